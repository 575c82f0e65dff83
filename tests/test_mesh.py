# File: tests/test_mesh.py
"""Test the structured rectangular mesh generator and its edge helpers."""

import numpy as np
import pytest

from quadplane.mesh import (
    rectangular_mesh,
    edge_nodes,
    fix_edge,
    load_edge,
    set_body_force,
)
from quadplane.model import Property

PROP = Property(thickness=1.0, young=1000.0, poisson=0.3)


def signed_area(coords):
    x, y = coords[:, 0], coords[:, 1]
    return 0.5 * (np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def test_counts_and_ids():
    mesh = rectangular_mesh(3.0, 2.0, 3, 2, PROP)
    assert mesh.n_nodes == 12
    assert mesh.n_elements == 6
    assert [n.id for n in mesh.nodes] == list(range(1, 13))
    assert [e.id for e in mesh.elements] == list(range(1, 7))


def test_elements_are_counter_clockwise_and_tile_the_rectangle():
    mesh = rectangular_mesh(3.0, 2.0, 3, 2, PROP, origin=(1.0, -1.0))
    areas = [signed_area(mesh.element_coords(e)) for e in mesh.elements]
    assert all(a > 0.0 for a in areas)
    assert sum(areas) == pytest.approx(6.0)
    assert mesh.element_coords(mesh.elements[0])[0].tolist() == [1.0, -1.0]


def test_edge_nodes_sorted_along_edge():
    mesh = rectangular_mesh(2.0, 2.0, 2, 2, PROP)
    assert edge_nodes(mesh, 'left') == [0, 3, 6]
    assert edge_nodes(mesh, 'right') == [2, 5, 8]
    assert edge_nodes(mesh, 'bottom') == [0, 1, 2]
    assert edge_nodes(mesh, 'top') == [6, 7, 8]
    with pytest.raises(ValueError):
        edge_nodes(mesh, 'middle')


def test_fix_edge_sets_only_requested_dofs():
    mesh = rectangular_mesh(2.0, 1.0, 2, 1, PROP)
    fixed = fix_edge(mesh, 'left', dofs=(0,))
    assert fixed == [0, 3]
    assert [mesh.nodes[k].bc for k in fixed] == [(1, 0), (1, 0)]
    assert all(n.bc == (0, 0) for k, n in enumerate(mesh.nodes) if k not in fixed)


def test_load_edge_distributes_total_force():
    mesh = rectangular_mesh(4.0, 3.0, 4, 3, PROP)
    loaded = load_edge(mesh, 'right', total_force=(6.0, -3.0))

    fx = [mesh.nodes[k].pm[0] for k in loaded]
    fy = [mesh.nodes[k].pm[1] for k in loaded]
    np.testing.assert_allclose(fx, [1.0, 2.0, 2.0, 1.0])
    assert sum(fy) == pytest.approx(-3.0)


def test_load_edge_accumulates():
    mesh = rectangular_mesh(1.0, 1.0, 1, 1, PROP)
    load_edge(mesh, 'top', total_force=(0.0, -2.0))
    load_edge(mesh, 'right', total_force=(4.0, 0.0))
    assert mesh.nodes[3].pm == pytest.approx((2.0, -1.0))


def test_set_body_force():
    mesh = rectangular_mesh(2.0, 1.0, 2, 1, PROP)
    set_body_force(mesh, (0.0, -9.81))
    assert all(e.q == (0.0, -9.81) for e in mesh.elements)


def test_invalid_sizes_rejected():
    with pytest.raises(ValueError):
        rectangular_mesh(1.0, 1.0, 0, 1, PROP)
    with pytest.raises(ValueError):
        rectangular_mesh(-1.0, 1.0, 1, 1, PROP)
