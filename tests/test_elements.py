# File: tests/test_elements.py
"""
TEST: Q4 Plane-Stress Element Kernels
=====================================

The element kernels are checked on their own, independent of assembly:

1. Stiffness is symmetric and has exactly the three rigid-body modes
2. Constant-strain fields give the exact constant stress (patch test)
3. Body force loads add up to force per area × area
4. Bad geometry raises KernelError instead of producing garbage

The DOF ordering [u1..u4, v1..v4] is exercised by every test that builds a
displacement vector by hand.
"""

import numpy as np
import pytest

from quadplane.elements import (
    plane_stiffness,
    plane_load,
    plane_stress,
    plane_stress_matrix,
    gauss_points_2d,
)
from quadplane.errors import KernelError
from quadplane.model import Property

PROP = Property(thickness=0.5, young=1000.0, poisson=0.3)

RECTANGLE = np.array([[0.0, 0.0], [2.0, 0.0], [2.0, 1.0], [0.0, 1.0]])
DISTORTED = np.array([[0.0, 0.0], [2.0, 0.2], [2.2, 1.5], [-0.1, 1.2]])


def linear_field(coords, a, b, c, d):
    """u = a x + b y, v = c x + d y, packed as [u1..u4, v1..v4]."""
    x, y = coords[:, 0], coords[:, 1]
    return np.concatenate([a * x + b * y, c * x + d * y])


def quad_area(coords):
    x, y = coords[:, 0], coords[:, 1]
    return 0.5 * (np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def test_gauss_weights_sum_to_reference_area():
    for order in (1, 2, 3):
        points, weights = gauss_points_2d(order)
        assert points.shape == (order * order, 2)
        assert np.isclose(weights.sum(), 4.0)


@pytest.mark.parametrize("coords", [RECTANGLE, DISTORTED])
def test_stiffness_symmetric(coords):
    ke = plane_stiffness(coords, PROP)
    assert ke.shape == (8, 8)
    np.testing.assert_allclose(ke, ke.T, rtol=1e-12, atol=1e-12)


@pytest.mark.parametrize("coords", [RECTANGLE, DISTORTED])
def test_rigid_body_modes(coords):
    """Translations and an infinitesimal rotation produce no nodal forces."""
    ke = plane_stiffness(coords, PROP)
    tol = 1e-10 * np.abs(ke).max()

    tx = np.r_[np.ones(4), np.zeros(4)]
    ty = np.r_[np.zeros(4), np.ones(4)]
    rot = linear_field(coords, 0, -1, 1, 0)

    for mode in (tx, ty, rot):
        np.testing.assert_allclose(ke @ mode, 0.0, atol=tol)

    # exactly three zero eigenvalues
    eig = np.linalg.eigvalsh(ke)
    assert np.sum(eig < 1e-9 * eig.max()) == 3


def test_stiffness_scales_with_thickness_and_modulus():
    ke = plane_stiffness(DISTORTED, PROP)
    ke2 = plane_stiffness(DISTORTED, Property(thickness=1.0, young=3000.0, poisson=0.3))
    np.testing.assert_allclose(ke2, 6.0 * ke, rtol=1e-12)


@pytest.mark.parametrize("coords", [RECTANGLE, DISTORTED])
def test_constant_strain_patch(coords):
    a, b, c, d = 1e-3, 2e-4, -5e-4, -3e-4
    u_e = linear_field(coords, a, b, c, d)

    stress = plane_stress(coords, PROP, u_e)

    expected = plane_stress_matrix(PROP.young, PROP.poisson) @ np.array([a, d, b + c])
    assert stress.shape == (4, 3)
    for row in stress:
        np.testing.assert_allclose(row, expected, rtol=1e-10, atol=1e-12)


def test_uniaxial_stress_on_rectangle():
    """ux = x/E·σ, uy = -ν y/E·σ gives sxx = σ and nothing else."""
    sigma = 10.0
    u_e = linear_field(RECTANGLE, sigma / PROP.young, 0.0, 0.0, -PROP.poisson * sigma / PROP.young)
    stress = plane_stress(RECTANGLE, PROP, u_e)
    np.testing.assert_allclose(stress[:, 0], sigma, rtol=1e-12)
    np.testing.assert_allclose(stress[:, 1:], 0.0, atol=1e-12)


@pytest.mark.parametrize("coords", [RECTANGLE, DISTORTED])
def test_body_load_resultant(coords):
    q = (3.0, -4.0)
    fe = plane_load(coords, q)
    area = quad_area(coords)

    assert fe.shape == (8,)
    assert np.isclose(fe[:4].sum(), q[0] * area)
    assert np.isclose(fe[4:].sum(), q[1] * area)


def test_body_load_on_rectangle_is_split_equally():
    fe = plane_load(RECTANGLE, (3.0, -4.0))
    np.testing.assert_allclose(fe[:4], 1.5)
    np.testing.assert_allclose(fe[4:], -2.0)


def test_zero_body_load():
    np.testing.assert_array_equal(plane_load(DISTORTED, (0.0, 0.0)), np.zeros(8))


def test_collapsed_element_raises():
    collapsed = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [3.0, 0.0]])
    with pytest.raises(KernelError):
        plane_stiffness(collapsed, PROP)


def test_clockwise_element_raises():
    clockwise = RECTANGLE[::-1].copy()
    with pytest.raises(KernelError):
        plane_stiffness(clockwise, PROP)
    with pytest.raises(KernelError):
        plane_load(clockwise, (1.0, 0.0))


def test_triangle_entered_as_quad_rejected_before_integration():
    """Coincident nodes 3 and 4: Gauss-point Jacobians are positive, the corner one is zero."""
    triangle = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [1.0, 1.0]])
    with pytest.raises(KernelError, match="corner"):
        plane_stiffness(triangle, PROP)
