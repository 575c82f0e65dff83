# Structured rectangular Q4 meshes with edge supports and edge loads

from typing import List, Sequence

import numpy as np

from .model import Mesh, Node, Property, Quad4

EDGES = ('left', 'right', 'bottom', 'top')


def rectangular_mesh(
    length: float,
    height: float,
    nx: int,
    ny: int,
    prop: Property,
    origin=(0.0, 0.0),
) -> Mesh:
    """
    Structured grid of nx × ny Q4 elements over a rectangle.

    Nodes are numbered row by row from the bottom-left corner; element
    connectivity is counter-clockwise:

        n4-------n3
        |         |
        |   Qk    |
        n1-------n2

    Parameters:
    -----------
    length, height : float
        Rectangle size in x and y
    nx, ny : int
        Number of elements in x and y (each >= 1)
    prop : Property
        Material/section
    origin : (float, float)
        Bottom-left corner

    Returns:
    --------
    Mesh
        No supports, no loads. Use ``fix_edge`` and ``load_edge``.
    """
    if nx < 1 or ny < 1:
        raise ValueError(f"Need at least one element per direction, got nx={nx}, ny={ny}")
    if length <= 0.0 or height <= 0.0:
        raise ValueError(f"Rectangle must have positive size, got {length} x {height}")

    xs = origin[0] + np.linspace(0.0, length, nx + 1)
    ys = origin[1] + np.linspace(0.0, height, ny + 1)

    nodes = []
    for j, y in enumerate(ys):
        for i, x in enumerate(xs):
            nodes.append(Node(id=len(nodes) + 1, x=float(x), y=float(y)))

    elements = []
    for j in range(ny):
        for i in range(nx):
            n1 = j * (nx + 1) + i
            n2 = n1 + 1
            n3 = n2 + (nx + 1)
            n4 = n1 + (nx + 1)
            elements.append(Quad4(id=len(elements) + 1, cn=(n1, n2, n3, n4)))

    return Mesh(nodes=nodes, elements=elements, prop=prop)


def edge_nodes(mesh: Mesh, edge: str, tol: float = 1e-9) -> List[int]:
    """Indices of nodes on one side of the mesh's bounding box, sorted along the edge."""
    if edge not in EDGES:
        raise ValueError(f"edge must be one of {EDGES}, got {edge!r}")

    xs = np.array([n.x for n in mesh.nodes])
    ys = np.array([n.y for n in mesh.nodes])

    if edge == 'left':
        idx = np.where(np.abs(xs - xs.min()) < tol)[0]
        order = np.argsort(ys[idx])
    elif edge == 'right':
        idx = np.where(np.abs(xs - xs.max()) < tol)[0]
        order = np.argsort(ys[idx])
    elif edge == 'bottom':
        idx = np.where(np.abs(ys - ys.min()) < tol)[0]
        order = np.argsort(xs[idx])
    else:
        idx = np.where(np.abs(ys - ys.max()) < tol)[0]
        order = np.argsort(xs[idx])

    return [int(k) for k in idx[order]]


def fix_nodes(mesh: Mesh, indices: Sequence[int], dofs: Sequence[int] = (0, 1)) -> None:
    """Mark the given DOFs of the given nodes as fixed (in place)."""
    for k in indices:
        node = mesh.nodes[k]
        bc = list(node.bc)
        for d in dofs:
            bc[d] = 1
        node.bc = tuple(bc)


def fix_edge(mesh: Mesh, edge: str, dofs: Sequence[int] = (0, 1)) -> List[int]:
    indices = edge_nodes(mesh, edge)
    fix_nodes(mesh, indices, dofs)
    return indices


def load_edge(mesh: Mesh, edge: str, total_force=(0.0, 0.0)) -> List[int]:
    """
    Spread a total force over an edge as consistent nodal loads (in place).

    Each edge segment carries a share proportional to its length, split
    equally between its two end nodes (exact for a uniform traction on
    straight Q4 edges). Loads are added to any existing nodal load.
    """
    indices = edge_nodes(mesh, edge)
    if len(indices) < 2:
        raise ValueError(f"Edge {edge!r} has fewer than two nodes")

    pts = np.array([mesh.nodes[k].position for k in indices])
    seg = np.hypot(*np.diff(pts, axis=0).T)
    total_len = seg.sum()

    share = np.zeros(len(indices))
    share[:-1] += 0.5 * seg / total_len
    share[1:] += 0.5 * seg / total_len

    for k, s in zip(indices, share):
        node = mesh.nodes[k]
        node.pm = (node.pm[0] + s * total_force[0], node.pm[1] + s * total_force[1])

    return indices


def set_body_force(mesh: Mesh, q=(0.0, 0.0)) -> None:
    """Apply the same body force per unit area to every element (in place)."""
    mesh.elements = [Quad4(id=e.id, cn=e.cn, q=(float(q[0]), float(q[1]))) for e in mesh.elements]
