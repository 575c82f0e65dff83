# Q4 plane-stress element kernels: stiffness, body-force load, nodal stress
"""
Q4 PLANE-STRESS ELEMENT
=======================

Isoparametric 4-node bilinear quadrilateral. Nodes are counter-clockwise
with natural coordinates:

    node   xi   eta
    1      -1   -1
    2      +1   -1
    3      +1   +1
    4      -1   +1

DOF ORDER (shared with ``kernel.dof.element_dof_map``):
-------------------------------------------------------
    [u1, u2, u3, u4, v1, v2, v3, v4]

i.e. index ``d*4 + n`` is DOF d of local node n. Every kernel below
returns vectors/matrices in this order.

KERNELS:
--------
- plane_stiffness(coords, prop)      → ke (8, 8), ∫ Bᵀ D B t dA
- plane_load(coords, q)              → fe (8,),   ∫ Nᵀ q dA
- plane_stress(coords, prop, u_e)    → (4, 3),    D B u_e at each node

All three are pure: no state, no I/O.
"""

from dataclasses import dataclass
from functools import partial
from typing import Callable, Tuple

import numpy as np
from numpy.polynomial.legendre import leggauss

from .errors import KernelError
from .model import NODES_PER_ELEMENT, Property

N_ELEMENT_DOF = 2 * NODES_PER_ELEMENT

# Natural coordinates of the four corner nodes
NODE_NATURAL_COORDS = np.array([
    [-1.0, -1.0],
    [ 1.0, -1.0],
    [ 1.0,  1.0],
    [-1.0,  1.0],
])


def shape_functions(xi: float, eta: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Bilinear shape functions and their natural derivatives.

    Returns:
        N: shape (4,)
        dNdxi: shape (4, 2), columns are d/dxi and d/deta
    """
    N = 0.25 * np.array([(1 - xi) * (1 - eta),
                         (1 + xi) * (1 - eta),
                         (1 + xi) * (1 + eta),
                         (1 - xi) * (1 + eta)])
    dNdxi = 0.25 * np.array([[-(1 - eta), -(1 - xi)],
                             [ (1 - eta), -(1 + xi)],
                             [ (1 + eta),  (1 + xi)],
                             [-(1 + eta),  (1 - xi)]])
    return N, dNdxi


def gauss_points_2d(order: int = 2):
    """Tensor-product Gauss-Legendre points (n, 2) and weights (n,) on [-1, 1]²."""
    pts, wts = leggauss(order)
    points = np.array([[xi, eta] for eta in pts for xi in pts])
    weights = np.array([wx * wy for wy in wts for wx in wts])
    return points, weights


def jacobian(coords: np.ndarray, dNdxi: np.ndarray) -> Tuple[np.ndarray, float]:
    J = coords.T @ dNdxi
    return J, float(np.linalg.det(J))


def plane_stress_matrix(young: float, poisson: float) -> np.ndarray:
    """Plane-stress constitutive matrix D (3x3) for [sxx, syy, sxy]."""
    c = young / (1.0 - poisson * poisson)
    return c * np.array([
        [1.0,     poisson, 0.0],
        [poisson, 1.0,     0.0],
        [0.0,     0.0,     0.5 * (1.0 - poisson)],
    ])


def check_geometry(coords: np.ndarray) -> None:
    """
    Reject elements whose Jacobian is not positive at every corner.

    Stresses are recovered at the corners, so a quad with two coincident
    nodes (a triangle entered as a quad) must fail here, before assembly,
    even though its Gauss-point Jacobians may all be positive.

    Raises:
        KernelError: If any corner Jacobian determinant is not positive
    """
    for xi, eta in NODE_NATURAL_COORDS:
        _, dNdxi = shape_functions(xi, eta)
        _, detJ = jacobian(coords, dNdxi)
        if detJ <= 0.0:
            raise KernelError(
                f"Non-positive Jacobian determinant {detJ:.3e} at corner (xi={xi:g}, eta={eta:g}); "
                f"element nodes must be distinct, counter-clockwise and convex."
            )


def strain_displacement(coords: np.ndarray, xi: float, eta: float) -> Tuple[np.ndarray, float]:
    """
    Strain-displacement matrix B (3x8) at a natural point.

    Raises:
        KernelError: If the Jacobian determinant is not positive
            (collapsed, inverted, or clockwise element)
    """
    _, dNdxi = shape_functions(xi, eta)
    J, detJ = jacobian(coords, dNdxi)
    if detJ <= 0.0:
        raise KernelError(
            f"Non-positive Jacobian determinant {detJ:.3e} at (xi={xi:g}, eta={eta:g}); "
            f"element nodes must be distinct and counter-clockwise."
        )
    dNdx = dNdxi @ np.linalg.inv(J)

    n = NODES_PER_ELEMENT
    B = np.zeros((3, N_ELEMENT_DOF))
    B[0, :n] = dNdx[:, 0]
    B[1, n:] = dNdx[:, 1]
    B[2, :n] = dNdx[:, 1]
    B[2, n:] = dNdx[:, 0]
    return B, detJ


def plane_stiffness(coords: np.ndarray, prop: Property, order: int = 2) -> np.ndarray:
    """
    Element stiffness matrix by Gauss quadrature.

    Parameters:
    -----------
    coords : np.ndarray
        (4, 2) nodal coordinates in connectivity order
    prop : Property
        Thickness, Young's modulus, Poisson ratio
    order : int
        Gauss points per direction (2 integrates the Q4 exactly for
        parallelograms)

    Returns:
    --------
    np.ndarray
        Symmetric ke, shape (8, 8)
    """
    check_geometry(coords)

    D = plane_stress_matrix(prop.young, prop.poisson)
    ke = np.zeros((N_ELEMENT_DOF, N_ELEMENT_DOF))

    points, weights = gauss_points_2d(order)
    for (xi, eta), w in zip(points, weights):
        B, detJ = strain_displacement(coords, xi, eta)
        ke += B.T @ D @ B * detJ * w

    ke *= prop.thickness
    # remove round-off asymmetry
    return 0.5 * (ke + ke.T)


def plane_load(coords: np.ndarray, q, order: int = 2) -> np.ndarray:
    """
    Equivalent nodal load of a uniform body force.

    q = (qx, qy) is force per unit area of the element (thickness already
    included). The result sums to q × area in each direction.
    """
    qx, qy = float(q[0]), float(q[1])
    fe = np.zeros(N_ELEMENT_DOF)
    if qx == 0.0 and qy == 0.0:
        return fe

    n = NODES_PER_ELEMENT
    points, weights = gauss_points_2d(order)
    for (xi, eta), w in zip(points, weights):
        N, dNdxi = shape_functions(xi, eta)
        _, detJ = jacobian(coords, dNdxi)
        if detJ <= 0.0:
            raise KernelError(f"Non-positive Jacobian determinant {detJ:.3e} in load integration.")
        fe[:n] += N * qx * detJ * w
        fe[n:] += N * qy * detJ * w
    return fe


def plane_stress(coords: np.ndarray, prop: Property, u_e: np.ndarray) -> np.ndarray:
    """
    Stresses (sxx, syy, sxy) evaluated at the four element nodes.

    Returns:
        np.ndarray of shape (4, 3), row j is local node j
    """
    D = plane_stress_matrix(prop.young, prop.poisson)
    stress = np.zeros((NODES_PER_ELEMENT, 3))
    for j, (xi, eta) in enumerate(NODE_NATURAL_COORDS):
        B, _ = strain_displacement(coords, xi, eta)
        stress[j] = D @ (B @ u_e)
    return stress


@dataclass(frozen=True)
class ElementKernels:
    """
    The three element functions the pipeline calls.

    Any set of callables with the same signatures can be passed to the
    assemblers (tests use stubs).
    """
    stiffness: Callable[[np.ndarray, Property], np.ndarray]
    load: Callable[[np.ndarray, tuple], np.ndarray]
    stress: Callable[[np.ndarray, Property, np.ndarray], np.ndarray]


def q4_kernels(order: int = 2) -> ElementKernels:
    return ElementKernels(
        stiffness=partial(plane_stiffness, order=order),
        load=partial(plane_load, order=order),
        stress=plane_stress,
    )


Q4_KERNELS = q4_kernels()
