# quadplane/kernel/assemble.py
"""
ASSEMBLY: Reduced Global Matrix and Load Vector Assembly
========================================================

PURPOSE:
--------
Scatter-add of element contributions into the global system.

The stiffness matrix is assembled directly in REDUCED form: only the
free-DOF block (n_free × n_free) is ever allocated. An entry ke[a, b] is
kept only if both of its equation numbers are free:

    for each element:
        for each (a, b):
            ia = dof_map[a]; ib = dof_map[b]
            if ia <= n_free and ib <= n_free:
                K[ia-1, ib-1] += ke[a, b]

Everything touching a fixed DOF is dropped. Since fixed DOFs have zero
displacement, those columns would multiply zero anyway, and those rows
are reaction equations we never solve.

The load vector is assembled over ALL DOFs (length n_total); the solve
only reads its free block.

Equation numbers in ``dof_map`` are 1-based (see ``kernel.dof``).
"""

from typing import Iterable, List, Tuple

import numpy as np


def assemble_global_K(
    n_free: int,
    contributions: Iterable[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble the reduced global stiffness matrix.

    Parameters:
    -----------
    n_free : int
        Number of free DOFs. Equation numbers 1..n_free are free.

    contributions : iterable of (dof_map, ke)
        - dof_map: 1-based equation numbers of the element DOFs
        - ke: element stiffness, shape (len(dof_map), len(dof_map))

    Returns:
    --------
    np.ndarray
        Kt, shape (n_free, n_free)
    """
    Kt = np.zeros((n_free, n_free), dtype=float)

    for dof_map, ke in contributions:
        n_element_dofs = len(dof_map)

        assert ke.shape == (n_element_dofs, n_element_dofs), \
            f"Element ke shape {ke.shape} doesn't match dof_map length {n_element_dofs}"

        for a in range(n_element_dofs):
            ia = dof_map[a]
            if ia > n_free:
                continue
            for b in range(n_element_dofs):
                ib = dof_map[b]
                if ib <= n_free:
                    Kt[ia - 1, ib - 1] += ke[a, b]

    return Kt


def assemble_global_F(
    F: np.ndarray,
    contributions: Iterable[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Accumulate element load vectors into F (in place, all DOFs).

    Parameters:
    -----------
    F : np.ndarray
        Global load vector, length n_total (modified in place)

    contributions : iterable of (dof_map, fe)
        - dof_map: 1-based equation numbers
        - fe: element load vector, shape (len(dof_map),)

    Returns:
    --------
    np.ndarray
        The same F, for chaining
    """
    for dof_map, fe in contributions:
        n_element_dofs = len(dof_map)

        assert fe.shape == (n_element_dofs,), \
            f"Element fe shape {fe.shape} doesn't match dof_map length {n_element_dofs}"

        for a in range(n_element_dofs):
            F[dof_map[a] - 1] += fe[a]

    return F


def set_nodal_load(F: np.ndarray, eq: List[int], load_vector) -> None:
    """
    Write a node's applied load into F (in place).

    This OVERWRITES the entries: a node states the total load component at
    each of its equations. Element loads are accumulated afterwards.

    >>> F = np.zeros(4)
    >>> set_nodal_load(F, [2, 4], (10.0, -5.0))
    >>> F
    array([ 0., 10.,  0., -5.])
    """
    for e, val in zip(eq, load_vector):
        F[e - 1] = val
