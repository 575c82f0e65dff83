# quadplane/kernel/solve.py
"""Reduced direct solve: LU factorisation, application, and singularity detection."""

import logging
from dataclasses import dataclass

import numpy as np
from scipy.linalg import lu_factor, lu_solve

from ..errors import SingularSystemError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Factorization:
    """
    LU factors of the reduced stiffness matrix.

    Acts as the solution operator: ``apply(fact, rhs)`` returns ``Kt⁻¹ rhs``
    without forming the inverse.
    """
    lu: np.ndarray
    piv: np.ndarray
    cond: float

    @property
    def size(self) -> int:
        return self.lu.shape[0]


def factorize(Kt: np.ndarray, cond_limit: float = 1e12) -> Factorization:
    """
    Factorize the reduced stiffness matrix.

    Args:
        Kt: Reduced stiffness matrix (n_free x n_free)
        cond_limit: Max condition number before raising SingularSystemError

    Returns:
        Factorization usable with ``apply``

    Raises:
        SingularSystemError: If Kt is singular or ill-conditioned
            (missing supports, disconnected nodes)
    """
    if Kt.ndim != 2 or Kt.shape[0] != Kt.shape[1]:
        raise ValueError(f"Stiffness matrix must be square, got shape {Kt.shape}")

    cond = np.linalg.cond(Kt)
    if not np.isfinite(cond) or cond > cond_limit:
        raise SingularSystemError(
            f"Singular or ill-conditioned stiffness matrix (cond={cond:.2e}). "
            f"Check supports. Need cond < {cond_limit:.0e}."
        )

    lu, piv = lu_factor(Kt, check_finite=True)
    if np.any(np.diag(lu) == 0.0):
        raise SingularSystemError("Zero pivot in LU factorisation of stiffness matrix.")

    logger.debug("Factorized %dx%d system (cond=%.3e)", Kt.shape[0], Kt.shape[1], cond)
    return Factorization(lu=lu, piv=piv, cond=float(cond))


def apply(fact: Factorization, rhs: np.ndarray) -> np.ndarray:
    """Apply the solution operator to a right-hand side of matching length."""
    if rhs.shape != (fact.size,):
        raise ValueError(f"Right-hand side shape {rhs.shape} doesn't match system size {fact.size}")
    return lu_solve((fact.lu, fact.piv), rhs)


def solve_reduced(
    Kt: np.ndarray,
    R: np.ndarray,
    n_free: int,
    cond_limit: float = 1e12
) -> np.ndarray:
    """
    Solve Kt·U_free = R_free and return the full displacement vector.

    Only the first n_free entries of R are read. Entries of U beyond n_free
    belong to fixed DOFs and stay zero.

    Args:
        Kt: Reduced stiffness matrix (n_free x n_free)
        R: Global load vector (n_total,)
        n_free: Number of free DOFs
        cond_limit: Passed to ``factorize``

    Returns:
        U: Displacement vector (n_total,)

    Raises:
        SingularSystemError: From ``factorize``
    """
    U = np.zeros(R.shape[0], dtype=float)

    if n_free == 0:
        logger.info("No free DOFs; skipping solve")
        return U

    fact = factorize(Kt, cond_limit)
    U[:n_free] = apply(fact, R[:n_free])

    return U
