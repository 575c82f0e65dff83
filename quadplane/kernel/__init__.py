# quadplane/kernel - Equation numbering, reduced assembly and direct solve
"""
KERNEL: THE ELEMENT-AGNOSTIC PIPELINE CORE
==========================================

This package holds the plumbing that does not care what the element is:
- Equation numbering with a free/fixed partition (dof.py)
- Reduced scatter-add assembly of K and F (assemble.py)
- LU factorize/apply solve of the reduced system (solve.py)

The element mechanics live in ``quadplane.elements``; the kernel only sees
(dof_map, ke) and (dof_map, fe) pairs.
"""

from .dof import DofKind, DofSlot, EquationNumbering, number_dofs, element_dof_map
from .solve import Factorization, factorize, apply, solve_reduced

__all__ = [
    'DofKind', 'DofSlot', 'EquationNumbering', 'number_dofs', 'element_dof_map',
    'Factorization', 'factorize', 'apply', 'solve_reduced',
]
