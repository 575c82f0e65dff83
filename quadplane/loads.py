# loads.py - Global load vector from nodal loads and element body forces

import logging

import numpy as np

from .elements import ElementKernels, Q4_KERNELS
from .kernel.assemble import assemble_global_F, set_nodal_load
from .kernel.dof import EquationNumbering, element_dof_map
from .model import Mesh

logger = logging.getLogger(__name__)


def element_load_contributions(mesh: Mesh, kernels: ElementKernels = Q4_KERNELS):
    """Yield (dof_map, fe) for every element, including those with zero body force."""
    for e in mesh.elements:
        coords = mesh.element_coords(e)
        fe = kernels.load(coords, e.q)
        yield element_dof_map(e, mesh.nodes), fe


def assemble_load(
    mesh: Mesh,
    numbering: EquationNumbering,
    kernels: ElementKernels = Q4_KERNELS,
) -> np.ndarray:
    """
    Assemble the global load vector R over all DOFs.

    Two steps, in this order:

    1. Nodal loads: R[eq] = pm for every node and DOF. This is an overwrite;
       each node gives the total applied component at its equations.
    2. Body forces: each element's equivalent nodal loads are ADDED to R,
       at free and fixed equations alike.

    Parameters:
    -----------
    mesh : Mesh
        Nodes must carry equation numbers (see ``kernel.dof.number_dofs``)
    numbering : EquationNumbering
        Gives the vector length (numbering.total)
    kernels : ElementKernels
        Supplies the load kernel

    Returns:
    --------
    np.ndarray
        R, shape (numbering.total,). Only R[:numbering.free] is used by the
        solve; the fixed block is kept for completeness.
    """
    R = np.zeros(numbering.total, dtype=float)

    for node in mesh.nodes:
        set_nodal_load(R, node.eq, node.pm)

    assemble_global_F(R, element_load_contributions(mesh, kernels))

    logger.debug("Load vector assembled: |R_free| = %.6e",
                 float(np.linalg.norm(R[:numbering.free])))
    return R
