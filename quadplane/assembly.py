# reduced global K assembly for Q4 meshes

import logging
from typing import Callable, Iterator, List, Optional, Tuple

import numpy as np

from .elements import ElementKernels, Q4_KERNELS
from .kernel.assemble import assemble_global_K
from .kernel.dof import EquationNumbering, element_dof_map
from .model import Mesh

logger = logging.getLogger(__name__)


def element_stiffness_contributions(
    mesh: Mesh,
    kernels: ElementKernels = Q4_KERNELS,
    on_element: Optional[Callable[[int, np.ndarray], None]] = None,
) -> Iterator[Tuple[List[int], np.ndarray]]:
    """
    Yield (dof_map, ke) per element, in element order.

    on_element(index, ke) is called with each local matrix before it is
    yielded (used to dump element stiffness to the report).
    """
    for i, e in enumerate(mesh.elements):
        coords = mesh.element_coords(e)
        ke = kernels.stiffness(coords, mesh.prop)
        if on_element is not None:
            on_element(i, ke)
        yield element_dof_map(e, mesh.nodes), ke


def assemble_stiffness(
    mesh: Mesh,
    numbering: EquationNumbering,
    kernels: ElementKernels = Q4_KERNELS,
    on_element: Optional[Callable[[int, np.ndarray], None]] = None,
) -> np.ndarray:
    """Reduced stiffness Kt (n_free x n_free); nodes must already be numbered."""
    logger.debug("Assembling stiffness: %d elements, %d free DOFs",
                 mesh.n_elements, numbering.free)
    contributions = element_stiffness_contributions(mesh, kernels, on_element)
    return assemble_global_K(numbering.free, contributions)
