# number, assemble, solve, recover - the full static analysis
"""
ANALYSIS PIPELINE
=================

    mesh
     │
     ├─ number_dofs           equation numbers, free block first
     ├─ assemble_stiffness    Kt (n_free × n_free)
     ├─ assemble_load         R  (n_total)
     ├─ solve_reduced         U  (n_total, fixed block zero)
     └─ recovery              energy, plot scale, element stresses

Every stage runs once, in order. If ``reports`` is given, the text
reports are written as the stages produce their data.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .assembly import assemble_stiffness
from .config import AnalysisConfig, CONFIG
from .elements import ElementKernels, q4_kernels
from .errors import DegenerateScaleError
from .kernel.dof import EquationNumbering, number_dofs
from .kernel.solve import solve_reduced
from .loads import assemble_load
from .model import Mesh
from .post import (
    element_displacements,
    element_stresses,
    nodal_displacements,
    plot_scale_factor,
    strain_energy,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """
    Everything a run produces.

    Attributes:
    -----------
    numbering : EquationNumbering
        DOF counts and equation numbers
    Kt : np.ndarray
        Reduced stiffness matrix (n_free × n_free)
    R : np.ndarray
        Load vector (n_total,)
    U : np.ndarray
        Displacement vector (n_total,), zero at fixed DOFs
    energy : float
        Strain energy 0.5·R·U
    scale : float
        Plot scale factor (config.default_scale if nothing moved)
    stresses : np.ndarray
        (n_elements, 4, 3) nodal stresses per element
    scale_is_default : bool
        True when the plot scale fell back to config.default_scale
    """
    numbering: EquationNumbering
    Kt: np.ndarray
    R: np.ndarray
    U: np.ndarray
    energy: float
    scale: float
    stresses: np.ndarray
    scale_is_default: bool = False


def run_analysis(
    mesh: Mesh,
    config: AnalysisConfig = CONFIG,
    kernels: Optional[ElementKernels] = None,
    reports=None,
) -> AnalysisResult:
    """
    Run the static analysis of a mesh.

    Parameters:
    -----------
    mesh : Mesh
        Nodes are numbered in place
    config : AnalysisConfig
        Solver tolerance, plot scaling, integration order
    kernels : ElementKernels, optional
        Element functions; defaults to Q4 plane stress at config.gauss_order
    reports : ReportSet, optional
        Open report set to write into

    Returns:
    --------
    AnalysisResult

    Raises:
    -------
    KernelError
        Degenerate element geometry
    SingularSystemError
        Unsupported or ill-conditioned structure
    """
    if kernels is None:
        kernels = q4_kernels(config.gauss_order)

    numbering = number_dofs(mesh.nodes)
    logger.info("DOFs: total=%d, free=%d, fixed=%d",
                numbering.total, numbering.free, numbering.fixed)
    if reports is not None:
        reports.result.write_equation_table(numbering)

    logger.info("1 - Assembling Stiffness and Load")
    on_element = reports.stiffness.write_matrix if reports is not None else None
    Kt = assemble_stiffness(mesh, numbering, kernels, on_element=on_element)
    R = assemble_load(mesh, numbering, kernels)

    logger.info("2 - Solving Linear System")
    U = solve_reduced(Kt, R, numbering.free, config.cond_limit)

    logger.info("3 - Recovering Stress")
    energy = strain_energy(R, U)

    scale_is_default = False
    try:
        scale = plot_scale_factor(mesh, U, config.scale_ratio)
    except DegenerateScaleError as e:
        logger.warning("%s Using default scale %g.", e, config.default_scale)
        scale = config.default_scale
        scale_is_default = True

    stresses = element_stresses(mesh, U, kernels)

    if reports is not None:
        reports.result.write_strain_energy(energy)
        reports.result.write_displacements(nodal_displacements(mesh, U))
        reports.plot.write_header(mesh.n_elements, scale)
        for i, e in enumerate(mesh.elements):
            reports.result.write_element_stress(i, stresses[i])
            reports.plot.write_element(mesh.element_coords(e),
                                       element_displacements(e, mesh, U),
                                       stresses[i])

    return AnalysisResult(numbering=numbering, Kt=Kt, R=R, U=U,
                          energy=energy, scale=scale, stresses=stresses,
                          scale_is_default=scale_is_default)
