# quadplane - Static analysis of 2-D plane-stress Q4 meshes
"""
QUADPLANE: Plane-Stress Analysis with Bilinear Quadrilaterals
=============================================================

This package provides:
- Equation numbering with a free/fixed partition
- Reduced dense assembly of stiffness and loads
- LU direct solve of the free-DOF system
- Stress recovery, text reports and plots

ARCHITECTURE:
-------------
    kernel/         Element-agnostic core (numbering, reduced assembly, solve)
    model.py        Node, Quad4, Property, Mesh
    elements.py     Q4 plane-stress kernels (stiffness, body load, stress)
    assembly.py     Stiffness assembly for Q4 meshes
    loads.py        Load vector assembly (nodal + body force)
    solve.py        Full analysis pipeline
    post.py         Strain energy, plot scale, stresses, tables
    io.py           Input file parsing and report writers
    mesh.py         Rectangular mesh generation
    viz.py          Deformed shape / stress plot
    main.py         Command-line entry point
"""

from .errors import (
    QuadplaneError,
    InputFormatError,
    KernelError,
    SingularSystemError,
    DegenerateScaleError,
)
from .model import Node, Quad4, Property, Mesh
from .kernel import number_dofs, element_dof_map, factorize, apply, solve_reduced
from .solve import run_analysis, AnalysisResult

__version__ = "0.1.0"
