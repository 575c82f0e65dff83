# Node, Quad4, Property, Mesh (dataclasses)
"""
MODEL DEFINITIONS: Node, Quad4, Property, Mesh
==============================================

PURPOSE:
--------
The basic records of a plane-stress analysis:
- Node: a point in the plane with boundary flags and a nodal load
- Quad4: a 4-node bilinear quadrilateral connecting four nodes
- Property: the single material/section applied to every element
- Mesh: the container the pipeline passes from stage to stage

Each node carries 2 DOFs (ux, uy). Each element therefore has
4 × 2 = 8 DOFs, ordered [u1, u2, u3, u4, v1, v2, v3, v4].

Node ids in input files are 1-based; element connectivity stored here
is 0-based (position in ``Mesh.nodes``).
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

DOF_PER_NODE = 2        # ux, uy
NODES_PER_ELEMENT = 4   # bilinear quadrilateral
SPATIAL_DIM = 2         # x, y
STRESS_COMPONENTS = 3   # sxx, syy, sxy


@dataclass
class Node:
    """
    A node in the plane.

    Parameters:
    -----------
    id : int
        Identifier as given in the input file
    x, y : float
        Coordinates
    bc : tuple of int
        Boundary flag per DOF: 0 = free, anything else = fixed at zero
    pm : tuple of float
        Applied nodal load per DOF (Fx, Fy)

    Notes:
    ------
    ``eq`` holds the 1-based equation number of each DOF. It is None until
    ``quadplane.kernel.dof.number_dofs`` assigns it.
    """
    id: int
    x: float
    y: float
    bc: Tuple[int, int] = (0, 0)
    pm: Tuple[float, float] = (0.0, 0.0)
    eq: Optional[List[int]] = field(default=None, compare=False)

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)

    def is_fixed(self, dof: int) -> bool:
        return self.bc[dof] != 0


@dataclass(frozen=True)
class Quad4:
    """
    4-node quadrilateral element.

    cn holds four 0-based node indices, counter-clockwise:

        4-------3
        |       |
        |  Q4   |
        1-------2

    q is the body force per unit area (qx, qy), consumed only by the
    load kernel.
    """
    id: int
    cn: Tuple[int, int, int, int]
    q: Tuple[float, float] = (0.0, 0.0)


@dataclass(frozen=True)
class Property:
    """Material and section shared by all elements."""
    thickness: float
    young: float    # Young's modulus
    poisson: float  # Poisson ratio


@dataclass
class Mesh:
    nodes: List[Node]
    elements: List[Quad4]
    prop: Property

    @property
    def n_nodes(self) -> int:
        return len(self.nodes)

    @property
    def n_elements(self) -> int:
        return len(self.elements)

    def element_coords(self, element: Quad4) -> np.ndarray:
        """Nodal positions of an element as a (4, 2) array, in connectivity order."""
        coords = np.zeros((NODES_PER_ELEMENT, SPATIAL_DIM), dtype=float)
        for j, node_idx in enumerate(element.cn):
            node = self.nodes[node_idx]
            coords[j, 0] = node.x
            coords[j, 1] = node.y
        return coords
