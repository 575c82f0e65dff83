# quadplane/kernel/dof.py
"""
EQUATION NUMBERING: Free/Fixed Partitioned DOF Indexing
=======================================================

PURPOSE:
--------
This module maps (node, local_dof) to a global equation number, and
partitions the numbers so that free DOFs come first:

    free DOFs   →  1, 2, ..., n_free          (ascending, traversal order)
    fixed DOFs  →  n_total, n_total-1, ...    (descending, traversal order)

With this layout, "is this DOF free?" is a single comparison:

    eq <= n_free

The assemblers rely on that comparison to build the reduced (free-only)
stiffness matrix directly. Contributions touching a fixed DOF are dropped,
which is only correct because fixed DOFs are held at ZERO displacement.

Equation numbers are 1-based. Array positions are ``eq - 1``.

USAGE:
------
    numbering = number_dofs(mesh.nodes)
    numbering.free                      # → number of unknowns
    element_dof_map(element, nodes)     # → 8 equation numbers

EXAMPLE:
--------
Three nodes, node 1 fully fixed, node 3 fixed in y:

    node  dof   bc   eq
    1     x     1    6      (first fixed → last number)
    1     y     1    5
    2     x     0    1
    2     y     0    2
    3     x     0    3
    3     y     1    4
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Sequence, Tuple

from ..model import DOF_PER_NODE, NODES_PER_ELEMENT, Node, Quad4


class DofKind(Enum):
    FREE = "free"
    FIXED = "fixed"


@dataclass(frozen=True)
class DofSlot:
    """
    Tagged equation number for one node-DOF pair.

    The tag says explicitly whether the DOF is solved for; ``eq`` is where
    it lives in the global numbering.
    """
    kind: DofKind
    eq: int

    @property
    def is_free(self) -> bool:
        return self.kind is DofKind.FREE


@dataclass
class EquationNumbering:
    """
    Result of DOF numbering.

    Attributes:
    -----------
    total : int
        Total number of DOFs (n_nodes × DOF_PER_NODE)
    free : int
        Number of free DOFs (size of the reduced system)
    fixed : int
        Number of fixed DOFs
    slots : dict
        {(node_index, dof): DofSlot} for every node-DOF pair
    """
    total: int
    free: int = 0
    fixed: int = 0
    slots: Dict[Tuple[int, int], DofSlot] = field(default_factory=dict)

    def is_free(self, eq: int) -> bool:
        return eq <= self.free

    def slot(self, node_index: int, dof: int) -> DofSlot:
        return self.slots[(node_index, dof)]

    def free_table(self) -> List[Tuple[int, int, int]]:
        """(node, dof, eq) rows for the free DOFs, 1-based, in traversal order."""
        rows = []
        for (node_index, dof), slot in self.slots.items():
            if slot.is_free:
                rows.append((node_index + 1, dof + 1, slot.eq))
        return rows


def number_dofs(nodes: Sequence[Node]) -> EquationNumbering:
    """
    Assign equation numbers to every node-DOF pair.

    Nodes are visited in list order and DOFs in x, y order. Each node's
    ``eq`` list is set in place.

    Parameters:
    -----------
    nodes : sequence of Node
        Mesh nodes with ``bc`` flags set

    Returns:
    --------
    EquationNumbering
        Counts and tagged slots. ``total == free + fixed`` always holds.
    """
    numbering = EquationNumbering(total=len(nodes) * DOF_PER_NODE)

    for i, node in enumerate(nodes):
        eq = [0] * DOF_PER_NODE
        for d in range(DOF_PER_NODE):
            if node.bc[d] == 0:
                numbering.free += 1
                slot = DofSlot(DofKind.FREE, numbering.free)
            else:
                numbering.fixed += 1
                slot = DofSlot(DofKind.FIXED, numbering.total - numbering.fixed + 1)
            numbering.slots[(i, d)] = slot
            eq[d] = slot.eq
        node.eq = eq

    return numbering


def element_dof_map(element: Quad4, nodes: Sequence[Node]) -> List[int]:
    """
    Equation numbers of an element's 8 DOFs in kernel order.

    Position ``d * NODES_PER_ELEMENT + n`` holds DOF ``d`` of local node
    ``n``, i.e. all x-DOFs first, then all y-DOFs:

        [u1, u2, u3, u4, v1, v2, v3, v4]

    The element kernels in ``quadplane.elements`` use the same ordering.

    Raises:
    -------
    ValueError
        If the nodes have not been numbered yet
    """
    a_index = [0] * (DOF_PER_NODE * NODES_PER_ELEMENT)
    for d in range(DOF_PER_NODE):
        for n, node_idx in enumerate(element.cn):
            node = nodes[node_idx]
            if node.eq is None:
                raise ValueError(
                    f"Node {node.id} has no equation numbers; call number_dofs first."
                )
            a_index[d * NODES_PER_ELEMENT + n] = node.eq[d]
    return a_index
