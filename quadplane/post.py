# strain energy, plot scaling, nodal displacements, element stresses

import numpy as np
import pandas as pd

from .elements import ElementKernels, Q4_KERNELS
from .errors import DegenerateScaleError
from .model import DOF_PER_NODE, NODES_PER_ELEMENT, STRESS_COMPONENTS, Mesh, Quad4


def strain_energy(R: np.ndarray, U: np.ndarray) -> float:
    """
    Total strain energy 0.5 · R·U over all DOFs.

    Fixed-DOF entries of U are zero, so the fixed block of R does not
    contribute.
    """
    return 0.5 * float(np.dot(R, U))


def plot_scale_factor(mesh: Mesh, U: np.ndarray, ratio: float = 1.2) -> float:
    """
    Scale factor that exaggerates displacements for plotting.

    Finds the node-DOF pair with the largest |U| (first one wins on ties,
    nodes in order, x before y) and returns the factor that stretches it to
    (ratio - 1) of that node's distance from the origin:

        ratio * max_pos = scale * max_disp + max_pos

    Parameters:
    -----------
    mesh : Mesh
        Numbered mesh
    U : np.ndarray
        Full displacement vector
    ratio : float
        1.2 means the largest displacement is drawn at 20% of its node's
        position norm

    Returns:
    --------
    float
        The scale factor

    Raises:
    -------
    DegenerateScaleError
        If every displacement is exactly zero
    """
    max_pos = 0.0
    max_disp = 0.0
    for node in mesh.nodes:
        for d in range(DOF_PER_NODE):
            disp = abs(U[node.eq[d] - 1])
            if max_disp < disp:
                max_disp = disp
                max_pos = float(np.hypot(node.x, node.y))

    if max_disp == 0.0:
        raise DegenerateScaleError("All displacements are zero; plot scale factor is undefined.")

    return (ratio * max_pos - max_pos) / max_disp


def element_displacements(element: Quad4, mesh: Mesh, U: np.ndarray) -> np.ndarray:
    """Element displacement vector [u1..u4, v1..v4] gathered from U."""
    u_e = np.zeros(DOF_PER_NODE * NODES_PER_ELEMENT)
    for d in range(DOF_PER_NODE):
        for n, node_idx in enumerate(element.cn):
            u_e[d * NODES_PER_ELEMENT + n] = U[mesh.nodes[node_idx].eq[d] - 1]
    return u_e


def element_stresses(mesh: Mesh, U: np.ndarray, kernels: ElementKernels = Q4_KERNELS) -> np.ndarray:
    """
    Nodal stresses of every element.

    Returns:
        np.ndarray of shape (n_elements, 4, 3): [element, local node, (sxx, syy, sxy)]
    """
    stresses = np.zeros((mesh.n_elements, NODES_PER_ELEMENT, STRESS_COMPONENTS))
    for i, e in enumerate(mesh.elements):
        coords = mesh.element_coords(e)
        u_e = element_displacements(e, mesh, U)
        stresses[i] = kernels.stress(coords, mesh.prop, u_e)
    return stresses


def nodal_displacements(mesh: Mesh, U: np.ndarray) -> np.ndarray:
    """(n_nodes, 2) array of (ux, uy) in node order."""
    disp = np.zeros((mesh.n_nodes, DOF_PER_NODE))
    for i, node in enumerate(mesh.nodes):
        for d in range(DOF_PER_NODE):
            disp[i, d] = U[node.eq[d] - 1]
    return disp


def displacement_table(mesh: Mesh, U: np.ndarray) -> pd.DataFrame:
    disp = nodal_displacements(mesh, U)
    return pd.DataFrame({
        'node': [n.id for n in mesh.nodes],
        'x': [n.x for n in mesh.nodes],
        'y': [n.y for n in mesh.nodes],
        'ux': disp[:, 0],
        'uy': disp[:, 1],
    })


def stress_table(mesh: Mesh, stresses: np.ndarray) -> pd.DataFrame:
    """
    Long-format stress table, one row per (element, local node).

    Columns: element, position, node, sxx, syy, sxy
    """
    rows = []
    for i, e in enumerate(mesh.elements):
        for j, node_idx in enumerate(e.cn):
            sxx, syy, sxy = stresses[i, j]
            rows.append({
                'element': e.id,
                'position': j + 1,
                'node': mesh.nodes[node_idx].id,
                'sxx': sxx,
                'syy': syy,
                'sxy': sxy,
            })
    return pd.DataFrame(rows, columns=['element', 'position', 'node', 'sxx', 'syy', 'sxy'])
