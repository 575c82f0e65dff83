"""
VISUALIZATION: DEFORMED MESH AND STRESS CONTOURS
================================================

Draws the undeformed mesh outline, the deformed mesh (displacements
multiplied by the plot scale factor), and colours each deformed element
by the average of one stress component over its four nodes.

The scale factor normally comes from ``post.plot_scale_factor``: it draws
the largest displacement at 20% of its node's distance from the origin,
so the deformed shape is visible whatever the units.
"""

import os

import matplotlib.pyplot as plt
from matplotlib.collections import PolyCollection
import numpy as np

from .model import Mesh
from .post import nodal_displacements

COMPONENTS = {'sxx': 0, 'syy': 1, 'sxy': 2}


def plot_deformed_mesh(
    mesh: Mesh,
    U: np.ndarray,
    stresses: np.ndarray,
    scale: float,
    outpath: str,
    component: str = 'sxx',
    title: str = 'Deformed shape',
) -> None:
    """
    Save a plot of the deformed mesh coloured by element stress.

    Parameters:
    -----------
    mesh : Mesh
        Numbered mesh
    U : np.ndarray
        Full displacement vector
    stresses : np.ndarray
        (n_elements, 4, 3) from ``post.element_stresses``
    scale : float
        Displacement magnification
    outpath : str
        Image file to write (directory is created if needed)
    component : str
        'sxx', 'syy' or 'sxy'
    """
    if component not in COMPONENTS:
        raise ValueError(f"component must be one of {sorted(COMPONENTS)}, got {component!r}")

    xy = np.array([n.position for n in mesh.nodes])
    xy_def = xy + scale * nodal_displacements(mesh, U)

    undeformed = [xy[list(e.cn)] for e in mesh.elements]
    deformed = [xy_def[list(e.cn)] for e in mesh.elements]
    values = stresses[:, :, COMPONENTS[component]].mean(axis=1)

    fig, ax = plt.subplots(figsize=(10, 6))

    ax.add_collection(PolyCollection(undeformed, facecolors='none', edgecolors='0.6',
                                     linewidths=0.8, linestyles='--'))
    polys = PolyCollection(deformed, array=values, cmap='viridis',
                           edgecolors='k', linewidths=0.5)
    ax.add_collection(polys)
    fig.colorbar(polys, ax=ax, label=component)

    ax.autoscale_view()
    ax.set_aspect('equal')
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_title(title)

    props = dict(boxstyle='round', facecolor='wheat', alpha=0.8)
    ax.text(0.02, 0.98, f'Deformation scale: ×{scale:.3g}', transform=ax.transAxes,
            fontsize=9, verticalalignment='top', bbox=props)

    os.makedirs(os.path.dirname(outpath) if os.path.dirname(outpath) else '.', exist_ok=True)

    plt.tight_layout()
    plt.savefig(outpath, dpi=150, bbox_inches='tight')
    plt.close(fig)
