# quadplane/config.py
"""
Analysis configuration and defaults.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings for one analysis run."""

    # Files
    input_path: str = "input.txt"
    output_dir: str = "."
    output_prefix: str = "SATURN"

    # Element integration (Gauss points per direction)
    gauss_order: int = 2

    # Solver
    cond_limit: float = 1e12

    # Plot scaling: largest displacement drawn at (scale_ratio - 1) of its node's position norm
    scale_ratio: float = 1.2
    default_scale: float = 1.0  # used when all displacements are zero

    # Validation runs compare the final strain energy against this value
    reference_energy: float = 1.0760861791e-04

    @property
    def stiffness_report(self) -> str:
        return f"{self.output_prefix}_out.txt"

    @property
    def result_report(self) -> str:
        return f"{self.output_prefix}_res.txt"

    @property
    def plot_report(self) -> str:
        return f"{self.output_prefix}_pos.txt"


# Global config instance
CONFIG = AnalysisConfig()
