"""
COMMAND-LINE ENTRY POINT
========================

    python -m quadplane input.txt
    python -m quadplane input.txt --outdir results --plot results/deformed.png

Reads the input file, runs the analysis, writes the three text reports
(<prefix>_out.txt, <prefix>_res.txt, <prefix>_pos.txt) and prints a
summary ending with the strain energy and the reference energy it should
be compared against.

Exit status is 0 on success and 1 on any analysis error. On error no
report files are written.
"""

import argparse
import dataclasses
import logging
import os
import sys

from .config import CONFIG
from .errors import QuadplaneError
from .io import ReportSet, read_input_file
from .kernel.dof import number_dofs
from .post import stress_table
from .solve import run_analysis

RULE = " " + "=" * 69


def print_information(mesh, numbering) -> None:
    print()
    print(" [quadplane] Q4 plane-stress analysis")
    print(" : LU decomposition with full global matrix")
    print()
    print(RULE)
    print()
    print(f" Young's modulus: {mesh.prop.young:10.3E}, "
          f"Poisson ratio: {mesh.prop.poisson:6.4f}, thick: {mesh.prop.thickness:6.4f}")
    print(f" # of elements: {mesh.n_elements:5d}, # of nodes: {mesh.n_nodes:5d}")
    print(f" # total DOFs: {numbering.total:6d}, # free DOFs: {numbering.free:6d}, "
          f"# fixed DOFs: {numbering.fixed:6d}")
    print(f" # of equations = {numbering.free:7d}")
    print()
    print(RULE)
    print()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="quadplane",
        description="Static analysis of a 2-D plane-stress Q4 mesh.",
    )
    p.add_argument("input", nargs="?", default=CONFIG.input_path,
                   help=f"Input file (default: {CONFIG.input_path})")
    p.add_argument("--outdir", default=CONFIG.output_dir, help="Directory for report files")
    p.add_argument("--prefix", default=CONFIG.output_prefix, help="Report file name prefix")
    p.add_argument("--gauss-order", type=int, default=CONFIG.gauss_order,
                   help="Gauss points per direction for element integration")
    p.add_argument("--cond-limit", type=float, default=CONFIG.cond_limit,
                   help="Largest acceptable condition number of the reduced stiffness")
    p.add_argument("--reference-energy", type=float, default=CONFIG.reference_energy,
                   help="Expected strain energy, echoed in the summary")
    p.add_argument("--plot", default=None, help="Save a deformed-shape plot to this file")
    p.add_argument("--component", default="sxx", choices=["sxx", "syy", "sxy"],
                   help="Stress component to colour the plot by")
    p.add_argument("--csv", default=None, help="Save the element stress table as CSV")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s: %(message)s")

    config = dataclasses.replace(
        CONFIG,
        input_path=args.input,
        output_dir=args.outdir,
        output_prefix=args.prefix,
        gauss_order=args.gauss_order,
        cond_limit=args.cond_limit,
        reference_energy=args.reference_energy,
    )

    try:
        mesh = read_input_file(config.input_path)
        print_information(mesh, number_dofs(mesh.nodes))

        with ReportSet(config) as reports:
            result = run_analysis(mesh, config, reports=reports)
    except (QuadplaneError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if result.scale_is_default:
        print(f" (no displacement: plot scale set to {result.scale:g})")

    if args.csv:
        os.makedirs(os.path.dirname(args.csv) or ".", exist_ok=True)
        stress_table(mesh, result.stresses).to_csv(args.csv, index=False)
        print(f" Stress table saved to: {args.csv}")

    if args.plot:
        from .viz import plot_deformed_mesh
        plot_deformed_mesh(mesh, result.U, result.stresses, result.scale, args.plot,
                           component=args.component)
        print(f" Plot saved to: {args.plot}")

    print(" 4 - Completed")
    print()
    print(f" Strain energy = {result.energy:17.10E}")
    print(f"   Ref. energy = {config.reference_energy:17.10E}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
