# input file parsing and text report writers
"""
INPUT / OUTPUT
==============

INPUT FORMAT:
-------------
Whitespace (or comma) separated, one record per line. Header lines are
skipped by position, so their text is free:

    NODE                                   <- header
    4                                      <- node count
    id  x  y  bcX  bcY  loadX  loadY       <- header
    1   0.0 0.0  1  1   0.0 0.0
    ...
    ELEMENT                                <- header
    1                                      <- element count
    id  n1 n2 n3 n4  qx qy                 <- header
    1   1  2  3  4   0.0 0.0
    THICKNESS                              <- header
    1.0
    YOUNG                                  <- header
    1000.0
    POISSON                                <- header
    0.3

Boundary flags are 0 (free) or 1 (fixed at zero displacement).
Connectivity refers to nodes by their 1-based POSITION in the node list.
Body-load columns beyond the second are ignored; missing ones are zero.
Blank lines are ignored.

REPORTS:
--------
    <prefix>_out.txt   element stiffness matrices, one block per element
    <prefix>_res.txt   equation numbers, strain energy, displacements, stresses
    <prefix>_pos.txt   element count, plot scale, then 28 values per element:
                       (x, y, ux, uy, sxx, syy, sxy) for each local node

``ReportSet`` renders all three in memory and writes them to disk only
when its ``with`` block exits without an exception.
"""

import io
import logging
import os
import re
from pathlib import Path
from typing import List, Optional

import numpy as np

from .config import AnalysisConfig, CONFIG
from .errors import InputFormatError
from .kernel.dof import EquationNumbering
from .model import DOF_PER_NODE, NODES_PER_ELEMENT, Mesh, Node, Property, Quad4

logger = logging.getLogger(__name__)

_SPLIT = re.compile(r"[,\s]+")


class _LineReader:
    """Sequential reader over the non-blank lines of an input file."""

    def __init__(self, lines, source: str = "<input>"):
        self._lines = [(i + 1, ln.strip()) for i, ln in enumerate(lines) if ln.strip()]
        self._pos = 0
        self.source = source

    def _next(self, what: str):
        if self._pos >= len(self._lines):
            raise InputFormatError(f"{self.source}: unexpected end of file while reading {what}")
        lineno, text = self._lines[self._pos]
        self._pos += 1
        return lineno, text

    def skip_header(self, what: str) -> None:
        self._next(f"{what} header")

    def values(self, what: str, minimum: int) -> List[str]:
        lineno, text = self._next(what)
        tokens = [t for t in _SPLIT.split(text) if t]
        if len(tokens) < minimum:
            raise InputFormatError(
                f"{self.source}:{lineno}: {what} needs at least {minimum} values, got {len(tokens)}"
            )
        return tokens

    def convert(self, token: str, kind, what: str):
        try:
            # Fortran-style exponents (1.0D+03)
            return kind(token.replace('D', 'E').replace('d', 'e')) if kind is float else kind(token)
        except ValueError:
            raise InputFormatError(
                f"{self.source}:{self.lineno}: cannot read {what} from {token!r}"
            ) from None

    def count(self, what: str) -> int:
        n = self.convert(self.values(what, 1)[0], int, what)
        if n < 0:
            raise InputFormatError(f"{self.source}: negative {what}: {n}")
        return n

    def scalar(self, what: str) -> float:
        return self.convert(self.values(what, 1)[0], float, what)

    @property
    def lineno(self) -> int:
        """Line number of the record read last."""
        return self._lines[self._pos - 1][0]


def parse_input(lines, source: str = "<input>") -> Mesh:
    """
    Parse input records into a Mesh.

    Parameters:
    -----------
    lines : iterable of str
        The file's lines
    source : str
        Name used in error messages

    Raises:
    -------
    InputFormatError
        Missing records, unreadable numbers, or connectivity pointing at a
        node that does not exist
    """
    r = _LineReader(lines, source)

    # Nodes
    r.skip_header("node section")
    n_nodes = r.count("node count")
    r.skip_header("node table")
    nodes = []
    for _ in range(n_nodes):
        tok = r.values("node record", 7)
        bc = (r.convert(tok[3], int, "bcX"), r.convert(tok[4], int, "bcY"))
        for name, flag in zip(("bcX", "bcY"), bc):
            if flag not in (0, 1):
                raise InputFormatError(
                    f"{source}:{r.lineno}: {name} must be 0 (free) or 1 (fixed), got {flag}"
                )
        nodes.append(Node(
            id=r.convert(tok[0], int, "node id"),
            x=r.convert(tok[1], float, "x"),
            y=r.convert(tok[2], float, "y"),
            bc=bc,
            pm=(r.convert(tok[5], float, "loadX"), r.convert(tok[6], float, "loadY")),
        ))

    # Elements
    r.skip_header("element section")
    n_elements = r.count("element count")
    r.skip_header("element table")
    elements = []
    for _ in range(n_elements):
        tok = r.values("element record", 1 + NODES_PER_ELEMENT)
        eid = r.convert(tok[0], int, "element id")
        cn = []
        for t in tok[1:1 + NODES_PER_ELEMENT]:
            k = r.convert(t, int, "connectivity")
            if not 1 <= k <= n_nodes:
                raise InputFormatError(
                    f"{source}: element {eid} refers to node {k}, but there are {n_nodes} nodes"
                )
            cn.append(k - 1)
        q = [r.convert(t, float, "body load") for t in tok[1 + NODES_PER_ELEMENT:3 + NODES_PER_ELEMENT]]
        q += [0.0] * (2 - len(q))
        elements.append(Quad4(id=eid, cn=tuple(cn), q=tuple(q)))

    # Properties
    r.skip_header("thickness")
    thickness = r.scalar("thickness")
    r.skip_header("Young's modulus")
    young = r.scalar("Young's modulus")
    r.skip_header("Poisson ratio")
    poisson = r.scalar("Poisson ratio")

    return Mesh(nodes=nodes, elements=elements,
                prop=Property(thickness=thickness, young=young, poisson=poisson))


def read_input_file(path) -> Mesh:
    """Read a mesh from an input file (see module docstring for the format)."""
    try:
        with open(path, "r") as f:
            lines = f.readlines()
    except OSError as e:
        raise InputFormatError(f"Cannot read input file {path}: {e}") from e
    mesh = parse_input(lines, source=str(path))
    logger.info("Read %s: %d nodes, %d elements", path, mesh.n_nodes, mesh.n_elements)
    return mesh


def write_input_file(mesh: Mesh, path) -> None:
    """Write a mesh in the input format (node ids renumbered 1..n)."""
    with open(path, "w") as f:
        f.write("NODE\n")
        f.write(f"{mesh.n_nodes}\n")
        f.write("id x y bcX bcY loadX loadY\n")
        for i, n in enumerate(mesh.nodes):
            f.write(f"{i + 1} {n.x!r} {n.y!r} {n.bc[0]} {n.bc[1]} {n.pm[0]!r} {n.pm[1]!r}\n")
        f.write("ELEMENT\n")
        f.write(f"{mesh.n_elements}\n")
        f.write("id n1 n2 n3 n4 qx qy\n")
        for e in mesh.elements:
            cn = " ".join(str(k + 1) for k in e.cn)
            f.write(f"{e.id} {cn} {e.q[0]!r} {e.q[1]!r}\n")
        f.write(f"THICKNESS\n{mesh.prop.thickness!r}\n")
        f.write(f"YOUNG\n{mesh.prop.young!r}\n")
        f.write(f"POISSON\n{mesh.prop.poisson!r}\n")


# =============================================================================
# REPORT WRITERS
# =============================================================================

class StiffnessReport:
    """Dump of each element's local stiffness matrix."""

    def __init__(self, stream):
        self.stream = stream

    def write_matrix(self, index: int, ke: np.ndarray) -> None:
        self.stream.write(" ---------------------------\n")
        for row in ke:
            self.stream.write("".join(f"{v:12.4E}" for v in row) + "\n")
        self.stream.write("\n")


class ResultReport:
    """Equation numbers, strain energy, displacements and element stresses."""

    def __init__(self, stream):
        self.stream = stream

    def write_equation_table(self, numbering: EquationNumbering) -> None:
        w = self.stream.write
        w(" EQUATION NUMBER\n")
        w(" ---------------------\n")
        w("     node   dof    eqn\n")
        for node, dof, eq in numbering.free_table():
            w(f"{node:7d}{dof:7d}{eq:7d}\n")
        w("\n")

    def write_strain_energy(self, energy: float) -> None:
        self.stream.write(f" STRAIN ENERGY = {energy:14.6E}\n")

    def write_displacements(self, displacements: np.ndarray) -> None:
        w = self.stream.write
        w("\n")
        w(" DISPLACEMENT \n")
        w(" ------------------------------\n")
        w("  Node      Dx         Dy     \n")
        for i, (dx, dy) in enumerate(displacements):
            w(f" {i + 1:4d}  {dx:11.3E}{dy:11.3E}\n")
        w("\n")

    def write_element_stress(self, index: int, stress: np.ndarray) -> None:
        w = self.stream.write
        w(f" STRESS of ELEMENT : {index + 1:4d}\n")
        w(" ----------------------------------------------\n")
        w("  Position       Sxx        Syy        Sxy     \n")
        for j, (sxx, syy, sxy) in enumerate(stress):
            w(f" {j + 1:4d}        {sxx:11.3E}{syy:11.3E}{sxy:11.3E}\n")
        w("\n")


class PlotReport:
    """Post-processing data: deformed shape and stress per element node."""

    def __init__(self, stream):
        self.stream = stream

    def write_header(self, n_elements: int, scale: float) -> None:
        self.stream.write(f" {n_elements}\n")
        self.stream.write(f"{scale:14.6E}\n")

    def write_element(self, coords: np.ndarray, u_e: np.ndarray, stress: np.ndarray) -> None:
        values = []
        for j in range(NODES_PER_ELEMENT):
            values.extend(coords[j])
            values.extend(u_e[d * NODES_PER_ELEMENT + j] for d in range(DOF_PER_NODE))
            values.extend(stress[j])
        self.stream.write(" " + "".join(f"{v:13.5E}" for v in values) + "\n")


class ReportSet:
    """
    The three report streams of one run.

    Use as a context manager. Reports are buffered in memory; files are
    written only if the block finishes without raising, so a failed run
    leaves no partial output.

    >>> with ReportSet(config) as reports:
    ...     run_analysis(mesh, config, reports=reports)
    """

    def __init__(self, config: AnalysisConfig = CONFIG):
        self.config = config
        self._buffers = None
        self.stiffness: Optional[StiffnessReport] = None
        self.result: Optional[ResultReport] = None
        self.plot: Optional[PlotReport] = None
        self.written: List[Path] = []

    def __enter__(self):
        self._buffers = {
            self.config.stiffness_report: io.StringIO(),
            self.config.result_report: io.StringIO(),
            self.config.plot_report: io.StringIO(),
        }
        self.stiffness = StiffnessReport(self._buffers[self.config.stiffness_report])
        self.result = ResultReport(self._buffers[self.config.result_report])
        self.plot = PlotReport(self._buffers[self.config.plot_report])
        return self

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is None:
                self._flush()
            else:
                logger.debug("Discarding reports after %s", exc_type.__name__)
        finally:
            for buf in self._buffers.values():
                buf.close()
            self._buffers = None
        return False

    def _flush(self) -> None:
        outdir = Path(self.config.output_dir)
        outdir.mkdir(parents=True, exist_ok=True)

        # Stage every file first, then move into place.
        staged = []
        try:
            for name, buf in self._buffers.items():
                target = outdir / name
                tmp = outdir / f".{name}.tmp"
                tmp.write_text(buf.getvalue())
                staged.append((tmp, target))
        except OSError:
            for tmp, _ in staged:
                tmp.unlink(missing_ok=True)
            raise

        for tmp, target in staged:
            os.replace(tmp, target)
            self.written.append(target)
            logger.info("Report written: %s", target)
