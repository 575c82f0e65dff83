# File: tests/test_io.py
"""
TEST: Input Parsing, Reports, and the Command Line
==================================================

- The bundled sample input parses into the expected mesh
- Malformed input raises InputFormatError with a useful location
- Reports are all-or-nothing: a failed run writes no files
- The CLI runs the sample end to end
"""

from pathlib import Path

import numpy as np
import pytest

from quadplane.config import AnalysisConfig
from quadplane.errors import InputFormatError, SingularSystemError
from quadplane.io import ReportSet, parse_input, read_input_file, write_input_file
from quadplane.main import main
from quadplane.mesh import rectangular_mesh, fix_edge, load_edge, set_body_force
from quadplane.model import Property
from quadplane.solve import run_analysis

SAMPLE = Path(__file__).resolve().parent.parent / "data" / "input.txt"


def sample_lines():
    return SAMPLE.read_text().splitlines()


def test_sample_input_parses():
    mesh = read_input_file(SAMPLE)

    assert mesh.n_nodes == 4
    assert mesh.n_elements == 1
    assert mesh.nodes[1].bc == (0, 1)
    assert mesh.nodes[2].pm == (5.0, 0.0)
    assert mesh.elements[0].cn == (0, 1, 2, 3)
    assert mesh.elements[0].q == (0.0, 0.0)
    assert mesh.prop == Property(thickness=1.0, young=1000.0, poisson=0.3)


def test_commas_blank_lines_and_fortran_exponents():
    text = """
    NODE
    1
    header

    1, 0.0, 0.0, 1, 1, 0.0, 0.0
    ELEMENT
    0
    header
    THICKNESS
    2.5D-01
    YOUNG
    2.1d+05
    POISSON
    0.3
    """
    mesh = parse_input(text.splitlines())
    assert mesh.nodes[0].bc == (1, 1)
    assert mesh.prop.thickness == pytest.approx(0.25)
    assert mesh.prop.young == pytest.approx(2.1e5)


def element_line(lines):
    return next(k for k, ln in enumerate(lines) if ln.startswith("id   n1")) + 1


def test_missing_body_load_columns_default_to_zero():
    lines = sample_lines()
    lines[element_line(lines)] = "1 1 2 3 4 2.0"
    mesh = parse_input(lines)
    assert mesh.elements[0].q == (2.0, 0.0)


def test_truncated_file_raises():
    lines = sample_lines()[:-2]
    with pytest.raises(InputFormatError, match="end of file"):
        parse_input(lines)


def test_short_node_record_raises():
    lines = sample_lines()
    lines[3] = "1 0.0 0.0 1 1"
    with pytest.raises(InputFormatError, match="at least 7"):
        parse_input(lines, source="bad.txt")


def test_non_integer_boundary_flag_raises():
    lines = sample_lines()
    lines[3] = "1 0.0 0.0 1.0 1 0.0 0.0"
    with pytest.raises(InputFormatError, match="bcX"):
        parse_input(lines)


def test_unknown_node_in_connectivity_raises():
    lines = sample_lines()
    lines[element_line(lines)] = "1 1 2 3 9 0.0 0.0"
    with pytest.raises(InputFormatError, match="node 9"):
        parse_input(lines)


def test_missing_file_raises(tmp_path):
    with pytest.raises(InputFormatError):
        read_input_file(tmp_path / "nope.txt")


def test_write_then_read_back(tmp_path):
    mesh = rectangular_mesh(3.0, 1.0, 3, 1, Property(0.1, 70e3, 0.33))
    fix_edge(mesh, 'left')
    load_edge(mesh, 'right', total_force=(0.0, -12.0))
    set_body_force(mesh, (0.0, -0.5))

    path = tmp_path / "mesh.txt"
    write_input_file(mesh, path)
    back = read_input_file(path)

    assert back.prop == mesh.prop
    assert [(n.x, n.y, n.bc, n.pm) for n in back.nodes] == \
        [(n.x, n.y, n.bc, n.pm) for n in mesh.nodes]
    assert [(e.cn, e.q) for e in back.elements] == [(e.cn, e.q) for e in mesh.elements]


def test_reports_written_on_success(tmp_path):
    config = AnalysisConfig(output_dir=str(tmp_path), output_prefix="run")
    mesh = read_input_file(SAMPLE)

    with ReportSet(config) as reports:
        result = run_analysis(mesh, config, reports=reports)

    names = sorted(p.name for p in tmp_path.iterdir())
    assert names == ["run_out.txt", "run_pos.txt", "run_res.txt"]

    res = (tmp_path / "run_res.txt").read_text()
    assert "EQUATION NUMBER" in res
    assert "STRAIN ENERGY" in res
    assert "STRESS of ELEMENT :    1" in res

    out = (tmp_path / "run_out.txt").read_text().splitlines()
    matrix_rows = [ln for ln in out if ln and not ln.startswith(" ---")]
    assert len(matrix_rows) == 8
    assert all(len(ln.split()) == 8 for ln in matrix_rows)

    pos = (tmp_path / "run_pos.txt").read_text().splitlines()
    assert int(pos[0]) == 1
    assert float(pos[1]) == pytest.approx(result.scale, rel=1e-5)
    values = [float(v) for v in pos[2].split()]
    assert len(values) == 28
    # local node 2: x, y, ux, uy, sxx, syy, sxy
    np.testing.assert_allclose(values[7:14], [2.0, 0.0, 0.02, 0.0, 10.0, 0.0, 0.0], atol=1e-6)


def test_reports_not_written_on_failure(tmp_path):
    config = AnalysisConfig(output_dir=str(tmp_path))
    mesh = rectangular_mesh(1.0, 1.0, 1, 1, Property(1.0, 1.0, 0.3))
    load_edge(mesh, 'top', total_force=(0.0, 1.0))

    with pytest.raises(SingularSystemError):
        with ReportSet(config) as reports:
            run_analysis(mesh, config, reports=reports)

    assert list(tmp_path.iterdir()) == []


def test_cli_runs_sample(tmp_path, capsys):
    csv = tmp_path / "stress.csv"
    code = main([str(SAMPLE), "--outdir", str(tmp_path), "--prefix", "cli",
                 "--reference-energy", "0.1", "--csv", str(csv)])

    assert code == 0
    out = capsys.readouterr().out
    energy_line = next(ln for ln in out.splitlines() if "Strain energy" in ln)
    assert float(energy_line.split("=")[1]) == pytest.approx(0.1, rel=1e-10)
    assert "Ref. energy" in out
    assert (tmp_path / "cli_res.txt").exists()
    assert len(csv.read_text().splitlines()) == 1 + 4


def test_cli_reports_errors(tmp_path, capsys):
    mesh = rectangular_mesh(1.0, 1.0, 1, 1, Property(1.0, 1.0, 0.3))
    path = tmp_path / "free.txt"
    write_input_file(mesh, path)

    code = main([str(path), "--outdir", str(tmp_path / "out")])

    assert code == 1
    assert "ERROR" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_boundary_flag_outside_zero_one_raises():
    lines = sample_lines()
    lines[3] = "1 0.0 0.0 2 -7 0.0 0.0"
    with pytest.raises(InputFormatError, match="bcX must be 0 .* or 1"):
        parse_input(lines, source="bad.txt")


def test_boundary_flag_error_names_the_line():
    lines = sample_lines()
    lines[5] = "3 2.0 1.0 0 -1 5.0 0.0"
    with pytest.raises(InputFormatError, match=r"bad.txt:6: bcY"):
        parse_input(lines, source="bad.txt")


def test_strain_energy_record_layout(tmp_path):
    config = AnalysisConfig(output_dir=str(tmp_path), output_prefix="run")
    with ReportSet(config) as reports:
        run_analysis(read_input_file(SAMPLE), config, reports=reports)

    res = (tmp_path / "run_res.txt").read_text().splitlines()
    line = next(ln for ln in res if "STRAIN ENERGY" in ln)
    assert line.startswith(" STRAIN ENERGY = ")
    assert len(line) == 17 + 14
    assert float(line[17:]) == pytest.approx(0.1, rel=1e-5)


def test_cli_reports_unwritable_output_dir(tmp_path, capsys):
    blocker = tmp_path / "taken"
    blocker.write_text("not a directory")

    code = main([str(SAMPLE), "--outdir", str(blocker)])

    assert code == 1
    assert "ERROR" in capsys.readouterr().err
    assert blocker.read_text() == "not a directory"
