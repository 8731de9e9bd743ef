import json
import logging

import pytest
from typer.testing import CliRunner

from cli import app, is_valid_path
from normalizer import load_project

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _write_doc(tmp_path, **overrides):
    doc = {
        "title": "CLI Plan",
        "timelineStart": "2025-01-01",
        "timelineEnd": "2025-03-31",
        "tasks": [{"name": "Only task", "start": "2025-01-06", "end": "2025-02-14"}],
        "milestones": [{"name": "Done", "date": "2025-02-14", "taskIndex": 0}],
    }
    doc.update(overrides)
    p = tmp_path / "plan.json"
    p.write_text(json.dumps(doc), encoding="utf-8")
    return p


@pytest.mark.parametrize(
    "value",
    ["/home/user/file.json", "./config/project.json", "file.json", "C:\\Users\\test\\file.json", "C:/", "  a.json  "],
)
def test_is_valid_path_accepts(value):
    assert is_valid_path(value)


@pytest.mark.parametrize("value", ["", "   ", "\t\t", "\n", ".", "C:", "z:", None, 123, True, {}, []])
def test_is_valid_path_rejects(value):
    assert not is_valid_path(value)


def test_convert_writes_html(tmp_path):
    src = _write_doc(tmp_path)
    out = tmp_path / "chart.html"
    result = runner.invoke(app, ["convert", "--input", str(src), "--output", str(out), "--no-png", "--seed", "2"])
    assert result.exit_code == 0, result.output
    assert f"HTML: {out}" in result.output
    assert "PNG:" not in result.output
    assert out.is_file()


def test_convert_uses_output_dir_and_palette(tmp_path):
    src = _write_doc(tmp_path)
    result = runner.invoke(app, ["convert", "-i", str(src), "--output-dir", str(tmp_path / "o"), "--palette", "purples_b"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "o" / "plan_gantt_chart_purples_b.html").is_file()


def test_convert_validation_failure_exits_1(tmp_path):
    src = _write_doc(tmp_path, title="")
    result = runner.invoke(app, ["convert", "-i", str(src), "--output-dir", str(tmp_path / "o")])
    assert result.exit_code == 1
    assert "Missing required field: title" in result.output
    assert not (tmp_path / "o").exists()


def test_convert_rejects_bad_input_path():
    result = runner.invoke(app, ["convert", "--input", "C:"])
    assert result.exit_code != 0


def test_parse_prints_normalized_json(tmp_path):
    src = _write_doc(tmp_path)
    result = runner.invoke(app, ["parse", str(src)])
    assert result.exit_code == 0, result.output
    assert '"title": "CLI Plan"' in result.output
    assert '"taskIndex": 0' in result.output


def test_parse_unsupported_format(tmp_path):
    result = runner.invoke(app, ["parse", str(tmp_path / "plan.csv")])
    assert result.exit_code == 1
    assert "Unsupported file format: .csv" in result.output


def test_palettes_lists_presets():
    result = runner.invoke(app, ["palettes"])
    assert result.exit_code == 0
    assert "alternating" in result.output
    assert "purples_c" in result.output


def test_to_excel_roundtrip(tmp_path):
    src = _write_doc(tmp_path)
    result = runner.invoke(app, ["to-excel", "--input", str(src)])
    assert result.exit_code == 0, result.output
    xlsx = tmp_path / "plan.xlsx"
    assert xlsx.is_file()
    project = load_project(xlsx)
    assert project.title == "CLI Plan"
    assert project.milestones[0].task_index == 0
