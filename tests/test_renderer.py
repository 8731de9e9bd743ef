import json
from datetime import date
from pathlib import Path

import pytest

from gantt_models import Milestone, Project, Task
from renderer import (
    CONFIG_MARKER,
    assemble,
    default_output_path,
    load_template,
    serialize_project,
    write_chart_html,
    write_snapshot,
)


def _project(name="Build"):
    return Project(
        title="Roadmap",
        timeline_start=date(2025, 1, 1),
        timeline_end=date(2025, 6, 30),
        palette=["#F01840"],
        tasks=[Task(name=name, start=date(2025, 1, 6), end=date(2025, 2, 14), color="#F01840")],
        milestones=[Milestone(name="Kickoff", date=date(2025, 1, 6), task_index=0)],
    )


def test_bundled_template_has_single_marker():
    assert load_template().count(CONFIG_MARKER) == 1


def test_serialized_payload_uses_wire_names():
    payload = json.loads(serialize_project(_project()))
    assert payload["timelineStart"] == "2025-01-01"
    assert payload["milestones"][0]["taskIndex"] == 0
    assert payload["showMilestones"] is True
    assert "accentBorder" not in payload


def test_assemble_replaces_marker_once():
    html = assemble(_project(), "<script>const config = {{CONFIG}};</script><!-- {{CONFIG}} -->")
    assert html.count(CONFIG_MARKER) == 1
    assert '"title": "Roadmap"' in html


def test_assemble_requires_marker():
    with pytest.raises(ValueError):
        assemble(_project(), "<html></html>")


def test_script_terminator_is_escaped():
    html = assemble(_project(name="</script><b>x"), "<script>const config = {{CONFIG}};</script>")
    assert html.count("</script>") == 1
    payload = json.loads(serialize_project(_project(name="</script>")))
    assert payload["tasks"][0]["name"] == "</script>"


def test_default_output_path():
    assert default_output_path("in/plan.xlsx", "out") == Path("out/plan_gantt_chart.html")
    assert default_output_path("plan.json", "out", "reds") == Path("out/plan_gantt_chart_reds.html")


def test_write_chart_html_creates_parent_dirs(tmp_path):
    out = write_chart_html(_project(), tmp_path / "a" / "b" / "chart.html")
    text = out.read_text(encoding="utf-8")
    assert CONFIG_MARKER not in text
    assert "ganttReady" in text


def test_snapshot_is_best_effort(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    # parent "directory" is a regular file, so the write fails
    assert write_snapshot(_project(), blocker / "snap.json") is False
    assert write_snapshot(_project(), tmp_path / "snap.json") is True


def test_unassociated_milestones_keep_their_place_in_payload_and_template():
    project = _project()
    project.milestones.append(Milestone(name="Board review", date=date(2025, 3, 3)))
    payload = json.loads(serialize_project(project))
    assert "taskIndex" not in payload["milestones"][1]
    # the template draws these on a separate timeline row
    template = load_template()
    assert "timeline-row" in template
    assert "m.taskIndex === undefined" in template
