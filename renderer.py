from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

from gantt_models import Project

log = logging.getLogger(__name__)

CONFIG_MARKER = "{{CONFIG}}"
TEMPLATE_PATH = Path(__file__).resolve().parent / "templates" / "gantt_template.html"


def load_template(path: Optional[Union[str, Path]] = None) -> str:
    """Read the presentational template (the bundled one by default)."""
    return Path(path or TEMPLATE_PATH).read_text(encoding="utf-8")


def serialize_project(project: Project, *, indent: int = 4) -> str:
    """
    Canonical text form of a project: model field order, pretty-printed.

    "</" is escaped as "<\\/" (still valid JSON) so a task name can never
    terminate the <script> element the payload is embedded in.
    """
    text = json.dumps(project.to_payload(), indent=indent, ensure_ascii=False)
    return text.replace("</", "<\\/")


def assemble(project: Project, template: str) -> str:
    """Substitute the serialized project for the single {{CONFIG}} marker."""
    if CONFIG_MARKER not in template:
        raise ValueError(f"Template has no {CONFIG_MARKER} placeholder.")
    return template.replace(CONFIG_MARKER, serialize_project(project), 1)


def default_output_path(
    input_path: Union[str, Path],
    output_dir: Union[str, Path],
    palette: Optional[str] = None,
) -> Path:
    """<output_dir>/<input stem>_gantt_chart[_<palette>].html"""
    stem = Path(input_path).stem
    suffix = f"_{palette}" if palette else ""
    return Path(output_dir) / f"{stem}_gantt_chart{suffix}.html"


def write_chart_html(project: Project, output_path: Union[str, Path], template: Optional[str] = None) -> Path:
    """Assemble and write the standalone chart. Parent directories are created."""
    out = Path(output_path)
    document = assemble(project, template if template is not None else load_template())
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(document, encoding="utf-8")
    log.info("Generated HTML at %s", out)
    return out


def write_snapshot(project: Project, path: Union[str, Path]) -> bool:
    """Best-effort debug copy of the serialized project; never raises on IO errors."""
    p = Path(path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(project.to_payload(), indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        log.warning("Could not save project snapshot to %s: %s", p, e)
        return False
    log.info("Saved config to %s", p)
    return True
