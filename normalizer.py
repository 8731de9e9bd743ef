from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

import palettes
from color_assign import make_rng, resolve_task_colors, strategy_for_format
from date_utils import coerce_bool, coerce_date, coerce_hours, coerce_index, is_blank
from errors import ParseError, UnsupportedFormatError
from excel_io import WorkbookPayload, read_gantt_workbook
from gantt_models import Milestone, PausePeriod, Project, Task

log = logging.getLogger(__name__)

SourceFormat = Literal["json", "xlsx"]

_EXTENSIONS: Dict[str, SourceFormat] = {".json": "json", ".xlsx": "xlsx", ".xls": "xlsx"}


def detect_format(path: Union[str, Path]) -> SourceFormat:
    """Map a file extension to its input encoding, before touching the file."""
    ext = Path(path).suffix.lower()
    fmt = _EXTENSIONS.get(ext)
    if fmt is None:
        raise UnsupportedFormatError(ext)
    return fmt


def read_declarative(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON project document. IO and decode errors become ParseError."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(path, e) from e
    if not isinstance(data, dict):
        raise ParseError(path, f"expected a JSON object at the top level, got {type(data).__name__}")
    return data


# ---------------------------------------------------------------------------
# Raw records -> models
# ---------------------------------------------------------------------------

def _format_validation_error(ve: ValidationError, where: str) -> str:
    parts = []
    for err in ve.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "Invalid value")
        parts.append(f"{where}.{loc}: {msg}" if loc else f"{where}: {msg}")
    return "; ".join(parts)


def _date_field(raw: Mapping[str, Any], key: str, where: str) -> Any:
    try:
        return coerce_date(raw.get(key))
    except ValueError as e:
        raise ValueError(f"{where}.{key}: {e}") from e


def _build(model: Callable[..., Any], where: str, **fields: Any) -> Any:
    try:
        return model(**fields)
    except ValidationError as ve:
        raise ValueError(_format_validation_error(ve, where)) from ve


def _build_task(raw: Any, i: int) -> Task:
    where = f"tasks[{i}]"
    if not isinstance(raw, Mapping):
        raise ValueError(f"{where}: expected an object, got {type(raw).__name__}")
    try:
        hours = coerce_hours(raw.get("hours"))
    except ValueError as e:
        raise ValueError(f"{where}.hours: {e}") from e
    name = raw.get("name")
    return _build(
        Task,
        where,
        name=None if is_blank(name) else str(name),
        start=_date_field(raw, "start", where),
        end=_date_field(raw, "end", where),
        hours=hours,
        subtasks=raw.get("subtasks"),
        color=None if is_blank(raw.get("color")) else str(raw.get("color")),
        color_index=coerce_index(raw.get("colorIndex")),
    )


def _build_milestones(raw_list: Sequence[Any], tasks: List[Task], *, link_by_name: bool) -> List[Milestone]:
    """
    Milestone -> task association differs per source:
      - tabular rows carry the task *name* (linkedTask), looked up by exact match
      - declarative documents carry a numeric taskIndex
    Either way an index outside the task list leaves the milestone unassociated.
    """
    names = [t.name for t in tasks]
    out: List[Milestone] = []
    for i, raw in enumerate(raw_list):
        where = f"milestones[{i}]"
        if not isinstance(raw, Mapping):
            raise ValueError(f"{where}: expected an object, got {type(raw).__name__}")
        if link_by_name:
            linked = raw.get("linkedTask")
            task_index = names.index(linked) if linked in names else None
            if linked and task_index is None:
                log.warning("Milestone '%s' links to unknown task '%s'; left unassociated", raw.get("name"), linked)
        else:
            task_index = coerce_index(raw.get("taskIndex"))
            if task_index is not None and not (0 <= task_index < len(tasks)):
                log.warning(
                    "Milestone '%s' has taskIndex %s but there are %d task(s); left unassociated",
                    raw.get("name"),
                    task_index,
                    len(tasks),
                )
                task_index = None
        out.append(
            _build(Milestone, where, name=raw.get("name"), date=_date_field(raw, "date", where), task_index=task_index)
        )
    return out


def _build_pause_periods(raw_list: Sequence[Any]) -> List[PausePeriod]:
    out: List[PausePeriod] = []
    for i, raw in enumerate(raw_list):
        where = f"pausePeriods[{i}]"
        if not isinstance(raw, Mapping):
            raise ValueError(f"{where}: expected an object, got {type(raw).__name__}")
        out.append(_build(PausePeriod, where, start=_date_field(raw, "start", where), end=_date_field(raw, "end", where)))
    return out


def _as_list(value: Any, where: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where}: expected a list, got {type(value).__name__}")
    return value


def build_project(
    raw: Mapping[str, Any],
    source_format: SourceFormat,
    *,
    palette: Optional[str] = None,
    rng: Optional[random.Random] = None,
    link_milestones_by_name: Optional[bool] = None,
) -> Project:
    """
    Turn a raw document (declarative shape) into a Project with resolved colors.

    Palette precedence: requested preset > palette declared in the input > default.
    A requested preset replaces the accents too, and every task color that came
    from the replaced palette is resolved again against the preset. Direct
    colors outside that palette are kept.
    Raises ValueError describing the first malformed field.
    """
    raw_tasks = raw.get("tasks")
    # A missing/non-list tasks value stays None for the validator to report.
    tasks = [_build_task(t, i) for i, t in enumerate(raw_tasks)] if isinstance(raw_tasks, list) else None

    project = _build(
        Project,
        "project",
        title=None if is_blank(raw.get("title")) else str(raw.get("title")),
        timeline_start=_date_field(raw, "timelineStart", "project"),
        timeline_end=_date_field(raw, "timelineEnd", "project"),
        show_milestones=coerce_bool(raw.get("showMilestones"), default=True),
        palette=_as_list(raw.get("palette"), "palette"),
        palette_preset=raw.get("palettePreset"),
        accent_border=raw.get("accentBorder"),
        accent_color=raw.get("accentColor"),
    )

    if palette is not None:
        preset = palettes.resolve(palette)
        replaced = set(project.palette)
        if tasks is not None:
            tasks = [t.model_copy(update={"color": None}) if t.color in replaced else t for t in tasks]
        project.palette = list(preset.colors)
        project.palette_preset = preset.id
        project.accent_border = preset.accent_border
        project.accent_color = preset.accent_color
        log.info("Applying palette preset '%s'", preset.id)
    elif not project.palette:
        project.palette = list(palettes.DEFAULT_PALETTE)

    if link_milestones_by_name is None:
        link_milestones_by_name = source_format == "xlsx"
    strategy = strategy_for_format(source_format, rng or make_rng())

    if tasks is not None:
        project.tasks = resolve_task_colors(tasks, project.palette, strategy)
    project.milestones = _build_milestones(
        _as_list(raw.get("milestones"), "milestones"), project.tasks or [], link_by_name=link_milestones_by_name
    )
    project.pause_periods = _build_pause_periods(_as_list(raw.get("pausePeriods"), "pausePeriods"))
    return project


def _workbook_to_raw(payload: WorkbookPayload) -> Dict[str, Any]:
    raw = dict(payload.project)
    raw.update(
        tasks=payload.tasks,
        milestones=payload.milestones,
        pausePeriods=payload.pause_periods,
        palette=payload.palette,
    )
    return raw


def load_raw(path: Union[str, Path]) -> tuple[Dict[str, Any], SourceFormat]:
    """Read either encoding into the declarative shape without building models."""
    fmt = detect_format(path)
    p = Path(path)
    if not p.is_file():
        raise ParseError(p, "Input file not found")
    if fmt == "json":
        return read_declarative(p), fmt
    try:
        payload = read_gantt_workbook(p.read_bytes())
    except (OSError, ValueError) as e:
        raise ParseError(p, e) from e
    return _workbook_to_raw(payload), fmt


def load_project(
    path: Union[str, Path],
    *,
    palette: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> Project:
    """
    Input Normalizer entry point: one file in, one Project out, every task colored.

    - UnsupportedFormatError: extension is not .json/.xlsx/.xls (checked first)
    - ParseError: missing/unreadable file or a malformed value
    """
    raw, fmt = load_raw(path)
    log.info("Parsed %s input: %s", "Excel" if fmt == "xlsx" else "JSON", path)
    try:
        return build_project(raw, fmt, palette=palette, rng=rng)
    except ValueError as e:
        raise ParseError(path, e) from e

