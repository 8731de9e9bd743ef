from __future__ import annotations

from datetime import date
from typing import Any, List, Mapping, Optional, Union

from date_utils import coerce_date, is_blank
from errors import ConfigValidationError
from gantt_models import Project


def _as_date(value: Any) -> Optional[date]:
    # Ordering is only checked between values that parse; unparseable strings
    # in raw payloads are rejected by the normalizer, not here.
    try:
        return coerce_date(value)
    except ValueError:
        return None


def collect_errors(config: Union[Project, Mapping[str, Any]]) -> List[str]:
    """
    Every problem in one pass, in a fixed order:
    title, timelineStart, timelineEnd, timeline ordering, tasks array, then
    per task (1-based) name, start, end, color, and start-before-end.
    """
    data = config.to_payload() if isinstance(config, Project) else config
    errors: List[str] = []

    if is_blank(data.get("title")):
        errors.append("Missing required field: title")
    if is_blank(data.get("timelineStart")):
        errors.append("Missing required field: timelineStart")
    if is_blank(data.get("timelineEnd")):
        errors.append("Missing required field: timelineEnd")

    start, end = _as_date(data.get("timelineStart")), _as_date(data.get("timelineEnd"))
    if start is not None and end is not None and start >= end:
        errors.append("timelineStart must be before timelineEnd")

    tasks = data.get("tasks")
    if not isinstance(tasks, list):
        errors.append("Missing or invalid tasks array")
        return errors

    for idx, task in enumerate(tasks, start=1):
        if not isinstance(task, Mapping):
            errors.append(f"Task {idx}: Invalid task entry")
            continue
        if is_blank(task.get("name")):
            errors.append(f"Task {idx}: Missing name")
        if is_blank(task.get("start")):
            errors.append(f"Task {idx}: Missing start date")
        if is_blank(task.get("end")):
            errors.append(f"Task {idx}: Missing end date")
        if is_blank(task.get("color")):
            errors.append(f"Task {idx}: Missing color")

        t_start, t_end = _as_date(task.get("start")), _as_date(task.get("end"))
        if t_start is not None and t_end is not None and t_start >= t_end:
            label = f"Task {idx} ({task.get('name')})" if not is_blank(task.get("name")) else f"Task {idx}"
            errors.append(f"{label}: start date must be before end date")

    return errors


def validate_config(config: Union[Project, Mapping[str, Any]]) -> None:
    """Raise ConfigValidationError listing every violation; return None when valid."""
    errors = collect_errors(config)
    if errors:
        raise ConfigValidationError(errors)
