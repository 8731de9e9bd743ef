from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from date_utils import is_blank
from gantt_models import DEFAULT_TITLE, MAX_SUBTASKS, Project

# Column order is fixed and positional; header text is informational only.
PROJECT_COLUMNS = ["title", "timelineStart", "timelineEnd", "showMilestones"]
SUBTASK_COLUMNS = [f"subtask{i}" for i in range(1, MAX_SUBTASKS + 1)]
TASK_COLUMNS = ["name", "start", "end", "hours", *SUBTASK_COLUMNS, "color", "colorIndex"]
MILESTONE_COLUMNS = ["name", "date", "linkedTask"]
PAUSE_COLUMNS = ["start", "end"]
PALETTE_COLUMNS = ["color"]

REQUIRED_SHEETS = ("Project", "Tasks")


@dataclass(frozen=True)
class WorkbookPayload:
    """Raw workbook content in the declarative document's shape (values not yet validated)."""

    project: Dict[str, Any]
    tasks: List[Dict[str, Any]] = field(default_factory=list)
    milestones: List[Dict[str, Any]] = field(default_factory=list)
    pause_periods: List[Dict[str, Any]] = field(default_factory=list)
    palette: List[str] = field(default_factory=list)


def _text(value: Any) -> Optional[str]:
    if is_blank(value):
        return None
    return str(value).strip()


def _cell(value: Any) -> Any:
    """Blank-ish cells (None, NaN, NaT, whitespace) -> None; strings trimmed."""
    if is_blank(value):
        return None
    return value.strip() if isinstance(value, str) else value


def _read_sheet(excel_bytes: bytes, sheet: str, columns: List[str]) -> pd.DataFrame:
    """Read a sheet positionally: column i of the sheet becomes columns[i]."""
    df = pd.read_excel(BytesIO(excel_bytes), sheet_name=sheet, engine="openpyxl", header=0, dtype=object)
    df = df.iloc[:, : len(columns)]
    df.columns = columns[: df.shape[1]]
    for col in columns:
        if col not in df.columns:
            df[col] = pd.NA
    return df[columns]


def collect_subtasks(row: Dict[str, Any]) -> List[str]:
    """subtask1..subtask10 cells -> trimmed non-empty strings, in column order."""
    out: List[str] = []
    for col in SUBTASK_COLUMNS:
        s = _text(row.get(col))
        if s:
            out.append(s)
    return out


def read_gantt_workbook(excel_bytes: bytes) -> WorkbookPayload:
    """
    Reads the Project / Tasks / Milestones / PausePeriods / Palette workbook.

    Values come back raw (dates may be datetimes or strings, numbers may be
    floats). Turning them into a Project happens in normalizer.py.
    """
    try:
        wb = load_workbook(BytesIO(excel_bytes), data_only=True)
    except Exception as e:
        raise ValueError(f"Unable to read .xlsx file. Make sure it's an Excel workbook (.xlsx). Details: {e}") from e

    missing = [s for s in REQUIRED_SHEETS if s not in wb.sheetnames]
    if missing:
        raise ValueError(f"Missing required sheet(s): {', '.join(missing)}. Expected: {', '.join(REQUIRED_SHEETS)}.")

    # Project metadata lives in row 2 (openpyxl keeps dates/bools as typed).
    ws = wb["Project"]
    cells = [ws.cell(row=2, column=c).value for c in range(1, len(PROJECT_COLUMNS) + 1)]
    project = {
        "title": _text(cells[0]) or DEFAULT_TITLE,
        "timelineStart": _cell(cells[1]),
        "timelineEnd": _cell(cells[2]),
        "showMilestones": _cell(cells[3]),
    }

    palette: List[str] = []
    if "Palette" in wb.sheetnames:
        for (value,) in wb["Palette"].iter_rows(min_row=2, max_col=1, values_only=True):
            s = _text(value)
            if s:
                palette.append(s)

    try:
        tasks_df = _read_sheet(excel_bytes, "Tasks", TASK_COLUMNS)
        milestones_df = (
            _read_sheet(excel_bytes, "Milestones", MILESTONE_COLUMNS) if "Milestones" in wb.sheetnames else None
        )
        pause_df = _read_sheet(excel_bytes, "PausePeriods", PAUSE_COLUMNS) if "PausePeriods" in wb.sheetnames else None
    except Exception as e:
        raise ValueError(f"Unable to parse Tasks/Milestones/PausePeriods sheets. Details: {e}") from e

    tasks: List[Dict[str, Any]] = []
    for row in tasks_df.to_dict(orient="records"):
        name = _text(row.get("name"))
        if not name:
            continue
        tasks.append(
            {
                "name": name,
                "start": _cell(row.get("start")),
                "end": _cell(row.get("end")),
                "hours": _cell(row.get("hours")),
                "subtasks": collect_subtasks(row),
                "color": _text(row.get("color")),
                "colorIndex": _cell(row.get("colorIndex")),
            }
        )

    milestones: List[Dict[str, Any]] = []
    if milestones_df is not None:
        for row in milestones_df.to_dict(orient="records"):
            name = _text(row.get("name"))
            if not name:
                continue
            milestones.append({"name": name, "date": _cell(row.get("date")), "linkedTask": _text(row.get("linkedTask"))})

    pause_periods: List[Dict[str, Any]] = []
    if pause_df is not None:
        for row in pause_df.to_dict(orient="records"):
            start, end = _cell(row.get("start")), _cell(row.get("end"))
            if start is None or end is None:
                continue
            pause_periods.append({"start": start, "end": end})

    return WorkbookPayload(
        project=project,
        tasks=tasks,
        milestones=milestones,
        pause_periods=pause_periods,
        palette=palette,
    )


# ---------------------------------------------------------------------------
# Writing (JSON -> workbook conversion, test fixtures)
# ---------------------------------------------------------------------------

_HEADER_FILL = PatternFill(start_color="F0F0F0", end_color="F0F0F0", fill_type="solid")


def _add_sheet(wb: Workbook, title: str, header: List[str]) -> Worksheet:
    ws = wb.create_sheet(title)
    ws.append(header)
    for c in ws[1]:
        c.font = Font(bold=True)
        c.fill = _HEADER_FILL
        c.alignment = Alignment(horizontal="left")
    ws.freeze_panes = "A2"
    return ws


def build_gantt_workbook(project: Project) -> Workbook:
    """Lay a project out in the workbook format read_gantt_workbook() expects."""
    tasks = project.tasks or []
    wb = Workbook()
    wb.remove(wb.active)

    ws_pal = _add_sheet(wb, "Palette", PALETTE_COLUMNS)
    for color in project.palette:
        ws_pal.append([color])

    ws_p = _add_sheet(wb, "Project", PROJECT_COLUMNS)
    ws_p.append([project.title or DEFAULT_TITLE, project.timeline_start, project.timeline_end, project.show_milestones])
    for col in (2, 3):
        ws_p.cell(row=2, column=col).number_format = "yyyy-mm-dd"

    ws_t = _add_sheet(wb, "Tasks", TASK_COLUMNS)
    for t in tasks:
        subtasks = list(t.subtasks) + [None] * (MAX_SUBTASKS - len(t.subtasks))
        ws_t.append([t.name, t.start, t.end, t.hours, *subtasks, t.color, t.color_index])
    for r in range(2, ws_t.max_row + 1):
        ws_t.cell(row=r, column=2).number_format = "yyyy-mm-dd"
        ws_t.cell(row=r, column=3).number_format = "yyyy-mm-dd"

    ws_m = _add_sheet(wb, "Milestones", MILESTONE_COLUMNS)
    for m in project.milestones:
        linked = None
        if m.task_index is not None and 0 <= m.task_index < len(tasks):
            linked = tasks[m.task_index].name
        ws_m.append([m.name.replace("\n", "\\n"), m.date, linked])

    ws_pp = _add_sheet(wb, "PausePeriods", PAUSE_COLUMNS)
    for p in project.pause_periods:
        ws_pp.append([p.start, p.end])

    ws_t.column_dimensions["A"].width = 35
    ws_m.column_dimensions["A"].width = 25
    ws_m.column_dimensions["C"].width = 35
    return wb


def gantt_workbook_bytes(project: Project) -> bytes:
    bio = BytesIO()
    build_gantt_workbook(project).save(bio)
    return bio.getvalue()


def write_gantt_workbook(project: Project, path: Union[str, Path]) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    build_gantt_workbook(project).save(out)
    return out
