from __future__ import annotations

import datetime as dt
import os
import re
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

HEX_COLOR_RE = re.compile(r"^(#[0-9A-Fa-f]{3}|#?[0-9A-Fa-f]{6})$")
MAX_SUBTASKS = 10
DEFAULT_TITLE = "PROJECT TIMELINE"
DEFAULT_OUTPUT_DIR = "output"


def normalize_color(v: Optional[str], *, field: str = "color") -> Optional[str]:
    """
    Hex colors ('#RGB', '#RRGGBB' or 'RRGGBB') come back upper-case with a '#'.
    Other CSS color values ('red', 'rgb(...)') pass through trimmed. Blank -> None.
    """
    if v is None:
        return None
    v = str(v).strip()
    if not v:
        return None
    if HEX_COLOR_RE.match(v):
        return ("#" + v.lstrip("#")).upper()
    if v.startswith("#"):
        raise ValueError(f"{field} must be a hex color like #F01840 or #F14, got {v!r}.")
    return v


class _WireModel(BaseModel):
    # camelCase on the wire (JSON / template payload), snake_case in Python.
    model_config = ConfigDict(populate_by_name=True)


class Task(_WireModel):
    name: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None
    hours: Optional[float] = Field(default=None, ge=0)
    subtasks: List[str] = Field(default_factory=list)
    color: Optional[str] = None
    color_index: Optional[int] = Field(default=None, alias="colorIndex")

    @field_validator("name")
    @classmethod
    def _name_strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("subtasks", mode="before")
    @classmethod
    def _clean_subtasks(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            raise ValueError("subtasks must be a list of strings.")
        out = [str(s).strip() for s in v if s is not None and str(s).strip()]
        if len(out) > MAX_SUBTASKS:
            raise ValueError(f"a task can have at most {MAX_SUBTASKS} subtasks, got {len(out)}.")
        return out

    @field_validator("color")
    @classmethod
    def _normalize_color(cls, v: Optional[str]) -> Optional[str]:
        return normalize_color(v)


class Milestone(_WireModel):
    name: str
    date: Optional[dt.date] = None
    task_index: Optional[int] = Field(default=None, alias="taskIndex")

    @field_validator("name", mode="before")
    @classmethod
    def _expand_line_breaks(cls, v: Any) -> str:
        # Spreadsheet users type a literal backslash-n for a line break.
        return str(v if v is not None else "").strip().replace("\\n", "\n")


class PausePeriod(_WireModel):
    start: date
    end: date

    @model_validator(mode="after")
    def _ordered(self) -> "PausePeriod":
        if self.end < self.start:
            raise ValueError("pause period end must be on/after start.")
        return self


class Project(_WireModel):
    title: Optional[str] = None
    timeline_start: Optional[date] = Field(default=None, alias="timelineStart")
    timeline_end: Optional[date] = Field(default=None, alias="timelineEnd")
    show_milestones: bool = Field(default=True, alias="showMilestones")
    palette: List[str] = Field(default_factory=list)
    palette_preset: Optional[str] = Field(default=None, alias="palettePreset")
    accent_border: Optional[str] = Field(default=None, alias="accentBorder")
    accent_color: Optional[str] = Field(default=None, alias="accentColor")
    # None when the source had no tasks array; the validator reports it.
    tasks: Optional[List[Task]] = None
    milestones: List[Milestone] = Field(default_factory=list)
    pause_periods: List[PausePeriod] = Field(default_factory=list, alias="pausePeriods")

    @field_validator("title")
    @classmethod
    def _title_strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("palette")
    @classmethod
    def _normalize_palette(cls, v: List[str]) -> List[str]:
        out = []
        for i, c in enumerate(v):
            norm = normalize_color(c, field=f"palette[{i}]")
            if norm is not None:
                out.append(norm)
        return out

    @field_validator("accent_border", "accent_color")
    @classmethod
    def _normalize_accent(cls, v: Optional[str]) -> Optional[str]:
        return normalize_color(v, field="accent")

    def to_payload(self) -> Dict[str, Any]:
        """Canonical serialized form: camelCase keys, ISO dates, unset optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Pipeline configuration / result
# ---------------------------------------------------------------------------

def _default_output_dir() -> Path:
    return Path(os.environ.get("OUTPUT_DIR") or DEFAULT_OUTPUT_DIR)


class GenerateOptions(BaseModel):
    input_path: Path
    output_path: Optional[Path] = None
    palette: Optional[str] = None
    export_png: bool = False
    output_dir: Path = Field(default_factory=_default_output_dir)
    template_path: Optional[Path] = None  # None -> bundled template
    snapshot_path: Optional[Path] = None  # debug copy of the serialized project
    seed: Optional[int] = None  # reproducible color assignment
    png_timeout_ms: int = Field(default=30_000, gt=0)

    @field_validator("palette")
    @classmethod
    def _palette_strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class GenerateResult(BaseModel):
    html_path: Path
    png_path: Optional[Path] = None
    warnings: List[str] = Field(default_factory=list)
    log: str = ""
