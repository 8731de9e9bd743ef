from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Union


class GanttError(Exception):
    """Base class for every error raised by the conversion pipeline."""


class ParseError(GanttError):
    """The input could not be read or contains values that cannot be parsed."""

    def __init__(self, source: Union[str, Path, None], cause: Union[str, BaseException]) -> None:
        self.source = str(source) if source is not None else None
        self.cause = cause
        where = f" {self.source}" if self.source else ""
        super().__init__(f"Unable to parse{where}: {cause}")


class UnsupportedFormatError(GanttError):
    def __init__(self, extension: str) -> None:
        self.extension = extension
        shown = extension or "(no extension)"
        super().__init__(f"Unsupported file format: {shown}. Expected .json or .xlsx")


class ConfigValidationError(GanttError):
    """Aggregate of every structural/semantic problem found in a project."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("Validation errors:\n" + "\n".join(f"  - {e}" for e in self.errors))


class ExportError(GanttError):
    """Rasterizing the chart failed. Callers downgrade this to a warning."""

    def __init__(self, message: str, *, html_path: Optional[Path] = None) -> None:
        self.html_path = html_path
        super().__init__(message)
