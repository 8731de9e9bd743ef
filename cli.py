"""Typer CLI for the Gantt chart generator."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Annotated, Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

import palettes
from errors import GanttError, UnsupportedFormatError
from excel_io import write_gantt_workbook
from gantt_models import GenerateOptions
from normalizer import detect_format, load_project
from pipeline import generate_gantt

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

app = typer.Typer(
    name="ganttgen",
    help="Turn a JSON or Excel project description into a standalone Gantt chart.",
    no_args_is_help=True,
)
console = Console()

_BARE_DRIVE_RE = re.compile(r"^[A-Za-z]:$")


def is_valid_path(value: Any) -> bool:
    """
    Cheap sanity check for a user-supplied path before touching the disk.

    Rejects non-strings, blank/whitespace-only strings, "." and a bare Windows
    drive letter such as "C:" (which resolves to the drive's cwd, not a file).
    """
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if not trimmed or trimmed == ".":
        return False
    return not _BARE_DRIVE_RE.match(trimmed)


def _configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT, force=True)


def _input_path(value: str) -> Path:
    if not is_valid_path(value):
        raise typer.BadParameter(f"Invalid input path: {value!r}")
    return Path(value.strip())


def _fail(err: Exception) -> NoReturn:
    typer.echo(str(err), err=True)
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def convert(
    input_path: Annotated[str, typer.Option("--input", "-i", help="Project file (.json or .xlsx)")],
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="HTML output path")] = None,
    palette: Annotated[Optional[str], typer.Option(help="Palette preset name (see 'palettes')")] = None,
    png: Annotated[bool, typer.Option("--png/--no-png", help="Also export a transparent PNG")] = False,
    output_dir: Annotated[
        Optional[Path], typer.Option("--output-dir", help="Directory for default output names (env OUTPUT_DIR)")
    ] = None,
    seed: Annotated[Optional[int], typer.Option(help="Seed for reproducible color assignment")] = None,
    snapshot: Annotated[Optional[Path], typer.Option(help="Also save the normalized project JSON here")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Generate the chart HTML (and optionally a PNG)."""
    _configure_logging(verbose)
    fields: dict[str, Any] = {
        "input_path": _input_path(input_path),
        "output_path": output,
        "palette": palette,
        "export_png": png,
        "seed": seed,
        "snapshot_path": snapshot,
    }
    if output_dir is not None:
        fields["output_dir"] = output_dir

    try:
        result = generate_gantt(GenerateOptions(**fields))
    except GanttError as e:
        _fail(e)

    for warning in result.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    typer.echo(f"HTML: {result.html_path}")
    if result.png_path is not None:
        typer.echo(f"PNG: {result.png_path}")


@app.command()
def parse(
    path: Annotated[str, typer.Argument(help="Project file (.json or .xlsx)")],
) -> None:
    """Print the normalized project as JSON."""
    _configure_logging()
    try:
        project = load_project(_input_path(path))
    except GanttError as e:
        _fail(e)
    typer.echo(json.dumps(project.to_payload(), indent=2, ensure_ascii=False))


@app.command(name="palettes")
def list_palettes() -> None:
    """List the built-in palette presets."""
    table = Table(title="Palette presets")
    table.add_column("Name", style="bold", no_wrap=True, min_width=13)
    table.add_column("Description")
    table.add_column("Colors")
    for info in palettes.palette_info():
        table.add_row(info["id"], info["description"], " ".join(info["colors"]))
    console.print(table)


@app.command(name="to-excel")
def to_excel(
    input_path: Annotated[str, typer.Option("--input", "-i", help="JSON project file")],
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Workbook path (.xlsx)")] = None,
) -> None:
    """Convert a JSON project into an editable workbook."""
    _configure_logging()
    src = _input_path(input_path)
    try:
        if detect_format(src) != "json":
            raise UnsupportedFormatError(src.suffix.lower())
        project = load_project(src)
        out = write_gantt_workbook(project, output or src.with_suffix(".xlsx"))
    except GanttError as e:
        _fail(e)
    typer.echo(f"Excel: {out}")


if __name__ == "__main__":
    app()
