from __future__ import annotations

import logging
from contextlib import contextmanager
from io import StringIO
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from color_assign import make_rng
from errors import ExportError
from export import export_png
from gantt_models import GenerateOptions, GenerateResult
from normalizer import load_project
from renderer import default_output_path, load_template, write_chart_html, write_snapshot
from validator import validate_config

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int], None]
Exporter = Callable[..., Path]

STAGES = {
    "parsing": 10,
    "validating": 30,
    "generating": 60,
    "exporting": 80,
    "complete": 100,
}

_CAPTURE_FORMAT = "%(levelname)s | %(name)s | %(message)s"


@contextmanager
def _captured_log() -> Iterator[StringIO]:
    """Collect INFO+ records emitted anywhere during the block."""
    buf = StringIO()
    handler = logging.StreamHandler(buf)
    handler.setFormatter(logging.Formatter(_CAPTURE_FORMAT))
    handler.setLevel(logging.INFO)
    root = logging.getLogger()
    old_level = root.level
    if root.getEffectiveLevel() > logging.INFO:
        root.setLevel(logging.INFO)
    root.addHandler(handler)
    try:
        yield buf
    finally:
        root.removeHandler(handler)
        root.setLevel(old_level)


def generate_gantt(
    options: GenerateOptions,
    *,
    progress: Optional[ProgressCallback] = None,
    exporter: Exporter = export_png,
) -> GenerateResult:
    """
    Run one conversion: normalize -> validate -> write HTML -> (optional) PNG.

    ParseError, UnsupportedFormatError and ConfigValidationError propagate and
    nothing is written. A failed PNG export only adds a warning; the HTML
    path is still returned.
    """

    def report(stage: str) -> None:
        log.debug("Stage %s (%d%%)", stage, STAGES[stage])
        if progress is not None:
            progress(stage, STAGES[stage])

    warnings: List[str] = []
    png_path: Optional[Path] = None

    with _captured_log() as buf:
        report("parsing")
        project = load_project(options.input_path, palette=options.palette, rng=make_rng(options.seed))

        report("validating")
        validate_config(project)
        log.info("Config validated: %d task(s), %d milestone(s)", len(project.tasks or []), len(project.milestones))

        report("generating")
        html_path = options.output_path or default_output_path(
            options.input_path, options.output_dir, project.palette_preset if options.palette else None
        )
        html_path = write_chart_html(project, html_path, load_template(options.template_path))
        if options.snapshot_path is not None:
            write_snapshot(project, options.snapshot_path)

        if options.export_png:
            report("exporting")
            try:
                png_path = exporter(html_path, timeout_ms=options.png_timeout_ms)
            except Exception as e:
                # Any renderer failure leaves the HTML usable.
                message = str(e) if isinstance(e, ExportError) else f"PNG export failed: {e}"
                warnings.append(message)
                log.warning("%s (HTML is still available at %s)", message, html_path)

        report("complete")

    return GenerateResult(html_path=html_path, png_path=png_path, warnings=warnings, log=buf.getvalue())
