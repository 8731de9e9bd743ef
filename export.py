from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from PIL import Image
from playwright.sync_api import sync_playwright

from errors import ExportError

log = logging.getLogger(__name__)

# The template sets this attribute once every bar/milestone has been laid out.
READY_SELECTOR = 'body[data-gantt-ready="true"]'


def trim_transparent(png_bytes: bytes, *, padding: int = 0) -> bytes:
    """Crop a PNG to the bounding box of its non-transparent pixels."""
    with Image.open(BytesIO(png_bytes)) as img:
        rgba = img.convert("RGBA")
    bbox = rgba.getchannel("A").getbbox()
    if bbox is None:
        # Fully transparent: nothing to crop to.
        return png_bytes
    left, top, right, bottom = bbox
    if padding:
        left, top = max(0, left - padding), max(0, top - padding)
        right, bottom = min(rgba.width, right + padding), min(rgba.height, bottom + padding)
    bio = BytesIO()
    rgba.crop((left, top, right, bottom)).save(bio, format="PNG")
    return bio.getvalue()


def capture_png_bytes(html_path: Union[str, Path], *, timeout_ms: int = 30_000, scale: int = 2) -> bytes:
    """
    Render the chart in headless Chromium and return a transparent screenshot.

    The browser is always closed, including when waiting for the ready signal
    times out.
    """
    uri = Path(html_path).resolve().as_uri()
    with sync_playwright() as pw:
        browser = pw.chromium.launch()
        try:
            page = browser.new_page(device_scale_factor=scale)
            page.goto(uri, wait_until="load", timeout=timeout_ms)
            page.wait_for_selector(READY_SELECTOR, state="attached", timeout=timeout_ms)
            return page.screenshot(full_page=True, omit_background=True, timeout=timeout_ms)
        finally:
            browser.close()


def export_png(
    html_path: Union[str, Path],
    png_path: Optional[Union[str, Path]] = None,
    *,
    timeout_ms: int = 30_000,
    scale: int = 2,
) -> Path:
    """
    Rasterize an assembled chart to <html_path>.png (or png_path).

    Every failure (missing browser, timeout, IO) is raised as ExportError so the
    caller can downgrade it to a warning.
    """
    html = Path(html_path)
    out = Path(png_path) if png_path is not None else html.with_suffix(".png")
    log.info("Exporting PNG...")
    try:
        png = capture_png_bytes(html, timeout_ms=timeout_ms, scale=scale)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(trim_transparent(png))
    except Exception as e:
        raise ExportError(f"PNG export failed: {e}", html_path=html) from e
    log.info("Generated PNG at %s", out)
    return out
