from io import BytesIO

import pytest
from PIL import Image

import export
from errors import ExportError


def _png(size, box=None, color=(240, 24, 64, 255)):
    img = Image.new("RGBA", size, (0, 0, 0, 0))
    if box is not None:
        img.paste(Image.new("RGBA", (box[2] - box[0], box[3] - box[1]), color), box[:2])
    bio = BytesIO()
    img.save(bio, format="PNG")
    return bio.getvalue()


def _size(png_bytes):
    with Image.open(BytesIO(png_bytes)) as img:
        return img.size


def test_trim_transparent_crops_to_content():
    trimmed = export.trim_transparent(_png((100, 80), box=(10, 20, 40, 30)))
    assert _size(trimmed) == (30, 10)


def test_trim_transparent_padding_is_clamped():
    trimmed = export.trim_transparent(_png((50, 50), box=(0, 5, 10, 15)), padding=4)
    assert _size(trimmed) == (14, 18)


def test_fully_transparent_image_is_returned_unchanged():
    png = _png((20, 20))
    assert export.trim_transparent(png) == png


def test_export_png_writes_trimmed_png_next_to_html(tmp_path, monkeypatch):
    html = tmp_path / "chart.html"
    html.write_text("<html></html>", encoding="utf-8")
    monkeypatch.setattr(export, "capture_png_bytes", lambda *a, **k: _png((60, 60), box=(5, 5, 25, 15)))

    out = export.export_png(html)

    assert out == tmp_path / "chart.png"
    assert _size(out.read_bytes()) == (20, 10)


def test_export_png_wraps_failures(tmp_path, monkeypatch):
    def boom(*a, **k):
        raise TimeoutError("ready signal never arrived")

    monkeypatch.setattr(export, "capture_png_bytes", boom)
    with pytest.raises(ExportError, match="ready signal") as exc:
        export.export_png(tmp_path / "chart.html")
    assert exc.value.html_path == tmp_path / "chart.html"
