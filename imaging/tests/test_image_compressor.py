"""ImageCompressor bounds, aspect ratio and input handling."""
from __future__ import annotations

import io

import pytest
from PIL import Image

from core.common.errors import DecodeFailure
from core.helpers.data_url import to_data_url
from imaging.logic.image_compressor import ImageCompressor


def _png(width: int, height: int, mode: str = "RGB", color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new(mode, (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.mark.parametrize("size", [(1600, 1200), (3000, 1000), (801, 2000)])
def test_wide_images_are_bounded_with_aspect_kept(size) -> None:
    w, h = size
    out = ImageCompressor(max_width=800).compress(_png(w, h))
    assert out.width <= 800
    assert abs(out.height - h * out.width / w) <= 1
    decoded = Image.open(io.BytesIO(out.data))
    assert decoded.format == "JPEG"
    assert decoded.size == (out.width, out.height)


def test_small_images_are_not_upscaled() -> None:
    out = ImageCompressor(max_width=800).compress(_png(320, 240))
    assert (out.width, out.height) == (320, 240)


def test_deterministic_output() -> None:
    src = _png(1200, 900)
    c = ImageCompressor()
    assert c.compress(src).data == c.compress(src).data


def test_accepts_data_url_and_path(tmp_path) -> None:
    raw = _png(1000, 500)
    path = tmp_path / "photo.png"
    path.write_bytes(raw)
    c = ImageCompressor()
    from_url = c.compress(to_data_url(raw, "image/png"))
    from_path = c.compress(path)
    from_str_path = c.compress(str(path))
    assert from_url.data == from_path.data == from_str_path.data
    assert from_url.data_url.startswith("data:image/jpeg;base64,")


def test_transparency_is_flattened_onto_white() -> None:
    out = ImageCompressor().compress(_png(10, 10, "RGBA", (0, 0, 0, 0)))
    pixel = Image.open(io.BytesIO(out.data)).convert("RGB").getpixel((5, 5))
    assert all(channel > 240 for channel in pixel)


def test_non_image_input_raises_decode_failure(tmp_path) -> None:
    c = ImageCompressor()
    with pytest.raises(DecodeFailure):
        c.compress(b"definitely not an image")
    with pytest.raises(DecodeFailure):
        c.compress("data:image/png;base64,@@@")
    with pytest.raises(DecodeFailure):
        c.compress(tmp_path / "missing.png")


def test_oversized_image_raises_decode_failure(monkeypatch) -> None:
    raw = _png(100, 100)
    # more than twice the pixel limit makes Pillow refuse the image outright
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    with pytest.raises(DecodeFailure):
        ImageCompressor().compress(raw)
