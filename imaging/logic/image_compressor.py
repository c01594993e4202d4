"""
===============================================================================
ImageCompressor – bound the size of photo attachments
-------------------------------------------------------------------------------
decode -> flatten alpha onto white -> downscale to max_width (aspect kept,
never upscaled) -> JPEG at a fixed quality.

Deterministic for identical input and settings. Input that is not an image
raises DecodeFailure.
===============================================================================
"""
from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from core.common.errors import DecodeFailure
from core.helpers.data_url import from_data_url, is_data_url, to_data_url

ImageSource = Union[bytes, bytearray, str, Path]

JPEG_MIME = "image/jpeg"


@dataclass(frozen=True)
class CompressedImage:
    data: bytes
    width: int
    height: int
    mime: str = JPEG_MIME

    @property
    def data_url(self) -> str:
        return to_data_url(self.data, self.mime)


def _read_source(source: ImageSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, str) and is_data_url(source):
        return from_data_url(source)[1]
    try:
        return Path(source).read_bytes()
    except OSError as exc:
        raise DecodeFailure(f"Cannot read image file {source}: {exc}") from exc


class ImageCompressor:
    def __init__(self, max_width: int = 800, quality: int = 70) -> None:
        if max_width <= 0:
            raise ValueError("max_width must be positive")
        self.max_width = max_width
        self.quality = quality

    def compress(self, source: ImageSource) -> CompressedImage:
        raw = _read_source(source)
        try:
            with Image.open(io.BytesIO(raw)) as img:
                img.load()
                rgb = self._flatten(img)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise DecodeFailure(f"Not a valid image: {exc}") from exc

        width, height = rgb.size
        if width > self.max_width:
            new_height = max(1, round(height * self.max_width / width))
            rgb = rgb.resize((self.max_width, new_height), Image.LANCZOS)

        buf = io.BytesIO()
        rgb.save(buf, format="JPEG", quality=self.quality, optimize=True)
        return CompressedImage(data=buf.getvalue(), width=rgb.width, height=rgb.height)

    @staticmethod
    def _flatten(img: Image.Image) -> Image.Image:
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        return img.convert("RGB")
