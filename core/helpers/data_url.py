"""
data_url.py

Encode/decode RFC 2397 ``data:`` URLs as used for embedded signatures and
photos inside draft payloads.
"""
from __future__ import annotations

import base64
import binascii
from typing import Tuple

from core.common.errors import DecodeFailure


def to_data_url(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def is_data_url(value: object) -> bool:
    return isinstance(value, str) and value.startswith("data:")


def from_data_url(url: str) -> Tuple[str, bytes]:
    """Return (mime, payload). Only base64 payloads are supported."""
    if not is_data_url(url) or "," not in url:
        raise DecodeFailure("Not a data URL")
    header, payload = url[5:].split(",", 1)
    parts = header.split(";")
    mime = parts[0] or "text/plain"
    if "base64" not in parts[1:]:
        raise DecodeFailure("Only base64 data URLs are supported")
    try:
        return mime, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeFailure(f"Invalid base64 payload: {exc}") from exc
