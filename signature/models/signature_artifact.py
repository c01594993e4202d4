from __future__ import annotations
from dataclasses import dataclass

from core.helpers.data_url import to_data_url


@dataclass(frozen=True)
class SignatureArtifact:
    """
    Cropped PNG produced by a capture session.

    Embedded directly into a draft payload via data_url; it keeps no
    reference to the session that produced it.
    """
    png_bytes: bytes
    width: int
    height: int

    @property
    def data_url(self) -> str:
        return to_data_url(self.png_bytes, "image/png")
