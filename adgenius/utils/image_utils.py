"""Utility helpers for converting uploaded images to and from data URIs."""

from __future__ import annotations

import base64
import binascii
import io
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image

DEFAULT_MIME_TYPE = "image/png"


def split_data_uri(value: str) -> Tuple[str, str]:
    """Return ``(mime_type, base64_payload)`` for a data URI or a bare payload."""
    if "," not in value:
        return DEFAULT_MIME_TYPE, value
    header, payload = value.split(",", 1)
    mime_type = DEFAULT_MIME_TYPE
    if header.startswith("data:"):
        declared = header[len("data:"):].split(";", 1)[0].strip()
        if declared:
            mime_type = declared
    return mime_type, payload


def to_data_uri(payload: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def encode_image_file(path: Union[str, Path], max_side: Optional[int] = None) -> str:
    """Read an image file and return it as a PNG data URI.

    Every upload is re-encoded to PNG so that the mime type sent to the
    provider always matches the bytes. ``max_side`` optionally shrinks large
    photos while keeping their aspect ratio.
    """
    with Image.open(path) as image:
        image.load()
        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA" if "transparency" in image.info else "RGB")
        if max_side:
            image.thumbnail((max_side, max_side))
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
    return to_data_uri(buffer.getvalue(), DEFAULT_MIME_TYPE)


def decode_data_uri(value: str) -> Image.Image:
    """Decode a data URI into a PIL image for gallery previews."""
    _, payload = split_data_uri(value)
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Data URI berisi base64 yang tidak valid.") from exc
    image = Image.open(io.BytesIO(raw))
    image.load()
    return image
