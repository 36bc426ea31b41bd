"""Shared helpers for image/data-URL encoding."""

from __future__ import annotations

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Optional

from PIL import Image

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
ALLOWED_EXTENSIONS = ("jpeg", "jpg", "png", "gif", "webp")

_PREVIEW_MAX_DIMENSION = 512

_MEDIA_MAP = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}


def mime_type_for_suffix(suffix: str) -> Optional[str]:
    return _MEDIA_MAP.get(suffix.lower().lstrip("."))


def extension_for_mime(mime_type: str) -> str:
    if mime_type == "image/jpeg":
        return "jpg"
    if mime_type == "image/webp":
        return "webp"
    if mime_type == "image/gif":
        return "gif"
    return "png"


def encode_data_url(raw: bytes, mime_type: str) -> str:
    """Encode raw image bytes to a data URL without re-compression."""
    encoded = base64.b64encode(raw).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def split_data_url(data_url: str) -> tuple[str, str]:
    """Return (mime_type, base64 payload) for a ``data:<mime>;base64,<payload>`` URL."""
    if data_url[:5].lower() != "data:":
        raise ValueError("Image must be a data URL.")
    header, _, b64 = data_url.partition(",")
    if not b64:
        raise ValueError("Invalid data URL payload.")
    if not header.lower().endswith(";base64"):
        raise ValueError("Data URL must be base64 encoded.")
    media_type = header[len("data:"):].split(";")[0].strip().lower()
    if not media_type:
        raise ValueError("Data URL is missing its media type.")
    b64 = b64.strip()
    try:
        # validate=True gives clearer failures for truncated/invalid base64 payloads.
        base64.b64decode(b64, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64 payload: {exc}") from exc
    return media_type, b64


def decode_data_url(data_url: str) -> tuple[bytes, str]:
    media_type, b64 = split_data_url(data_url)
    return base64.b64decode(b64), media_type


def write_preview(raw: bytes, path: Path) -> Path:
    """Write a downscaled PNG preview of ``raw`` to ``path``."""
    img = Image.open(io.BytesIO(raw))
    img.load()
    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA")
    w, h = img.size
    if max(w, h) > _PREVIEW_MAX_DIMENSION:
        img.thumbnail((_PREVIEW_MAX_DIMENSION, _PREVIEW_MAX_DIMENSION), Image.LANCZOS)
        logger.debug("Resized preview from %dx%d to %dx%d", w, h, img.size[0], img.size[1])
    img.save(path, format="PNG")
    return path
