"""Builders shared across the critic test modules."""

import io
from types import SimpleNamespace
from typing import Any

from PIL import Image

from uicritic.config.settings import IntakeMode, Settings


def make_settings(**overrides: Any) -> Settings:
    """Settings with test credentials; `.env` is never read."""
    values: dict[str, Any] = {
        "openai_api_key": "sk-test",
        "intake_mode": IntakeMode.STORAGE,
        "cloudinary_cloud_name": "demo",
        "cloudinary_api_key": "key",
        "cloudinary_api_secret": "secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_png(
    size: tuple[int, int] = (4, 4),
    color: tuple[int, int, int] = (255, 255, 255),
) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def make_two_tone_png(
    foreground: tuple[int, int, int],
    background: tuple[int, int, int],
    size: int = 100,
) -> bytes:
    """Left half ``foreground``, right half ``background``."""
    img = Image.new("RGB", (size, size), background)
    img.paste(foreground, (0, 0, size // 2, size))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def chat_response(content: Any) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def image_response(b64: Any, output_format: str = "png") -> SimpleNamespace:
    return SimpleNamespace(data=[SimpleNamespace(b64_json=b64)], output_format=output_format)
