"""Domain models shared by the server and the client."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class AnalysisKind(str, Enum):
    JOURNEY = "journey"
    ABTEST = "abtest"
    VARIANT_IMAGE = "variant-image"
    CONTRAST = "contrast"


@dataclass(frozen=True)
class ImageReference:
    """A hosted image URL or a self-contained base64 data URI."""

    url: str

    @property
    def is_data_url(self) -> bool:
        return self.url[:5].lower() == "data:"

    @property
    def is_remote(self) -> bool:
        return self.url.lower().startswith(("http://", "https://"))

    def describe(self) -> str:
        """Short form for logs; data URIs are never logged in full."""
        if self.is_data_url:
            header = self.url.split(",", 1)[0]
            return f"{header},<{len(self.url)} chars>"
        return self.url


@dataclass(frozen=True)
class ResolvedImage:
    """An image reference resolved to (MIME type, base64 payload)."""

    mime_type: str
    data_b64: str

    @property
    def raw(self) -> bytes:
        return base64.b64decode(self.data_b64)

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data_b64}"


@dataclass(frozen=True)
class AnalysisRequest:
    image: Optional[ImageReference]
    context: Optional[str] = None
    element_type: Optional[str] = None
    element_description: Optional[str] = None
    analysis_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "AnalysisRequest":
        """Build a request from a JSON body, ignoring blank or non-string fields."""

        def _text(key: str) -> Optional[str]:
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            return None

        image_url = _text("imageUrl")
        return cls(
            image=ImageReference(image_url) if image_url else None,
            context=_text("context"),
            element_type=_text("elementType"),
            element_description=_text("elementDescription"),
            analysis_id=_text("analysisId"),
        )
