"""Image intake: validation, preview lifecycle and hand-off to analysis."""

from __future__ import annotations

import logging
import mimetypes
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from PIL import UnidentifiedImageError

from ..config.settings import IntakeMode
from ..core.models import ImageReference
from ..utils.image import ALLOWED_MIME_TYPES, encode_data_url, mime_type_for_suffix, write_preview
from .api import CriticAPIClient, CriticAPIError

logger = logging.getLogger("uicritic.client")

MAX_FILE_BYTES = 10 * 1024 * 1024

TOO_LARGE_MESSAGE = "File is too large (max 10MB)."
INVALID_TYPE_MESSAGE = "Invalid file type. Please upload an image (JPG, PNG, GIF, WEBP)."
NO_FILE_MESSAGE = "Please select a file first."
UPLOAD_FAILED_MESSAGE = "Upload failed. Please try again."


class IntakeError(Exception):
    """Raised when a file is rejected or cannot be handed off."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class SelectedFile:
    name: str
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path) -> "SelectedFile":
        mime_type = mime_type_for_suffix(path.suffix) or mimetypes.guess_type(path.name)[0]
        return cls(name=path.name, mime_type=mime_type or "", data=path.read_bytes())


@dataclass(frozen=True)
class IntakeResult:
    image: ImageReference
    analysis_id: str


class PreviewHandle:
    """A transient on-disk preview; must be released once superseded."""

    def __init__(self, path: Path):
        self.path = path
        self.released = False

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


class ImageIntake:
    """Validates one selected design at a time and turns it into an image reference."""

    def __init__(
        self,
        mode: IntakeMode,
        *,
        max_bytes: int = MAX_FILE_BYTES,
        preview_dir: Optional[Path] = None,
    ):
        self.mode = mode
        self.max_bytes = max_bytes
        self.preview_dir = preview_dir
        self.selected: Optional[SelectedFile] = None
        self.preview: Optional[PreviewHandle] = None
        self.error: Optional[str] = None

    def __enter__(self) -> "ImageIntake":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._clear()

    def select(self, file: SelectedFile) -> PreviewHandle:
        """Accept ``file`` and create its preview, or reject it without side effects."""
        self.error = None
        if file.size > self.max_bytes:
            self._reject(TOO_LARGE_MESSAGE)
        if file.mime_type not in ALLOWED_MIME_TYPES:
            self._reject(INVALID_TYPE_MESSAGE)

        self._clear()
        self.selected = file
        self.preview = self._create_preview(file)
        return self.preview

    async def submit(self, api: Optional[CriticAPIClient] = None) -> IntakeResult:
        if self.selected is None:
            self.error = NO_FILE_MESSAGE
            raise IntakeError(NO_FILE_MESSAGE)
        if self.mode is IntakeMode.INLINE:
            return self.encode_inline()
        if api is None:
            raise ValueError("Storage intake needs an API client.")

        file = self.selected
        self.error = None
        try:
            image_url, public_id = await api.upload(
                file.data,
                filename=file.name,
                mime_type=file.mime_type,
            )
        except CriticAPIError as exc:
            self._clear()
            self.error = exc.message or UPLOAD_FAILED_MESSAGE
            raise IntakeError(self.error) from exc
        logger.info("Uploaded %s as %s", file.name, public_id)
        return IntakeResult(
            image=ImageReference(image_url),
            analysis_id=public_id or self._temp_id(),
        )

    def encode_inline(self) -> IntakeResult:
        if self.selected is None:
            self.error = NO_FILE_MESSAGE
            raise IntakeError(NO_FILE_MESSAGE)
        data_url = encode_data_url(self.selected.data, self.selected.mime_type)
        return IntakeResult(image=ImageReference(data_url), analysis_id=self._temp_id())

    def _reject(self, message: str) -> None:
        self._clear()
        self.error = message
        raise IntakeError(message)

    def _clear(self) -> None:
        if self.preview is not None:
            self.preview.release()
        self.preview = None
        self.selected = None

    def _create_preview(self, file: SelectedFile) -> PreviewHandle:
        fd, name = tempfile.mkstemp(prefix="critic-preview-", suffix=".png", dir=self.preview_dir)
        os.close(fd)
        path = Path(name)
        try:
            write_preview(file.data, path)
        except (UnidentifiedImageError, OSError) as exc:
            logger.warning("Could not render preview for %s: %s", file.name, exc)
            path.write_bytes(file.data)
        return PreviewHandle(path)

    @staticmethod
    def _temp_id() -> str:
        return f"temp-{int(time.time() * 1000)}"
