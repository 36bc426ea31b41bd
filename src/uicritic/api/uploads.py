"""Design upload handling for the API server."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Optional
from uuid import uuid4

from werkzeug.datastructures import FileStorage

from ..config.settings import IntakeMode, Settings
from ..core.exceptions import InvalidInputError
from ..services.storage import CloudinaryStorage, storage_from_settings
from ..utils.image import ALLOWED_EXTENSIONS, ALLOWED_MIME_TYPES, encode_data_url

logger = logging.getLogger("uicritic.api")

FILETYPES_PATTERN = "|".join(ALLOWED_EXTENSIONS)

StorageFactory = Callable[[Settings], CloudinaryStorage]


def read_design_file(file: Optional[FileStorage], *, max_bytes: int) -> tuple[bytes, str]:
    """Validate an uploaded design and return (raw bytes, MIME type)."""
    if file is None or not file.filename:
        raise InvalidInputError("No file uploaded.")
    suffix = Path(file.filename).suffix.lower().lstrip(".")
    mime_type = (file.mimetype or "").lower()
    if mime_type not in ALLOWED_MIME_TYPES or suffix not in ALLOWED_EXTENSIONS:
        raise InvalidInputError(
            f"File upload only supports the following filetypes - {FILETYPES_PATTERN}",
            context={"filename": file.filename, "mimetype": mime_type},
        )
    raw = file.read(max_bytes + 1)
    if len(raw) > max_bytes:
        raise InvalidInputError(
            f"File is too large (max {max_bytes // (1024 * 1024)}MB).",
            context={"max_bytes": max_bytes},
        )
    if not raw:
        raise InvalidInputError("Uploaded file is empty.")
    return raw, mime_type


class DesignUploader:
    """Turns a validated upload into an image reference for the active intake mode."""

    def __init__(
        self,
        settings: Settings,
        *,
        storage_factory: StorageFactory = storage_from_settings,
    ):
        self.settings = settings
        self._storage_factory = storage_factory

    def store(self, raw: bytes, mime_type: str) -> Dict[str, str]:
        if self.settings.intake_mode is IntakeMode.INLINE:
            public_id = f"inline-{uuid4().hex}"
            logger.info("Encoded inline design public_id=%s bytes=%d", public_id, len(raw))
            return {"imageUrl": encode_data_url(raw, mime_type), "publicId": public_id}
        storage = self._storage_factory(self.settings)
        stored = storage.upload(raw, mime_type)
        return {"imageUrl": stored.url, "publicId": stored.public_id}
