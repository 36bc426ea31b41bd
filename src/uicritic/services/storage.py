"""Cloudinary storage client for uploaded designs.

This client wraps Cloudinary's signed REST upload endpoint so uploaded
designs get a durable public URL the analysis endpoints can fetch.

Usage:
    storage = CloudinaryStorage(cloud_name="demo", api_key="...", api_secret="...")
    stored = storage.upload(raw_bytes, "image/png")
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

from ..config.settings import Settings
from ..core.exceptions import ServiceUnavailableError, StorageError
from ..utils.image import extension_for_mime

logger = logging.getLogger("uicritic.storage")

# Cloudinary API base URL
CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"

# Request timeout in seconds
REQUEST_TIMEOUT = 60


@dataclass
class StoredImage:
    """A design hosted by the storage collaborator."""

    url: str
    public_id: str


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """Cloudinary signature: sha1 of sorted ``key=value`` pairs joined by ``&`` plus the secret."""
    to_sign = "&".join(
        f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, "")
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryStorage:
    """Client for Cloudinary's image upload API."""

    def __init__(
        self,
        *,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.timeout = timeout
        self._session = session or requests.Session()
        self._clock = clock

    @property
    def upload_url(self) -> str:
        return f"{CLOUDINARY_API_BASE}/{self.cloud_name}/image/upload"

    def upload(self, raw: bytes, mime_type: str) -> StoredImage:
        """Upload raw image bytes and return the hosted URL and public id.

        Raises:
            StorageError: If Cloudinary rejects the upload or cannot be reached.
        """
        params: Dict[str, Any] = {"timestamp": int(self._clock())}
        if self.folder:
            params["folder"] = self.folder
        data = dict(params)
        data["api_key"] = self.api_key
        data["signature"] = sign_params(params, self.api_secret)
        files = {"file": (f"design.{extension_for_mime(mime_type)}", raw, mime_type)}

        try:
            response = self._session.post(
                self.upload_url,
                data=data,
                files=files,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as exc:
            raise StorageError("Cloudinary upload timed out.", status_code=504) from exc
        except requests.exceptions.ConnectionError as exc:
            raise StorageError("Could not connect to Cloudinary.", status_code=502) from exc
        except requests.exceptions.RequestException as exc:
            raise StorageError(f"Cloudinary upload failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code >= 400:
            error = payload.get("error") if isinstance(payload, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            raise StorageError(
                message or "Cloudinary upload failed.",
                status_code=response.status_code,
            )

        url = payload.get("secure_url") or payload.get("url")
        public_id = payload.get("public_id")
        if not url or not public_id:
            raise StorageError("Cloudinary response did not include an image URL.")
        logger.info("Cloudinary upload complete public_id=%s bytes=%d", public_id, len(raw))
        return StoredImage(url=url, public_id=public_id)


def storage_from_settings(settings: Settings) -> CloudinaryStorage:
    if not settings.storage_configured:
        raise ServiceUnavailableError(
            "Storage Service Unavailable: Cloudinary credentials not configured."
        )
    return CloudinaryStorage(
        cloud_name=settings.cloudinary_cloud_name or "",
        api_key=settings.cloudinary_api_key or "",
        api_secret=settings.cloudinary_api_secret or "",
        folder=settings.cloudinary_folder,
        timeout=settings.storage_timeout,
    )
