"""Resolve image references to (MIME type, base64 payload).

Data URIs are decoded locally; ``http(s)://`` URLs are fetched and re-encoded.
"""

from __future__ import annotations

import base64
import logging
from typing import Optional

import requests

from ..core.exceptions import ImageFetchError, InvalidInputError
from ..core.models import ImageReference, ResolvedImage
from ..utils.image import split_data_url

logger = logging.getLogger("uicritic.services")

# Request timeout in seconds
REQUEST_TIMEOUT = 30


class ImageResolver:
    """Turns an ``ImageReference`` into a ``ResolvedImage``."""

    def __init__(
        self,
        *,
        timeout: float = REQUEST_TIMEOUT,
        default_mime_type: str = "image/jpeg",
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.default_mime_type = default_mime_type
        self._session = session or requests.Session()

    def resolve(self, reference: ImageReference) -> ResolvedImage:
        if reference.is_data_url:
            return self._decode(reference)
        if reference.is_remote:
            return self._fetch(reference)
        raise InvalidInputError(
            "Image URL must be an http(s) URL or a base64 data URI.",
            context={"imageUrl": reference.describe()[:80]},
        )

    def _decode(self, reference: ImageReference) -> ResolvedImage:
        try:
            mime_type, data_b64 = split_data_url(reference.url)
        except ValueError as exc:
            raise InvalidInputError(f"Invalid image data: {exc}") from exc
        return ResolvedImage(mime_type=mime_type, data_b64=data_b64)

    def _fetch(self, reference: ImageReference) -> ResolvedImage:
        url = reference.url
        logger.info("Fetching remote image %s", url)
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as exc:
            raise ImageFetchError(f"Timed out fetching image: {url}", status_code=504) from exc
        except requests.exceptions.ConnectionError as exc:
            raise ImageFetchError(f"Could not connect to image host: {url}") from exc
        except requests.exceptions.RequestException as exc:
            raise ImageFetchError(f"Failed to fetch image: {exc}") from exc

        if response.status_code >= 400:
            raise ImageFetchError(
                f"Failed to fetch image: {url} returned HTTP {response.status_code}.",
                status_code=response.status_code,
            )

        content_type = response.headers.get("Content-Type", "")
        mime_type = content_type.split(";")[0].strip().lower() or self.default_mime_type
        data_b64 = base64.b64encode(response.content).decode("ascii")
        logger.debug("Fetched image %s mime=%s bytes=%d", url, mime_type, len(response.content))
        return ResolvedImage(mime_type=mime_type, data_b64=data_b64)
