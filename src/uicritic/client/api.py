"""Async HTTP client for the critic API.

Usage:
    async with CriticAPIClient("http://localhost:5001") as api:
        text = await api.analyze_journey(image_url)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger("uicritic.client")

# Request timeout in seconds, applied per call
REQUEST_TIMEOUT = 120.0


class CriticAPIError(Exception):
    """Exception raised when a critic API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        return default
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return default


class CriticAPIClient:
    """Client for the upload and analysis endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "CriticAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, path: str, *, default_error: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise CriticAPIError(f"{default_error} (request timed out)") from exc
        except httpx.HTTPError as exc:
            raise CriticAPIError(f"{default_error} ({exc})") from exc
        if response.status_code >= 400:
            message = _error_message(response, default_error)
            logger.warning("%s %s failed status=%d message=%s", method, path, response.status_code, message)
            raise CriticAPIError(message, status_code=response.status_code)
        return response

    async def _post_analysis(
        self,
        path: str,
        body: Dict[str, Any],
        *,
        result_key: str,
        default_error: str,
    ) -> str:
        payload = {key: value for key, value in body.items() if value is not None}
        response = await self._send("POST", path, json=payload, default_error=default_error)
        data = response.json()
        result = data.get(result_key) if isinstance(data, dict) else None
        if not isinstance(result, str) or not result:
            raise CriticAPIError(default_error, status_code=response.status_code)
        return result

    async def upload(self, raw: bytes, *, filename: str, mime_type: str) -> tuple[str, str]:
        """Upload a design and return (imageUrl, publicId)."""
        default_error = "Upload failed. Please try again."
        response = await self._send(
            "POST",
            "/api/upload",
            files={"designImage": (filename, raw, mime_type)},
            default_error=default_error,
        )
        data = response.json()
        image_url = data.get("imageUrl") if isinstance(data, dict) else None
        public_id = data.get("publicId") if isinstance(data, dict) else None
        if not image_url:
            raise CriticAPIError(default_error, status_code=response.status_code)
        return image_url, public_id or ""

    async def analyze_journey(
        self,
        image_url: str,
        *,
        context: Optional[str] = None,
        analysis_id: Optional[str] = None,
    ) -> str:
        return await self._post_analysis(
            "/api/analyze/journey",
            {"imageUrl": image_url, "context": context, "analysisId": analysis_id},
            result_key="journeyAnalysis",
            default_error="Failed to get journey analysis.",
        )

    async def generate_abtest(
        self,
        image_url: str,
        *,
        context: Optional[str] = None,
        analysis_id: Optional[str] = None,
        element_type: Optional[str] = None,
        element_description: Optional[str] = None,
    ) -> str:
        return await self._post_analysis(
            "/api/generate/abtest",
            {
                "imageUrl": image_url,
                "context": context,
                "analysisId": analysis_id,
                "elementType": element_type,
                "elementDescription": element_description,
            },
            result_key="abTestSuggestions",
            default_error="Failed to get A/B suggestions.",
        )

    async def generate_variant_image(
        self,
        image_url: str,
        *,
        context: Optional[str] = None,
        analysis_id: Optional[str] = None,
    ) -> str:
        return await self._post_analysis(
            "/api/generate/variant-image",
            {"imageUrl": image_url, "context": context, "analysisId": analysis_id},
            result_key="variantImageUrl",
            default_error="Failed to generate variant image.",
        )

    async def fetch_image(self, url: str) -> bytes:
        """Download a hosted image (absolute URL) for local heuristics."""
        response = await self._send("GET", url, default_error="Failed to download image.")
        return response.content
