"""OpenAI collaborator calls.

Each helper issues exactly one request and folds the outcome into an
``LLMResult`` instead of raising, so callers decide how an empty answer or an
upstream failure is reported.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from ..core.models import ResolvedImage
from ..utils.image import extension_for_mime
from .results import LLMEmpty, LLMFailure, LLMResult, LLMSuccess

logger = logging.getLogger("uicritic.llm")


def _status_error_message(exc: APIStatusError) -> str:
    body = exc.body
    if isinstance(body, dict):
        error = body.get("error") if isinstance(body.get("error"), dict) else body
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return exc.message or f"OpenAI request failed with status {exc.status_code}."


def _failure_from_exception(exc: Exception) -> LLMFailure:
    if isinstance(exc, APIStatusError):
        return LLMFailure(status_code=exc.status_code, message=_status_error_message(exc))
    if isinstance(exc, APITimeoutError):
        return LLMFailure(status_code=504, message="Request to OpenAI timed out.")
    return LLMFailure(status_code=502, message=f"Could not connect to OpenAI: {exc}")


def describe_image(
    client: OpenAI,
    *,
    prompt: str,
    image: ResolvedImage,
    model: str,
    max_completion_tokens: int,
    detail: str = "low",
    request_tag: Optional[str] = None,
) -> LLMResult:
    """Ask a vision model about ``image`` and return its text answer."""
    messages: list[dict[str, Any]] = [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {
                    "type": "image_url",
                    "image_url": {"url": image.to_data_url(), "detail": detail},
                },
            ],
        }
    ]
    logger.debug(
        "Calling OpenAI chat tag=%s model=%s mime=%s image_b64_chars=%d max_completion_tokens=%d",
        request_tag or "",
        model,
        image.mime_type,
        len(image.data_b64),
        max_completion_tokens,
    )
    start = time.perf_counter()
    try:
        resp = client.chat.completions.create(
            model=model,
            messages=messages,  # type: ignore[arg-type]
            max_completion_tokens=max_completion_tokens,
        )
    except (APIStatusError, APIConnectionError) as exc:
        failure = _failure_from_exception(exc)
        logger.warning(
            "OpenAI chat failed tag=%s status=%d message=%s",
            request_tag or "",
            failure.status_code,
            failure.message,
        )
        return failure
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("OpenAI chat completed tag=%s ms=%.1f", request_tag or "", elapsed_ms)

    choices = resp.choices or []
    if not choices:
        return LLMEmpty("no choices")
    message = choices[0].message
    content = message.content if message else None
    if not content or not content.strip():
        return LLMEmpty("empty content")
    return LLMSuccess(content)


def generate_variant_image(
    client: OpenAI,
    *,
    prompt: str,
    image: ResolvedImage,
    model: str,
    size: str = "1024x1024",
    request_tag: Optional[str] = None,
) -> LLMResult:
    """Generate an edited version of ``image`` and return it as a data URL."""
    filename = f"design.{extension_for_mime(image.mime_type)}"
    logger.debug(
        "Calling OpenAI image edit tag=%s model=%s mime=%s size=%s",
        request_tag or "",
        model,
        image.mime_type,
        size,
    )
    start = time.perf_counter()
    try:
        resp = client.images.edit(
            model=model,
            image=(filename, image.raw, image.mime_type),
            prompt=prompt,
            size=size,  # type: ignore[arg-type]
            n=1,
        )
    except (APIStatusError, APIConnectionError) as exc:
        failure = _failure_from_exception(exc)
        logger.warning(
            "OpenAI image edit failed tag=%s status=%d message=%s",
            request_tag or "",
            failure.status_code,
            failure.message,
        )
        return failure
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("OpenAI image edit completed tag=%s ms=%.1f", request_tag or "", elapsed_ms)

    data = resp.data or []
    if not data:
        return LLMEmpty("no image data")
    b64 = getattr(data[0], "b64_json", None)
    if not b64:
        return LLMEmpty("image without base64 payload")
    output_format = getattr(resp, "output_format", None) or "png"
    mime_type = "image/jpeg" if output_format in {"jpeg", "jpg"} else f"image/{output_format}"
    return LLMSuccess(f"data:{mime_type};base64,{b64}")
