"""Client construction for the generative-AI collaborator."""

from __future__ import annotations

import logging

from openai import OpenAI

from ..config.settings import Settings
from ..core.exceptions import LLMConfigError

logger = logging.getLogger("uicritic.llm")

UNCONFIGURED_MESSAGE = "AI Service Unavailable: API Key not configured."


def ensure_llm_configured(settings: Settings) -> None:
    if not settings.llm_configured:
        raise LLMConfigError(UNCONFIGURED_MESSAGE)


def get_openai_client(settings: Settings) -> OpenAI:
    ensure_llm_configured(settings)
    kwargs = {
        "api_key": settings.openai_api_key,
        "timeout": settings.llm_timeout,
        # Each analysis is attempted exactly once.
        "max_retries": 0,
    }
    if settings.openai_base_url:
        kwargs["base_url"] = settings.openai_base_url.rstrip("/")
    logger.debug("Creating OpenAI client base_url=%s", kwargs.get("base_url", "<default>"))
    return OpenAI(**kwargs)
