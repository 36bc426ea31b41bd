"""LLM client entrypoints."""

from .client import describe_image, generate_variant_image
from .env import ensure_llm_configured, get_openai_client
from .results import LLMEmpty, LLMFailure, LLMResult, LLMSuccess, unwrap_result

__all__ = [
    "LLMEmpty",
    "LLMFailure",
    "LLMResult",
    "LLMSuccess",
    "describe_image",
    "ensure_llm_configured",
    "generate_variant_image",
    "get_openai_client",
    "unwrap_result",
]
