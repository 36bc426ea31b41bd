"""Explicit outcome type for a single collaborator call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..core.exceptions import UpstreamEmptyError, UpstreamError


@dataclass(frozen=True)
class LLMSuccess:
    payload: str


@dataclass(frozen=True)
class LLMEmpty:
    reason: str


@dataclass(frozen=True)
class LLMFailure:
    status_code: int
    message: str


LLMResult = Union[LLMSuccess, LLMEmpty, LLMFailure]


def unwrap_result(result: LLMResult, *, empty_message: str) -> str:
    """Return the success payload or raise the matching upstream error."""
    if isinstance(result, LLMSuccess):
        return result.payload
    if isinstance(result, LLMEmpty):
        raise UpstreamEmptyError(empty_message, context={"reason": result.reason})
    if isinstance(result, LLMFailure):
        raise UpstreamError(result.message, status_code=result.status_code)
    raise TypeError(f"Unknown LLM result: {type(result).__name__}")
