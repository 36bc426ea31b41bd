"""Custom exception hierarchy for UI Critic.

Every error carries the HTTP status the API answers with, so route handlers
translate them without knowing which layer raised them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class CriticError(Exception):
    """Base exception type for all UI Critic errors."""

    message: str
    context: Optional[Dict[str, Any]] = None

    status_code = 500

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return f"{self.message} | context={self.context}"


class InvalidInputError(CriticError):
    """Raised for user-correctable input problems (missing file, bad type, missing URL)."""

    status_code = 400


class ServiceUnavailableError(CriticError):
    """Raised when a collaborator is not configured for this deployment."""

    status_code = 503


class LLMConfigError(ServiceUnavailableError):
    """Raised when the generative-AI credential is missing."""


@dataclass
class UpstreamError(CriticError):
    """Raised when a collaborator call fails; carries the collaborator's status."""

    status_code: int = 502


class ImageFetchError(UpstreamError):
    """Raised when a remote image reference cannot be fetched."""


class UpstreamEmptyError(CriticError):
    """Raised when the collaborator answered but produced no usable payload."""

    status_code = 502


@dataclass
class StorageError(CriticError):
    """Raised when the storage collaborator rejects or fails an upload."""

    status_code: int = 500
