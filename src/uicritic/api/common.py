"""Shared API helpers."""

from __future__ import annotations

import logging
from typing import Any, Tuple

from flask import jsonify

from ..core.exceptions import CriticError

logger = logging.getLogger("uicritic.api")


def message_response(message: str, status: int) -> Tuple[Any, int]:
    return jsonify({"message": message}), status


def error_response(exc: CriticError) -> Tuple[Any, int]:
    logger.warning("%s (%d): %s", type(exc).__name__, exc.status_code, exc)
    return message_response(exc.message, exc.status_code)
