"""Logging setup shared by the API server and the CLI client.

One main log per run plus a side file per channel. Channel loggers still
propagate, so the main log has the full picture.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
from typing import Optional

# logger name -> side-file suffix
CHANNELS = {
    "uicritic.llm": "llm",
    "uicritic.client": "client",
}

_CONFIGURED = False


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in {"1", "true", "yes"}


def setup_logging(log_path: Optional[Path] = None) -> Path:
    """Attach file handlers once per process and return the main log path."""
    global _CONFIGURED
    prefix = os.environ.get("CRITIC_LOG_PREFIX", "").strip() or "backend"
    resolved = _resolve_log_path(log_path, prefix)
    if _CONFIGURED:
        return resolved

    resolved.parent.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, os.environ.get("CRITIC_LOG_LEVEL", "INFO").upper(), logging.INFO)
    rotate_bytes = int(os.environ.get("CRITIC_LOG_ROTATE_BYTES", "0"))
    backup_count = int(os.environ.get("CRITIC_LOG_BACKUP_COUNT", "3"))
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    def handler_for(path: Path) -> logging.Handler:
        handler = _build_handler(path, rotate_bytes=rotate_bytes, backup_count=backup_count)
        handler.setFormatter(formatter)
        return handler

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler_for(resolved))
    if _env_flag("CRITIC_LOG_STDOUT"):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    for name, suffix in CHANNELS.items():
        channel = logging.getLogger(name)
        channel.setLevel(level)
        channel.addHandler(handler_for(resolved.with_name(f"{prefix}_{suffix}.log")))

    _CONFIGURED = True
    logging.getLogger(__name__).info("Logging initialized: %s", resolved)
    return resolved


def _resolve_log_path(log_path: Optional[Path], prefix: str) -> Path:
    if log_path is not None:
        return log_path
    if os.environ.get("CRITIC_LOG_FILE"):
        return Path(os.environ["CRITIC_LOG_FILE"])
    log_dir = os.environ.get("CRITIC_LOG_DIR")
    base = Path(log_dir) if log_dir else Path.cwd() / ".critic" / "logs"
    return base / f"{prefix}.log"


def _build_handler(path: Path, *, rotate_bytes: int, backup_count: int) -> logging.Handler:
    # mode="w" starts each run with fresh files.
    if rotate_bytes > 0:
        return RotatingFileHandler(
            path,
            mode="w",
            maxBytes=rotate_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(path, mode="w", encoding="utf-8")
