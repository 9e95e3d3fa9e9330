"""
Error types and error logging for artslab.

Logs full stack traces for debugging while the CLI shows clean messages.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class ArtslabError(Exception):
    """Base class for errors raised to artslab callers."""


class RecordValidationError(ArtslabError, ValueError):
    """Record input is missing a required field; nothing was stored."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required field(s): {', '.join(self.missing)}")


def _error_log_path(store_path: Optional[Path] = None) -> Path:
    """Resolve error log path, respecting ARTSLAB_STORE_PATH."""
    if store_path is not None:
        return Path(store_path) / "artslab-errors.log"
    store = os.environ.get("ARTSLAB_STORE_PATH")
    if store:
        return Path(store) / "artslab-errors.log"
    return Path.home() / ".artslab" / "artslab-errors.log"


def log_exception(exc: Exception, context: str = "", store_path: Optional[Path] = None) -> Path:
    """
    Log exception with full traceback to file.

    Args:
        exc: The exception that occurred
        context: Optional context string (e.g., command name)
        store_path: Store directory; defaults to ARTSLAB_STORE_PATH or ~/.artslab

    Returns:
        Path to the error log file
    """
    log_path = _error_log_path(store_path)
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a") as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"[{timestamp}]")
            if context:
                f.write(f" {context}")
            f.write("\n")
            f.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    except OSError:
        pass  # Can't write error log, don't crash over it
    return log_path
