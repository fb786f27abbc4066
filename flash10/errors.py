"""Exception hierarchy for the review scheduler.

Flash10Error (base)
├── PersistenceError
│   ├── PersistenceReadError   (recovered by the store, never propagated)
│   └── PersistenceWriteError  (reported to callers in operation results)
├── GenerationError            (content source produced nothing usable)
└── ConfigurationError

Unknown identities on failure and unavailable reminders are not errors:
the first is a no-op and the second is skipped silently.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class Flash10Error(Exception):
    """Base exception carrying a message and optional context."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class PersistenceError(Flash10Error):
    """Problem reading or writing persisted review state."""


class PersistenceReadError(PersistenceError):
    """Persisted state is missing or cannot be decoded."""


class PersistenceWriteError(PersistenceError):
    """Persisted state could not be replaced (quota, I/O)."""


class GenerationError(Flash10Error):
    """A content source returned a malformed or empty batch."""


class ConfigurationError(Flash10Error):
    """Invalid configuration value."""


__all__ = [
    "ConfigurationError",
    "Flash10Error",
    "GenerationError",
    "PersistenceError",
    "PersistenceReadError",
    "PersistenceWriteError",
]
