"""Error taxonomy & redaction.

Two error kinds flow out of the core:

- ``FormatError``: the CSV text is empty/malformed or lacks a required header.
  Raised synchronously by the parser.
- ``StoreError``: any failure reported by a store binding. The reconciler
  propagates it unmodified; nothing is retried or rolled back.

``classify_error`` maps any exception onto a small category set so callers
(CLI, ``runtime.import_csv``) can report failures without branching on types.
``redact`` strips credentials from messages before they reach logs.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any


class FormatError(ValueError):
    pass


class ConfigError(RuntimeError):
    pass


class StoreError(RuntimeError):
    """Raised by store bindings when a store call fails."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.status = status
        self.response_text = response_text


_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?i)bearer\s+[A-Za-z0-9._~+/=-]{8,}"),
    re.compile(r"(?i)(token|api[_-]?key)=[^\s&]+"),
]

_REDACTION_PLACEHOLDER = "<redacted>"

_NETWORK_TOKENS = ("timeout", "timed out", "connection reset", "connection refused", "temporarily unavailable")


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "category": self.category,
            "message": self.message,
            "type": self.original_type,
            "transient": self.transient,
        }
        if self.details:
            out["details"] = self.details
        return out


def redact(text: str) -> str:
    """Replace credential-looking substrings with a placeholder."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    - FormatError -> 'format'
    - ConfigError -> 'config'
    - StoreError -> 'network' (transient) when the message looks like a
      transport failure or the status is 5xx, otherwise 'store'
    - anything else -> 'generic'
    """
    msg = str(exc) if exc else ""
    low = msg.lower()
    name = exc.__class__.__name__

    if isinstance(exc, FormatError):
        return ErrorInfo("format", redact(msg), name)
    if isinstance(exc, ConfigError):
        return ErrorInfo("config", redact(msg), name)
    if isinstance(exc, StoreError):
        details: dict[str, Any] = {}
        if exc.operation:
            details["operation"] = exc.operation
        if exc.status is not None:
            details["status"] = exc.status
        server_side = exc.status is not None and exc.status >= 500  # noqa: PLR2004
        if server_side or any(k in low for k in _NETWORK_TOKENS):
            return ErrorInfo("network", redact(msg), name, transient=True, details=details or None)
        return ErrorInfo("store", redact(msg), name, details=details or None)
    if any(k in low for k in _NETWORK_TOKENS):
        return ErrorInfo("network", redact(msg), name, transient=True)
    return ErrorInfo("generic", redact(msg), name)


__all__ = [
    "FormatError",
    "ConfigError",
    "StoreError",
    "ErrorInfo",
    "classify_error",
    "redact",
]
