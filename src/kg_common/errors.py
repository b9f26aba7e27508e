from __future__ import annotations

from typing import Any

REDACT_TOKEN = "***redacted***"

# Error codes carried in typed_error envelopes
CONNECTION_ERROR = "connection_error"
REMOTE_ERROR = "remote_error"
BAD_REQUEST = "bad_request"
UNKNOWN_TOOL = "unknown_tool"
UNKNOWN_ERROR = "unknown_error"

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


class ConfigError(RuntimeError):
    """Startup configuration is unusable (e.g. missing credential)."""


def typed_error(code: str, message: str, *, details: dict | None = None, **extra: Any) -> dict:
    """
    Standard error envelope:
      {"error": {"code": code, "message": message, "details": {...}}, ...extra}
    """
    err: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        err["error"]["details"] = details
    if extra:
        err.update(extra)
    return err


def error_message(payload: Any) -> str:
    """Pull the human-readable message out of a typed_error envelope."""
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return UNKNOWN_ERROR_MESSAGE
