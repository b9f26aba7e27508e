from __future__ import annotations

import functools
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from kg_common.context import bind_corr_id, release_corr_id
from kg_common.errors import UNKNOWN_ERROR, UNKNOWN_ERROR_MESSAGE
from kg_common.result import ApiResult
from kg_common.telemetry import log_event

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared helpers for MCP tool handlers
# ---------------------------------------------------------------------------


_REDACTION_KEYS = {"auth_bearer", "authorization", "token", "access_token", "api_key", "apikey"}

# Handler parameters that carry collaborators rather than call arguments
_SKIP_PARAMS = {"self", "client"}


def sanitize_args_for_log(args: dict | None) -> dict:
    """Remove obvious secrets from args (telemetry layer also redacts)."""
    out: dict[str, Any] = {}
    for k, v in (args or {}).items():
        out[str(k)] = "***redacted***" if str(k).lower() in _REDACTION_KEYS else v
    return out


@dataclass(frozen=True)
class InstrumentConfig:
    kind: str
    name: str
    telemetry_file: str = "mcp-telemetry.jsonl"


def instrument_async_tool(cfg: InstrumentConfig):
    """Decorator for async tool handlers returning ApiResult.

    Binds a fresh correlation id for the duration of the call, records timing and
    outcome as telemetry, and turns any escaping exception into an unknown_error
    result so a single call can never take the server down.
    """

    def decorator(fn: Callable[..., Awaitable[ApiResult]]):
        fn_sig = inspect.signature(fn)

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> ApiResult:
            token = bind_corr_id()
            t0 = time.perf_counter()

            bound = fn_sig.bind_partial(*args, **kwargs)
            loggable = {k: v for k, v in bound.arguments.items() if k not in _SKIP_PARAMS}
            args_for_log: dict[str, Any] = {"args": sanitize_args_for_log(loggable)}

            try:
                try:
                    result = await fn(*args, **kwargs)
                except Exception:
                    logger.exception("Tool %s failed unexpectedly", cfg.name)
                    result = ApiResult.failure(UNKNOWN_ERROR, UNKNOWN_ERROR_MESSAGE)

                ms = int((time.perf_counter() - t0) * 1000)
                if not result.ok:
                    args_for_log["error"] = result.error.get("error")

                log_event(cfg.kind, cfg.name, args_for_log, ok=result.ok, ms=ms)
                return result
            finally:
                release_corr_id(token)

        return wrapper

    return decorator
