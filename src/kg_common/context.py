"""Per-invocation correlation ids.

Each tool call runs in its own asyncio task, so a ContextVar keeps ids of
overlapping calls apart. The id is stamped on telemetry records and sent
upstream as ``X-Request-Id``.
"""
from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

_corr_id_ctx: ContextVar[str | None] = ContextVar("corr_id", default=None)


def new_corr_id() -> str:
    return uuid.uuid4().hex


def current_corr_id() -> str | None:
    return _corr_id_ctx.get()


def bind_corr_id(corr_id: str | None = None) -> Token:
    """Bind a correlation id (fresh one if omitted); pass the token to release_corr_id()."""
    return _corr_id_ctx.set(corr_id or new_corr_id())


def release_corr_id(token: Token) -> None:
    _corr_id_ctx.reset(token)
