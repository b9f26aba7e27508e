from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from kg_common.errors import error_message, typed_error


@dataclass(frozen=True)
class ApiResult:
    """Outcome of one remote call: a value, or a typed_error envelope."""

    value: Any = None
    error: dict | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        return None if self.ok else error_message(self.error)

    @classmethod
    def success(cls, value: Any = None) -> "ApiResult":
        return cls(value=value)

    @classmethod
    def failure(cls, code: str, message: str, *, details: dict | None = None, **extra: Any) -> "ApiResult":
        return cls(error=typed_error(code, message, details=details, **extra))
