from __future__ import annotations

import datetime as _dt
import json
import logging
import os
from pathlib import Path
from typing import Any

from kg_config.settings import telemetry_dir
from kg_common.context import current_corr_id
from kg_common.errors import REDACT_TOKEN

logger = logging.getLogger(__name__)

TELEMETRY_FILE = "mcp-telemetry.jsonl"

_SECRET_KEYS = {"authorization", "auth_bearer", "access_token", "token", "api_key", "apikey", "memory_api_key"}


def telemetry_disabled() -> bool:
    return os.getenv("KG_DISABLE_TELEMETRY", "0").strip().lower() in {"1", "true", "yes"}


def redact_secrets(obj: Any) -> Any:
    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            if isinstance(k, str) and k.strip().lower() in _SECRET_KEYS:
                if isinstance(v, str) and v.strip().lower().startswith("bearer "):
                    out[k] = "Bearer " + REDACT_TOKEN
                else:
                    out[k] = REDACT_TOKEN
            else:
                out[k] = redact_secrets(v)
        return out
    if isinstance(obj, list):
        return [redact_secrets(x) for x in obj]
    return obj


def log_event(
    kind: str,
    name: str,
    args: dict | None = None,
    ok: bool = True,
    ms: int = 0,
    *,
    corr_id: str | None = None,
    telemetry_file: str = TELEMETRY_FILE,
) -> None:
    """
    Append one JSONL telemetry record for a tool call.
    Telemetry must never break a tool call: write failures are logged and dropped.
    """
    if telemetry_disabled():
        return

    rec = {
        "ts": _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z"),
        "kind": kind,
        "name": name,
        "corr_id": corr_id or current_corr_id(),
        "args": {} if args is None else dict(args),
        "ok": bool(ok),
        "ms": int(ms),
    }

    try:
        folder = telemetry_dir()
        folder.mkdir(parents=True, exist_ok=True)
        p = folder / telemetry_file
        with p.open("a", encoding="utf-8") as f:
            f.write(json.dumps(redact_secrets(rec), ensure_ascii=False, default=str) + "\n")
    except (OSError, RuntimeError) as e:
        logger.warning("Telemetry write failed: %s", e)


def telemetry_recent(n: int = 50, telemetry_file: str = TELEMETRY_FILE) -> list[dict]:
    """
    Return the last N telemetry records (bounded), skipping malformed lines.
    """
    p: Path = telemetry_dir() / telemetry_file
    if not p.exists():
        return []

    n = max(1, min(int(n), 200))
    out = []
    for line in p.read_text(encoding="utf-8").splitlines()[-n:]:
        try:
            out.append(json.loads(line))
        except json.JSONDecodeError:
            continue
    return out
