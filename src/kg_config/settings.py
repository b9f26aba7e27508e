from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from kg_common.errors import ConfigError

DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_CONNECT_TIMEOUT_S = 3.05
DEFAULT_READ_TIMEOUT_S = 30.0
DEFAULT_USER_AGENT = "kg-memory-mcp/1.0"


def _find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward until we find pyproject.toml or .git.
    """
    start = start.resolve()
    for p in (start, *start.parents):
        if (p / "pyproject.toml").exists() or (p / ".git").exists():
            return p
    return None


@lru_cache(maxsize=1)
def repo_root() -> Path:
    """Best-effort repository root discovery.

    Order of precedence:
      1) KG_REPO_ROOT (explicit override)
      2) walk upward from current working directory
      3) walk upward from this module file's directory
    """
    explicit = os.getenv("KG_REPO_ROOT")
    if explicit:
        p = Path(explicit).expanduser().resolve()
        if not p.exists() or not p.is_dir():
            raise ConfigError(f"KG_REPO_ROOT does not exist or is not a directory: {p}")
        return p

    cwd = Path.cwd().resolve()
    root = _find_repo_root(cwd)
    if root:
        return root

    here_dir = Path(__file__).resolve().parent
    root = _find_repo_root(here_dir)
    if root:
        return root

    return cwd


@lru_cache(maxsize=1)
def load_env_once() -> Optional[Path]:
    """
    Load dotenv exactly once. Precedence:
      1) KG_ENV_FILE (explicit path)
      2) repo-root/.env
      3) repo-root/config/.env
    """
    explicit = os.getenv("KG_ENV_FILE")
    candidates = []

    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(repo_root() / ".env")
    candidates.append(repo_root() / "config" / ".env")

    for p in candidates:
        p = p.resolve()
        if p.exists() and p.is_file():
            # Do NOT override already-set environment variables
            load_dotenv(dotenv_path=str(p), override=False)
            return p

    return None


def telemetry_dir() -> Path:
    """
    Telemetry folder. Override with KG_TELEMETRY_DIR.

    Defaults to the per-user cache ($XDG_CACHE_HOME or ~/.cache), never the
    working directory: hosts often launch the server from unrelated projects.
    """
    p = os.getenv("KG_TELEMETRY_DIR")
    if p:
        return Path(p).expanduser().resolve()
    cache = os.getenv("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return (Path(cache).expanduser() / "kg-memory-mcp" / "telemetry").resolve()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class MemoryApiSettings:
    """Connection settings for the remote memory API, fixed for the process lifetime."""

    api_key: str
    base_url: str = DEFAULT_API_URL
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_S
    read_timeout: float = DEFAULT_READ_TIMEOUT_S
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)

    def __repr__(self) -> str:
        return f"MemoryApiSettings(base_url={self.base_url!r}, api_key='***redacted***')"


def load_settings() -> MemoryApiSettings:
    """
    Resolve MEMORY_API_KEY / MEMORY_API_URL (plus HTTP knobs) from the environment.
    Raises ConfigError when the credential is missing.
    """
    api_key = (os.getenv("MEMORY_API_KEY") or "").strip()
    if not api_key:
        raise ConfigError("MEMORY_API_KEY environment variable is required")

    base_url = (os.getenv("MEMORY_API_URL") or "").strip() or DEFAULT_API_URL

    return MemoryApiSettings(
        api_key=api_key,
        base_url=base_url.rstrip("/"),
        connect_timeout=_env_float("KG_HTTP_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT_S),
        read_timeout=_env_float("KG_HTTP_READ_TIMEOUT", DEFAULT_READ_TIMEOUT_S),
        user_agent=os.getenv("KG_HTTP_USER_AGENT", DEFAULT_USER_AGENT),
    )


def configure_logging() -> None:
    """
    Configure logging explicitly. No import-time side effects.
    Idempotent: if logging is already configured, do nothing.
    Records go to stderr; stdout carries the MCP channel.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.getenv("KG_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = os.getenv(
        "KG_LOG_FORMAT",
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logging.basicConfig(level=level, format=fmt)


def init_runtime(*, configure_logs: bool = True, load_env: bool = True) -> None:
    """
    Call this from entrypoints only (servers, scripts).
    """
    if load_env:
        load_env_once()
    if configure_logs:
        configure_logging()
