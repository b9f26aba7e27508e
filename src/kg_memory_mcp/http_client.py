"""
Thin HTTP client for the remote memory API.

- One `requests.Session` per worker thread, each carrying the bearer credential
  and JSON headers (requests does not promise a Session is thread-safe).
- Bounded (connect, read) timeout on every call; no retries.
- Failures are logged once here and re-raised for the caller to classify.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Mapping

import requests
from requests import Response

from kg_common.context import current_corr_id
from kg_config.settings import MemoryApiSettings

logger = logging.getLogger(__name__)


def api_url(base_url: str, path: str) -> str:
    """Join base and path without duplicate/missing slashes."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


class HttpClient:
    """A small wrapper around `requests.Session` bound to one base URL and credential."""

    def __init__(
        self,
        settings: MemoryApiSettings,
        *,
        session: requests.Session | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        """
        `session` pins one session for every thread (tests inject fakes this way);
        otherwise each calling thread lazily builds its own from `session_factory`.
        """
        self.settings = settings
        self._session_factory = session_factory
        self._pinned = self._configure(session) if session is not None else None
        self._local = threading.local()

    def _configure(self, session: requests.Session) -> requests.Session:
        session.headers.update(
            {
                "Authorization": f"Bearer {self.settings.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": self.settings.user_agent,
            }
        )
        return session

    @property
    def session(self) -> requests.Session:
        if self._pinned is not None:
            return self._pinned
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = self._configure(self._session_factory())
        return session

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any | None = None,
    ) -> Response:
        """Perform an HTTP request and raise for non-2xx responses."""
        url = api_url(self.settings.base_url, path)
        headers = {}
        corr_id = current_corr_id()
        if corr_id:
            headers["X-Request-Id"] = corr_id

        t0 = time.perf_counter()
        try:
            resp = self.session.request(
                method=method,
                url=url,
                headers=headers,
                params=dict(params) if params else None,
                json=json,
                timeout=self.settings.timeout,
            )
            resp.raise_for_status()
            return resp
        except requests.RequestException as e:
            ms = int((time.perf_counter() - t0) * 1000)
            status = getattr(getattr(e, "response", None), "status_code", None)
            logger.warning(
                "HTTP %s %s failed (status=%s, ms=%s): %s",
                method.upper(),
                url,
                status,
                ms,
                str(e),
            )
            raise

    def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any | None = None,
    ) -> Any:
        resp = self.request(method, path, params=params, json=json)
        if not resp.content:
            return None
        return resp.json()
