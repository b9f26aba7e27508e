"""
Remote knowledge-graph facade.

One coroutine per capability of the memory API. Every method issues exactly one
HTTP request and returns an ApiResult; transport exceptions never escape.
The blocking `requests` call runs in a worker thread so the event loop only
suspends at the network boundary.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

import requests
from pydantic import ValidationError

from kg_common.errors import (
    CONNECTION_ERROR,
    REMOTE_ERROR,
    UNKNOWN_ERROR,
    UNKNOWN_ERROR_MESSAGE,
)
from kg_common.result import ApiResult
from kg_config.settings import MemoryApiSettings
from kg_memory_mcp.http_client import HttpClient
from kg_memory_mcp.models import HealthStatus, KnowledgeGraph, Pattern, checked

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3


class MalformedResponse(ValueError):
    """The remote answered 2xx but the envelope lacks the expected payload."""


def _data(body: Any) -> Any:
    if not isinstance(body, dict) or "data" not in body:
        raise MalformedResponse("response envelope has no 'data'")
    return body["data"]


def _field(key: str) -> Callable[[Any], Any]:
    def unwrap(body: Any) -> Any:
        data = _data(body)
        if not isinstance(data, dict) or key not in data:
            raise MalformedResponse(f"response data has no {key!r}")
        return data[key]

    return unwrap


def _graph(raw: Any) -> dict:
    return checked(KnowledgeGraph, raw)


def _graph_field(key: str) -> Callable[[Any], Any]:
    field = _field(key)
    return lambda body: _graph(field(body))


def _ignore(body: Any) -> None:
    return None


def _health(body: Any) -> dict:
    # /health may answer bare {status, features} or inside the usual envelope.
    raw = body.get("data", body) if isinstance(body, dict) else body
    return checked(HealthStatus, raw)


def _patterns(body: Any) -> list:
    patterns = _field("patterns")(body)
    if not isinstance(patterns, list):
        raise MalformedResponse("response patterns is not a list")
    return [checked(Pattern, p) for p in patterns]


def _server_error(body: Any) -> tuple[Optional[str], Optional[dict]]:
    if not isinstance(body, dict):
        return None, None
    msg = body.get("error")
    details = body.get("details")
    return (
        msg if isinstance(msg, str) and msg else None,
        details if isinstance(details, dict) else None,
    )


class MemoryApiClient:
    """Facade over the memory API REST contract."""

    def __init__(self, settings: MemoryApiSettings, *, http: HttpClient | None = None) -> None:
        self.settings = settings
        self.http = http or HttpClient(settings)

    # ------------------------------------------------------------------
    # request plumbing
    # ------------------------------------------------------------------

    def _rejected(self, status: Optional[int], body: Any) -> ApiResult:
        msg, details = _server_error(body)
        if msg is None:
            msg = f"Request failed with status code {status}" if status else "Request failed"
        return ApiResult.failure(REMOTE_ERROR, msg, details=details, status=status)

    async def _call(
        self,
        method: str,
        path: str,
        unwrap: Callable[[Any], Any],
        *,
        params: dict | None = None,
        json: Any | None = None,
    ) -> ApiResult:
        try:
            body = await asyncio.to_thread(self.http.request_json, method, path, params=params, json=json)
        except requests.HTTPError as e:
            resp = e.response
            try:
                err_body = resp.json() if resp is not None and resp.content else None
            except ValueError:
                err_body = None
            return self._rejected(getattr(resp, "status_code", None), err_body)
        except requests.Timeout:
            return ApiResult.failure(
                CONNECTION_ERROR, f"Timed out waiting for the memory API at {self.settings.base_url}"
            )
        except requests.ConnectionError:
            return ApiResult.failure(
                CONNECTION_ERROR, f"Unable to reach the memory API at {self.settings.base_url}"
            )
        except Exception:
            logger.exception("%s %s failed", method, path)
            return ApiResult.failure(UNKNOWN_ERROR, UNKNOWN_ERROR_MESSAGE)

        if isinstance(body, dict) and body.get("success") is False:
            return self._rejected(None, body)

        try:
            return ApiResult.success(unwrap(body))
        except (MalformedResponse, ValidationError, TypeError, AttributeError):
            logger.exception("Unexpected response shape from %s %s", method, path)
            return ApiResult.failure(UNKNOWN_ERROR, UNKNOWN_ERROR_MESSAGE)

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    async def check_health(self) -> ApiResult:
        return await self._call("GET", "/health", _health)

    async def create_entities(self, entities: list) -> ApiResult:
        return await self._call("POST", "/api/entities", _field("created"), json={"entities": entities})

    async def create_relations(self, relations: list) -> ApiResult:
        return await self._call("POST", "/api/relations", _field("created"), json={"relations": relations})

    async def add_observations(self, observations: list) -> ApiResult:
        return await self._call("POST", "/api/observations", _field("updates"), json={"observations": observations})

    async def delete_entities(self, entity_names: list) -> ApiResult:
        """Delete entities; the remote store cascades their relations."""
        return await self._call("DELETE", "/api/entities", _ignore, json={"entityNames": entity_names})

    async def delete_observations(self, deletions: list) -> ApiResult:
        return await self._call("DELETE", "/api/observations", _ignore, json={"deletions": deletions})

    async def delete_relations(self, relations: list) -> ApiResult:
        """Delete relations matching exactly on (from, to, relationType)."""
        return await self._call("DELETE", "/api/relations", _ignore, json={"relations": relations})

    async def read_graph(self) -> ApiResult:
        return await self._call("GET", "/api/graph", lambda body: _graph(_data(body)))

    async def search_nodes(self, query: str) -> ApiResult:
        return await self._call("GET", "/api/search", _graph_field("graph"), params={"query": query})

    async def open_nodes(self, names: list) -> ApiResult:
        return await self._call("POST", "/api/nodes", _graph_field("graph"), json={"names": names})

    async def get_patterns(self, category: Optional[str] = None) -> ApiResult:
        params = {"category": category} if category else None
        return await self._call("GET", "/api/patterns", _patterns, params=params)

    async def get_temporal_graph(self, start_date: str, end_date: str) -> ApiResult:
        return await self._call(
            "GET",
            "/api/graph/temporal",
            _graph_field("graph"),
            params={"startDate": start_date, "endDate": end_date},
        )

    async def find_path(self, from_: str, to: str, max_depth: Optional[int] = None) -> ApiResult:
        params = {
            "from": from_,
            "to": to,
            "maxDepth": DEFAULT_MAX_DEPTH if max_depth is None else max_depth,
        }
        return await self._call("GET", "/api/graph/path", _graph_field("path"), params=params)
