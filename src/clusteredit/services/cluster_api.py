"""Async HTTP client for the Crane cluster endpoints built on httpx."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Protocol, Sequence

import httpx

from .settings import Settings

__all__ = [
    "ClusterSpec",
    "ClusterUpdate",
    "ClusterRecord",
    "ClusterApiError",
    "ClusterApiClient",
    "CreateOperation",
    "UpdateOperation",
    "describe_error",
]

LOGGER = logging.getLogger(__name__)
_CLUSTER_PATH = "/api/v1/cluster"


@dataclass(slots=True, frozen=True)
class ClusterSpec:
    """One entry of a batch create request."""

    name: str
    crane_url: str

    def to_payload(self) -> dict[str, str]:
        return {"name": self.name, "craneUrl": self.crane_url}


@dataclass(slots=True, frozen=True)
class ClusterUpdate:
    """Request body for updating one existing cluster."""

    id: str
    name: str
    crane_url: str

    def to_payload(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "craneUrl": self.crane_url}


@dataclass(slots=True, frozen=True)
class ClusterRecord:
    """A cluster as returned by the backend, used to seed update sessions."""

    id: str
    name: str
    crane_url: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ClusterRecord":
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name", "") or ""),
            crane_url=str(payload.get("craneUrl", "") or ""),
        )


class CreateOperation(Protocol):
    """Asynchronous batch create; raising signals an error outcome."""

    def __call__(self, clusters: Sequence[ClusterSpec]) -> Awaitable[Any]:  # pragma: no cover - protocol
        ...


class UpdateOperation(Protocol):
    """Asynchronous single update; raising signals an error outcome."""

    def __call__(self, update: ClusterUpdate) -> Awaitable[Any]:  # pragma: no cover - protocol
        ...


class ClusterApiError(RuntimeError):
    """Raised when the cluster endpoint answers with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ClusterApiClient:
    """Implements the create/update operations against a Crane dashboard API."""

    def __init__(
        self,
        settings: Settings,
        *,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory or self._default_client

    async def add_clusters(self, clusters: Sequence[ClusterSpec]) -> Any:
        body = {"clusters": [cluster.to_payload() for cluster in clusters]}
        LOGGER.debug("ClusterApiClient.add_clusters: count=%d", len(clusters))
        return await self._request("POST", _CLUSTER_PATH, body)

    async def update_cluster(self, update: ClusterUpdate) -> Any:
        LOGGER.debug("ClusterApiClient.update_cluster: id=%s", update.id)
        return await self._request("PUT", f"{_CLUSTER_PATH}/{update.id}", update.to_payload())

    async def _request(self, method: str, path: str, body: Mapping[str, Any]) -> Any:
        async with self._client_factory() as client:
            response = await client.request(method, path, json=body)
        if response.is_error:
            message = _error_from_response(response)
            LOGGER.warning("%s %s failed: status=%s, message=%s", method, path, response.status_code, message)
            raise ClusterApiError(message, status_code=response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except json.JSONDecodeError:
            return response.text

    def _default_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._settings.api_base_url,
            timeout=self._settings.request_timeout,
            headers=dict(self._settings.default_headers),
        )


def describe_error(exc: BaseException) -> str:
    """Return the banner text for a failed submission."""

    if isinstance(exc, httpx.TimeoutException):
        return "request timed out"
    if isinstance(exc, httpx.RequestError):
        return f"request failed: {exc}" if str(exc) else "request failed"
    message = str(exc).strip()
    return message or type(exc).__name__


def _error_from_response(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = None
    if isinstance(payload, Mapping):
        for key in ("error", "message", "msg"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, Mapping):
                nested = value.get("message")
                if isinstance(nested, str) and nested.strip():
                    return nested.strip()
    reason = response.reason_phrase or "request failed"
    return f"{response.status_code} {reason}"
