from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from permitsync.app.sync_debug import elapsed_ms, sync_debug


DEFAULT_PERMIT_API_URL = "http://localhost:8080"
DEFAULT_PERMIT_COLLECTION_PATH = "/permits"
DEFAULT_PERMIT_API_TIMEOUT_SECONDS = 8.0
_MIN_TIMEOUT_SECONDS = 1.0


class TransportError(RuntimeError):
    """Raised when a request never produced an HTTP response."""


@dataclass(frozen=True, slots=True)
class TransportResponse:
    status: int
    body: bytes = b""

    @property
    def empty(self) -> bool:
        return not self.body.strip()

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


@dataclass(frozen=True, slots=True)
class PermitApiConfig:
    base_url: str = DEFAULT_PERMIT_API_URL
    collection_path: str = DEFAULT_PERMIT_COLLECTION_PATH
    timeout_seconds: float = DEFAULT_PERMIT_API_TIMEOUT_SECONDS

    @property
    def collection_url(self) -> str:
        return f"{self.base_url}{self.collection_path}"

    def item_path(self, permit_id: str) -> str:
        return f"{self.collection_path}/{quote(permit_id, safe='')}"

    @classmethod
    def from_mapping(cls, value: dict[str, Any] | None) -> PermitApiConfig:
        raw = value or {}
        base_url = str(raw.get("base_url", "") or "").strip().rstrip("/") or DEFAULT_PERMIT_API_URL
        collection_path = str(raw.get("collection_path", "") or "").strip().strip("/")
        collection_path = f"/{collection_path}" if collection_path else DEFAULT_PERMIT_COLLECTION_PATH
        timeout_raw = raw.get("timeout_seconds", DEFAULT_PERMIT_API_TIMEOUT_SECONDS)
        try:
            timeout_seconds = float(timeout_raw)
        except (TypeError, ValueError):
            timeout_seconds = DEFAULT_PERMIT_API_TIMEOUT_SECONDS
        return cls(
            base_url=base_url,
            collection_path=collection_path,
            timeout_seconds=max(_MIN_TIMEOUT_SECONDS, timeout_seconds),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "base_url": self.base_url,
            "collection_path": self.collection_path,
            "timeout_seconds": self.timeout_seconds,
        }


class PermitTransport(Protocol):
    config: PermitApiConfig

    async def request(
        self,
        method: str,
        path: str,
        *,
        payload: Any | None = None,
    ) -> TransportResponse:
        raise NotImplementedError


class UrllibPermitTransport:
    """JSON-over-HTTP transport; blocking urllib calls run in a worker thread."""

    def __init__(self, config: PermitApiConfig | None = None) -> None:
        self.config = config or PermitApiConfig()

    async def request(
        self,
        method: str,
        path: str,
        *,
        payload: Any | None = None,
    ) -> TransportResponse:
        return await asyncio.to_thread(self._request_blocking, method.upper(), path, payload)

    def _request_blocking(self, method: str, path: str, payload: Any | None) -> TransportResponse:
        request_url = f"{self.config.base_url}{path}"
        request_data: bytes | None = None
        if payload is not None:
            request_data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        started_at = perf_counter()
        sync_debug(
            "http.request",
            method=method,
            path=path,
            payload_bytes=len(request_data) if request_data is not None else 0,
        )
        request = Request(request_url, data=request_data, headers=headers, method=method)

        try:
            with urlopen(request, timeout=self.config.timeout_seconds) as response:
                status_code = int(response.getcode() or 0)
                body = response.read()
        except HTTPError as exc:
            try:
                body = exc.read()
            except OSError:
                body = b""
            sync_debug(
                "http.response",
                method=method,
                path=path,
                status=int(exc.code),
                body_bytes=len(body),
                duration_ms=elapsed_ms(started_at),
            )
            return TransportResponse(status=int(exc.code), body=body or b"")
        except (URLError, TimeoutError, ConnectionError) as exc:
            sync_debug(
                "http.request.error",
                method=method,
                path=path,
                error=str(exc),
                duration_ms=elapsed_ms(started_at),
            )
            raise TransportError(f"Request failed for {method} {path}: {exc}") from exc

        sync_debug(
            "http.response",
            method=method,
            path=path,
            status=status_code,
            body_bytes=len(body),
            duration_ms=elapsed_ms(started_at),
        )
        return TransportResponse(status=status_code, body=body)
