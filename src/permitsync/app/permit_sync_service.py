from __future__ import annotations

import asyncio
from collections.abc import Mapping
from time import perf_counter
from typing import Any

from permitsync.app.permit_models import PermitRecord, with_permit_id
from permitsync.app.permit_transport import PermitTransport, TransportError, TransportResponse
from permitsync.app.permit_validation import (
    INVALID_INPUT_MESSAGE,
    ValidationError,
    assert_valid_input,
    assert_valid_single_response,
    filter_valid_permits,
    require_permit_id,
)
from permitsync.app.state_cell import ReadOnlyStateCell, StateCell
from permitsync.app.sync_debug import elapsed_ms, sync_debug


CONNECTIVITY_ERROR_MESSAGE = (
    "An error occurred trying to connect to the server. "
    "Please contact the server administrator."
)

_SUCCESS_STATUSES: dict[str, frozenset[int]] = {
    "GET": frozenset({200}),
    "POST": frozenset({200, 201}),
    "PUT": frozenset({200}),
    "DELETE": frozenset({200, 204}),
}


class ConnectivityError(RuntimeError):
    """Any failure to reach the permit API, collapsed to one user-facing message."""

    def __init__(self, message: str = CONNECTIVITY_ERROR_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


PermitList = tuple[PermitRecord, ...]


class PermitSyncService:
    """Keeps a local permit list consistent with the permit API.

    Create and update apply their change locally before the request and restore
    the pre-call list on any failure. Delete only touches the list once the
    server confirms it.
    """

    def __init__(self, transport: PermitTransport) -> None:
        self._transport = transport
        self._permits: StateCell[PermitList] = StateCell((), name="permits")
        self._pending: set[asyncio.Future[TransportResponse]] = set()
        self._closed = False

    @property
    def permits(self) -> PermitList:
        return self._permits.value

    @property
    def permits_cell(self) -> ReadOnlyStateCell[PermitList]:
        return self._permits.read_only()

    @property
    def closed(self) -> bool:
        return self._closed

    def find(self, permit_id: str) -> PermitRecord | None:
        target = str(permit_id or "").strip()
        for permit in self._permits.value:
            if permit.permit_id == target:
                return permit
        return None

    async def fetch_all(self) -> PermitList:
        started_at = perf_counter()
        response = await self._send("GET", self._collection_path)
        result = filter_valid_permits(self._decode_json(response, verb="fetch"))
        self._permits.set(result.permits)
        sync_debug(
            "permits.fetch",
            count=len(result.permits),
            dropped=result.dropped_count,
            duration_ms=elapsed_ms(started_at),
        )
        return result.permits

    async def create(self, candidate: Mapping[str, Any] | PermitRecord) -> PermitRecord:
        payload = _as_payload(candidate)
        if isinstance(payload, Mapping):
            payload = with_permit_id(payload)
        assert_valid_input(payload)

        optimistic = PermitRecord.from_mapping(payload)
        if self.find(optimistic.permit_id) is not None:
            sync_debug("validation.input_rejected", problems=["id already exists"])
            raise ValidationError(INVALID_INPUT_MESSAGE, problems=("id already exists",))
        backup = self._permits.value
        self._permits.set(backup + (optimistic,))
        try:
            response = await self._send("POST", self._collection_path, payload=optimistic.to_mapping())
            confirmed = assert_valid_single_response(self._decode_json(response, verb="create"))
        except BaseException as exc:
            self._rollback(backup, verb="create", permit_id=optimistic.permit_id, error=exc)
            raise

        self._permits.set(_reconcile(self._permits.value, optimistic.permit_id, confirmed))
        sync_debug("permits.create", permit_id=confirmed.permit_id)
        return confirmed

    async def update(self, candidate: Mapping[str, Any] | PermitRecord) -> PermitRecord:
        payload = _as_payload(candidate)
        assert_valid_input(payload)

        optimistic = PermitRecord.from_mapping(payload)
        backup = self._permits.value
        self._permits.set(
            tuple(
                optimistic if permit.permit_id == optimistic.permit_id else permit
                for permit in backup
            )
        )
        try:
            response = await self._send(
                "PUT",
                self._item_path(optimistic.permit_id),
                payload=optimistic.to_mapping(),
            )
            confirmed = assert_valid_single_response(self._decode_json(response, verb="update"))
        except BaseException as exc:
            self._rollback(backup, verb="update", permit_id=optimistic.permit_id, error=exc)
            raise

        self._permits.set(_reconcile(self._permits.value, optimistic.permit_id, confirmed))
        sync_debug("permits.update", permit_id=confirmed.permit_id)
        return confirmed

    async def delete(self, permit_id: str) -> PermitRecord | None:
        target = require_permit_id(permit_id)
        await self._send("DELETE", self._item_path(target))

        current = self._permits.value
        removed = next((permit for permit in current if permit.permit_id == target), None)
        if removed is not None:
            self._permits.set(tuple(permit for permit in current if permit.permit_id != target))
        sync_debug("permits.delete", permit_id=target, was_present=removed is not None)
        return removed

    async def aclose(self) -> None:
        """Cancel outstanding requests; nothing resolving afterwards mutates the list."""
        self._closed = True
        pending = tuple(self._pending)
        for future in pending:
            future.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        sync_debug("permits.closed", cancelled=len(pending))

    @property
    def _collection_path(self) -> str:
        return self._transport.config.collection_path

    def _item_path(self, permit_id: str) -> str:
        return self._transport.config.item_path(permit_id)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        payload: Any | None = None,
    ) -> TransportResponse:
        if self._closed:
            raise ConnectivityError()
        future = asyncio.ensure_future(self._transport.request(method, path, payload=payload))
        self._pending.add(future)
        try:
            response = await future
        except (TransportError, OSError, asyncio.TimeoutError) as exc:
            sync_debug("permits.request.error", method=method, path=path, error=str(exc))
            raise ConnectivityError() from exc
        finally:
            self._pending.discard(future)

        if self._closed:
            raise ConnectivityError()
        if response.status not in _SUCCESS_STATUSES.get(method, frozenset()):
            sync_debug("permits.request.rejected", method=method, path=path, status=response.status)
            raise ConnectivityError()
        return response

    def _decode_json(self, response: TransportResponse, *, verb: str) -> Any:
        if response.empty:
            sync_debug("permits.response.empty", verb=verb, status=response.status)
            raise ConnectivityError()
        try:
            return response.json()
        except (UnicodeDecodeError, ValueError) as exc:
            sync_debug(
                "permits.response.parse_error",
                verb=verb,
                body_bytes=len(response.body),
                error=str(exc),
            )
            raise ConnectivityError() from exc

    def _rollback(
        self,
        backup: PermitList,
        *,
        verb: str,
        permit_id: str,
        error: BaseException,
    ) -> None:
        self._permits.set(backup)
        sync_debug(
            "permits.rollback",
            verb=verb,
            permit_id=permit_id,
            reason=type(error).__name__,
            restored=len(backup),
        )


def _as_payload(candidate: object) -> object:
    if isinstance(candidate, PermitRecord):
        return candidate.to_mapping()
    return candidate


def _reconcile(current: PermitList, optimistic_id: str, confirmed: PermitRecord) -> PermitList:
    """Swap the optimistic entry for the server's copy, keeping ids unique."""
    rows: list[PermitRecord] = []
    placed = False
    for permit in current:
        if permit.permit_id in (optimistic_id, confirmed.permit_id):
            if not placed:
                rows.append(confirmed)
                placed = True
            continue
        rows.append(permit)
    if not placed:
        rows.append(confirmed)
    return tuple(rows)
