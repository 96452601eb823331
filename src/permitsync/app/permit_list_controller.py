from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from permitsync.app.delete_tracker import DeleteResult, PermitDeleteTracker
from permitsync.app.permit_models import PERMIT_ID_KEY, PermitRecord
from permitsync.app.permit_sync_service import ConnectivityError, PermitList, PermitSyncService
from permitsync.app.permit_validation import ValidationError
from permitsync.app.state_cell import ReadOnlyStateCell, StateCell
from permitsync.app.sync_debug import sync_debug


class PermitListController:
    """State the permit list screen renders from.

    The error message always reflects the most recent error class: a failed
    refresh replaces (and forgets) accumulated delete failures, and a later
    delete failure replaces the refresh error.
    """

    def __init__(self, service: PermitSyncService) -> None:
        self._service = service
        self._tracker = PermitDeleteTracker(service)
        self._loading: StateCell[bool] = StateCell(False, name="loading")
        self._error_message: StateCell[str] = StateCell("", name="error_message")
        self._clearing_failures = False
        self._unsubscribe = self._tracker.failures_cell.subscribe(self._on_failures_changed)

    @property
    def service(self) -> PermitSyncService:
        return self._service

    @property
    def tracker(self) -> PermitDeleteTracker:
        return self._tracker

    @property
    def permits(self) -> PermitList:
        return self._service.permits

    @property
    def permits_cell(self) -> ReadOnlyStateCell[PermitList]:
        return self._service.permits_cell

    @property
    def loading(self) -> bool:
        return self._loading.value

    @property
    def loading_cell(self) -> ReadOnlyStateCell[bool]:
        return self._loading.read_only()

    @property
    def error_message(self) -> str:
        return self._error_message.value

    @property
    def error_message_cell(self) -> ReadOnlyStateCell[str]:
        return self._error_message.read_only()

    @property
    def deleting(self) -> frozenset[str]:
        return self._tracker.deleting

    @property
    def deleting_cell(self) -> ReadOnlyStateCell[frozenset[str]]:
        return self._tracker.deleting_cell

    async def refresh(self) -> bool:
        self._set_loading(True)
        try:
            await self._service.fetch_all()
        except (ConnectivityError, ValidationError) as exc:
            self._clear_delete_failures()
            self._set_error(str(exc))
            sync_debug("controller.refresh_failed", reason=type(exc).__name__)
            return False
        finally:
            self._set_loading(False)

        self._clear_delete_failures()
        self._set_error("")
        return True

    async def delete_permit(self, permit: PermitRecord | str) -> DeleteResult:
        return await self._tracker.delete_permit(permit)

    async def save_permit(self, values: Mapping[str, Any] | PermitRecord) -> str:
        """Create or update a permit; return the error to show, or an empty string."""
        if isinstance(values, PermitRecord):
            existing_id = values.permit_id
        elif isinstance(values, Mapping):
            existing_id = str(values.get(PERMIT_ID_KEY) or "").strip()
        else:
            existing_id = ""

        try:
            if existing_id and self._service.find(existing_id) is not None:
                await self._service.update(values)
            else:
                await self._service.create(values)
        except (ConnectivityError, ValidationError) as exc:
            return str(exc)
        return ""

    def close(self) -> None:
        self._unsubscribe()

    async def aclose(self) -> None:
        self.close()
        await self._service.aclose()

    def _clear_delete_failures(self) -> None:
        self._clearing_failures = True
        try:
            self._tracker.clear_failures()
        finally:
            self._clearing_failures = False

    def _on_failures_changed(self, _failures: tuple[tuple[str, str], ...]) -> None:
        if self._clearing_failures:
            return
        self._set_error(self._tracker.failure_message)

    def _set_loading(self, value: bool) -> None:
        if self._loading.value != value:
            self._loading.set(value)

    def _set_error(self, message: str) -> None:
        if self._error_message.value != message:
            self._error_message.set(message)
