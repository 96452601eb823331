from __future__ import annotations

from dataclasses import dataclass

from permitsync.app.permit_models import PermitRecord
from permitsync.app.permit_sync_service import ConnectivityError, PermitSyncService
from permitsync.app.permit_validation import require_permit_id
from permitsync.app.state_cell import ReadOnlyStateCell, StateCell
from permitsync.app.sync_debug import sync_debug


DELETE_STATUS_DELETED = "deleted"
DELETE_STATUS_FAILED = "failed"
DELETE_STATUS_SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class DeleteResult:
    status: str
    permit_id: str
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == DELETE_STATUS_DELETED


def delete_failure_message(names: tuple[str, ...] | list[str]) -> str:
    if not names:
        return ""
    if len(names) == 1:
        return f'Could not delete "{names[0]}". Please try again.'
    return f"Could not delete {len(names)} permits: {', '.join(names)}. Please try again."


class PermitDeleteTracker:
    """Tracks in-flight permit deletes and the permits whose delete failed.

    Failures are keyed by permit id so two permits sharing a name are tracked
    separately; the message renders their names in the order they failed.
    """

    def __init__(self, service: PermitSyncService) -> None:
        self._service = service
        self._deleting: StateCell[frozenset[str]] = StateCell(frozenset(), name="deleting")
        self._failures: StateCell[tuple[tuple[str, str], ...]] = StateCell((), name="delete_failures")

    @property
    def deleting(self) -> frozenset[str]:
        return self._deleting.value

    @property
    def deleting_cell(self) -> ReadOnlyStateCell[frozenset[str]]:
        return self._deleting.read_only()

    @property
    def failure_names(self) -> tuple[str, ...]:
        return tuple(name for _, name in self._failures.value)

    @property
    def failed_ids(self) -> tuple[str, ...]:
        return tuple(permit_id for permit_id, _ in self._failures.value)

    @property
    def failures_cell(self) -> ReadOnlyStateCell[tuple[tuple[str, str], ...]]:
        return self._failures.read_only()

    @property
    def failure_message(self) -> str:
        return delete_failure_message(self.failure_names)

    def is_deleting(self, permit_id: str) -> bool:
        return str(permit_id or "").strip() in self._deleting.value

    async def delete_permit(self, permit: PermitRecord | str) -> DeleteResult:
        if isinstance(permit, PermitRecord):
            permit_id = require_permit_id(permit.permit_id)
            name = permit.display_name
        else:
            permit_id = require_permit_id(permit)
            known = self._service.find(permit_id)
            name = known.display_name if known is not None else permit_id

        # A second delete for an id that is still in flight is ignored.
        if permit_id in self._deleting.value:
            sync_debug("delete.skipped", permit_id=permit_id, reason="already_in_flight")
            return DeleteResult(status=DELETE_STATUS_SKIPPED, permit_id=permit_id)

        self._deleting.set(self._deleting.value | {permit_id})
        try:
            await self._service.delete(permit_id)
        except ConnectivityError as exc:
            self._record_failure(permit_id, name)
            sync_debug("delete.failed", permit_id=permit_id, failures=len(self._failures.value))
            return DeleteResult(status=DELETE_STATUS_FAILED, permit_id=permit_id, message=exc.message)
        finally:
            self._deleting.set(self._deleting.value - {permit_id})

        self._clear_failure(permit_id)
        sync_debug("delete.succeeded", permit_id=permit_id, failures=len(self._failures.value))
        return DeleteResult(status=DELETE_STATUS_DELETED, permit_id=permit_id)

    def clear_failures(self) -> None:
        if self._failures.value:
            self._failures.set(())

    def _record_failure(self, permit_id: str, name: str) -> None:
        if permit_id not in self.failed_ids:
            self._failures.set(self._failures.value + ((permit_id, name),))

    def _clear_failure(self, permit_id: str) -> None:
        if permit_id in self.failed_ids:
            self._failures.set(
                tuple(entry for entry in self._failures.value if entry[0] != permit_id)
            )
