from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, Signal

from permitsync.app.permit_list_controller import PermitListController
from permitsync.app.permit_sync_service import PermitList


class PermitListBridge(QObject):
    """Re-emits permit list controller state as Qt signals for widgets."""

    permits_changed = Signal(object)
    error_message_changed = Signal(str)
    loading_changed = Signal(bool)
    deleting_changed = Signal(list)

    def __init__(
        self,
        controller: PermitListController,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._unsubscribers: list[Callable[[], None]] = [
            controller.permits_cell.subscribe(self._relay_permits),
            controller.error_message_cell.subscribe(self.error_message_changed.emit),
            controller.loading_cell.subscribe(self.loading_changed.emit),
            controller.deleting_cell.subscribe(self._relay_deleting),
        ]

    @property
    def controller(self) -> PermitListController:
        return self._controller

    def permit_rows(self) -> list[dict[str, str]]:
        return _permit_rows(self._controller.permits)

    def deleting_ids(self) -> list[str]:
        return sorted(self._controller.deleting)

    def detach(self) -> None:
        while self._unsubscribers:
            self._unsubscribers.pop()()

    def _relay_permits(self, permits: PermitList) -> None:
        self.permits_changed.emit(_permit_rows(permits))

    def _relay_deleting(self, deleting: frozenset[str]) -> None:
        self.deleting_changed.emit(sorted(deleting))


def _permit_rows(permits: PermitList) -> list[dict[str, str]]:
    return [permit.to_mapping() for permit in permits]
