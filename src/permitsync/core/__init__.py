from __future__ import annotations

from permitsync.app.delete_tracker import DeleteResult, PermitDeleteTracker, delete_failure_message
from permitsync.app.permit_list_controller import PermitListController
from permitsync.app.permit_models import PERMIT_STATUSES, PermitRecord
from permitsync.app.permit_sync_service import (
    CONNECTIVITY_ERROR_MESSAGE,
    ConnectivityError,
    PermitSyncService,
)
from permitsync.app.permit_transport import (
    PermitApiConfig,
    PermitTransport,
    TransportError,
    TransportResponse,
    UrllibPermitTransport,
)
from permitsync.app.permit_validation import (
    PermitCheck,
    PermitFilterResult,
    ValidationError,
    assert_valid_input,
    assert_valid_single_response,
    check_permit,
    filter_valid_permits,
    is_valid_permit,
    is_valid_status,
)
from permitsync.app.state_cell import ReadOnlyStateCell, StateCell
from permitsync.app.sync_runtime import PermitSyncRuntime, build_permit_sync_runtime

__all__ = [
    "CONNECTIVITY_ERROR_MESSAGE",
    "ConnectivityError",
    "DeleteResult",
    "PERMIT_STATUSES",
    "PermitApiConfig",
    "PermitCheck",
    "PermitDeleteTracker",
    "PermitFilterResult",
    "PermitListController",
    "PermitRecord",
    "PermitSyncRuntime",
    "PermitSyncService",
    "PermitTransport",
    "ReadOnlyStateCell",
    "StateCell",
    "TransportError",
    "TransportResponse",
    "UrllibPermitTransport",
    "ValidationError",
    "assert_valid_input",
    "assert_valid_single_response",
    "build_permit_sync_runtime",
    "check_permit",
    "delete_failure_message",
    "filter_valid_permits",
    "is_valid_permit",
    "is_valid_status",
]
