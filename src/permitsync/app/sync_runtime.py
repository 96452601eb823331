from __future__ import annotations

from dataclasses import dataclass

from permitsync.app.permit_list_controller import PermitListController
from permitsync.app.permit_sync_service import PermitSyncService
from permitsync.app.permit_transport import PermitApiConfig, PermitTransport, UrllibPermitTransport
from permitsync.app.settings_store import load_permit_api_config
from permitsync.app.sync_debug import sync_debug


@dataclass(frozen=True, slots=True)
class PermitSyncRuntime:
    config: PermitApiConfig
    transport: PermitTransport
    service: PermitSyncService
    controller: PermitListController


def build_permit_sync_runtime(
    *,
    config: PermitApiConfig | None = None,
    transport: PermitTransport | None = None,
) -> PermitSyncRuntime:
    """Wire one service and controller; consumers receive them by reference."""
    if transport is not None:
        resolved_config = transport.config
    else:
        resolved_config = config or load_permit_api_config()
        transport = UrllibPermitTransport(resolved_config)
    service = PermitSyncService(transport)
    controller = PermitListController(service)
    sync_debug(
        "runtime.built",
        base_url=resolved_config.base_url,
        collection_path=resolved_config.collection_path,
        timeout_seconds=resolved_config.timeout_seconds,
    )
    return PermitSyncRuntime(
        config=resolved_config,
        transport=transport,
        service=service,
        controller=controller,
    )
