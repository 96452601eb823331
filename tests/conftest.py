"""Shared test fixtures."""

import pytest

from permit_fakes import FakePermitTransport
from permitsync.app.permit_list_controller import PermitListController
from permitsync.app.permit_sync_service import PermitSyncService
from permitsync.app.sync_debug import clear_recent_sync_events


@pytest.fixture(autouse=True)
def fresh_sync_events():
    clear_recent_sync_events()
    yield
    clear_recent_sync_events()


@pytest.fixture
def transport():
    return FakePermitTransport()


@pytest.fixture
def service(transport):
    return PermitSyncService(transport)


@pytest.fixture
def controller(service):
    ctrl = PermitListController(service)
    yield ctrl
    ctrl.close()
