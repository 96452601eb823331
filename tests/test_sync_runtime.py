"""Tests for wiring the sync runtime."""

import pytest

from permit_fakes import FakePermitTransport, permit_payload
from permitsync.app.permit_transport import PermitApiConfig, UrllibPermitTransport
from permitsync.core import build_permit_sync_runtime


class TestBuildRuntime:
    def test_uses_given_config(self):
        config = PermitApiConfig(base_url="http://permits.test")
        runtime = build_permit_sync_runtime(config=config)
        assert isinstance(runtime.transport, UrllibPermitTransport)
        assert runtime.transport.config == config
        assert runtime.controller.service is runtime.service

    def test_loads_config_from_settings(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        runtime = build_permit_sync_runtime()
        assert runtime.config == PermitApiConfig()

    @pytest.mark.asyncio
    async def test_injected_transport_drives_controller(self):
        transport = FakePermitTransport(PermitApiConfig(collection_path="/api/permits"))
        transport.respond("GET", "/api/permits", body=[permit_payload("1", "A")])
        runtime = build_permit_sync_runtime(transport=transport)

        assert await runtime.controller.refresh() is True
        assert runtime.config.collection_path == "/api/permits"
        assert [permit.permit_id for permit in runtime.service.permits] == ["1"]
