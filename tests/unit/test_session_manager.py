"""Unit tests for EditSessionManager."""

from __future__ import annotations

import asyncio
import time

import pytest

from docedit.adapters import AdapterRegistry, UnknownAdapterError
from docedit.models.document import EditMetadata
from docedit.models.session import SessionStatus
from docedit.service.session_controller import EditSessionController
from docedit.service.session_manager import EditSessionManager, SessionNotFoundError
from docedit.storage.gateway import PersistenceGateway


def _manager(
    gateway: PersistenceGateway, ttl_seconds: int = 3600, cleanup_interval: float = 9999
) -> EditSessionManager:
    def factory(adapter_id: str | None) -> EditSessionController:
        return EditSessionController(
            gateway, AdapterRegistry.get(adapter_id or "split"), debounce_seconds=0
        )

    return EditSessionManager(factory, ttl_seconds=ttl_seconds, cleanup_interval=cleanup_interval)


@pytest.fixture
def session_manager(gateway: PersistenceGateway) -> EditSessionManager:
    """EditSessionManager with long TTL and no cleanup task (for tests)."""
    return _manager(gateway)


class TestSessionLifecycle:
    def test_create_session(self, session_manager: EditSessionManager) -> None:
        info = session_manager.create_session()
        assert len(info.session_id) == 32
        assert info.adapter == "split"
        assert info.status is SessionStatus.IDLE
        assert info.path is None
        assert info.metadata == {}

    def test_create_with_adapter_and_metadata(self, session_manager: EditSessionManager) -> None:
        info = session_manager.create_session(adapter_id="source", metadata={"user": "alice"})
        assert info.adapter == "source"
        assert info.metadata == {"user": "alice"}

    def test_create_with_unknown_adapter(self, session_manager: EditSessionManager) -> None:
        with pytest.raises(UnknownAdapterError):
            session_manager.create_session(adapter_id="nope")
        assert session_manager.active_count == 0

    def test_get_controller(self, session_manager: EditSessionManager) -> None:
        info = session_manager.create_session()
        controller = session_manager.get_controller(info.session_id)
        assert controller.status is SessionStatus.IDLE
        assert session_manager.get_controller(info.session_id) is controller

    def test_get_controller_missing_raises(self, session_manager: EditSessionManager) -> None:
        with pytest.raises(SessionNotFoundError, match="not found"):
            session_manager.get_controller("nonexist123")

    async def test_session_info_tracks_document(
        self, session_manager: EditSessionManager, metadata: EditMetadata
    ) -> None:
        info = session_manager.create_session()
        await session_manager.get_controller(info.session_id).open(metadata)
        refreshed = session_manager.get_session(info.session_id)
        assert refreshed.status is SessionStatus.READY
        assert refreshed.path == metadata.resource_handle.path
        assert refreshed.last_accessed_at >= info.created_at

    async def test_close_session_closes_controller(
        self, session_manager: EditSessionManager, metadata: EditMetadata
    ) -> None:
        info = session_manager.create_session()
        controller = session_manager.get_controller(info.session_id)
        await controller.open(metadata)
        session_manager.close_session(info.session_id)
        assert controller.status is SessionStatus.IDLE
        with pytest.raises(SessionNotFoundError):
            session_manager.get_controller(info.session_id)

    def test_close_missing_raises(self, session_manager: EditSessionManager) -> None:
        with pytest.raises(SessionNotFoundError, match="not found"):
            session_manager.close_session("nonexist123")

    def test_list_sessions(self, session_manager: EditSessionManager) -> None:
        session_manager.create_session()
        session_manager.create_session()
        assert len(session_manager.list_sessions()) == 2
        assert session_manager.active_count == 2


class TestExpiry:
    def test_expired_session_raises(self, gateway: PersistenceGateway) -> None:
        mgr = _manager(gateway, ttl_seconds=0)
        info = mgr.create_session()
        time.sleep(0.05)  # ensure TTL has passed
        with pytest.raises(SessionNotFoundError, match="expired"):
            mgr.get_controller(info.session_id)

    def test_expired_not_listed(self, gateway: PersistenceGateway) -> None:
        mgr = _manager(gateway, ttl_seconds=0)
        mgr.create_session()
        time.sleep(0.05)
        assert mgr.list_sessions() == []
        assert mgr.active_count == 0

    async def test_purge_closes_controllers(
        self, gateway: PersistenceGateway, metadata: EditMetadata
    ) -> None:
        mgr = _manager(gateway, ttl_seconds=0)
        info = mgr.create_session()
        controller = mgr._sessions[info.session_id].controller
        await controller.open(metadata)
        time.sleep(0.05)
        mgr._purge_expired()
        assert mgr._sessions == {}
        assert controller.status is SessionStatus.IDLE

    async def test_cleanup_task(self, gateway: PersistenceGateway) -> None:
        mgr = _manager(gateway, ttl_seconds=0, cleanup_interval=0.05)
        mgr.start()
        try:
            mgr.create_session()
            await asyncio.sleep(0.2)  # wait for cleanup to run
            assert mgr._sessions == {}
        finally:
            await mgr.stop()

    async def test_stop_closes_everything(self, session_manager: EditSessionManager) -> None:
        session_manager.start()
        session_manager.create_session()
        await session_manager.stop()
        assert session_manager.active_count == 0
