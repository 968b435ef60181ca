"""Unit tests for the fail-soft apply executor."""

import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from adapters.apply import DirectApplyCallbacks, apply_changes, apply_direct
from adapters.types import ChangeKind, ChangeSet, ImportListStats, ResourceType
from ir.types import (
    IR,
    AuthenticationIR,
    ConnectionIR,
    DownloadClientIR,
    ImportListIR,
    MediaManagementIR,
)

DC = ResourceType.DOWNLOAD_CLIENT


def _dc(name):
    return DownloadClientIR(name=name, implementation="QBittorrent")


@pytest.fixture
def changes():
    cs = ChangeSet()
    cs.add_delete(DC, "old", 9, _dc("old"))
    cs.add_create(DC, "new-a", _dc("new-a"))
    cs.add_update(DC, "changed", 4, _dc("changed"))
    cs.add_create(DC, "new-b", _dc("new-b"))
    return cs


class Recorder:
    """Change handler that records calls and fails on selected names."""

    def __init__(self, fail=(), delay=0.0, on_call=None):
        self.calls = []
        self.fail = set(fail)
        self.delay = delay
        self.on_call = on_call

    async def __call__(self, kind, change):
        self.calls.append((kind, change.name))
        if self.on_call is not None:
            self.on_call()
        if self.delay:
            await asyncio.sleep(self.delay)
        if change.name in self.fail:
            raise RuntimeError(f"boom {change.name}")


# ==================== apply_changes tests ====================


@pytest.mark.asyncio
class TestApplyChanges:
    async def test_order_creates_updates_deletes(self, changes):
        handler = Recorder()
        await apply_changes(changes, handler)
        assert handler.calls == [
            (ChangeKind.CREATE, "new-a"),
            (ChangeKind.CREATE, "new-b"),
            (ChangeKind.UPDATE, "changed"),
            (ChangeKind.DELETE, "old"),
        ]

    async def test_all_applied(self, changes):
        result = await apply_changes(changes, Recorder())
        assert result.applied == 4
        assert result.failed == 0
        assert result.skipped == 0
        assert result.success

    async def test_fail_soft(self, changes):
        handler = Recorder(fail={"new-a"})
        result = await apply_changes(changes, handler)
        assert len(handler.calls) == 4
        assert result.applied == 3
        assert result.failed == 1
        assert not result.success
        (error,) = result.errors
        assert error.change.name == "new-a"
        assert "boom new-a" in str(error)

    async def test_empty_changeset(self):
        result = await apply_changes(ChangeSet(), Recorder())
        assert (result.applied, result.failed, result.skipped) == (0, 0, 0)
        assert result.success

    async def test_stop_event_before_start(self, changes):
        stop = asyncio.Event()
        stop.set()
        handler = Recorder()
        result = await apply_changes(changes, handler, stop_event=stop)
        assert handler.calls == []
        assert result.skipped == 4

    async def test_stop_event_mid_apply(self, changes):
        stop = asyncio.Event()
        handler = Recorder(on_call=stop.set)
        result = await apply_changes(changes, handler, stop_event=stop)
        # The in-flight change completes; nothing after it starts
        assert len(handler.calls) == 1
        assert result.applied == 1
        assert result.skipped == 3

    async def test_deadline_passed(self, changes):
        handler = Recorder()
        result = await apply_changes(changes, handler, deadline=time.monotonic() - 1)
        assert handler.calls == []
        assert result.skipped == 4

    async def test_deadline_cuts_off_slow_change(self, changes):
        handler = Recorder(delay=5.0)
        result = await apply_changes(changes, handler, deadline=time.monotonic() + 0.05)
        assert result.failed == 1
        assert result.applied == 0
        assert result.skipped == 3

    async def test_counts_add_up(self, changes):
        stop = asyncio.Event()
        calls = {"n": 0}

        def stop_after_two():
            calls["n"] += 1
            if calls["n"] == 2:
                stop.set()

        handler = Recorder(fail={"new-a"}, on_call=stop_after_two)
        result = await apply_changes(changes, handler, stop_event=stop)
        assert result.applied + result.failed + result.skipped == changes.total_changes()


# ==================== apply_direct tests ====================


@pytest.fixture
def direct_ir():
    return IR(
        app="radarr",
        connection=ConnectionIR(url="http://radarr:7878"),
        import_lists=(ImportListIR(name="trakt", type="TraktListImport"),),
        media_management=MediaManagementIR(use_hardlinks=True),
        authentication=AuthenticationIR(method="forms", username="admin"),
    )


@pytest.mark.asyncio
class TestApplyDirect:
    async def test_aggregates_import_list_stats(self, direct_ir):
        stats = ImportListStats(created=2, updated=1, deleted=1)
        stats.errors.append(ValueError("unknown type"))
        callbacks = DirectApplyCallbacks(
            apply_import_lists=AsyncMock(return_value=stats),
            apply_media_management=AsyncMock(),
            apply_authentication=AsyncMock(),
        )
        result = await apply_direct(direct_ir, callbacks)
        assert result.applied == 4 + 1 + 1
        assert result.skipped == 0
        assert result.failed == 1
        assert str(result.errors[0]) == "ImportList: unknown type"

    async def test_step_failure_is_isolated(self, direct_ir):
        callbacks = DirectApplyCallbacks(
            apply_import_lists=AsyncMock(return_value=ImportListStats(created=1)),
            apply_media_management=AsyncMock(side_effect=RuntimeError("denied")),
            apply_authentication=AsyncMock(),
        )
        result = await apply_direct(direct_ir, callbacks)
        assert result.applied == 2
        assert result.failed == 1
        assert str(result.errors[0]) == "MediaManagement: denied"
        callbacks.apply_authentication.assert_awaited_once()

    async def test_import_list_callback_raising(self, direct_ir):
        callbacks = DirectApplyCallbacks(
            apply_import_lists=AsyncMock(side_effect=RuntimeError("down")),
        )
        result = await apply_direct(direct_ir, callbacks)
        assert result.failed == 1
        assert result.applied == 0

    async def test_undeclared_categories_skip_callbacks(self):
        bare = IR(app="radarr", connection=ConnectionIR(url="http://radarr:7878"))
        callbacks = DirectApplyCallbacks(
            apply_import_lists=AsyncMock(),
            apply_media_management=AsyncMock(),
            apply_authentication=AsyncMock(),
        )
        result = await apply_direct(bare, callbacks)
        assert result.success
        assert result.applied == 0
        callbacks.apply_import_lists.assert_not_awaited()
        callbacks.apply_media_management.assert_not_awaited()
        callbacks.apply_authentication.assert_not_awaited()

    async def test_missing_callbacks(self, direct_ir):
        result = await apply_direct(direct_ir, DirectApplyCallbacks())
        assert result.applied == 0
        assert result.success
