"""Unit tests for the reconciliation pipeline."""

import asyncio
import time

import pytest

from adapters.base import Adapter, DirectApplier, HealthChecker
from adapters.errors import ArrAPIError, ArrConnectionError
from adapters.registry import AdapterNotRegisteredError, AdapterRegistry
from adapters.types import ApplyResult, Capabilities, ChangeSet, ServiceInfo
from compiler.compiler import source_hash
from events import EventBus, EventType
from instances import InstanceDefinition
from ir.types import HealthIssue, HealthStatus, empty_ir
from reconciler import Reconciler, ReconcileOutcome, ReconcileStatus

# ==================== Test Helpers ====================


class ScriptedAdapter(Adapter, DirectApplier, HealthChecker):
    """
    Adapter whose phases are scripted by the test.

    Raise from a phase by putting an exception in ``errors[phase]``.
    """

    def __init__(self, apply_result=None, changes=None):
        self.errors = {}
        self.apply_result = apply_result
        self.changes = changes
        self.health = HealthStatus(healthy=True)
        self.calls = []
        self.apply_kwargs = {}

    @property
    def name(self):
        return "radarr"

    def _step(self, phase):
        self.calls.append(phase)
        if phase in self.errors:
            raise self.errors[phase]

    async def connect(self, conn):
        self._step("connect")
        return ServiceInfo(version="5.2.6")

    async def discover(self, conn):
        self._step("discover")
        return Capabilities(resolutions=("1080p", "720p"))

    async def current_state(self, conn):
        self._step("current_state")
        return empty_ir("radarr", conn)

    def diff(self, current, desired, capabilities=None):
        if self.changes is not None:
            return self.changes
        return super().diff(current, desired, capabilities)

    async def apply(self, conn, changes, *, stop_event=None, deadline=None):
        self._step("apply")
        self.apply_kwargs = {"stop_event": stop_event, "deadline": deadline}
        if self.apply_result is not None:
            return self.apply_result
        return ApplyResult(applied=changes.total_changes())

    async def apply_direct(self, conn, ir):
        self._step("apply_direct")
        return ApplyResult()

    async def get_health(self, conn):
        self._step("get_health")
        return self.health


class MinimalAdapter(Adapter):
    """Adapter with none of the optional capabilities."""

    name = "radarr"

    async def connect(self, conn):
        return ServiceInfo(version="1")

    async def discover(self, conn):
        return Capabilities()

    async def current_state(self, conn):
        return empty_ir("radarr", conn)

    async def apply(self, conn, changes, *, stop_event=None, deadline=None):
        return ApplyResult(applied=changes.total_changes())


def _reconciler(adapter, **kwargs):
    registry = AdapterRegistry()
    registry.register(adapter)
    return Reconciler(registry, **kwargs)


async def _drain(subscription, count):
    return [await asyncio.wait_for(subscription.__anext__(), timeout=1) for _ in range(count)]


# ==================== Status tests ====================


@pytest.mark.asyncio
class TestReconcileStatus:
    async def test_synced(self, radarr_instance):
        adapter = ScriptedAdapter()
        outcome = await _reconciler(adapter).reconcile(radarr_instance)

        assert outcome.status is ReconcileStatus.SYNCED
        assert outcome.success
        assert outcome.creates > 0
        assert outcome.apply_result.applied == outcome.creates + outcome.updates
        assert outcome.service_version == "5.2.6"
        assert outcome.source_hash == source_hash(radarr_instance.intent)
        assert outcome.last_applied_hash == outcome.source_hash
        assert outcome.phase == "completed"
        assert adapter.calls == [
            "connect",
            "discover",
            "current_state",
            "apply",
            "apply_direct",
            "get_health",
        ]

    async def test_in_sync_skips_apply(self, radarr_instance):
        adapter = ScriptedAdapter(changes=ChangeSet())
        outcome = await _reconciler(adapter).reconcile(radarr_instance)

        assert outcome.status is ReconcileStatus.IN_SYNC
        assert outcome.message == "Configuration is in sync"
        assert "apply" not in adapter.calls
        # Direct configuration still runs on an in-sync pass
        assert "apply_direct" in adapter.calls
        assert outcome.last_applied_hash == outcome.source_hash

    async def test_partially_applied(self, radarr_instance):
        result = ApplyResult(applied=4)
        result.record_failure(None, RuntimeError("boom"), resource="DownloadClient")
        outcome = await _reconciler(ScriptedAdapter(apply_result=result)).reconcile(
            radarr_instance
        )
        assert outcome.status is ReconcileStatus.PARTIALLY_APPLIED
        assert outcome.message == "Applied 4 changes, 1 failed, 0 skipped"
        assert not outcome.success

    async def test_skipped_changes_are_partial(self, radarr_instance):
        adapter = ScriptedAdapter(apply_result=ApplyResult(applied=2, skipped=3))
        outcome = await _reconciler(adapter).reconcile(radarr_instance)
        assert outcome.status is ReconcileStatus.PARTIALLY_APPLIED

    @pytest.mark.parametrize(
        "phase, error, message",
        [
            ("connect", ArrConnectionError("http://radarr:7878", "refused"), "connecting failed"),
            ("discover", ArrAPIError("GET", "/api/v3/x", 500), "discovering failed"),
            ("current_state", ArrAPIError("GET", "/api/v3/tag", 401), "reading failed"),
        ],
    )
    async def test_connectivity_failures(self, radarr_instance, phase, error, message):
        adapter = ScriptedAdapter()
        adapter.errors[phase] = error
        previous = ReconcileOutcome(instance="movies", app="radarr", last_applied_hash="abc")

        outcome = await _reconciler(adapter).reconcile(radarr_instance, previous=previous)

        assert outcome.status is ReconcileStatus.FAILED
        assert outcome.message.startswith(message)
        assert outcome.last_applied_hash == "abc"
        assert "apply" not in adapter.calls
        assert outcome.finished_at is not None

    async def test_direct_apply_failure_is_not_fatal(self, radarr_instance):
        adapter = ScriptedAdapter()
        adapter.errors["apply_direct"] = RuntimeError("media management exploded")
        outcome = await _reconciler(adapter).reconcile(radarr_instance)
        assert outcome.status is ReconcileStatus.SYNCED
        assert outcome.direct_result is None
        assert "get_health" in adapter.calls

    async def test_health_failure_is_not_fatal(self, radarr_instance):
        adapter = ScriptedAdapter()
        adapter.errors["get_health"] = ArrConnectionError("http://radarr:7878", "reset")
        outcome = await _reconciler(adapter).reconcile(radarr_instance)
        assert outcome.status is ReconcileStatus.SYNCED
        assert outcome.health is None

    async def test_optional_capabilities(self, radarr_instance):
        outcome = await _reconciler(MinimalAdapter()).reconcile(radarr_instance)
        assert outcome.status is ReconcileStatus.SYNCED
        assert outcome.direct_result is None
        assert outcome.health is None

    async def test_unknown_app(self, radarr_instance):
        reconciler = Reconciler(AdapterRegistry())
        with pytest.raises(AdapterNotRegisteredError):
            await reconciler.reconcile(radarr_instance)


# ==================== Drift tests ====================


@pytest.mark.asyncio
class TestDrift:
    async def test_drift_when_intent_unchanged(self, radarr_instance):
        previous = ReconcileOutcome(
            instance="movies",
            app="radarr",
            last_applied_hash=source_hash(radarr_instance.intent),
        )
        outcome = await _reconciler(ScriptedAdapter()).reconcile(radarr_instance, previous=previous)
        assert outcome.drift_detected
        assert outcome.status is ReconcileStatus.SYNCED

    async def test_no_drift_when_intent_changed(self, radarr_instance):
        previous = ReconcileOutcome(instance="movies", app="radarr", last_applied_hash="0" * 16)
        outcome = await _reconciler(ScriptedAdapter()).reconcile(radarr_instance, previous=previous)
        assert not outcome.drift_detected
        assert outcome.last_applied_hash == outcome.source_hash

    async def test_no_drift_on_first_pass(self, radarr_instance):
        outcome = await _reconciler(ScriptedAdapter()).reconcile(radarr_instance)
        assert not outcome.drift_detected

    async def test_no_drift_when_in_sync(self, radarr_instance):
        previous = ReconcileOutcome(
            instance="movies",
            app="radarr",
            last_applied_hash=source_hash(radarr_instance.intent),
        )
        adapter = ScriptedAdapter(changes=ChangeSet())
        outcome = await _reconciler(adapter).reconcile(radarr_instance, previous=previous)
        assert not outcome.drift_detected

    async def test_retry_after_partial_pass_is_not_drift(self, radarr_instance):
        result = ApplyResult(applied=1)
        result.record_failure(None, RuntimeError("boom"), resource="DownloadClient")
        adapter = ScriptedAdapter(apply_result=result)
        reconciler = _reconciler(adapter)

        first = await reconciler.reconcile(radarr_instance)
        assert first.status is ReconcileStatus.PARTIALLY_APPLIED
        assert first.last_applied_hash == ""

        adapter.apply_result = None
        retry = await reconciler.reconcile(radarr_instance, previous=first)
        assert not retry.drift_detected
        assert retry.status is ReconcileStatus.SYNCED
        assert retry.last_applied_hash == retry.source_hash

    async def test_partial_pass_keeps_previous_hash(self, radarr_instance):
        previous = ReconcileOutcome(instance="movies", app="radarr", last_applied_hash="0" * 16)
        adapter = ScriptedAdapter(apply_result=ApplyResult(applied=2, skipped=3))
        outcome = await _reconciler(adapter).reconcile(radarr_instance, previous=previous)
        assert outcome.status is ReconcileStatus.PARTIALLY_APPLIED
        assert outcome.last_applied_hash == "0" * 16


# ==================== Apply parameter tests ====================


@pytest.mark.asyncio
class TestApplyParameters:
    async def test_stop_event_is_forwarded(self, radarr_instance):
        adapter = ScriptedAdapter()
        stop = asyncio.Event()
        await _reconciler(adapter).reconcile(radarr_instance, stop_event=stop)
        assert adapter.apply_kwargs["stop_event"] is stop

    async def test_no_deadline_by_default(self, radarr_instance):
        adapter = ScriptedAdapter()
        await _reconciler(adapter).reconcile(radarr_instance)
        assert adapter.apply_kwargs["deadline"] is None

    async def test_deadline_from_apply_timeout(self, radarr_instance):
        adapter = ScriptedAdapter()
        before = time.monotonic()
        await _reconciler(adapter, apply_timeout=60).reconcile(radarr_instance)
        assert before + 60 <= adapter.apply_kwargs["deadline"] <= time.monotonic() + 60


# ==================== Event tests ====================


@pytest.mark.asyncio
class TestReconcileEvents:
    async def test_reconciling_then_status(self, radarr_instance):
        bus = EventBus()
        _, subscription = await bus.subscribe()
        await _reconciler(ScriptedAdapter(), event_bus=bus).reconcile(radarr_instance)

        reconciling, synced = await _drain(subscription, 2)
        assert reconciling.event_type is EventType.RECONCILING
        assert reconciling.instance == "movies"
        assert synced.event_type is EventType.SYNCED
        assert synced.data["status"] == "Synced"
        assert synced.data["instance"] == "movies"

    async def test_drift_event(self, radarr_instance):
        bus = EventBus()
        _, subscription = await bus.subscribe()
        previous = ReconcileOutcome(
            instance="movies",
            app="radarr",
            last_applied_hash=source_hash(radarr_instance.intent),
        )
        await _reconciler(ScriptedAdapter(), event_bus=bus).reconcile(
            radarr_instance, previous=previous
        )

        events = await _drain(subscription, 3)
        assert [e.event_type for e in events] == [
            EventType.RECONCILING,
            EventType.DRIFT,
            EventType.SYNCED,
        ]
        assert events[1].message.startswith("Drift detected: ")

    async def test_failed_event(self, radarr_instance):
        bus = EventBus()
        _, subscription = await bus.subscribe()
        adapter = ScriptedAdapter()
        adapter.errors["connect"] = ArrConnectionError("http://radarr:7878", "refused")
        await _reconciler(adapter, event_bus=bus).reconcile(radarr_instance)

        _, failed = await _drain(subscription, 2)
        assert failed.event_type is EventType.FAILED
        assert "connecting failed" in failed.message

    async def test_in_sync_event(self, radarr_instance):
        bus = EventBus()
        _, subscription = await bus.subscribe()
        await _reconciler(ScriptedAdapter(changes=ChangeSet()), event_bus=bus).reconcile(
            radarr_instance
        )
        _, in_sync = await _drain(subscription, 2)
        assert in_sync.event_type is EventType.IN_SYNC


# ==================== Outcome tests ====================


class TestReconcileOutcome:
    def test_defaults(self):
        outcome = ReconcileOutcome(instance="movies", app="radarr")
        assert outcome.status is ReconcileStatus.PENDING
        assert not outcome.success
        assert outcome.to_dict()["healthy"] is None
        assert outcome.to_dict()["finished_at"] is None

    def test_to_dict(self):
        result = ApplyResult(applied=2)
        result.record_failure(None, RuntimeError("nope"), resource="Indexer")
        outcome = ReconcileOutcome(
            instance="movies",
            app="radarr",
            status=ReconcileStatus.PARTIALLY_APPLIED,
            creates=2,
            updates=1,
            apply_result=result,
            health=HealthStatus(
                healthy=False,
                issues=(HealthIssue(source="IndexerCheck", type="error", message="down"),),
            ),
            duration_seconds=1.23456,
        )
        data = outcome.to_dict()
        assert data["status"] == "PartiallyApplied"
        assert data["changes"] == {"creates": 2, "updates": 1, "deletes": 0}
        assert data["applied"] == 2
        assert data["failed"] == 1
        assert data["errors"] == ["Indexer: nope"]
        assert data["healthy"] is False
        assert data["health_issues"] == [
            {"source": "IndexerCheck", "type": "error", "message": "down"}
        ]
        assert data["duration_seconds"] == 1.235

    def test_instance_definition_url(self, radarr_instance):
        assert isinstance(radarr_instance, InstanceDefinition)
        assert radarr_instance.url == "http://radarr:7878"
