"""
Reconciler - one reconciliation pass for one backend instance.

Phases:
    Connect -> Discover -> Compile (pruned against capabilities)
    -> CurrentState -> Diff -> Apply -> ApplyDirect -> GetHealth

Connectivity failures up to and including CurrentState abort the pass.
Apply is fail-soft; ApplyDirect and GetHealth are best-effort and never
turn a pass into a failure.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from adapters.base import DirectApplier, HealthChecker
from adapters.errors import AdapterError
from adapters.registry import AdapterRegistry
from adapters.types import ApplyResult, ChangeSet
from compiler.compiler import Compiler
from events import EventBus, EventType, ReconcileEvent
from instances import InstanceDefinition
from ir.types import ConnectionIR, HealthStatus, UnrealizedFeature

logger = logging.getLogger(__name__)


class ReconcileStatus(Enum):
    """Outcome of a reconciliation pass."""

    PENDING = "Pending"
    SYNCED = "Synced"
    IN_SYNC = "InSync"
    PARTIALLY_APPLIED = "PartiallyApplied"
    FAILED = "Failed"


_EVENT_TYPES = {
    ReconcileStatus.SYNCED: EventType.SYNCED,
    ReconcileStatus.IN_SYNC: EventType.IN_SYNC,
    ReconcileStatus.PARTIALLY_APPLIED: EventType.PARTIALLY_APPLIED,
    ReconcileStatus.FAILED: EventType.FAILED,
}


@dataclass
class ReconcileOutcome:
    """What one pass did, and what the next pass needs to know."""

    instance: str
    app: str
    status: ReconcileStatus = ReconcileStatus.PENDING
    phase: str = "pending"
    message: str = ""
    service_version: str = ""
    source_hash: str = ""
    last_applied_hash: str = ""
    drift_detected: bool = False
    creates: int = 0
    updates: int = 0
    deletes: int = 0
    apply_result: ApplyResult = field(default_factory=ApplyResult)
    direct_result: Optional[ApplyResult] = None
    unrealized: List[UnrealizedFeature] = field(default_factory=list)
    health: Optional[HealthStatus] = None
    duration_seconds: float = 0.0
    finished_at: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return self.status in (ReconcileStatus.SYNCED, ReconcileStatus.IN_SYNC)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary (no IR, no secrets)."""
        return {
            "instance": self.instance,
            "app": self.app,
            "status": self.status.value,
            "phase": self.phase,
            "message": self.message,
            "service_version": self.service_version,
            "source_hash": self.source_hash,
            "last_applied_hash": self.last_applied_hash,
            "drift_detected": self.drift_detected,
            "changes": {
                "creates": self.creates,
                "updates": self.updates,
                "deletes": self.deletes,
            },
            "applied": self.apply_result.applied,
            "failed": self.apply_result.failed,
            "skipped": self.apply_result.skipped,
            "errors": [str(e) for e in self.apply_result.errors],
            "unrealized": [
                {"feature": u.feature, "reason": u.reason} for u in self.unrealized
            ],
            "healthy": None if self.health is None else self.health.healthy,
            "health_issues": (
                []
                if self.health is None
                else [
                    {"source": i.source, "type": i.type, "message": i.message}
                    for i in self.health.issues
                ]
            ),
            "duration_seconds": round(self.duration_seconds, 3),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


class Reconciler:
    """
    Runs the reconciliation pipeline against the adapter registered for an
    instance's backend family.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        compiler: Optional[Compiler] = None,
        event_bus: Optional[EventBus] = None,
        apply_timeout: Optional[float] = None,
    ):
        self.registry = registry
        self.compiler = compiler or Compiler()
        self._event_bus = event_bus
        self.apply_timeout = apply_timeout

    async def _publish(
        self,
        event_type: EventType,
        instance: InstanceDefinition,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self._event_bus is None:
            return
        await self._event_bus.publish(
            ReconcileEvent(
                event_type=event_type,
                instance=instance.name,
                app=instance.app,
                message=message,
                data=data or {},
            )
        )

    async def reconcile(
        self,
        instance: InstanceDefinition,
        previous: Optional[ReconcileOutcome] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> ReconcileOutcome:
        """
        Reconcile one instance.

        Args:
            instance: The instance definition
            previous: Outcome of the prior pass, for the last applied hash
            stop_event: Shutdown signal, propagated into Apply

        Returns:
            The outcome; connectivity failures are reported as FAILED
            rather than raised

        Raises:
            AdapterNotRegisteredError: If no adapter serves the instance's app
        """
        adapter = self.registry.get(instance.app)
        start_time = time.monotonic()
        outcome = ReconcileOutcome(
            instance=instance.name,
            app=instance.app,
            last_applied_hash=previous.last_applied_hash if previous else "",
        )
        await self._publish(EventType.RECONCILING, instance, "Starting reconciliation")

        try:
            await self._run(adapter, instance, outcome, stop_event)
        except AdapterError as e:
            logger.error(f"Reconciliation of {instance.name} failed in {outcome.phase}: {e}")
            outcome.status = ReconcileStatus.FAILED
            outcome.message = f"{outcome.phase} failed: {e}"

        outcome.duration_seconds = time.monotonic() - start_time
        outcome.finished_at = datetime.now(timezone.utc)

        await self._publish(
            _EVENT_TYPES[outcome.status], instance, outcome.message, outcome.to_dict()
        )
        return outcome

    async def _run(
        self,
        adapter,
        instance: InstanceDefinition,
        outcome: ReconcileOutcome,
        stop_event: Optional[asyncio.Event],
    ) -> None:
        intent = instance.intent
        conn = ConnectionIR(
            url=intent.url,
            api_key=intent.api_key,
            insecure_skip_verify=intent.insecure_skip_verify,
        )

        outcome.phase = "connecting"
        info = await adapter.connect(conn)
        outcome.service_version = info.version
        logger.info(f"Connected to {instance.app} {info.version} at {conn.url}")

        outcome.phase = "discovering"
        capabilities = await adapter.discover(conn)

        outcome.phase = "compiling"
        desired = self.compiler.compile(intent, capabilities)
        outcome.source_hash = desired.source_hash
        outcome.unrealized = list(desired.unrealized)
        for feature in desired.unrealized:
            logger.info(f"{instance.name}: {feature.feature} unrealized ({feature.reason})")

        outcome.phase = "reading"
        current = await adapter.current_state(conn)

        outcome.phase = "diffing"
        changes: ChangeSet = adapter.diff(current, desired, capabilities)
        outcome.creates = len(changes.creates)
        outcome.updates = len(changes.updates)
        outcome.deletes = len(changes.deletes)

        if changes.is_empty():
            logger.info(f"No changes to apply for {instance.name}, state is in sync")
            outcome.status = ReconcileStatus.IN_SYNC
            outcome.message = "Configuration is in sync"
        else:
            if outcome.last_applied_hash and outcome.last_applied_hash == desired.source_hash:
                outcome.drift_detected = True
                logger.info(f"Drift detected for {instance.name}: {changes.summary()}")
                await self._publish(
                    EventType.DRIFT, instance, f"Drift detected: {changes.summary()}"
                )

            outcome.phase = "applying"
            logger.info(f"Applying changes to {instance.name}: {changes.summary()}")
            deadline = None
            if self.apply_timeout:
                deadline = time.monotonic() + self.apply_timeout
            result = await adapter.apply(conn, changes, stop_event=stop_event, deadline=deadline)
            outcome.apply_result = result

            if result.success and result.skipped == 0:
                outcome.status = ReconcileStatus.SYNCED
                outcome.message = f"Applied {result.applied} changes"
                logger.info(f"All changes applied to {instance.name} ({result.applied})")
            else:
                outcome.status = ReconcileStatus.PARTIALLY_APPLIED
                outcome.message = (
                    f"Applied {result.applied} changes, {result.failed} failed, "
                    f"{result.skipped} skipped"
                )
                logger.warning(f"{instance.name}: {outcome.message}")

        # A partial pass keeps the previous hash so its retry is not drift
        if outcome.status in (ReconcileStatus.IN_SYNC, ReconcileStatus.SYNCED):
            outcome.last_applied_hash = desired.source_hash

        if isinstance(adapter, DirectApplier):
            outcome.phase = "applying-direct"
            try:
                outcome.direct_result = await adapter.apply_direct(conn, desired)
            except Exception as e:
                logger.error(
                    f"Failed to apply direct configuration for {instance.name} (non-fatal): {e}",
                    exc_info=True,
                )
            else:
                if not outcome.direct_result.success:
                    logger.warning(
                        f"Some direct configuration changes failed for {instance.name}: "
                        f"{outcome.direct_result.failed} failed"
                    )

        if isinstance(adapter, HealthChecker):
            outcome.phase = "health"
            try:
                outcome.health = await adapter.get_health(conn)
            except Exception as e:
                logger.warning(f"Health check failed for {instance.name}: {e}")
            else:
                for issue in outcome.health.issues:
                    logger.info(f"{instance.name} health {issue.type}: {issue.message}")

        outcome.phase = "completed"
