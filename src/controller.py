"""
Controller - periodic reconciliation of every configured instance.

Each cycle reconciles all instances concurrently, bounded by a semaphore.
Outcomes are kept in memory so the next cycle can detect drift and the
status API can report them.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from adapters.registry import AdapterRegistry
from config import ControllerConfig
from events import EventBus
from instances import InstanceDefinition
from reconciler import Reconciler, ReconcileOutcome, ReconcileStatus

logger = logging.getLogger(__name__)


class Controller:
    """
    Main controller that implements the reconciliation loop.

    Instances are reconciled on a fixed interval, or immediately when
    triggered through :meth:`trigger_reconciliation`.
    """

    def __init__(
        self,
        instances: List[InstanceDefinition],
        registry: AdapterRegistry,
        config: Optional[ControllerConfig] = None,
        event_bus: Optional[EventBus] = None,
        reconciler: Optional[Reconciler] = None,
    ):
        self.config = config or ControllerConfig()
        self.instances: Dict[str, InstanceDefinition] = {i.name: i for i in instances}
        self.registry = registry
        self.reconcile_interval = self.config.reconcile_interval
        self.max_concurrent_reconciles = self.config.max_concurrent_reconciles
        self.semaphore = asyncio.Semaphore(self.max_concurrent_reconciles)
        self.reconciler = reconciler or Reconciler(
            registry,
            event_bus=event_bus,
            apply_timeout=self.config.apply_timeout,
        )
        self.running = False
        self.outcomes: Dict[str, ReconcileOutcome] = {}

        self._shutdown_event = asyncio.Event()
        self._wakeup = asyncio.Event()
        self._triggered: List[str] = []

    async def start(self):
        """Run the reconciliation loop until :meth:`stop` is called."""
        logger.info(f"Starting controller for {len(self.instances)} instance(s)")
        self.running = True
        self._shutdown_event.clear()
        await self._reconciliation_loop()

    async def stop(self):
        """Stop the loop; in-flight applies stop issuing further changes."""
        logger.info("Stopping controller")
        self.running = False
        self._shutdown_event.set()
        self._wakeup.set()

    async def _reconciliation_loop(self):
        while self.running:
            try:
                if self._triggered:
                    names, self._triggered = self._triggered, []
                    await self.reconcile_many(names)
                else:
                    await self.reconcile_all()
            except Exception as e:
                logger.error(f"Error in reconciliation loop: {e}", exc_info=True)

            await self._sleep(self.reconcile_interval)

    async def _sleep(self, seconds: float) -> None:
        """Sleep until the interval passes, a trigger arrives or shutdown."""
        self._wakeup.clear()
        if self._triggered or not self.running:
            return
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def reconcile_all(self) -> None:
        await self.reconcile_many(list(self.instances))

    async def reconcile_many(self, names: List[str]) -> None:
        tasks = [self.reconcile_instance(name) for name in names if name in self.instances]
        if tasks:
            logger.info(f"Reconciling {len(tasks)} instance(s)")
            await asyncio.gather(*tasks, return_exceptions=True)

    async def reconcile_instance(self, name: str) -> ReconcileOutcome:
        """
        Reconcile a single instance under the concurrency limit.

        Unexpected errors are recorded as a FAILED outcome so one broken
        instance never stops the others.
        """
        instance = self.instances[name]
        async with self.semaphore:
            previous = self.outcomes.get(name)
            try:
                outcome = await self.reconciler.reconcile(
                    instance, previous=previous, stop_event=self._shutdown_event
                )
            except Exception as e:
                logger.error(f"Error reconciling {name}: {e}", exc_info=True)
                outcome = ReconcileOutcome(
                    instance=name,
                    app=instance.app,
                    status=ReconcileStatus.FAILED,
                    phase="failed",
                    message=f"Reconciliation error: {e}",
                    last_applied_hash=previous.last_applied_hash if previous else "",
                )
            self.outcomes[name] = outcome
            return outcome

    def get_outcome(self, name: str) -> Optional[ReconcileOutcome]:
        return self.outcomes.get(name)

    async def trigger_reconciliation(self, name: str) -> None:
        """
        Queue an instance for immediate reconciliation.

        Raises:
            KeyError: If the instance is unknown
        """
        if name not in self.instances:
            raise KeyError(name)
        logger.info(f"Manually triggering reconciliation for {name}")
        if name not in self._triggered:
            self._triggered.append(name)
        self._wakeup.set()
