"""
Adapter Base - Abstract interface for *arr backend families.

One Adapter exists per backend family (radarr, sonarr, ...). The
reconciliation pipeline is generic over this interface: it connects,
discovers capabilities, reads the owned current state, diffs it against the
compiled desired state and applies the resulting ChangeSet.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from adapters.diff import diff_ir
from adapters.types import ApplyResult, Capabilities, ChangeSet, ServiceInfo
from ir.types import IR, ConnectionIR, HealthStatus


class Adapter(ABC):
    """
    Abstract base class for backend adapters.

    Adapters own all backend-specific field mapping; the diff algorithm,
    ownership rules and fail-soft apply semantics are shared.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend family this adapter serves (e.g., 'radarr')."""
        pass

    @abstractmethod
    async def connect(self, conn: ConnectionIR) -> ServiceInfo:
        """
        Probe liveness and version.

        Raises:
            ArrConnectionError: If the instance cannot be reached
        """
        pass

    @abstractmethod
    async def discover(self, conn: ConnectionIR) -> Capabilities:
        """
        Query what the instance supports.

        Must not fail for an individual unsupported feature; only a
        connectivity failure raises.
        """
        pass

    @abstractmethod
    async def current_state(self, conn: ConnectionIR) -> IR:
        """
        Read back the owned resources as an IR.

        A missing ownership tag means nothing is managed yet and yields an
        empty IR.
        """
        pass

    def diff(
        self, current: IR, desired: IR, capabilities: Optional[Capabilities] = None
    ) -> ChangeSet:
        """Compute the ChangeSet turning ``current`` into ``desired``."""
        return diff_ir(current, desired)

    @abstractmethod
    async def apply(
        self,
        conn: ConnectionIR,
        changes: ChangeSet,
        *,
        stop_event: Optional[asyncio.Event] = None,
        deadline: Optional[float] = None,
    ) -> ApplyResult:
        """
        Apply a ChangeSet, fail-soft and tagging every created resource.

        Args:
            conn: Instance connection
            changes: Output of ``diff``
            stop_event: Shutdown signal; stops issuing further Changes
            deadline: ``time.monotonic()`` value bounding the whole apply
        """
        pass


class DirectApplier(ABC):
    """Optional: categories applied outside of a ChangeSet."""

    @abstractmethod
    async def apply_direct(self, conn: ConnectionIR, ir: IR) -> ApplyResult:
        pass


class HealthChecker(ABC):
    """Optional: surface the backend's own health checks."""

    @abstractmethod
    async def get_health(self, conn: ConnectionIR) -> HealthStatus:
        pass
