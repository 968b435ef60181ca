"""
Adapters - the backend-facing half of the reconciliation pipeline.

Backend-specific adapters live in subpackages (``adapters.radarr``) and
are registered into an AdapterRegistry at startup.
"""

from adapters.base import Adapter, DirectApplier, HealthChecker
from adapters.errors import (
    AdapterError,
    ArrAPIError,
    ArrConnectionError,
    UnsupportedResourceError,
)
from adapters.registry import (
    AdapterAlreadyRegisteredError,
    AdapterNotRegisteredError,
    AdapterRegistry,
)
from adapters.types import (
    ApplyError,
    ApplyResult,
    Capabilities,
    Change,
    ChangeKind,
    ChangeSet,
    ResourceType,
    ServiceInfo,
)

__all__ = [
    "Adapter",
    "AdapterAlreadyRegisteredError",
    "AdapterError",
    "AdapterNotRegisteredError",
    "AdapterRegistry",
    "ApplyError",
    "ApplyResult",
    "ArrAPIError",
    "ArrConnectionError",
    "Capabilities",
    "Change",
    "ChangeKind",
    "ChangeSet",
    "DirectApplier",
    "HealthChecker",
    "ResourceType",
    "ServiceInfo",
    "UnsupportedResourceError",
]
