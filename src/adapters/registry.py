"""
Adapter Registry - one Adapter per backend family.

The registry is an explicit object built at startup and handed to the
reconciler and controller. Registration is expected once per family;
registering a family twice or looking up an unknown one is a programming
error and raises immediately.
"""

import logging
import threading
from importlib.metadata import entry_points
from typing import Dict, List, Optional

from adapters.base import Adapter

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "nebularr.adapters"


class AdapterAlreadyRegisteredError(ValueError):
    """An adapter for this backend family is already registered."""


class AdapterNotRegisteredError(LookupError):
    """No adapter is registered for this backend family."""


class AdapterRegistry:
    """Thread-safe map from backend family to Adapter instance."""

    def __init__(self):
        self._lock = threading.RLock()
        self._adapters: Dict[str, Adapter] = {}

    def register(self, adapter: Adapter) -> None:
        """
        Register an adapter under its ``name``.

        Raises:
            AdapterAlreadyRegisteredError: If the family is already registered
        """
        with self._lock:
            if adapter.name in self._adapters:
                raise AdapterAlreadyRegisteredError(
                    f"Adapter for '{adapter.name}' is already registered"
                )
            self._adapters[adapter.name] = adapter
        logger.info(f"Registered adapter: {adapter.name}")

    def get(self, app: str) -> Adapter:
        """
        Look up the adapter for a backend family.

        Raises:
            AdapterNotRegisteredError: If no adapter serves ``app``
        """
        with self._lock:
            adapter = self._adapters.get(app)
            if adapter is None:
                available = ", ".join(sorted(self._adapters)) or "none"
                raise AdapterNotRegisteredError(
                    f"Unknown adapter: {app}. Available adapters: {available}"
                )
            return adapter

    def find(self, app: str) -> Optional[Adapter]:
        with self._lock:
            return self._adapters.get(app)

    def list(self) -> List[str]:
        """List registered backend families, sorted."""
        with self._lock:
            return sorted(self._adapters)

    def clear(self) -> None:
        with self._lock:
            self._adapters.clear()

    def __contains__(self, app: str) -> bool:
        with self._lock:
            return app in self._adapters

    def __len__(self) -> int:
        with self._lock:
            return len(self._adapters)


def register_entry_point_adapters(registry: AdapterRegistry) -> None:
    """Register adapters shipped by installed packages."""
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        try:
            adapter_class = ep.load()
            registry.register(adapter_class())
        except AdapterAlreadyRegisteredError:
            raise
        except Exception as e:
            logger.warning(f"Could not load adapter {ep.name}: {e}")


def default_registry(timeout: Optional[float] = None, user_agent: Optional[str] = None) -> AdapterRegistry:
    """
    Build a registry holding the built-in adapters plus any installed ones.

    Args:
        timeout: HTTP timeout handed to the built-in adapters
        user_agent: User-Agent handed to the built-in adapters
    """
    from adapters.radarr import RadarrAdapter

    kwargs = {}
    if timeout is not None:
        kwargs["timeout"] = timeout
    if user_agent is not None:
        kwargs["user_agent"] = user_agent

    registry = AdapterRegistry()
    registry.register(RadarrAdapter(**kwargs))
    register_entry_point_adapters(registry)
    return registry
