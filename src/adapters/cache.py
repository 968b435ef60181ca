"""Per-adapter name -> service ID cache."""

import threading
from typing import Dict, Optional, Tuple

from adapters.types import ResourceType

_Key = Tuple[ResourceType, str]


class ResourceIdCache:
    """
    Best-effort cache of resolved service IDs.

    Scoped to one adapter object and keyed by instance URL first, so
    concurrent reconciliation of several instances never collides. A miss
    means the caller falls back to a live lookup-by-name.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, Dict[_Key, int]] = {}

    def get(self, instance_url: str, resource_type: ResourceType, name: str) -> Optional[int]:
        with self._lock:
            return self._entries.get(instance_url, {}).get((resource_type, name))

    def set(self, instance_url: str, resource_type: ResourceType, name: str, resource_id: int) -> None:
        with self._lock:
            self._entries.setdefault(instance_url, {})[(resource_type, name)] = resource_id

    def discard(self, instance_url: str, resource_type: ResourceType, name: str) -> None:
        with self._lock:
            self._entries.get(instance_url, {}).pop((resource_type, name), None)

    def invalidate(self, instance_url: Optional[str] = None) -> None:
        """Drop one instance's entries, or everything when no URL is given."""
        with self._lock:
            if instance_url is None:
                self._entries.clear()
            else:
                self._entries.pop(instance_url, None)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(entries) for entries in self._entries.values())
