"""
Ownership - deciding which backend resources this system manages.

Most categories carry a tag list, so ownership is the presence of the
"nebularr-managed" tag. Categories without a tag field fall back to a
generated name prefix, and a few singleton-like categories are owned as a
whole once the config declares any of them.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

from adapters.errors import ArrAPIError
from adapters.httpclient import ArrClient

logger = logging.getLogger(__name__)

OWNERSHIP_TAG = "nebularr-managed"
TAG_PATH = "/api/v3/tag"


class OwnershipStrategy(ABC):
    """Decides whether a raw backend resource is owned."""

    @abstractmethod
    def owns(self, resource: Dict[str, Any]) -> bool:
        pass

    def filter(self, resources: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [resource for resource in resources if self.owns(resource)]


class TagBased(OwnershipStrategy):
    """Owned when the resource's ``tags`` include the ownership tag ID."""

    def __init__(self, tag_id: Optional[int]):
        self.tag_id = tag_id

    def owns(self, resource: Dict[str, Any]) -> bool:
        return has_tag(resource, self.tag_id)


class NamePrefixBased(OwnershipStrategy):
    """Owned when the resource name starts with one of the prefixes."""

    def __init__(self, *prefixes: str):
        if not prefixes:
            raise ValueError("NamePrefixBased needs at least one prefix")
        self.prefixes: Tuple[str, ...] = prefixes

    def owns(self, resource: Dict[str, Any]) -> bool:
        return str(resource.get("name", "")).startswith(self.prefixes)


class CategoryBased(OwnershipStrategy):
    """
    Every resource in the category is owned.

    Used for categories with no tag field and no generated name. The diff
    engine only touches them when the desired state declares the category.
    """

    def owns(self, resource: Dict[str, Any]) -> bool:
        return True


def has_tag(resource: Dict[str, Any], tag_id: Optional[int]) -> bool:
    if tag_id is None:
        return False
    return tag_id in (resource.get("tags") or [])


def with_tag(payload: Dict[str, Any], tag_id: int) -> Dict[str, Any]:
    """Return a copy of ``payload`` whose tags include ``tag_id``."""
    tags = list(payload.get("tags") or [])
    if tag_id not in tags:
        tags.append(tag_id)
    return {**payload, "tags": tags}


async def find_ownership_tag(client: ArrClient, label: str = OWNERSHIP_TAG) -> Optional[int]:
    """
    Look up the ownership tag ID.

    Returns:
        The tag ID, or None when the tag has never been created
    """
    tags = await client.get(TAG_PATH) or []
    for tag in tags:
        if str(tag.get("label", "")).lower() == label.lower():
            return tag["id"]
    return None


async def ensure_ownership_tag(client: ArrClient, label: str = OWNERSHIP_TAG) -> int:
    """
    Get or create the ownership tag.

    Concurrent callers may race to create the tag. The backend rejects a
    duplicate label, so the losing creator re-fetches to find the winner.

    Raises:
        ArrAPIError: If the tag can be neither created nor found
    """
    tag_id = await find_ownership_tag(client, label)
    if tag_id is not None:
        return tag_id

    try:
        created = await client.post(TAG_PATH, {"label": label})
        logger.info(f"Created ownership tag '{label}' on {client.base_url}")
        return created["id"]
    except ArrAPIError as e:
        logger.warning(f"Creating tag '{label}' failed ({e}); re-fetching")
        tag_id = await find_ownership_tag(client, label)
        if tag_id is None:
            raise
        return tag_id
