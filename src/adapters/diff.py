"""
Diff Engine - generic name-keyed reconciliation of resource lists.

One algorithm, instantiated per resource category:

1. index current and desired by key (first occurrence wins);
2. each desired entry missing from current is a Create; each present
   but unequal one is an Update carrying the current service ID;
3. each current entry missing from desired is a Delete carrying its
   service ID, unless the category or entry is exempt from deletion.

Creates and updates follow desired order, deletes follow current order,
so identical inputs always yield an identical ChangeSet.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Generic, Sequence, TypeVar

from adapters.types import ChangeSet, ResourceType
from ir.types import (
    IR,
    CustomFormatIR,
    DelayProfileIR,
    DownloadClientIR,
    IndexerIR,
    NotificationIR,
    RemotePathMappingIR,
)
from ir.serialize import SECRET_FIELDS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UpdatePolicy(Enum):
    """What to do when a resource exists on both sides."""

    ALWAYS_UPDATE = "always_update"
    SKIP_IF_BOTH_EXIST = "skip_if_both_exist"


def _by_name(resource) -> str:
    return resource.name


def _always(resource) -> bool:
    return True


@dataclass(frozen=True)
class CategoryDiff(Generic[T]):
    """
    Per-category instantiation of the diff algorithm.

    Attributes:
        resource_type: ResourceType emitted on every Change
        equal: Equality predicate; must ignore secrets and service IDs
        key: Reconciliation key (defaults to ``.name``)
        update_policy: ALWAYS_UPDATE or SKIP_IF_BOTH_EXIST
        allow_delete: False for categories that are never deleted
        deletable: Per-entry delete exemption
        skip_when_undeclared: Do not diff at all when desired is empty
    """

    resource_type: ResourceType
    equal: Callable[[T, T], bool]
    key: Callable[[T], str] = _by_name
    update_policy: UpdatePolicy = UpdatePolicy.ALWAYS_UPDATE
    allow_delete: bool = True
    deletable: Callable[[T], bool] = _always
    skip_when_undeclared: bool = False

    def diff(self, current: Sequence[T], desired: Sequence[T]) -> ChangeSet:
        return diff_resources(
            self.resource_type,
            current,
            desired,
            key=self.key,
            equal=self.equal,
            update_policy=self.update_policy,
            allow_delete=self.allow_delete,
            deletable=self.deletable,
            skip_when_undeclared=self.skip_when_undeclared,
        )


def _index(resources: Sequence[T], key: Callable[[T], str], side: str) -> Dict[str, T]:
    indexed: Dict[str, T] = {}
    for resource in resources:
        k = key(resource)
        if k in indexed:
            logger.warning(f"Duplicate {side} resource '{k}' ignored")
            continue
        indexed[k] = resource
    return indexed


def diff_resources(
    resource_type: ResourceType,
    current: Sequence[T],
    desired: Sequence[T],
    *,
    equal: Callable[[T, T], bool],
    key: Callable[[T], str] = _by_name,
    update_policy: UpdatePolicy = UpdatePolicy.ALWAYS_UPDATE,
    allow_delete: bool = True,
    deletable: Callable[[T], bool] = _always,
    skip_when_undeclared: bool = False,
) -> ChangeSet:
    """
    Compute creates/updates/deletes for one resource category.

    Args:
        resource_type: Category tag for every emitted Change
        current: Owned resources read back from the backend (with IDs)
        desired: Compiled and pruned resources (without IDs)
        equal: Equality predicate used to decide on updates
        key: Reconciliation key function
        update_policy: Whether "both exist" may emit an Update
        allow_delete: Whether this category ever emits Deletes
        deletable: Per-resource delete predicate
        skip_when_undeclared: Return nothing when ``desired`` is empty

    Returns:
        A ChangeSet for this category only
    """
    changes = ChangeSet()
    if skip_when_undeclared and not desired:
        return changes

    current_by_key = _index(current, key, "current")
    desired_by_key = _index(desired, key, "desired")

    for name, want in desired_by_key.items():
        have = current_by_key.get(name)
        if have is None:
            changes.add_create(resource_type, name, want)
        elif update_policy is UpdatePolicy.SKIP_IF_BOTH_EXIST:
            continue
        elif not equal(have, want):
            changes.add_update(resource_type, name, have.id, want)

    if allow_delete:
        for name, have in current_by_key.items():
            if name not in desired_by_key and deletable(have):
                changes.add_delete(resource_type, name, have.id, have)

    return changes


# ==================== Equality predicates ====================


def download_clients_equal(a: DownloadClientIR, b: DownloadClientIR) -> bool:
    """Compare download clients; the password is never compared."""
    return (
        a.name == b.name
        and a.implementation == b.implementation
        and a.host == b.host
        and a.port == b.port
        and a.use_tls == b.use_tls
        and a.category == b.category
        and a.enable == b.enable
        and a.priority == b.priority
    )


def _indexer_modes(idx: IndexerIR):
    """The search modes the backend ends up with; ``enable`` gates all three."""
    return (
        idx.enable and idx.enable_rss,
        idx.enable and idx.enable_automatic_search,
        idx.enable and idx.enable_interactive_search,
    )


def indexers_equal(a: IndexerIR, b: IndexerIR) -> bool:
    """Compare indexers; the API key is never compared."""
    return (
        a.name == b.name
        and a.implementation == b.implementation
        and a.url == b.url
        and a.priority == b.priority
        and _indexer_modes(a) == _indexer_modes(b)
    )


def custom_formats_equal(a: CustomFormatIR, b: CustomFormatIR) -> bool:
    if a.name != b.name or a.include_when_renaming != b.include_when_renaming:
        return False
    if len(a.specifications) != len(b.specifications):
        return False
    specs_b = {spec.name: spec for spec in b.specifications}
    for spec in a.specifications:
        other = specs_b.get(spec.name)
        if other is None:
            return False
        if (spec.type, spec.negate, spec.required, spec.value) != (
            other.type,
            other.negate,
            other.required,
            other.value,
        ):
            return False
    return True


def notifications_equal(a: NotificationIR, b: NotificationIR) -> bool:
    """
    Compare notifications.

    Only the fields declared on the desired side take part, and secret-looking
    ones never do; the backend fills in defaults for everything else.
    """

    def visible(fields):
        return {k: v for k, v in fields.items() if k not in SECRET_FIELDS}

    return (
        a.name == b.name
        and a.implementation == b.implementation
        and a.enabled == b.enabled
        and a.on_grab == b.on_grab
        and a.on_download == b.on_download
        and a.on_upgrade == b.on_upgrade
        and a.on_rename == b.on_rename
        and a.on_health_issue == b.on_health_issue
        and a.on_health_restored == b.on_health_restored
        and a.on_application_update == b.on_application_update
        and a.include_health_warnings == b.include_health_warnings
        and all(a.fields.get(k) == v for k, v in visible(b.fields).items())
    )


def delay_profiles_equal(a: DelayProfileIR, b: DelayProfileIR) -> bool:
    return (
        a.order == b.order
        and a.preferred_protocol == b.preferred_protocol
        and a.usenet_delay == b.usenet_delay
        and a.torrent_delay == b.torrent_delay
        and a.enable_usenet == b.enable_usenet
        and a.enable_torrent == b.enable_torrent
        and a.bypass_if_highest_quality == b.bypass_if_highest_quality
        and a.bypass_if_above_custom_format_score == b.bypass_if_above_custom_format_score
        and a.minimum_custom_format_score == b.minimum_custom_format_score
        and set(a.tags) == set(b.tags)
    )


def remote_path_mappings_equal(a: RemotePathMappingIR, b: RemotePathMappingIR) -> bool:
    return a.local_path == b.local_path


def _never_equal_needed(a, b) -> bool:
    return True


# ==================== Category table ====================

DEFAULT_DELAY_PROFILE_ORDER = 1
NAMING_CONFIG_ID = 1

QUALITY_PROFILES = CategoryDiff(
    ResourceType.QUALITY_PROFILE,
    equal=_never_equal_needed,
    update_policy=UpdatePolicy.SKIP_IF_BOTH_EXIST,
)
CUSTOM_FORMATS = CategoryDiff(ResourceType.CUSTOM_FORMAT, equal=custom_formats_equal)
DOWNLOAD_CLIENTS = CategoryDiff(ResourceType.DOWNLOAD_CLIENT, equal=download_clients_equal)
INDEXERS = CategoryDiff(ResourceType.INDEXER, equal=indexers_equal)
ROOT_FOLDERS = CategoryDiff(
    ResourceType.ROOT_FOLDER,
    equal=_never_equal_needed,
    key=lambda folder: folder.path,
    allow_delete=False,
    skip_when_undeclared=True,
)
REMOTE_PATH_MAPPINGS = CategoryDiff(
    ResourceType.REMOTE_PATH_MAPPING,
    equal=remote_path_mappings_equal,
    key=lambda m: f"{m.host}|{m.remote_path}",
    skip_when_undeclared=True,
)
NOTIFICATIONS = CategoryDiff(ResourceType.NOTIFICATION, equal=notifications_equal)
DELAY_PROFILES = CategoryDiff(
    ResourceType.DELAY_PROFILE,
    equal=delay_profiles_equal,
    key=lambda p: str(p.order),
    deletable=lambda p: p.order != DEFAULT_DELAY_PROFILE_ORDER,
    skip_when_undeclared=True,
)


def _quality_profiles(ir: IR) -> list:
    if ir.quality is None:
        return []
    return [profile for profile in (ir.quality.video, ir.quality.audio) if profile is not None]


def diff_naming(current: IR, desired: IR) -> ChangeSet:
    """
    Naming is a singleton: update it in place when it differs.

    An unknown current naming (nothing managed yet) also yields an update
    against the fixed singleton ID.
    """
    changes = ChangeSet()
    want = desired.naming.for_app(desired.app) if desired.naming else None
    if want is None:
        return changes
    have = current.naming.for_app(current.app) if current.naming else None
    if have is None:
        changes.add_update(ResourceType.NAMING_CONFIG, "naming", NAMING_CONFIG_ID, want)
    elif _without_id(have) != _without_id(want):
        resource_id = have.id if have.id is not None else NAMING_CONFIG_ID
        changes.add_update(ResourceType.NAMING_CONFIG, "naming", resource_id, want)
    return changes


def _without_id(resource):
    return replace(resource, id=None)


def diff_ir(current: IR, desired: IR) -> ChangeSet:
    """
    Diff every category of two IRs in a fixed order.

    Args:
        current: Owned state read back from the backend
        desired: Compiled and pruned desired state

    Returns:
        The combined ChangeSet
    """
    changes = ChangeSet()
    # Formats first: a new profile references format IDs by name
    changes.extend(CUSTOM_FORMATS.diff(current.all_custom_formats(), desired.all_custom_formats()))
    changes.extend(QUALITY_PROFILES.diff(_quality_profiles(current), _quality_profiles(desired)))
    changes.extend(DOWNLOAD_CLIENTS.diff(current.download_clients, desired.download_clients))
    changes.extend(INDEXERS.diff(current.indexers, desired.indexers))
    changes.extend(ROOT_FOLDERS.diff(current.root_folders, desired.root_folders))
    changes.extend(
        REMOTE_PATH_MAPPINGS.diff(current.remote_path_mappings, desired.remote_path_mappings)
    )
    changes.extend(diff_naming(current, desired))
    changes.extend(NOTIFICATIONS.diff(current.notifications, desired.notifications))
    changes.extend(DELAY_PROFILES.diff(current.delay_profiles, desired.delay_profiles))
    return changes


__all__ = [
    "NAMING_CONFIG_ID",
    "CategoryDiff",
    "UpdatePolicy",
    "diff_ir",
    "diff_naming",
    "diff_resources",
    "custom_formats_equal",
    "delay_profiles_equal",
    "download_clients_equal",
    "indexers_equal",
    "notifications_equal",
    "remote_path_mappings_equal",
]
