"""
Adapter-facing types: capabilities, change sets and apply results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from ir.types import (
    AudioQualityIR,
    CustomFormatIR,
    DelayProfileIR,
    DownloadClientIR,
    IndexerIR,
    LidarrNamingIR,
    NotificationIR,
    RadarrNamingIR,
    RemotePathMappingIR,
    RootFolderIR,
    SonarrNamingIR,
    VideoQualityIR,
)


@dataclass(frozen=True)
class ServiceInfo:
    """Result of a liveness/version probe."""

    version: str
    start_time: Optional[datetime] = None


@dataclass(frozen=True)
class CustomFormatSpecType:
    name: str
    implementation: str


@dataclass(frozen=True)
class Capabilities:
    """What a backend instance reported it supports, at discovery time."""

    discovered_at: Optional[datetime] = None
    resolutions: Tuple[str, ...] = ()
    sources: Tuple[str, ...] = ()
    custom_format_specs: Tuple[CustomFormatSpecType, ...] = ()
    audio_tiers: Tuple[str, ...] = ()
    download_client_types: Tuple[str, ...] = ()
    indexer_types: Tuple[str, ...] = ()


class ResourceType(Enum):
    """Resource categories that flow through a ChangeSet."""

    QUALITY_PROFILE = "QualityProfile"
    CUSTOM_FORMAT = "CustomFormat"
    DOWNLOAD_CLIENT = "DownloadClient"
    INDEXER = "Indexer"
    ROOT_FOLDER = "RootFolder"
    REMOTE_PATH_MAPPING = "RemotePathMapping"
    NAMING_CONFIG = "NamingConfig"
    NOTIFICATION = "Notification"
    DELAY_PROFILE = "DelayProfile"


class ChangeKind(Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


Payload = Union[
    VideoQualityIR,
    AudioQualityIR,
    CustomFormatIR,
    DownloadClientIR,
    IndexerIR,
    RootFolderIR,
    RemotePathMappingIR,
    RadarrNamingIR,
    SonarrNamingIR,
    LidarrNamingIR,
    NotificationIR,
    DelayProfileIR,
]

# The closed set of payload types accepted for each resource type
PAYLOAD_TYPES: Dict[ResourceType, Tuple[type, ...]] = {
    ResourceType.QUALITY_PROFILE: (VideoQualityIR, AudioQualityIR),
    ResourceType.CUSTOM_FORMAT: (CustomFormatIR,),
    ResourceType.DOWNLOAD_CLIENT: (DownloadClientIR,),
    ResourceType.INDEXER: (IndexerIR,),
    ResourceType.ROOT_FOLDER: (RootFolderIR,),
    ResourceType.REMOTE_PATH_MAPPING: (RemotePathMappingIR,),
    ResourceType.NAMING_CONFIG: (RadarrNamingIR, SonarrNamingIR, LidarrNamingIR),
    ResourceType.NOTIFICATION: (NotificationIR,),
    ResourceType.DELAY_PROFILE: (DelayProfileIR,),
}


@dataclass(frozen=True)
class Change:
    """
    One operation against a backend resource.

    ``payload`` must be an instance of one of the types registered for
    ``resource_type`` in PAYLOAD_TYPES; a mismatch raises TypeError at
    construction so adapters can dispatch on ``resource_type`` alone.
    """

    resource_type: ResourceType
    name: str
    payload: Payload
    id: Optional[int] = None

    def __post_init__(self):
        expected = PAYLOAD_TYPES[self.resource_type]
        if not isinstance(self.payload, expected):
            names = ", ".join(t.__name__ for t in expected)
            raise TypeError(
                f"{self.resource_type.value} change '{self.name}' needs a payload "
                f"of type {names}, got {type(self.payload).__name__}"
            )


@dataclass
class ChangeSet:
    """Creates, updates and deletes computed by the diff engine."""

    creates: List[Change] = field(default_factory=list)
    updates: List[Change] = field(default_factory=list)
    deletes: List[Change] = field(default_factory=list)

    def add_create(self, resource_type: ResourceType, name: str, payload: Payload) -> Change:
        change = Change(resource_type=resource_type, name=name, payload=payload)
        self.creates.append(change)
        return change

    def add_update(
        self, resource_type: ResourceType, name: str, resource_id: Optional[int], payload: Payload
    ) -> Change:
        if resource_id is None:
            raise ValueError(f"Update of {resource_type.value} '{name}' has no service ID")
        change = Change(resource_type=resource_type, name=name, payload=payload, id=resource_id)
        self.updates.append(change)
        return change

    def add_delete(
        self, resource_type: ResourceType, name: str, resource_id: Optional[int], payload: Payload
    ) -> Change:
        if resource_id is None:
            raise ValueError(f"Delete of {resource_type.value} '{name}' has no service ID")
        change = Change(resource_type=resource_type, name=name, payload=payload, id=resource_id)
        self.deletes.append(change)
        return change

    def extend(self, other: "ChangeSet") -> None:
        self.creates.extend(other.creates)
        self.updates.extend(other.updates)
        self.deletes.extend(other.deletes)

    def is_empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes)

    def total_changes(self) -> int:
        return len(self.creates) + len(self.updates) + len(self.deletes)

    def summary(self) -> str:
        return (
            f"{len(self.creates)} create(s), {len(self.updates)} update(s), "
            f"{len(self.deletes)} delete(s)"
        )


@dataclass
class ApplyError:
    """A failure tied to one Change (or to a direct-apply step when None)."""

    change: Optional[Change]
    error: Exception
    resource: str = ""

    def __str__(self) -> str:
        if self.change is None:
            return f"{self.resource}: {self.error}" if self.resource else str(self.error)
        return f"{self.change.resource_type.value} '{self.change.name}': {self.error}"


@dataclass
class ApplyResult:
    """Aggregate outcome of applying a ChangeSet."""

    applied: int = 0
    failed: int = 0
    skipped: int = 0
    errors: List[ApplyError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0 and not self.errors

    def record_failure(
        self, change: Optional[Change], error: Exception, resource: str = ""
    ) -> None:
        self.failed += 1
        self.errors.append(ApplyError(change=change, error=error, resource=resource))

    def merge(self, other: "ApplyResult") -> None:
        self.applied += other.applied
        self.failed += other.failed
        self.skipped += other.skipped
        self.errors.extend(other.errors)


@dataclass
class ImportListStats:
    """Counts reported by a direct import-list sync."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    errors: List[Exception] = field(default_factory=list)
