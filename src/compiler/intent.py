"""
Compile inputs - declared intent for one backend instance.

These are the user-facing shapes the compiler consumes. Secrets are
already resolved to plain values by the time they reach this layer, and
they are excluded from the source hash.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from presets.overrides import QualityOverrides


@dataclass(frozen=True)
class DownloadClientInput:
    name: str
    implementation: str
    host: str = ""
    port: int = 0
    use_tls: bool = False
    username: str = ""
    password: str = field(default="", repr=False)
    category: str = ""
    directory: str = ""
    priority: int = 1
    remove_completed_downloads: bool = True
    remove_failed_downloads: bool = True


@dataclass(frozen=True)
class RemotePathMappingInput:
    host: str
    remote_path: str
    local_path: str


@dataclass(frozen=True)
class IndexerInput:
    name: str
    implementation: str
    url: str = ""
    protocol: str = ""
    api_key: str = field(default="", repr=False)
    categories: Tuple[int, ...] = ()
    priority: int = 25
    minimum_seeders: int = 0
    seed_ratio: Optional[float] = None
    seed_time_minutes: Optional[int] = None
    enable_rss: bool = True
    enable_automatic_search: bool = True
    enable_interactive_search: bool = True


@dataclass(frozen=True)
class ImportListInput:
    name: str
    type: str
    enabled: bool = True
    enable_auto: bool = True
    search_on_add: bool = True
    quality_profile_name: str = ""
    root_folder_path: str = ""
    monitor: str = ""
    minimum_availability: str = ""
    series_type: str = ""
    season_folder: bool = True
    should_monitor: str = ""
    settings: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MediaManagementInput:
    recycle_bin: Optional[str] = None
    recycle_bin_cleanup_days: Optional[int] = None
    set_permissions: Optional[bool] = None
    chmod_folder: Optional[str] = None
    chown_group: Optional[str] = None
    delete_empty_folders: Optional[bool] = None
    create_empty_folders: Optional[bool] = None
    use_hardlinks: Optional[bool] = None
    watch_library_for_changes: Optional[bool] = None
    allow_fingerprinting: Optional[str] = None


@dataclass(frozen=True)
class AuthenticationInput:
    method: str = "forms"
    username: str = ""
    password: str = field(default="", repr=False)
    authentication_required: str = "enabled"


@dataclass(frozen=True)
class NotificationInput:
    name: str
    implementation: str
    on_grab: bool = False
    on_download: bool = False
    on_upgrade: bool = False
    on_rename: bool = False
    on_health_issue: bool = False
    on_health_restored: bool = False
    on_application_update: bool = False
    include_health_warnings: bool = False
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CustomFormatSpecInput:
    name: str
    type: str
    value: str
    negate: bool = False
    required: bool = False


@dataclass(frozen=True)
class CustomFormatInput:
    name: str
    score: int = 0
    include_when_renaming: bool = False
    specifications: Tuple[CustomFormatSpecInput, ...] = ()


@dataclass(frozen=True)
class DelayProfileInput:
    name: str = ""
    order: int = 0
    preferred_protocol: str = ""
    usenet_delay: int = 0
    torrent_delay: int = 0
    enable_usenet: bool = True
    enable_torrent: bool = True
    bypass_if_highest_quality: bool = False
    bypass_if_above_custom_format_score: bool = False
    minimum_custom_format_score: int = 0
    tags: Tuple[int, ...] = ()


@dataclass(frozen=True)
class CompileInput:
    """Everything declared for one backend instance."""

    app: str
    config_name: str
    url: str
    api_key: str = field(default="", repr=False)
    insecure_skip_verify: bool = False
    quality_preset: str = ""
    quality_overrides: Optional[QualityOverrides] = None
    naming_preset: str = ""
    download_clients: Tuple[DownloadClientInput, ...] = ()
    remote_path_mappings: Tuple[RemotePathMappingInput, ...] = ()
    indexers: Tuple[IndexerInput, ...] = ()
    root_folders: Tuple[str, ...] = ()
    import_lists: Tuple[ImportListInput, ...] = ()
    media_management: Optional[MediaManagementInput] = None
    authentication: Optional[AuthenticationInput] = None
    notifications: Tuple[NotificationInput, ...] = ()
    custom_formats: Tuple[CustomFormatInput, ...] = ()
    delay_profiles: Tuple[DelayProfileInput, ...] = ()
