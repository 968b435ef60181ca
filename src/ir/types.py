"""
Intermediate Representation - backend agnostic desired/current state.

The IR is the only structured document that crosses the reconciliation
core's boundary. Every type here is a frozen dataclass; sequences are
tuples so an IR value can be shared between the compiler, pruner and diff
engine without defensive copies. Use ``dataclasses.replace`` to derive a
new IR from an existing one.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple

IR_VERSION = "v1"

APP_RADARR = "radarr"
APP_SONARR = "sonarr"
APP_LIDARR = "lidarr"
APP_PROWLARR = "prowlarr"

VIDEO_APPS = (APP_RADARR, APP_SONARR)
AUDIO_APPS = (APP_LIDARR,)
ALL_APPS = (APP_RADARR, APP_SONARR, APP_LIDARR, APP_PROWLARR)

PROTOCOL_TORRENT = "torrent"
PROTOCOL_USENET = "usenet"


@dataclass(frozen=True)
class ConnectionIR:
    """How to reach one backend instance."""

    url: str
    api_key: str = field(default="", repr=False)
    insecure_skip_verify: bool = False


@dataclass(frozen=True)
class UnrealizedFeature:
    """A feature that was declared but cannot be realized on a backend."""

    feature: str
    reason: str


# ==================== Quality ====================


@dataclass(frozen=True)
class VideoQualityTierIR:
    resolution: str
    sources: Tuple[str, ...] = ()
    allowed: bool = True


@dataclass(frozen=True)
class FormatSpecIR:
    """One specification inside a custom format."""

    type: str
    name: str
    value: str
    negate: bool = False
    required: bool = False


@dataclass(frozen=True)
class CustomFormatIR:
    name: str
    include_when_renaming: bool = False
    specifications: Tuple[FormatSpecIR, ...] = ()
    id: Optional[int] = None


@dataclass(frozen=True)
class VideoQualityIR:
    profile_name: str
    upgrade_allowed: bool = True
    cutoff: Optional[VideoQualityTierIR] = None
    tiers: Tuple[VideoQualityTierIR, ...] = ()
    custom_formats: Tuple[CustomFormatIR, ...] = ()
    format_scores: Dict[str, int] = field(default_factory=dict)
    minimum_custom_format_score: int = 0
    upgrade_until_custom_format_score: int = 0
    id: Optional[int] = None

    @property
    def name(self) -> str:
        return self.profile_name


@dataclass(frozen=True)
class AudioQualityTierIR:
    tier: str
    allowed: bool = True


@dataclass(frozen=True)
class AudioQualityIR:
    profile_name: str
    upgrade_allowed: bool = True
    cutoff: str = ""
    tiers: Tuple[AudioQualityTierIR, ...] = ()
    format_scores: Dict[str, int] = field(default_factory=dict)
    id: Optional[int] = None

    @property
    def name(self) -> str:
        return self.profile_name


@dataclass(frozen=True)
class QualityIR:
    video: Optional[VideoQualityIR] = None
    audio: Optional[AudioQualityIR] = None


# ==================== Naming ====================


@dataclass(frozen=True)
class RadarrNamingIR:
    rename_movies: bool = True
    replace_illegal_characters: bool = True
    colon_replacement_format: int = 4
    standard_movie_format: str = ""
    movie_folder_format: str = ""
    id: Optional[int] = None


@dataclass(frozen=True)
class SonarrNamingIR:
    rename_episodes: bool = True
    replace_illegal_characters: bool = True
    colon_replacement_format: int = 4
    standard_episode_format: str = ""
    daily_episode_format: str = ""
    anime_episode_format: str = ""
    series_folder_format: str = ""
    season_folder_format: str = ""
    specials_folder_format: str = ""
    multi_episode_style: int = 5
    id: Optional[int] = None


@dataclass(frozen=True)
class LidarrNamingIR:
    rename_tracks: bool = True
    replace_illegal_characters: bool = True
    colon_replacement_format: int = 4
    standard_track_format: str = ""
    multi_disc_track_format: str = ""
    artist_folder_format: str = ""
    album_folder_format: str = ""
    id: Optional[int] = None


@dataclass(frozen=True)
class NamingIR:
    radarr: Optional[RadarrNamingIR] = None
    sonarr: Optional[SonarrNamingIR] = None
    lidarr: Optional[LidarrNamingIR] = None

    def for_app(self, app: str):
        """Return the naming block relevant to ``app`` (or None)."""
        return {
            APP_RADARR: self.radarr,
            APP_SONARR: self.sonarr,
            APP_LIDARR: self.lidarr,
        }.get(app)


# ==================== Resources ====================


@dataclass(frozen=True)
class DownloadClientIR:
    name: str
    implementation: str
    protocol: str = ""
    enable: bool = True
    priority: int = 1
    remove_completed_downloads: bool = True
    remove_failed_downloads: bool = True
    host: str = ""
    port: int = 0
    use_tls: bool = False
    username: str = ""
    password: str = field(default="", repr=False)
    category: str = ""
    directory: str = ""
    id: Optional[int] = None


@dataclass(frozen=True)
class IndexerIR:
    name: str
    implementation: str
    protocol: str = ""
    enable: bool = True
    priority: int = 25
    url: str = ""
    api_key: str = field(default="", repr=False)
    categories: Tuple[int, ...] = ()
    minimum_seeders: int = 0
    seed_ratio: Optional[float] = None
    seed_time_minutes: Optional[int] = None
    enable_rss: bool = True
    enable_automatic_search: bool = True
    enable_interactive_search: bool = True
    id: Optional[int] = None


@dataclass(frozen=True)
class RootFolderIR:
    path: str
    name: str = ""
    default_monitor: str = ""
    id: Optional[int] = None


@dataclass(frozen=True)
class RemotePathMappingIR:
    host: str
    remote_path: str
    local_path: str
    id: Optional[int] = None

    @property
    def name(self) -> str:
        return f"{self.remote_path} -> {self.local_path}"


@dataclass(frozen=True)
class ImportListIR:
    name: str
    type: str
    enabled: bool = True
    enable_auto: bool = True
    search_on_add: bool = True
    quality_profile_id: int = 0
    quality_profile_name: str = ""
    root_folder_path: str = ""
    monitor: str = ""
    minimum_availability: str = ""
    series_type: str = ""
    season_folder: bool = True
    should_monitor: str = ""
    settings: Dict[str, str] = field(default_factory=dict)
    id: Optional[int] = None


@dataclass(frozen=True)
class MediaManagementIR:
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
class AuthenticationIR:
    method: str = "forms"
    username: str = ""
    password: str = field(default="", repr=False)
    authentication_required: str = "enabled"


@dataclass(frozen=True)
class NotificationIR:
    name: str
    implementation: str
    config_contract: str = ""
    enabled: bool = True
    on_grab: bool = False
    on_download: bool = False
    on_upgrade: bool = False
    on_rename: bool = False
    on_health_issue: bool = False
    on_health_restored: bool = False
    on_application_update: bool = False
    include_health_warnings: bool = False
    fields: Dict[str, object] = field(default_factory=dict)
    tags: Tuple[int, ...] = ()
    id: Optional[int] = None


@dataclass(frozen=True)
class DelayProfileIR:
    name: str
    order: int
    preferred_protocol: str = PROTOCOL_USENET
    usenet_delay: int = 0
    torrent_delay: int = 0
    enable_usenet: bool = True
    enable_torrent: bool = True
    bypass_if_highest_quality: bool = False
    bypass_if_above_custom_format_score: bool = False
    minimum_custom_format_score: int = 0
    tags: Tuple[int, ...] = ()
    id: Optional[int] = None


# ==================== Health ====================

HEALTH_ERROR = "error"
HEALTH_WARNING = "warning"
HEALTH_NOTICE = "notice"


@dataclass(frozen=True)
class HealthIssue:
    source: str
    type: str
    message: str
    wiki_url: str = ""

    @property
    def key(self) -> str:
        """Stable identity used to de-duplicate issues across polls."""
        return f"{self.source}:{self.type}:{self.message}"


@dataclass(frozen=True)
class HealthStatus:
    healthy: bool = True
    issues: Tuple[HealthIssue, ...] = ()

    def has_errors(self) -> bool:
        return any(issue.type == HEALTH_ERROR for issue in self.issues)

    def has_warnings(self) -> bool:
        return any(issue.type == HEALTH_WARNING for issue in self.issues)


# ==================== Document ====================


@dataclass(frozen=True)
class IR:
    """
    One backend instance's configuration, desired or current.

    Current-state IRs carry service side ``id`` values on each record;
    desired IRs never do.
    """

    app: str
    connection: ConnectionIR
    version: str = IR_VERSION
    generated_at: Optional[datetime] = None
    source_hash: str = ""
    quality: Optional[QualityIR] = None
    naming: Optional[NamingIR] = None
    download_clients: Tuple[DownloadClientIR, ...] = ()
    remote_path_mappings: Tuple[RemotePathMappingIR, ...] = ()
    indexers: Tuple[IndexerIR, ...] = ()
    root_folders: Tuple[RootFolderIR, ...] = ()
    import_lists: Tuple[ImportListIR, ...] = ()
    media_management: Optional[MediaManagementIR] = None
    authentication: Optional[AuthenticationIR] = None
    notifications: Tuple[NotificationIR, ...] = ()
    custom_formats: Tuple[CustomFormatIR, ...] = ()
    delay_profiles: Tuple[DelayProfileIR, ...] = ()
    unrealized: Tuple[UnrealizedFeature, ...] = ()

    @property
    def video_quality(self) -> Optional[VideoQualityIR]:
        return self.quality.video if self.quality else None

    @property
    def audio_quality(self) -> Optional[AudioQualityIR]:
        return self.quality.audio if self.quality else None

    def all_custom_formats(self) -> Tuple[CustomFormatIR, ...]:
        """Preset-derived formats followed by user declared ones."""
        preset_formats = self.video_quality.custom_formats if self.video_quality else ()
        return tuple(preset_formats) + tuple(self.custom_formats)


def empty_ir(app: str, connection: ConnectionIR) -> IR:
    """An IR describing a backend with nothing managed on it."""
    return IR(app=app, connection=connection)
