"""
Intermediate Representation for *arr backend configuration.

Re-exports the IR document types so callers can ``from ir import IR``.
"""

from ir.serialize import canonical_json, ir_to_dict
from ir.types import (
    ALL_APPS,
    APP_LIDARR,
    APP_PROWLARR,
    APP_RADARR,
    APP_SONARR,
    AUDIO_APPS,
    HEALTH_ERROR,
    HEALTH_NOTICE,
    HEALTH_WARNING,
    IR,
    IR_VERSION,
    PROTOCOL_TORRENT,
    PROTOCOL_USENET,
    VIDEO_APPS,
    AudioQualityIR,
    AudioQualityTierIR,
    AuthenticationIR,
    ConnectionIR,
    CustomFormatIR,
    DelayProfileIR,
    DownloadClientIR,
    FormatSpecIR,
    HealthIssue,
    HealthStatus,
    ImportListIR,
    IndexerIR,
    LidarrNamingIR,
    MediaManagementIR,
    NamingIR,
    NotificationIR,
    QualityIR,
    RadarrNamingIR,
    RemotePathMappingIR,
    RootFolderIR,
    SonarrNamingIR,
    UnrealizedFeature,
    VideoQualityIR,
    VideoQualityTierIR,
    empty_ir,
)

__all__ = [
    "ALL_APPS",
    "APP_LIDARR",
    "APP_PROWLARR",
    "APP_RADARR",
    "APP_SONARR",
    "AUDIO_APPS",
    "HEALTH_ERROR",
    "HEALTH_NOTICE",
    "HEALTH_WARNING",
    "IR",
    "IR_VERSION",
    "PROTOCOL_TORRENT",
    "PROTOCOL_USENET",
    "VIDEO_APPS",
    "AudioQualityIR",
    "AudioQualityTierIR",
    "AuthenticationIR",
    "ConnectionIR",
    "CustomFormatIR",
    "DelayProfileIR",
    "DownloadClientIR",
    "FormatSpecIR",
    "HealthIssue",
    "HealthStatus",
    "ImportListIR",
    "IndexerIR",
    "LidarrNamingIR",
    "MediaManagementIR",
    "NamingIR",
    "NotificationIR",
    "QualityIR",
    "RadarrNamingIR",
    "RemotePathMappingIR",
    "RootFolderIR",
    "SonarrNamingIR",
    "UnrealizedFeature",
    "VideoQualityIR",
    "VideoQualityTierIR",
    "canonical_json",
    "empty_ir",
    "ir_to_dict",
]
