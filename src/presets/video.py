"""Built-in video quality presets for Radarr and Sonarr."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class QualityTier:
    """A resolution plus the release sources accepted at that resolution."""

    resolution: str
    sources: Tuple[str, ...]


@dataclass(frozen=True)
class VideoQualityPreset:
    name: str
    description: str
    tiers: Tuple[QualityTier, ...]
    upgrade_until: Optional[QualityTier] = None
    preferred_formats: Tuple[str, ...] = ()
    reject_formats: Tuple[str, ...] = ()


_ALL_DISC_AND_WEB = ("remux", "bluray", "webdl", "webrip")
_UNWANTED = ("cam", "telesync", "telecine", "workprint")

VIDEO_PRESETS: Dict[str, VideoQualityPreset] = {
    "4k-hdr": VideoQualityPreset(
        name="4k-hdr",
        description="4K with HDR, falls back to 1080p",
        tiers=(
            QualityTier("2160p", _ALL_DISC_AND_WEB),
            QualityTier("1080p", _ALL_DISC_AND_WEB),
        ),
        upgrade_until=QualityTier("2160p", ("remux",)),
        preferred_formats=("hdr10", "hdr10plus", "dolby-vision", "atmos", "truehd", "dts-x"),
        reject_formats=_UNWANTED + ("3d",),
    ),
    "4k-sdr": VideoQualityPreset(
        name="4k-sdr",
        description="4K without HDR requirement",
        tiers=(
            QualityTier("2160p", _ALL_DISC_AND_WEB),
            QualityTier("1080p", _ALL_DISC_AND_WEB),
        ),
        upgrade_until=QualityTier("2160p", ("remux",)),
        preferred_formats=("atmos", "truehd", "dts-x", "dts-hd"),
        reject_formats=_UNWANTED + ("3d",),
    ),
    "1080p-quality": VideoQualityPreset(
        name="1080p-quality",
        description="1080p bluray/remux preferred",
        tiers=(
            QualityTier("1080p", ("remux", "bluray")),
            QualityTier("1080p", ("webdl", "webrip")),
            QualityTier("720p", ("bluray", "webdl")),
        ),
        upgrade_until=QualityTier("1080p", ("remux",)),
        preferred_formats=("truehd", "dts-hd", "atmos"),
        reject_formats=_UNWANTED,
    ),
    "1080p-streaming": VideoQualityPreset(
        name="1080p-streaming",
        description="1080p web sources for smaller files",
        tiers=(
            QualityTier("1080p", ("webdl", "webrip")),
            QualityTier("1080p", ("hdtv",)),
            QualityTier("720p", ("webdl", "webrip")),
        ),
        upgrade_until=QualityTier("1080p", ("webdl",)),
        preferred_formats=("hevc", "aac"),
        reject_formats=_UNWANTED,
    ),
    "720p": VideoQualityPreset(
        name="720p",
        description="720p any source for limited storage/bandwidth",
        tiers=(
            QualityTier("720p", ("bluray", "webdl", "webrip", "hdtv")),
            QualityTier("480p", ("webdl", "dvd")),
        ),
        upgrade_until=QualityTier("720p", ("bluray",)),
        reject_formats=_UNWANTED,
    ),
    "balanced": VideoQualityPreset(
        name="balanced",
        description="1080p preferred, accepts 720p-4K (default)",
        tiers=(
            QualityTier("2160p", ("bluray", "webdl")),
            QualityTier("1080p", _ALL_DISC_AND_WEB),
            QualityTier("720p", ("bluray", "webdl")),
        ),
        upgrade_until=QualityTier("1080p", ("bluray",)),
        preferred_formats=("hdr10", "dolby-vision"),
        reject_formats=_UNWANTED,
    ),
    "any": VideoQualityPreset(
        name="any",
        description="Accept anything, upgrade when better",
        tiers=(
            QualityTier("2160p", _ALL_DISC_AND_WEB + ("hdtv",)),
            QualityTier("1080p", _ALL_DISC_AND_WEB + ("hdtv",)),
            QualityTier("720p", ("bluray", "webdl", "webrip", "hdtv")),
            QualityTier("480p", ("webdl", "webrip", "dvd", "sdtv")),
        ),
        upgrade_until=QualityTier("2160p", ("remux",)),
        reject_formats=("cam", "workprint"),
    ),
    "storage-optimized": VideoQualityPreset(
        name="storage-optimized",
        description="Balance quality vs file size",
        tiers=(
            QualityTier("1080p", ("webdl", "webrip")),
            QualityTier("720p", ("webdl", "webrip")),
        ),
        upgrade_until=QualityTier("1080p", ("webdl",)),
        preferred_formats=("hevc", "av1", "aac"),
        reject_formats=("remux", "truehd", "dts-hd", "cam", "telesync"),
    ),
}

DEFAULT_VIDEO_PRESET = "balanced"


def get_video_preset(name: str) -> Optional[VideoQualityPreset]:
    return VIDEO_PRESETS.get(name)


def list_video_presets() -> List[str]:
    return sorted(VIDEO_PRESETS)
