"""Built-in audio quality presets for Lidarr."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class AudioQualityPreset:
    name: str
    description: str
    tiers: Tuple[str, ...]
    upgrade_until: str
    preferred_formats: Tuple[str, ...] = ()
    reject_tiers: Tuple[str, ...] = ()


AUDIO_PRESETS: Dict[str, AudioQualityPreset] = {
    "lossless-hires": AudioQualityPreset(
        name="lossless-hires",
        description="24-bit lossless preferred for audiophiles",
        tiers=("lossless-hires", "lossless"),
        upgrade_until="lossless-hires",
        preferred_formats=("flac", "alac"),
        reject_tiers=("lossy-poor", "lossy-trash"),
    ),
    "lossless": AudioQualityPreset(
        name="lossless",
        description="16-bit lossless (FLAC, ALAC)",
        tiers=("lossless", "lossless-hires", "lossy-high"),
        upgrade_until="lossless",
        preferred_formats=("flac",),
        reject_tiers=("lossy-poor", "lossy-trash"),
    ),
    "high-quality": AudioQualityPreset(
        name="high-quality",
        description="320kbps lossy or lossless",
        tiers=("lossless", "lossy-high"),
        upgrade_until="lossless",
        preferred_formats=("flac", "mp3-320"),
        reject_tiers=("lossy-low", "lossy-poor", "lossy-trash"),
    ),
    "balanced": AudioQualityPreset(
        name="balanced",
        description="256kbps+ lossy or lossless (default)",
        tiers=("lossless", "lossy-high", "lossy-mid"),
        upgrade_until="lossy-high",
        reject_tiers=("lossy-poor", "lossy-trash"),
    ),
    "portable": AudioQualityPreset(
        name="portable",
        description="192-256kbps for mobile devices",
        tiers=("lossy-high", "lossy-mid", "lossy-low"),
        upgrade_until="lossy-high",
        preferred_formats=("aac", "mp3-320"),
        reject_tiers=("lossy-trash", "lossless-raw"),
    ),
    "any": AudioQualityPreset(
        name="any",
        description="Accept anything, upgrade when better",
        tiers=(
            "lossless-hires",
            "lossless",
            "lossy-high",
            "lossy-mid",
            "lossy-low",
            "lossy-poor",
        ),
        upgrade_until="lossless",
    ),
}

DEFAULT_AUDIO_PRESET = "balanced"

# Lidarr quality ids grouped by tier
AUDIO_TIER_DEFINITIONS: Dict[str, Tuple[int, ...]] = {
    "lossless-hires": (1001, 1002),
    "lossless": (1003, 1004, 1005, 1006),
    "lossy-high": (2001, 2002, 2003),
    "lossy-mid": (2004, 2005, 2006),
    "lossy-low": (2007, 2008),
    "lossy-poor": (2009, 2010),
    "lossy-trash": (2011, 2012),
    "lossless-raw": (1007,),
}


def get_audio_preset(name: str) -> Optional[AudioQualityPreset]:
    return AUDIO_PRESETS.get(name)


def list_audio_presets() -> List[str]:
    return sorted(AUDIO_PRESETS)
