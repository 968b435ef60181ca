"""
Preset Expander - turns preset names into IR fragments.

Pure functions of their inputs; no I/O. Unknown preset names fall back to
the family default rather than failing, so a typo degrades to sane defaults.
"""

import logging
from typing import Dict, List, Optional

from ir.types import (
    APP_LIDARR,
    APP_RADARR,
    APP_SONARR,
    AudioQualityIR,
    AudioQualityTierIR,
    CustomFormatIR,
    NamingIR,
    VideoQualityIR,
    VideoQualityTierIR,
)
from presets.audio import AUDIO_PRESETS, DEFAULT_AUDIO_PRESET
from presets.formats import PREFERRED_SCORE, REJECTED_SCORE, format_to_custom_format
from presets.naming import lidarr_naming, radarr_naming, sonarr_naming
from presets.overrides import (
    QualityOverrides,
    apply_audio_overrides,
    apply_video_overrides,
)
from presets.video import DEFAULT_VIDEO_PRESET, VIDEO_PRESETS

logger = logging.getLogger(__name__)


class PresetExpander:
    """Expands quality and naming presets into IR values."""

    def expand_video(
        self,
        preset_name: str,
        profile_name: str,
        overrides: Optional[QualityOverrides] = None,
    ) -> VideoQualityIR:
        """
        Expand a video preset (optionally with overrides).

        Preferred formats become "Prefer: X" custom formats scored +100,
        rejected formats become "Reject: X" scored -10000. Formats without
        a known pattern are skipped.

        Args:
            preset_name: Name of a video preset, e.g. "4k-hdr"
            profile_name: Quality profile name to emit
            overrides: Optional exclude/prefer/reject adjustments

        Returns:
            A VideoQualityIR with every tier allowed
        """
        preset = VIDEO_PRESETS.get(preset_name)
        if preset is None:
            logger.info(
                f"Unknown video preset '{preset_name}', using '{DEFAULT_VIDEO_PRESET}'"
            )
            preset = VIDEO_PRESETS[DEFAULT_VIDEO_PRESET]

        if overrides is not None:
            preset = apply_video_overrides(preset, overrides)

        tiers = tuple(
            VideoQualityTierIR(resolution=t.resolution, sources=t.sources, allowed=True)
            for t in preset.tiers
        )
        cutoff = None
        if preset.upgrade_until is not None:
            cutoff = VideoQualityTierIR(
                resolution=preset.upgrade_until.resolution,
                sources=preset.upgrade_until.sources,
                allowed=True,
            )

        custom_formats: List[CustomFormatIR] = []
        scores: Dict[str, int] = {}
        for fmt in preset.preferred_formats:
            cf = format_to_custom_format(fmt, reject=False)
            if cf is not None:
                custom_formats.append(cf)
                scores[cf.name] = PREFERRED_SCORE
        for fmt in preset.reject_formats:
            cf = format_to_custom_format(fmt, reject=True)
            if cf is not None:
                custom_formats.append(cf)
                scores[cf.name] = REJECTED_SCORE

        return VideoQualityIR(
            profile_name=profile_name,
            upgrade_allowed=True,
            cutoff=cutoff,
            tiers=tiers,
            custom_formats=tuple(custom_formats),
            format_scores=scores,
        )

    def expand_audio(
        self,
        preset_name: str,
        profile_name: str,
        overrides: Optional[QualityOverrides] = None,
    ) -> AudioQualityIR:
        """Expand an audio preset; tiers listed in reject_tiers are disallowed."""
        preset = AUDIO_PRESETS.get(preset_name)
        if preset is None:
            logger.info(
                f"Unknown audio preset '{preset_name}', using '{DEFAULT_AUDIO_PRESET}'"
            )
            preset = AUDIO_PRESETS[DEFAULT_AUDIO_PRESET]

        if overrides is not None:
            preset = apply_audio_overrides(preset, overrides)

        rejected = set(preset.reject_tiers)
        return AudioQualityIR(
            profile_name=profile_name,
            upgrade_allowed=True,
            cutoff=preset.upgrade_until,
            tiers=tuple(
                AudioQualityTierIR(tier=tier, allowed=tier not in rejected)
                for tier in preset.tiers
            ),
        )

    def expand_naming(self, app: str, preset_name: str) -> Optional[NamingIR]:
        if app == APP_RADARR:
            return NamingIR(radarr=radarr_naming(preset_name))
        if app == APP_SONARR:
            return NamingIR(sonarr=sonarr_naming(preset_name))
        if app == APP_LIDARR:
            return NamingIR(lidarr=lidarr_naming(preset_name))
        return None
