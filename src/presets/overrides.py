"""User overrides layered on top of a quality preset."""

from dataclasses import dataclass, replace
from typing import Iterable, Tuple

from presets.audio import AudioQualityPreset
from presets.video import VideoQualityPreset


@dataclass(frozen=True)
class QualityOverrides:
    """
    Modifications to a preset's format lists.

    Entries in ``exclude`` are removed from both the preferred and the
    rejected lists before the ``*_additional`` entries are appended.
    """

    exclude: Tuple[str, ...] = ()
    prefer_additional: Tuple[str, ...] = ()
    reject_additional: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.exclude or self.prefer_additional or self.reject_additional)


def _remove_items(items: Iterable[str], to_remove: Iterable[str]) -> Tuple[str, ...]:
    removed = set(to_remove)
    return tuple(item for item in items if item not in removed)


def apply_video_overrides(
    preset: VideoQualityPreset, overrides: QualityOverrides
) -> VideoQualityPreset:
    return replace(
        preset,
        preferred_formats=_remove_items(preset.preferred_formats, overrides.exclude)
        + tuple(overrides.prefer_additional),
        reject_formats=_remove_items(preset.reject_formats, overrides.exclude)
        + tuple(overrides.reject_additional),
    )


def apply_audio_overrides(
    preset: AudioQualityPreset, overrides: QualityOverrides
) -> AudioQualityPreset:
    # For audio presets "reject" means rejected tiers, not formats
    return replace(
        preset,
        preferred_formats=_remove_items(preset.preferred_formats, overrides.exclude)
        + tuple(overrides.prefer_additional),
        reject_tiers=_remove_items(preset.reject_tiers, overrides.exclude)
        + tuple(overrides.reject_additional),
    )
