"""Built-in quality and naming presets and their expansion into IR."""

from presets.audio import AUDIO_PRESETS, DEFAULT_AUDIO_PRESET, list_audio_presets
from presets.expander import PresetExpander
from presets.naming import DEFAULT_NAMING_PRESET, NAMING_PRESETS, list_naming_presets
from presets.overrides import QualityOverrides
from presets.video import DEFAULT_VIDEO_PRESET, VIDEO_PRESETS, list_video_presets

__all__ = [
    "AUDIO_PRESETS",
    "DEFAULT_AUDIO_PRESET",
    "DEFAULT_NAMING_PRESET",
    "DEFAULT_VIDEO_PRESET",
    "NAMING_PRESETS",
    "PresetExpander",
    "QualityOverrides",
    "VIDEO_PRESETS",
    "list_audio_presets",
    "list_naming_presets",
    "list_video_presets",
]
