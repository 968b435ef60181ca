"""
Naming presets.

A naming preset is a name ("plex-friendly", "scene", ...) that expands to
a different set of file/folder format strings for each backend family.
Unknown names fall back to the default preset.
"""

from typing import Dict, List

from ir.types import LidarrNamingIR, RadarrNamingIR, SonarrNamingIR

NAMING_PRESETS: Dict[str, str] = {
    "plex-friendly": "Optimized for Plex metadata matching",
    "jellyfin-friendly": "Optimized for Jellyfin",
    "kodi-friendly": "Optimized for Kodi",
    "detailed": "Maximum info in filename",
    "minimal": "Clean, simple names",
    "scene": "Scene-style naming",
}

DEFAULT_NAMING_PRESET = "plex-friendly"

COLON_DELETE = 0
COLON_DASH = 1
COLON_SPACE = 2
COLON_SMART = 4

MULTI_EPISODE_EXTEND = 0
MULTI_EPISODE_SCENE = 3
MULTI_EPISODE_PREFIXED_RANGE = 5

_MEDIA_SERVER_PRESETS = ("plex-friendly", "jellyfin-friendly", "kodi-friendly")

_RADARR_FOLDER = "{Movie CleanTitle} ({Release Year})"

_RADARR: Dict[str, RadarrNamingIR] = {
    "media-server": RadarrNamingIR(
        colon_replacement_format=COLON_SMART,
        standard_movie_format="{Movie CleanTitle} ({Release Year}) - {Quality Full}",
        movie_folder_format=_RADARR_FOLDER,
    ),
    "detailed": RadarrNamingIR(
        colon_replacement_format=COLON_SMART,
        standard_movie_format=(
            "{Movie CleanTitle} ({Release Year}) [{Quality Full}]"
            "{[MediaInfo AudioCodec]}{[MediaInfo AudioChannels]}"
            "{[MediaInfo VideoCodec]}{[MediaInfo VideoDynamicRange]}{-Release Group}"
        ),
        movie_folder_format=_RADARR_FOLDER,
    ),
    "minimal": RadarrNamingIR(
        colon_replacement_format=COLON_DELETE,
        standard_movie_format="{Movie CleanTitle} ({Release Year})",
        movie_folder_format=_RADARR_FOLDER,
    ),
    "scene": RadarrNamingIR(
        colon_replacement_format=COLON_DELETE,
        standard_movie_format="{Movie.CleanTitle}.{Release Year}.{Quality.Full}-{Release Group}",
        movie_folder_format=_RADARR_FOLDER,
    ),
}

_SONARR_FOLDERS = dict(
    series_folder_format="{Series Title}",
    season_folder_format="Season {season:00}",
    specials_folder_format="Specials",
)

_SONARR: Dict[str, SonarrNamingIR] = {
    "media-server": SonarrNamingIR(
        colon_replacement_format=COLON_SMART,
        standard_episode_format=(
            "{Series Title} - S{season:00}E{episode:00} - {Episode Title} {Quality Full}"
        ),
        daily_episode_format="{Series Title} - {Air-Date} - {Episode Title} {Quality Full}",
        anime_episode_format=(
            "{Series Title} - S{season:00}E{episode:00} - {Episode Title} {Quality Full}"
        ),
        multi_episode_style=MULTI_EPISODE_PREFIXED_RANGE,
        **_SONARR_FOLDERS,
    ),
    "detailed": SonarrNamingIR(
        colon_replacement_format=COLON_SMART,
        standard_episode_format=(
            "{Series Title} - S{season:00}E{episode:00} - {Episode Title} [{Quality Full}]"
            "{[MediaInfo AudioCodec]}{[MediaInfo VideoCodec]}{-Release Group}"
        ),
        daily_episode_format=(
            "{Series Title} - {Air-Date} - {Episode Title} [{Quality Full}]{-Release Group}"
        ),
        anime_episode_format=(
            "{Series Title} - S{season:00}E{episode:00} - {absolute:000} - "
            "{Episode Title} [{Quality Full}]{-Release Group}"
        ),
        multi_episode_style=MULTI_EPISODE_PREFIXED_RANGE,
        **_SONARR_FOLDERS,
    ),
    "minimal": SonarrNamingIR(
        colon_replacement_format=COLON_DELETE,
        standard_episode_format="{Series Title} - S{season:00}E{episode:00} - {Episode Title}",
        daily_episode_format="{Series Title} - {Air-Date} - {Episode Title}",
        anime_episode_format="{Series Title} - S{season:00}E{episode:00} - {Episode Title}",
        multi_episode_style=MULTI_EPISODE_EXTEND,
        **_SONARR_FOLDERS,
    ),
    "scene": SonarrNamingIR(
        colon_replacement_format=COLON_DELETE,
        standard_episode_format=(
            "{Series.Title}.S{season:00}E{episode:00}.{Episode.Title}.{Quality.Full}-{Release Group}"
        ),
        daily_episode_format=(
            "{Series.Title}.{Air.Date}.{Episode.Title}.{Quality.Full}-{Release Group}"
        ),
        anime_episode_format=(
            "{Series.Title}.S{season:00}E{episode:00}.{Episode.Title}.{Quality.Full}-{Release Group}"
        ),
        multi_episode_style=MULTI_EPISODE_SCENE,
        **_SONARR_FOLDERS,
    ),
}

# Lidarr has no scene preset; it falls back to the default like any unknown name
_LIDARR: Dict[str, LidarrNamingIR] = {
    "media-server": LidarrNamingIR(
        colon_replacement_format=COLON_SMART,
        standard_track_format="{Album Artist} - {Album Title} - {track:00} - {Track Title}",
        multi_disc_track_format=(
            "{Album Artist} - {Album Title} - {medium:0}{track:00} - {Track Title}"
        ),
        artist_folder_format="{Artist Name}",
        album_folder_format="{Album Title} ({Release Year})",
    ),
    "detailed": LidarrNamingIR(
        colon_replacement_format=COLON_SMART,
        standard_track_format=(
            "{Album Artist} - {Album Title} - {track:00} - {Track Title} [{Quality Full}]"
        ),
        multi_disc_track_format=(
            "{Album Artist} - {Album Title} - {medium:0}{track:00} - "
            "{Track Title} [{Quality Full}]"
        ),
        artist_folder_format="{Artist Name}",
        album_folder_format="{Album Title} ({Release Year}) [{Quality Full}]",
    ),
    "minimal": LidarrNamingIR(
        colon_replacement_format=COLON_DELETE,
        standard_track_format="{track:00} - {Track Title}",
        multi_disc_track_format="{medium:0}{track:00} - {Track Title}",
        artist_folder_format="{Artist Name}",
        album_folder_format="{Album Title}",
    ),
}


def _variant(preset_name: str, table: Dict[str, object]):
    if preset_name in _MEDIA_SERVER_PRESETS:
        return table["media-server"]
    return table.get(preset_name, table["media-server"])


def radarr_naming(preset_name: str) -> RadarrNamingIR:
    return _variant(preset_name, _RADARR)


def sonarr_naming(preset_name: str) -> SonarrNamingIR:
    return _variant(preset_name, _SONARR)


def lidarr_naming(preset_name: str) -> LidarrNamingIR:
    return _variant(preset_name, _LIDARR)


def list_naming_presets() -> List[str]:
    return sorted(NAMING_PRESETS)
