"""Canonical download client / indexer implementation names."""

from ir.types import PROTOCOL_TORRENT, PROTOCOL_USENET

_CANONICAL = {
    "qbittorrent": "QBittorrent",
    "transmission": "Transmission",
    "deluge": "Deluge",
    "rtorrent": "RTorrent",
    "sabnzbd": "Sabnzbd",
    "nzbget": "NzbGet",
}

_TORRENT = {"QBittorrent", "Transmission", "Deluge", "RTorrent", "Torznab"}
_USENET = {"Sabnzbd", "NzbGet", "Newznab"}


def normalize_implementation(implementation: str) -> str:
    """Map user-friendly names ("qbittorrent") to API names ("QBittorrent")."""
    return _CANONICAL.get(implementation.lower(), implementation)


def infer_protocol(implementation: str) -> str:
    """Protocol for a known implementation, or "" when it cannot be told."""
    canonical = normalize_implementation(implementation)
    if canonical in _TORRENT:
        return PROTOCOL_TORRENT
    if canonical in _USENET:
        return PROTOCOL_USENET
    return ""
