"""Radarr (movies) adapter."""

from adapters.radarr.adapter import RadarrAdapter

__all__ = ["RadarrAdapter"]
