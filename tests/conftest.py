"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest

from compiler.intent import CompileInput, DownloadClientInput, IndexerInput
from instances import InstanceDefinition
from ir.types import ConnectionIR


@pytest.fixture
def connection():
    """Connection to a Radarr instance that is never actually contacted."""
    return ConnectionIR(url="http://radarr:7878", api_key="radarr-api-key")


@pytest.fixture
def fixed_now():
    return datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def radarr_intent():
    """Declared intent for a typical Radarr instance."""
    return CompileInput(
        app="radarr",
        config_name="movies",
        url="http://radarr:7878",
        api_key="radarr-api-key",
        quality_preset="1080p-quality",
        naming_preset="plex-friendly",
        download_clients=(
            DownloadClientInput(
                name="qbit",
                implementation="qbittorrent",
                host="qbittorrent",
                port=8080,
                username="admin",
                password="qbit-password",
                category="movies",
            ),
        ),
        indexers=(
            IndexerInput(
                name="nzbgeek",
                implementation="Newznab",
                url="https://api.nzbgeek.info",
                api_key="indexer-key",
                categories=(2000, 2040),
            ),
        ),
        root_folders=("/movies",),
    )


@pytest.fixture
def radarr_instance(radarr_intent):
    return InstanceDefinition(name="movies", app="radarr", intent=radarr_intent)


@pytest.fixture
def instances_document():
    """A parsed instance definitions file with one Radarr instance."""
    return {
        "instances": [
            {
                "name": "movies",
                "app": "radarr",
                "url": "http://radarr:7878",
                "api_key": {"env": "RADARR_API_KEY"},
                "quality": {"preset": "4k-hdr", "exclude": ["hdr10"]},
                "naming": {"preset": "jellyfin-friendly"},
                "download_clients": [
                    {
                        "name": "qbit",
                        "implementation": "qbittorrent",
                        "host": "qbittorrent",
                        "port": 8080,
                        "password": {"env": "QBIT_PASSWORD"},
                    }
                ],
                "root_folders": ["/movies"],
            }
        ]
    }
