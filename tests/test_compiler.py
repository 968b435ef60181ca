"""Unit tests for the compiler."""

import re
from dataclasses import replace

import pytest

from adapters.types import Capabilities
from compiler import Compiler, profile_name, resource_name, source_hash
from compiler.implementations import infer_protocol, normalize_implementation
from compiler.intent import (
    CompileInput,
    CustomFormatInput,
    CustomFormatSpecInput,
    DelayProfileInput,
    DownloadClientInput,
    IndexerInput,
    NotificationInput,
)
from ir.types import PROTOCOL_TORRENT, PROTOCOL_USENET


@pytest.fixture
def compiler():
    return Compiler()


# ==================== Naming tests ====================


class TestResourceNames:
    def test_profile_name(self):
        assert profile_name("movies") == "nebularr-movies"

    def test_resource_name(self):
        assert resource_name("movies", "qbit") == "nebularr-movies-qbit"


class TestImplementations:
    @pytest.mark.parametrize(
        "declared,canonical",
        [
            ("qbittorrent", "QBittorrent"),
            ("QBITTORRENT", "QBittorrent"),
            ("sabnzbd", "Sabnzbd"),
            ("nzbget", "NzbGet"),
            ("Aria2", "Aria2"),
        ],
    )
    def test_normalize(self, declared, canonical):
        assert normalize_implementation(declared) == canonical

    def test_infer_protocol(self):
        assert infer_protocol("qbittorrent") == PROTOCOL_TORRENT
        assert infer_protocol("Newznab") == PROTOCOL_USENET
        assert infer_protocol("Something") == ""


# ==================== Compile tests ====================


class TestCompile:
    def test_connection(self, compiler, radarr_intent):
        ir = compiler.compile(radarr_intent)
        assert ir.app == "radarr"
        assert ir.connection.url == "http://radarr:7878"
        assert ir.connection.api_key == "radarr-api-key"

    def test_quality_profile(self, compiler, radarr_intent):
        ir = compiler.compile(radarr_intent)
        assert ir.video_quality.profile_name == "nebularr-movies"
        assert ir.audio_quality is None

    def test_download_client(self, compiler, radarr_intent):
        ir = compiler.compile(radarr_intent)
        (dc,) = ir.download_clients
        assert dc.name == "nebularr-movies-qbit"
        assert dc.implementation == "QBittorrent"
        assert dc.protocol == PROTOCOL_TORRENT
        assert dc.password == "qbit-password"
        assert dc.id is None

    def test_indexer(self, compiler, radarr_intent):
        ir = compiler.compile(radarr_intent)
        (idx,) = ir.indexers
        assert idx.name == "nebularr-movies-nzbgeek"
        assert idx.protocol == PROTOCOL_USENET
        assert idx.categories == (2000, 2040)
        assert idx.enable

    def test_indexer_with_every_mode_off_is_disabled(self, compiler, radarr_intent):
        intent = replace(
            radarr_intent,
            indexers=(
                IndexerInput(
                    name="nzb",
                    implementation="Newznab",
                    enable_rss=False,
                    enable_automatic_search=False,
                    enable_interactive_search=False,
                ),
            ),
        )
        (idx,) = compiler.compile(intent).indexers
        assert not idx.enable

    def test_root_folders_keep_path(self, compiler, radarr_intent):
        ir = compiler.compile(radarr_intent)
        assert [f.path for f in ir.root_folders] == ["/movies"]

    def test_naming(self, compiler, radarr_intent):
        ir = compiler.compile(radarr_intent)
        assert ir.naming.radarr is not None

    def test_generated_at(self, compiler, radarr_intent, fixed_now):
        ir = compiler.compile(radarr_intent, now=fixed_now)
        assert ir.generated_at == fixed_now

    def test_lidarr_gets_audio_profile(self, compiler):
        intent = CompileInput(app="lidarr", config_name="music", url="http://lidarr:8686")
        ir = compiler.compile(intent)
        assert ir.video_quality is None
        assert ir.audio_quality.profile_name == "nebularr-music"
        assert ir.naming.lidarr is not None

    def test_lidarr_format_scores(self, compiler):
        intent = CompileInput(
            app="lidarr",
            config_name="music",
            url="http://lidarr:8686",
            custom_formats=(CustomFormatInput(name="flac", score=100),),
        )
        ir = compiler.compile(intent)
        assert [cf.name for cf in ir.custom_formats] == ["nebularr-music-flac"]
        assert ir.audio_quality.format_scores == {"nebularr-music-flac": 100}

    def test_prowlarr_has_no_quality_or_naming(self, compiler):
        intent = CompileInput(
            app="prowlarr",
            config_name="idx",
            url="http://prowlarr:9696",
            custom_formats=(CustomFormatInput(name="ignored"),),
        )
        ir = compiler.compile(intent)
        assert ir.quality is None
        assert ir.naming is None
        assert ir.custom_formats == ()

    def test_user_custom_format(self, compiler, radarr_intent):
        intent = replace(
            radarr_intent,
            custom_formats=(
                CustomFormatInput(
                    name="no-x265",
                    score=-500,
                    specifications=(
                        CustomFormatSpecInput(
                            name="x265", type="ReleaseTitleSpecification", value=r"\bx265\b"
                        ),
                    ),
                ),
                CustomFormatInput(name="unscored"),
            ),
        )
        ir = compiler.compile(intent)
        assert [cf.name for cf in ir.custom_formats] == [
            "nebularr-movies-no-x265",
            "nebularr-movies-unscored",
        ]
        scores = ir.video_quality.format_scores
        assert scores["nebularr-movies-no-x265"] == -500
        assert "nebularr-movies-unscored" not in scores
        # Preset scores survive the merge
        assert scores["Reject: cam"] == -10000

    def test_all_custom_formats_puts_presets_first(self, compiler, radarr_intent):
        intent = replace(radarr_intent, custom_formats=(CustomFormatInput(name="mine"),))
        ir = compiler.compile(intent)
        names = [cf.name for cf in ir.all_custom_formats()]
        assert names[-1] == "nebularr-movies-mine"
        assert names[0].startswith(("Prefer: ", "Reject: "))

    def test_delay_profile_order_defaults_to_position(self, compiler, radarr_intent):
        intent = replace(
            radarr_intent,
            delay_profiles=(
                DelayProfileInput(usenet_delay=60),
                DelayProfileInput(order=5, preferred_protocol="torrent"),
            ),
        )
        ir = compiler.compile(intent)
        first, second = ir.delay_profiles
        assert first.order == 1
        assert first.name == "delay-1"
        assert first.preferred_protocol == PROTOCOL_USENET
        assert second.order == 5
        assert second.preferred_protocol == PROTOCOL_TORRENT

    def test_notification(self, compiler, radarr_intent):
        intent = replace(
            radarr_intent,
            notifications=(
                NotificationInput(
                    name="discord",
                    implementation="Discord",
                    on_grab=True,
                    fields={"webHookUrl": "https://discord.example/hook"},
                ),
            ),
        )
        (n,) = compiler.compile(intent).notifications
        assert n.name == "nebularr-movies-discord"
        assert n.config_contract == "DiscordSettings"
        assert n.on_grab is True

    def test_no_pruning_without_capabilities(self, compiler, radarr_intent):
        ir = compiler.compile(radarr_intent)
        assert ir.unrealized == ()

    def test_pruning_with_capabilities(self, compiler, radarr_intent):
        caps = Capabilities(
            resolutions=("1080p",),
            download_client_types=("Transmission",),
        )
        ir = compiler.compile(radarr_intent, caps)
        assert {t.resolution for t in ir.video_quality.tiers} == {"1080p"}
        assert ir.download_clients == ()
        features = [u.feature for u in ir.unrealized]
        assert "resolution:720p" in features
        assert "downloadclient:QBittorrent" in features


# ==================== Source hash tests ====================


class TestSourceHash:
    def test_format(self, radarr_intent):
        assert re.fullmatch(r"[0-9a-f]{16}", source_hash(radarr_intent))

    def test_deterministic(self, compiler, radarr_intent, fixed_now):
        first = compiler.compile(radarr_intent, now=fixed_now)
        second = compiler.compile(radarr_intent)
        assert first.source_hash == second.source_hash

    def test_ignores_secrets(self, radarr_intent):
        rotated = replace(
            radarr_intent,
            api_key="another-key",
            download_clients=(
                replace(radarr_intent.download_clients[0], password="rotated"),
            ),
            indexers=(replace(radarr_intent.indexers[0], api_key="rotated"),),
        )
        assert source_hash(rotated) == source_hash(radarr_intent)

    def test_ignores_connection(self, radarr_intent):
        moved = replace(radarr_intent, url="http://radarr.internal:7878")
        assert source_hash(moved) == source_hash(radarr_intent)

    def test_changes_with_preset(self, radarr_intent):
        changed = replace(radarr_intent, quality_preset="4k-hdr")
        assert source_hash(changed) != source_hash(radarr_intent)

    def test_changes_with_download_client(self, radarr_intent):
        changed = replace(
            radarr_intent,
            download_clients=radarr_intent.download_clients
            + (DownloadClientInput(name="sab", implementation="sabnzbd"),),
        )
        assert source_hash(changed) != source_hash(radarr_intent)

    def test_hash_unaffected_by_pruning(self, compiler, radarr_intent):
        caps = Capabilities(resolutions=("1080p",))
        assert compiler.compile(radarr_intent, caps).source_hash == source_hash(radarr_intent)
