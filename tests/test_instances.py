"""Unit tests for loading instance definition files."""

import copy

import pytest

from instances import (
    InstanceConfigError,
    InstanceDefinition,
    load_instances,
    parse_instances,
    resolve_secret,
)

ENVIRON = {"RADARR_API_KEY": "radarr-key", "QBIT_PASSWORD": "qbit-pass"}


# ==================== resolve_secret tests ====================


class TestResolveSecret:
    def test_inline(self):
        assert resolve_secret("plain") == "plain"

    def test_none(self):
        assert resolve_secret(None) == ""

    def test_env_reference(self):
        assert resolve_secret({"env": "RADARR_API_KEY"}, ENVIRON) == "radarr-key"

    def test_missing_variable(self):
        with pytest.raises(InstanceConfigError, match="MISSING is not set"):
            resolve_secret({"env": "MISSING"}, ENVIRON)

    def test_prefix_enforced(self):
        with pytest.raises(InstanceConfigError, match="allowed prefix NEBULARR_"):
            resolve_secret({"env": "RADARR_API_KEY"}, ENVIRON, prefix="NEBULARR_")

    def test_prefix_allows_matching(self):
        environ = {"NEBULARR_KEY": "k"}
        assert resolve_secret({"env": "NEBULARR_KEY"}, environ, prefix="NEBULARR_") == "k"


# ==================== parse_instances tests ====================


class TestParseInstances:
    def test_builds_compile_input(self, instances_document):
        [instance] = parse_instances(instances_document, ENVIRON)
        assert isinstance(instance, InstanceDefinition)
        assert instance.name == "movies"
        assert instance.app == "radarr"
        assert instance.url == "http://radarr:7878"

        intent = instance.intent
        assert intent.config_name == "movies"
        assert intent.api_key == "radarr-key"
        assert intent.quality_preset == "4k-hdr"
        assert intent.quality_overrides.exclude == ("hdr10",)
        assert intent.naming_preset == "jellyfin-friendly"
        assert intent.root_folders == ("/movies",)

        [client] = intent.download_clients
        assert client.implementation == "qbittorrent"
        assert client.password == "qbit-pass"
        assert client.port == 8080

    def test_no_overrides_is_none(self, instances_document):
        document = copy.deepcopy(instances_document)
        document["instances"][0]["quality"] = {"preset": "1080p-quality"}
        [instance] = parse_instances(document, ENVIRON)
        assert instance.intent.quality_overrides is None

    def test_optional_sections(self, instances_document):
        document = copy.deepcopy(instances_document)
        raw = document["instances"][0]
        raw["indexers"] = [
            {
                "name": "nzbgeek",
                "implementation": "Newznab",
                "url": "https://api.nzbgeek.info",
                "api_key": "idx-key",
                "categories": [2000, 2040],
            }
        ]
        raw["custom_formats"] = [
            {
                "name": "x265",
                "score": -50,
                "specifications": [
                    {"name": "x265", "type": "ReleaseTitleSpecification", "value": "x265"}
                ],
            }
        ]
        raw["delay_profiles"] = [{"order": 2, "usenet_delay": 60, "tags": [3]}]
        raw["media_management"] = {"use_hardlinks": True}
        raw["authentication"] = {"method": "forms", "username": "admin", "password": "pw"}
        raw["import_lists"] = [
            {"name": "trending", "type": "TraktListImport", "settings": {"listName": "trending"}}
        ]

        [instance] = parse_instances(document, ENVIRON)
        intent = instance.intent
        assert intent.indexers[0].categories == (2000, 2040)
        assert intent.indexers[0].api_key == "idx-key"
        assert intent.custom_formats[0].score == -50
        assert intent.custom_formats[0].specifications[0].value == "x265"
        assert intent.delay_profiles[0].tags == (3,)
        assert intent.media_management.use_hardlinks is True
        assert intent.authentication.password == "pw"
        assert intent.import_lists[0].settings == {"listName": "trending"}

    def test_invalid_document(self):
        with pytest.raises(InstanceConfigError, match="Invalid instance definitions"):
            parse_instances({"instances": [{"name": "movies"}]}, ENVIRON)

    def test_unresolvable_secret(self, instances_document):
        with pytest.raises(InstanceConfigError, match="QBIT_PASSWORD"):
            parse_instances(instances_document, {"RADARR_API_KEY": "k"})


# ==================== load_instances tests ====================


class TestLoadInstances:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "instances.yaml"
        path.write_text(
            "instances:\n"
            "  - name: movies\n"
            "    app: radarr\n"
            "    url: http://radarr:7878\n"
            "    api_key: {env: RADARR_API_KEY}\n"
        )
        [instance] = load_instances(str(path), ENVIRON)
        assert instance.intent.api_key == "radarr-key"

    def test_missing_file(self, tmp_path):
        with pytest.raises(InstanceConfigError, match="Cannot read"):
            load_instances(str(tmp_path / "nope.yaml"))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "instances.yaml"
        path.write_text("instances: [\n")
        with pytest.raises(InstanceConfigError, match="Cannot parse"):
            load_instances(str(path))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "instances.yaml"
        path.write_text("")
        with pytest.raises(InstanceConfigError, match="'instances' is a required property"):
            load_instances(str(path))
