"""
Instance definitions - YAML files describing which backends to reconcile.

A definitions file looks like::

    instances:
      - name: movies
        app: radarr
        url: http://radarr:7878
        api_key: {env: RADARR_API_KEY}
        quality:
          preset: 1080p-quality
          exclude: [x265]
        naming:
          preset: plex-friendly
        download_clients:
          - name: qbit
            implementation: qbittorrent
            host: qbittorrent
            port: 8080
            password: {env: QBIT_PASSWORD}

Secrets may be inline strings or ``{env: NAME}`` references resolved from
the environment at load time.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import yaml

from compiler.intent import (
    AuthenticationInput,
    CompileInput,
    CustomFormatInput,
    CustomFormatSpecInput,
    DelayProfileInput,
    DownloadClientInput,
    ImportListInput,
    IndexerInput,
    MediaManagementInput,
    NotificationInput,
    RemotePathMappingInput,
)
from presets.overrides import QualityOverrides
from validation import validate_instances_document

logger = logging.getLogger(__name__)


class InstanceConfigError(ValueError):
    """An instance definitions file is unreadable, invalid or unresolvable."""


@dataclass(frozen=True)
class InstanceDefinition:
    """One named backend instance and its compile input."""

    name: str
    app: str
    intent: CompileInput

    @property
    def url(self) -> str:
        return self.intent.url


def resolve_secret(
    value: Any,
    environ: Optional[Mapping[str, str]] = None,
    prefix: str = "",
) -> str:
    """
    Resolve an inline secret or an ``{env: NAME}`` reference.

    Args:
        value: String, ``{"env": NAME}`` mapping, or None
        environ: Environment to read from (defaults to ``os.environ``)
        prefix: When set, referenced variable names must start with it

    Raises:
        InstanceConfigError: If the variable is unset or outside the prefix
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value

    env_name = value["env"]
    if prefix and not env_name.startswith(prefix):
        raise InstanceConfigError(
            f"Secret reference {env_name} does not start with allowed prefix {prefix}"
        )
    environ = os.environ if environ is None else environ
    if env_name not in environ:
        raise InstanceConfigError(f"Secret environment variable {env_name} is not set")
    return environ[env_name]


class _Builder:
    """Turns one validated instance mapping into a CompileInput."""

    def __init__(self, environ: Optional[Mapping[str, str]], prefix: str):
        self.environ = environ
        self.prefix = prefix

    def secret(self, value: Any) -> str:
        return resolve_secret(value, self.environ, self.prefix)

    def build(self, raw: Dict[str, Any]) -> InstanceDefinition:
        quality = raw.get("quality") or {}
        overrides = QualityOverrides(
            exclude=tuple(quality.get("exclude", ())),
            prefer_additional=tuple(quality.get("prefer_additional", ())),
            reject_additional=tuple(quality.get("reject_additional", ())),
        )

        intent = CompileInput(
            app=raw["app"],
            config_name=raw["name"],
            url=raw["url"],
            api_key=self.secret(raw.get("api_key")),
            insecure_skip_verify=raw.get("insecure_skip_verify", False),
            quality_preset=quality.get("preset", ""),
            quality_overrides=None if overrides.is_empty() else overrides,
            naming_preset=(raw.get("naming") or {}).get("preset", ""),
            download_clients=tuple(
                self.download_client(dc) for dc in raw.get("download_clients", ())
            ),
            remote_path_mappings=tuple(
                RemotePathMappingInput(**m) for m in raw.get("remote_path_mappings", ())
            ),
            indexers=tuple(self.indexer(idx) for idx in raw.get("indexers", ())),
            root_folders=tuple(raw.get("root_folders", ())),
            import_lists=tuple(
                ImportListInput(**{**il, "settings": dict(il.get("settings", {}))})
                for il in raw.get("import_lists", ())
            ),
            media_management=(
                MediaManagementInput(**raw["media_management"])
                if raw.get("media_management") is not None
                else None
            ),
            authentication=self.authentication(raw.get("authentication")),
            notifications=tuple(
                NotificationInput(**{**n, "fields": dict(n.get("fields", {}))})
                for n in raw.get("notifications", ())
            ),
            custom_formats=tuple(self.custom_format(cf) for cf in raw.get("custom_formats", ())),
            delay_profiles=tuple(
                DelayProfileInput(**{**p, "tags": tuple(p.get("tags", ()))})
                for p in raw.get("delay_profiles", ())
            ),
        )
        return InstanceDefinition(name=raw["name"], app=raw["app"], intent=intent)

    def download_client(self, raw: Dict[str, Any]) -> DownloadClientInput:
        return DownloadClientInput(**{**raw, "password": self.secret(raw.get("password"))})

    def indexer(self, raw: Dict[str, Any]) -> IndexerInput:
        return IndexerInput(
            **{
                **raw,
                "api_key": self.secret(raw.get("api_key")),
                "categories": tuple(raw.get("categories", ())),
            }
        )

    def authentication(self, raw: Optional[Dict[str, Any]]) -> Optional[AuthenticationInput]:
        if raw is None:
            return None
        return AuthenticationInput(**{**raw, "password": self.secret(raw.get("password"))})

    def custom_format(self, raw: Dict[str, Any]) -> CustomFormatInput:
        specs = tuple(
            CustomFormatSpecInput(**{**spec, "value": str(spec["value"])})
            for spec in raw.get("specifications", ())
        )
        return CustomFormatInput(**{**raw, "specifications": specs})


def parse_instances(
    document: Any,
    environ: Optional[Mapping[str, str]] = None,
    secrets_prefix: str = "",
) -> List[InstanceDefinition]:
    """
    Validate and convert a parsed definitions document.

    Raises:
        InstanceConfigError: If the document is invalid or a secret cannot be resolved
    """
    valid, error = validate_instances_document(document)
    if not valid:
        raise InstanceConfigError(f"Invalid instance definitions: {error}")

    builder = _Builder(environ, secrets_prefix)
    return [builder.build(raw) for raw in document["instances"]]


def load_instances(
    path: str,
    environ: Optional[Mapping[str, str]] = None,
    secrets_prefix: str = "",
) -> List[InstanceDefinition]:
    """
    Load instance definitions from a YAML file.

    Raises:
        InstanceConfigError: If the file cannot be read, parsed or validated
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise InstanceConfigError(f"Cannot read instance definitions {path}: {e}") from e
    except yaml.YAMLError as e:
        raise InstanceConfigError(f"Cannot parse instance definitions {path}: {e}") from e

    instances = parse_instances(document or {}, environ, secrets_prefix)
    logger.info(f"Loaded {len(instances)} instance definition(s) from {path}")
    return instances
