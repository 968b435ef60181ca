"""
Compiler - turns declared intent into an IR document.

Compilation is a pure transformation with no network I/O. Generated
resource names embed the config name so the same backend can be shared by
several configs without collisions:

    profile level:  nebularr-{config}
    item level:     nebularr-{config}-{item}
"""

import hashlib
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from adapters.types import Capabilities
from compiler.implementations import infer_protocol, normalize_implementation
from compiler.intent import (
    CompileInput,
    CustomFormatInput,
    DelayProfileInput,
    DownloadClientInput,
    ImportListInput,
    IndexerInput,
    NotificationInput,
)
from compiler.pruner import prune
from ir.serialize import canonical_json, strip_secrets, to_plain
from ir.types import (
    AUDIO_APPS,
    IR,
    PROTOCOL_USENET,
    VIDEO_APPS,
    AuthenticationIR,
    ConnectionIR,
    CustomFormatIR,
    DelayProfileIR,
    DownloadClientIR,
    FormatSpecIR,
    ImportListIR,
    IndexerIR,
    MediaManagementIR,
    NotificationIR,
    QualityIR,
    RemotePathMappingIR,
    RootFolderIR,
)
from presets.audio import DEFAULT_AUDIO_PRESET
from presets.expander import PresetExpander
from presets.naming import DEFAULT_NAMING_PRESET
from presets.video import DEFAULT_VIDEO_PRESET

logger = logging.getLogger(__name__)

NAME_PREFIX = "nebularr-"
HASH_BYTES = 8


def profile_name(config_name: str) -> str:
    return f"{NAME_PREFIX}{config_name}"


def resource_name(config_name: str, item_name: str) -> str:
    return f"{NAME_PREFIX}{config_name}-{item_name}"


def source_hash(intent: CompileInput) -> str:
    """
    Deterministic hash of the intent, used for external drift detection.

    The projection omits the connection and every secret (passwords, API
    keys) so rotating a credential does not look like a config change.
    Encoding is canonical JSON (sorted keys, compact separators); the
    digest is SHA-256 truncated to its first 8 bytes (16 hex chars).
    """
    projection = {
        "app": intent.app,
        "config_name": intent.config_name,
        "quality_preset": intent.quality_preset,
        "quality_overrides": intent.quality_overrides,
        "naming_preset": intent.naming_preset,
        "download_clients": intent.download_clients,
        "remote_path_mappings": intent.remote_path_mappings,
        "indexers": intent.indexers,
        "root_folders": intent.root_folders,
        "notifications": intent.notifications,
        "custom_formats": intent.custom_formats,
        "delay_profiles": intent.delay_profiles,
    }
    payload = canonical_json(strip_secrets(to_plain(projection)))
    digest = hashlib.sha256(payload.encode("utf-8")).digest()
    return digest[:HASH_BYTES].hex()


class Compiler:
    """Compiles CompileInput into IR, delegating presets to PresetExpander."""

    def __init__(self, expander: Optional[PresetExpander] = None):
        self.expander = expander or PresetExpander()

    def compile(
        self,
        intent: CompileInput,
        capabilities: Optional[Capabilities] = None,
        now: Optional[datetime] = None,
    ) -> IR:
        """
        Compile intent for one backend instance.

        Args:
            intent: Declared configuration
            capabilities: When given, the result is pruned against it
            now: Timestamp for ``generated_at`` (defaults to current UTC)

        Returns:
            The desired-state IR
        """
        cfg = intent.config_name
        ir = IR(
            app=intent.app,
            connection=ConnectionIR(
                url=intent.url,
                api_key=intent.api_key,
                insecure_skip_verify=intent.insecure_skip_verify,
            ),
            generated_at=now or datetime.now(timezone.utc),
            quality=self._compile_quality(intent),
            naming=self.expander.expand_naming(
                intent.app, intent.naming_preset or DEFAULT_NAMING_PRESET
            ),
            download_clients=tuple(
                self._compile_download_client(dc, cfg) for dc in intent.download_clients
            ),
            remote_path_mappings=tuple(
                RemotePathMappingIR(
                    host=m.host, remote_path=m.remote_path, local_path=m.local_path
                )
                for m in intent.remote_path_mappings
            ),
            indexers=tuple(self._compile_indexer(idx, cfg) for idx in intent.indexers),
            root_folders=tuple(RootFolderIR(path=path) for path in intent.root_folders),
            import_lists=tuple(self._compile_import_list(il) for il in intent.import_lists),
            media_management=self._compile_media_management(intent),
            authentication=self._compile_authentication(intent),
            notifications=tuple(
                self._compile_notification(n, cfg) for n in intent.notifications
            ),
        )

        if intent.app in VIDEO_APPS + AUDIO_APPS:
            ir = replace(
                ir,
                custom_formats=tuple(
                    self._compile_custom_format(cf, cfg) for cf in intent.custom_formats
                ),
                delay_profiles=self._compile_delay_profiles(intent.delay_profiles),
            )
            ir = self._merge_format_scores(ir, intent.custom_formats, cfg)

        if capabilities is not None:
            ir, _ = prune(ir, capabilities)

        ir = replace(ir, source_hash=source_hash(intent))
        logger.debug(
            f"Compiled {intent.app} config '{cfg}' (hash {ir.source_hash}, "
            f"{len(ir.unrealized)} unrealized)"
        )
        return ir

    def _compile_quality(self, intent: CompileInput) -> Optional[QualityIR]:
        name = profile_name(intent.config_name)
        if intent.app in VIDEO_APPS:
            return QualityIR(
                video=self.expander.expand_video(
                    intent.quality_preset or DEFAULT_VIDEO_PRESET,
                    name,
                    intent.quality_overrides,
                )
            )
        if intent.app in AUDIO_APPS:
            return QualityIR(
                audio=self.expander.expand_audio(
                    intent.quality_preset or DEFAULT_AUDIO_PRESET,
                    name,
                    intent.quality_overrides,
                )
            )
        return None

    def _compile_download_client(
        self, dc: DownloadClientInput, cfg: str
    ) -> DownloadClientIR:
        return DownloadClientIR(
            name=resource_name(cfg, dc.name),
            implementation=normalize_implementation(dc.implementation),
            protocol=infer_protocol(dc.implementation),
            enable=True,
            priority=dc.priority,
            remove_completed_downloads=dc.remove_completed_downloads,
            remove_failed_downloads=dc.remove_failed_downloads,
            host=dc.host,
            port=dc.port,
            use_tls=dc.use_tls,
            username=dc.username,
            password=dc.password,
            category=dc.category,
            directory=dc.directory,
        )

    def _compile_indexer(self, idx: IndexerInput, cfg: str) -> IndexerIR:
        return IndexerIR(
            name=resource_name(cfg, idx.name),
            implementation=idx.implementation,
            protocol=idx.protocol or infer_protocol(idx.implementation),
            enable=any(
                (idx.enable_rss, idx.enable_automatic_search, idx.enable_interactive_search)
            ),
            priority=idx.priority,
            url=idx.url,
            api_key=idx.api_key,
            categories=tuple(idx.categories),
            minimum_seeders=idx.minimum_seeders,
            seed_ratio=idx.seed_ratio,
            seed_time_minutes=idx.seed_time_minutes,
            enable_rss=idx.enable_rss,
            enable_automatic_search=idx.enable_automatic_search,
            enable_interactive_search=idx.enable_interactive_search,
        )

    def _compile_import_list(self, il: ImportListInput) -> ImportListIR:
        # Import lists keep the declared name; they are matched by name
        # during direct apply and tagged for ownership.
        return ImportListIR(
            name=il.name,
            type=il.type,
            enabled=il.enabled,
            enable_auto=il.enable_auto,
            search_on_add=il.search_on_add,
            quality_profile_name=il.quality_profile_name,
            root_folder_path=il.root_folder_path,
            monitor=il.monitor,
            minimum_availability=il.minimum_availability,
            series_type=il.series_type,
            season_folder=il.season_folder,
            should_monitor=il.should_monitor,
            settings=dict(il.settings),
        )

    def _compile_media_management(
        self, intent: CompileInput
    ) -> Optional[MediaManagementIR]:
        mm = intent.media_management
        if mm is None:
            return None
        return MediaManagementIR(**to_plain(mm))

    def _compile_authentication(self, intent: CompileInput) -> Optional[AuthenticationIR]:
        auth = intent.authentication
        if auth is None:
            return None
        return AuthenticationIR(
            method=auth.method,
            username=auth.username,
            password=auth.password,
            authentication_required=auth.authentication_required,
        )

    def _compile_notification(self, n: NotificationInput, cfg: str) -> NotificationIR:
        return NotificationIR(
            name=resource_name(cfg, n.name),
            implementation=n.implementation,
            config_contract=f"{n.implementation}Settings",
            enabled=True,
            on_grab=n.on_grab,
            on_download=n.on_download,
            on_upgrade=n.on_upgrade,
            on_rename=n.on_rename,
            on_health_issue=n.on_health_issue,
            on_health_restored=n.on_health_restored,
            on_application_update=n.on_application_update,
            include_health_warnings=n.include_health_warnings,
            fields=dict(n.fields),
        )

    def _compile_custom_format(self, cf: CustomFormatInput, cfg: str) -> CustomFormatIR:
        return CustomFormatIR(
            name=resource_name(cfg, cf.name),
            include_when_renaming=cf.include_when_renaming,
            specifications=tuple(
                FormatSpecIR(
                    type=spec.type,
                    name=spec.name,
                    value=spec.value,
                    negate=spec.negate,
                    required=spec.required,
                )
                for spec in cf.specifications
            ),
        )

    def _compile_delay_profiles(
        self, profiles: Tuple[DelayProfileInput, ...]
    ) -> Tuple[DelayProfileIR, ...]:
        result = []
        for index, p in enumerate(profiles):
            order = p.order or index + 1
            result.append(
                DelayProfileIR(
                    name=p.name or f"delay-{order}",
                    order=order,
                    preferred_protocol=p.preferred_protocol or PROTOCOL_USENET,
                    usenet_delay=p.usenet_delay,
                    torrent_delay=p.torrent_delay,
                    enable_usenet=p.enable_usenet,
                    enable_torrent=p.enable_torrent,
                    bypass_if_highest_quality=p.bypass_if_highest_quality,
                    bypass_if_above_custom_format_score=p.bypass_if_above_custom_format_score,
                    minimum_custom_format_score=p.minimum_custom_format_score,
                    tags=tuple(p.tags),
                )
            )
        return tuple(result)

    def _merge_format_scores(
        self, ir: IR, formats: Tuple[CustomFormatInput, ...], cfg: str
    ) -> IR:
        """Add non-zero user format scores to the quality profile's scores."""
        user_scores: Dict[str, int] = {
            resource_name(cfg, cf.name): cf.score for cf in formats if cf.score != 0
        }
        if not user_scores or ir.quality is None:
            return ir
        quality = ir.quality
        for attr in ("video", "audio"):
            profile = getattr(quality, attr)
            if profile is None:
                continue
            scores = dict(profile.format_scores)
            scores.update(user_scores)
            quality = replace(quality, **{attr: replace(profile, format_scores=scores)})
        return replace(ir, quality=quality)
