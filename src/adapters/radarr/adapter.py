"""
Radarr Adapter - reference Adapter implementation for the Radarr v3 API.

Ownership per category:

    quality profiles          name prefix "nebularr-"
    custom formats            name prefixes "nebularr-", "Prefer: ", "Reject: "
    download clients,
    indexers, notifications,
    import lists              "nebularr-managed" tag
    root folders, remote path
    mappings, delay profiles  whole category, once declared
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from adapters.apply import DirectApplyCallbacks, apply_changes, apply_direct
from adapters.base import Adapter, DirectApplier, HealthChecker
from adapters.cache import ResourceIdCache
from adapters.errors import ArrAPIError, UnsupportedResourceError
from adapters.httpclient import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, ArrClient
from adapters.ownership import (
    CategoryBased,
    NamePrefixBased,
    TagBased,
    ensure_ownership_tag,
    find_ownership_tag,
)
from adapters.radarr import mapping
from adapters.types import (
    ApplyResult,
    Capabilities,
    Change,
    ChangeKind,
    ChangeSet,
    CustomFormatSpecType,
    ImportListStats,
    ResourceType,
    ServiceInfo,
)
from compiler.compiler import NAME_PREFIX
from ir.types import (
    APP_RADARR,
    IR,
    AuthenticationIR,
    ConnectionIR,
    HealthStatus,
    MediaManagementIR,
    NamingIR,
    QualityIR,
    empty_ir,
)
from presets.formats import PREFER_PREFIX, REJECT_PREFIX

logger = logging.getLogger(__name__)

API = "/api/v3"

RESOLUTIONS = ("2160p", "1080p", "720p", "480p")
SOURCES = ("bluray", "webdl", "webrip", "hdtv", "dvd", "cam", "telesync", "telecine", "workprint")

QUALITY_PROFILE_OWNERSHIP = NamePrefixBased(NAME_PREFIX)
CUSTOM_FORMAT_OWNERSHIP = NamePrefixBased(NAME_PREFIX, PREFER_PREFIX, REJECT_PREFIX)
CATEGORY_OWNERSHIP = CategoryBased()

_Handler = Callable[[ArrClient, Change, int], Awaitable[None]]


class RadarrAdapter(Adapter, DirectApplier, HealthChecker):
    """Adapter for Radarr (movies)."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, user_agent: str = DEFAULT_USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent
        self.ids = ResourceIdCache()
        self._handlers: Dict[tuple, _Handler] = {
            (ResourceType.QUALITY_PROFILE, ChangeKind.CREATE): self._create_quality_profile,
            (ResourceType.QUALITY_PROFILE, ChangeKind.UPDATE): self._update_quality_profile,
            (ResourceType.QUALITY_PROFILE, ChangeKind.DELETE): self._delete("qualityprofile"),
            (ResourceType.CUSTOM_FORMAT, ChangeKind.CREATE): self._create_custom_format,
            (ResourceType.CUSTOM_FORMAT, ChangeKind.UPDATE): self._update_custom_format,
            (ResourceType.CUSTOM_FORMAT, ChangeKind.DELETE): self._delete("customformat"),
            (ResourceType.DOWNLOAD_CLIENT, ChangeKind.CREATE): self._create_download_client,
            (ResourceType.DOWNLOAD_CLIENT, ChangeKind.UPDATE): self._update_download_client,
            (ResourceType.DOWNLOAD_CLIENT, ChangeKind.DELETE): self._delete("downloadclient"),
            (ResourceType.INDEXER, ChangeKind.CREATE): self._create_indexer,
            (ResourceType.INDEXER, ChangeKind.UPDATE): self._update_indexer,
            (ResourceType.INDEXER, ChangeKind.DELETE): self._delete("indexer"),
            (ResourceType.ROOT_FOLDER, ChangeKind.CREATE): self._create_root_folder,
            (ResourceType.REMOTE_PATH_MAPPING, ChangeKind.CREATE): self._create_remote_path_mapping,
            (ResourceType.REMOTE_PATH_MAPPING, ChangeKind.UPDATE): self._update_remote_path_mapping,
            (ResourceType.REMOTE_PATH_MAPPING, ChangeKind.DELETE): self._delete("remotepathmapping"),
            (ResourceType.NAMING_CONFIG, ChangeKind.UPDATE): self._update_naming,
            (ResourceType.NOTIFICATION, ChangeKind.CREATE): self._create_notification,
            (ResourceType.NOTIFICATION, ChangeKind.UPDATE): self._update_notification,
            (ResourceType.NOTIFICATION, ChangeKind.DELETE): self._delete("notification"),
            (ResourceType.DELAY_PROFILE, ChangeKind.CREATE): self._create_delay_profile,
            (ResourceType.DELAY_PROFILE, ChangeKind.UPDATE): self._update_delay_profile,
            (ResourceType.DELAY_PROFILE, ChangeKind.DELETE): self._delete("delayprofile"),
        }

    @property
    def name(self) -> str:
        return APP_RADARR

    def _client(self, conn: ConnectionIR) -> ArrClient:
        return ArrClient(conn, timeout=self.timeout, user_agent=self.user_agent)

    # ==================== Connect / Discover ====================

    async def connect(self, conn: ConnectionIR) -> ServiceInfo:
        async with self._client(conn) as client:
            status = await client.get(f"{API}/system/status") or {}
        start_time = None
        if status.get("startTime"):
            start_time = datetime.fromisoformat(status["startTime"].replace("Z", "+00:00"))
        return ServiceInfo(version=status.get("version", ""), start_time=start_time)

    async def discover(self, conn: ConnectionIR) -> Capabilities:
        async with self._client(conn) as client:
            cf_schemas = await self._optional_schema(client, "customformat")
            dc_schemas = await self._optional_schema(client, "downloadclient")
            idx_schemas = await self._optional_schema(client, "indexer")

        return Capabilities(
            discovered_at=datetime.now(timezone.utc),
            resolutions=RESOLUTIONS,
            sources=SOURCES,
            custom_format_specs=tuple(
                CustomFormatSpecType(
                    name=s.get("name", ""), implementation=s.get("implementation", "")
                )
                for s in cf_schemas
            ),
            download_client_types=_unique_implementations(dc_schemas),
            indexer_types=_unique_implementations(idx_schemas),
        )

    async def _optional_schema(self, client: ArrClient, resource: str) -> List[Dict[str, Any]]:
        """A failing schema endpoint means the feature is unknown, not an error."""
        try:
            return await client.get(f"{API}/{resource}/schema") or []
        except ArrAPIError as e:
            logger.debug(f"Schema for {resource} unavailable on {client.base_url}: {e}")
            return []

    # ==================== Current state ====================

    async def current_state(self, conn: ConnectionIR) -> IR:
        async with self._client(conn) as client:
            tag_id = await find_ownership_tag(client)
            if tag_id is None:
                logger.debug(f"No ownership tag on {client.base_url}; nothing managed yet")
                return empty_ir(APP_RADARR, conn)
            tagged = TagBased(tag_id)

            profiles = QUALITY_PROFILE_OWNERSHIP.filter(await client.get(f"{API}/qualityprofile") or [])
            formats = CUSTOM_FORMAT_OWNERSHIP.filter(await client.get(f"{API}/customformat") or [])
            clients = tagged.filter(await client.get(f"{API}/downloadclient") or [])
            indexers = tagged.filter(await client.get(f"{API}/indexer") or [])
            folders = CATEGORY_OWNERSHIP.filter(await client.get(f"{API}/rootfolder") or [])
            mappings = CATEGORY_OWNERSHIP.filter(
                await client.get(f"{API}/remotepathmapping") or []
            )
            naming = await client.get(f"{API}/config/naming")
            import_lists = tagged.filter(await client.get(f"{API}/importlist") or [])
            media_management = await client.get(f"{API}/config/mediamanagement")
            host_config = await client.get(f"{API}/config/host")
            notifications = tagged.filter(await client.get(f"{API}/notification") or [])
            delay_profiles = CATEGORY_OWNERSHIP.filter(
                await client.get(f"{API}/delayprofile") or []
            )

        for resource in profiles:
            self.ids.set(client.base_url, ResourceType.QUALITY_PROFILE, resource["name"], resource["id"])
        for resource in formats:
            self.ids.set(client.base_url, ResourceType.CUSTOM_FORMAT, resource["name"], resource["id"])

        return IR(
            app=APP_RADARR,
            connection=conn,
            generated_at=datetime.now(timezone.utc),
            # One managed profile per config
            quality=QualityIR(video=mapping.quality_profile_to_ir(profiles[0])) if profiles else None,
            custom_formats=tuple(mapping.custom_format_to_ir(r) for r in formats),
            download_clients=tuple(mapping.download_client_to_ir(r) for r in clients),
            indexers=tuple(mapping.indexer_to_ir(r) for r in indexers),
            root_folders=tuple(mapping.root_folder_to_ir(r) for r in folders),
            remote_path_mappings=tuple(mapping.remote_path_mapping_to_ir(r) for r in mappings),
            naming=NamingIR(radarr=mapping.naming_to_ir(naming)) if naming else None,
            import_lists=tuple(mapping.import_list_to_ir(r) for r in import_lists),
            media_management=(
                mapping.media_management_to_ir(media_management) if media_management else None
            ),
            authentication=mapping.host_config_to_auth_ir(host_config) if host_config else None,
            notifications=tuple(mapping.notification_to_ir(r) for r in notifications),
            delay_profiles=tuple(mapping.delay_profile_to_ir(r) for r in delay_profiles),
        )

    # ==================== Apply ====================

    async def apply(
        self,
        conn: ConnectionIR,
        changes: ChangeSet,
        *,
        stop_event: Optional[asyncio.Event] = None,
        deadline: Optional[float] = None,
    ) -> ApplyResult:
        async with self._client(conn) as client:
            tag_id = await ensure_ownership_tag(client)

            async def handle(kind: ChangeKind, change: Change) -> None:
                handler = self._handlers.get((change.resource_type, kind))
                if handler is None:
                    raise UnsupportedResourceError(
                        f"Radarr cannot {kind.value} {change.resource_type.value}"
                    )
                await handler(client, change, tag_id)

            return await apply_changes(changes, handle, stop_event=stop_event, deadline=deadline)

    def _delete(self, resource: str) -> _Handler:
        async def delete(client: ArrClient, change: Change, tag_id: int) -> None:
            await client.delete(f"{API}/{resource}/{change.id}")
            self.ids.discard(client.base_url, change.resource_type, change.name)

        return delete

    async def _format_ids(self, client: ArrClient, names) -> Dict[str, int]:
        ids = {}
        missing = []
        for name in names:
            cached = self.ids.get(client.base_url, ResourceType.CUSTOM_FORMAT, name)
            if cached is None:
                missing.append(name)
            else:
                ids[name] = cached
        if missing:
            for resource in await client.get(f"{API}/customformat") or []:
                self.ids.set(client.base_url, ResourceType.CUSTOM_FORMAT, resource["name"], resource["id"])
                if resource["name"] in missing:
                    ids[resource["name"]] = resource["id"]
        return ids

    async def _quality_profile_payload(self, client: ArrClient, change: Change) -> Dict[str, Any]:
        profile = change.payload
        schema = await client.get(f"{API}/qualityprofile/schema") or {}
        format_ids = await self._format_ids(client, profile.format_scores)
        return mapping.quality_profile_payload(schema, profile, format_ids)

    async def _create_quality_profile(self, client: ArrClient, change: Change, tag_id: int) -> None:
        payload = await self._quality_profile_payload(client, change)
        created = await client.post(f"{API}/qualityprofile", payload) or {}
        if "id" in created:
            self.ids.set(client.base_url, ResourceType.QUALITY_PROFILE, change.name, created["id"])

    async def _update_quality_profile(self, client: ArrClient, change: Change, tag_id: int) -> None:
        payload = await self._quality_profile_payload(client, change)
        payload["id"] = change.id
        await client.put(f"{API}/qualityprofile/{change.id}", payload)

    async def _create_custom_format(self, client: ArrClient, change: Change, tag_id: int) -> None:
        created = await client.post(f"{API}/customformat", mapping.custom_format_payload(change.payload)) or {}
        if "id" in created:
            self.ids.set(client.base_url, ResourceType.CUSTOM_FORMAT, change.name, created["id"])

    async def _update_custom_format(self, client: ArrClient, change: Change, tag_id: int) -> None:
        payload = {**mapping.custom_format_payload(change.payload), "id": change.id}
        await client.put(f"{API}/customformat/{change.id}", payload)

    async def _create_download_client(self, client: ArrClient, change: Change, tag_id: int) -> None:
        await client.post(f"{API}/downloadclient", mapping.download_client_payload(change.payload, tag_id))

    async def _update_download_client(self, client: ArrClient, change: Change, tag_id: int) -> None:
        payload = {**mapping.download_client_payload(change.payload, tag_id), "id": change.id}
        await client.put(f"{API}/downloadclient/{change.id}", payload)

    async def _create_indexer(self, client: ArrClient, change: Change, tag_id: int) -> None:
        await client.post(f"{API}/indexer", mapping.indexer_payload(change.payload, tag_id))

    async def _update_indexer(self, client: ArrClient, change: Change, tag_id: int) -> None:
        payload = {**mapping.indexer_payload(change.payload, tag_id), "id": change.id}
        await client.put(f"{API}/indexer/{change.id}", payload)

    async def _create_root_folder(self, client: ArrClient, change: Change, tag_id: int) -> None:
        await client.post(f"{API}/rootfolder", {"path": change.payload.path})

    async def _create_remote_path_mapping(self, client: ArrClient, change: Change, tag_id: int) -> None:
        await client.post(f"{API}/remotepathmapping", mapping.remote_path_mapping_payload(change.payload))

    async def _update_remote_path_mapping(self, client: ArrClient, change: Change, tag_id: int) -> None:
        payload = {**mapping.remote_path_mapping_payload(change.payload), "id": change.id}
        await client.put(f"{API}/remotepathmapping/{change.id}", payload)

    async def _update_naming(self, client: ArrClient, change: Change, tag_id: int) -> None:
        current = await client.get(f"{API}/config/naming") or {}
        payload = mapping.naming_payload(current, change.payload)
        await client.put(f"{API}/config/naming/{current.get('id', change.id)}", payload)

    async def _create_notification(self, client: ArrClient, change: Change, tag_id: int) -> None:
        await client.post(f"{API}/notification", mapping.notification_payload(change.payload, tag_id))

    async def _update_notification(self, client: ArrClient, change: Change, tag_id: int) -> None:
        payload = {**mapping.notification_payload(change.payload, tag_id), "id": change.id}
        await client.put(f"{API}/notification/{change.id}", payload)

    async def _create_delay_profile(self, client: ArrClient, change: Change, tag_id: int) -> None:
        await client.post(f"{API}/delayprofile", mapping.delay_profile_payload(change.payload))

    async def _update_delay_profile(self, client: ArrClient, change: Change, tag_id: int) -> None:
        payload = {**mapping.delay_profile_payload(change.payload), "id": change.id}
        await client.put(f"{API}/delayprofile/{change.id}", payload)

    # ==================== Direct apply ====================

    async def apply_direct(self, conn: ConnectionIR, ir: IR) -> ApplyResult:
        async with self._client(conn) as client:
            tag_id = await ensure_ownership_tag(client)
            callbacks = DirectApplyCallbacks(
                apply_import_lists=lambda: self._apply_import_lists(client, ir, tag_id),
                apply_media_management=lambda: self._apply_media_management(
                    client, ir.media_management
                ),
                apply_authentication=lambda: self._apply_authentication(client, ir.authentication),
            )
            return await apply_direct(ir, callbacks)

    async def _quality_profile_id(self, client: ArrClient, name: str) -> Optional[int]:
        cached = self.ids.get(client.base_url, ResourceType.QUALITY_PROFILE, name)
        if cached is not None:
            return cached
        for resource in await client.get(f"{API}/qualityprofile") or []:
            self.ids.set(client.base_url, ResourceType.QUALITY_PROFILE, resource["name"], resource["id"])
            if resource["name"] == name:
                return resource["id"]
        return None

    async def _apply_import_lists(self, client: ArrClient, ir: IR, tag_id: int) -> ImportListStats:
        """Create or update declared lists by name; delete tagged lists no longer declared."""
        stats = ImportListStats()
        existing = {r["name"]: r for r in await client.get(f"{API}/importlist") or [] if r.get("name")}
        schemas = {
            s.get("implementation"): s for s in await client.get(f"{API}/importlist/schema") or []
        }

        default_profile = ir.video_quality.profile_name if ir.video_quality else ""
        desired = set()
        for il in ir.import_lists:
            desired.add(il.name)
            schema = schemas.get(il.type)
            if schema is None:
                stats.errors.append(
                    ValueError(f"Unknown import list type {il.type} for {il.name}")
                )
                continue

            profile_id = il.quality_profile_id
            if not profile_id:
                profile_id = await self._quality_profile_id(
                    client, il.quality_profile_name or default_profile
                ) or 0

            payload = mapping.import_list_payload(il, schema, profile_id, tag_id)
            current = existing.get(il.name)
            try:
                if current is None:
                    await client.post(f"{API}/importlist", payload)
                    stats.created += 1
                else:
                    payload["id"] = current["id"]
                    await client.put(f"{API}/importlist/{current['id']}", payload)
                    stats.updated += 1
            except Exception as e:
                stats.errors.append(
                    RuntimeError(f"Failed to sync import list {il.name}: {e}")
                )

        for name, current in existing.items():
            if name in desired or tag_id not in (current.get("tags") or []):
                continue
            try:
                await client.delete(f"{API}/importlist/{current['id']}")
                stats.deleted += 1
            except Exception as e:
                stats.errors.append(RuntimeError(f"Failed to delete import list {name}: {e}"))

        return stats

    async def _apply_media_management(self, client: ArrClient, mm: MediaManagementIR) -> None:
        current = await client.get(f"{API}/config/mediamanagement") or {}
        payload = mapping.media_management_payload(current, mm)
        await client.put(f"{API}/config/mediamanagement/{current.get('id')}", payload)

    async def _apply_authentication(self, client: ArrClient, auth: AuthenticationIR) -> None:
        current = await client.get(f"{API}/config/host") or {}
        payload = mapping.host_config_payload(current, auth)
        await client.put(f"{API}/config/host/{current.get('id')}", payload)

    # ==================== Health ====================

    async def get_health(self, conn: ConnectionIR) -> HealthStatus:
        async with self._client(conn) as client:
            checks = await client.get(f"{API}/health") or []
        return mapping.health_to_status(checks)


def _unique_implementations(schemas: List[Dict[str, Any]]) -> tuple:
    seen: List[str] = []
    for schema in schemas:
        impl = schema.get("implementation")
        if impl and impl not in seen:
            seen.append(impl)
    return tuple(seen)
