"""
Field mapping between IR values and Radarr v3 JSON resources.

Pure functions only; the adapter performs the HTTP calls.
"""

import copy
from typing import Any, Dict, Iterable, List, Optional, Set

from ir.types import (
    HEALTH_ERROR,
    HEALTH_NOTICE,
    HEALTH_WARNING,
    PROTOCOL_TORRENT,
    PROTOCOL_USENET,
    AuthenticationIR,
    CustomFormatIR,
    DelayProfileIR,
    DownloadClientIR,
    FormatSpecIR,
    HealthIssue,
    HealthStatus,
    ImportListIR,
    IndexerIR,
    MediaManagementIR,
    NotificationIR,
    RadarrNamingIR,
    RemotePathMappingIR,
    RootFolderIR,
    VideoQualityIR,
    VideoQualityTierIR,
)

# Standard Radarr quality definition IDs
QUALITY_IDS: Dict[str, int] = {
    "Unknown": 0,
    "SDTV": 1,
    "DVD": 2,
    "WEBDL-1080p": 3,
    "HDTV-720p": 4,
    "WEBDL-720p": 5,
    "Bluray-720p": 6,
    "Bluray-1080p": 7,
    "WEBDL-480p": 8,
    "HDTV-1080p": 9,
    "Raw-HD": 10,
    "WEBRip-480p": 12,
    "WEBRip-720p": 14,
    "WEBRip-1080p": 15,
    "HDTV-2160p": 16,
    "WEBRip-2160p": 17,
    "WEBDL-2160p": 18,
    "Bluray-2160p": 19,
    "Bluray-480p": 20,
    "Bluray-576p": 21,
    "BR-DISK": 22,
    "DVD-R": 23,
    "WORKPRINT": 24,
    "CAM": 25,
    "TELESYNC": 26,
    "TELECINE": 27,
    "DVDSCR": 28,
    "REGIONAL": 29,
    "Remux-1080p": 30,
    "Remux-2160p": 31,
}

_QUALITY_NAME_PREFIX = {
    "bluray": "Bluray",
    "remux": "Remux",
    "webdl": "WEBDL",
    "webrip": "WEBRip",
    "hdtv": "HDTV",
}

# Quality "source" enum as reported inside quality definitions
_QUALITY_SOURCES = {
    "bluray": "bluray",
    "webdl": "webdl",
    "webrip": "webrip",
    "tv": "hdtv",
    "dvd": "dvd",
    "cam": "cam",
    "telesync": "telesync",
    "telecine": "telecine",
    "workprint": "workprint",
}

# Custom format SourceSpecification values
SOURCE_VALUES: Dict[str, int] = {
    "cam": 1,
    "telesync": 2,
    "telecine": 3,
    "workprint": 4,
    "dvd": 5,
    "tv": 6,
    "webdl": 7,
    "webrip": 8,
    "bluray": 9,
}

# Custom format ResolutionSpecification values
RESOLUTION_VALUES: Dict[str, int] = {
    "r360p": 360,
    "r480p": 480,
    "r576p": 576,
    "r720p": 720,
    "r1080p": 1080,
    "r2160p": 2160,
}

COLON_FORMATS: Dict[int, str] = {
    0: "delete",
    1: "dash",
    2: "spaceDash",
    3: "spaceDashSpace",
    4: "smart",
}

AUTH_METHODS = {
    "none": "none",
    "forms": "forms",
    "basic": "basic",
    "external": "external",
}

AUTH_REQUIRED = {
    "enabled": "enabled",
    "disabledForLocalAddresses": "disabledForLocalAddresses",
}

ORIGINAL_LANGUAGE = {"id": -2, "name": "Original"}

HEALTH_TYPES = {
    "error": HEALTH_ERROR,
    "warning": HEALTH_WARNING,
    "notice": HEALTH_NOTICE,
}


# ==================== Fields ====================


def fields_to_dict(fields: Optional[Iterable[Dict[str, Any]]]) -> Dict[str, Any]:
    """Flatten a Radarr ``fields`` array into ``{name: value}``."""
    result = {}
    for f in fields or []:
        name = f.get("name")
        if name and f.get("value") is not None:
            result[name] = f["value"]
    return result


def dict_to_fields(values: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [{"name": name, "value": value} for name, value in values.items()]


def _tags_with(tags: Iterable[int], tag_id: Optional[int]) -> List[int]:
    result = list(tags)
    if tag_id is not None and tag_id not in result:
        result.append(tag_id)
    return result


# ==================== Quality profiles ====================


def parse_resolution(resolution: str) -> int:
    try:
        return int(resolution.rstrip("p"))
    except ValueError:
        return 0


def quality_name(resolution: int, source: str) -> str:
    if source == "dvd":
        return "DVD"
    prefix = _QUALITY_NAME_PREFIX.get(source)
    if prefix is None:
        return ""
    return f"{prefix}-{resolution}p"


def allowed_quality_ids(tiers: Iterable[VideoQualityTierIR]) -> Set[int]:
    """Quality definition IDs allowed by the given tiers."""
    allowed = set()
    for tier in tiers:
        if not tier.allowed:
            continue
        res = parse_resolution(tier.resolution)
        for source in tier.sources:
            quality_id = QUALITY_IDS.get(quality_name(res, source), 0)
            if quality_id > 0:
                allowed.add(quality_id)
    return allowed


def cutoff_quality_id(cutoff: Optional[VideoQualityTierIR]) -> int:
    """Quality ID of the cutoff's first source; 0 when there is none."""
    if cutoff is None or not cutoff.sources:
        return 0
    return QUALITY_IDS.get(quality_name(parse_resolution(cutoff.resolution), cutoff.sources[0]), 0)


def mark_allowed_qualities(items: List[Dict[str, Any]], allowed: Set[int]) -> None:
    """Set ``allowed`` on every item in place; a group is allowed if any member is."""
    for item in items:
        quality = item.get("quality")
        if quality and quality.get("id") is not None:
            item["allowed"] = quality["id"] in allowed
        nested = item.get("items") or []
        if nested:
            mark_allowed_qualities(nested, allowed)
            item["allowed"] = any(sub.get("allowed") for sub in nested)


def quality_profile_payload(
    schema: Dict[str, Any], profile: VideoQualityIR, format_ids: Dict[str, int]
) -> Dict[str, Any]:
    """
    Build a quality profile from the server's schema template.

    Args:
        schema: Result of GET /qualityprofile/schema
        profile: Desired profile
        format_ids: Custom format name -> ID, for format scores
    """
    payload = copy.deepcopy(schema)
    payload["name"] = profile.profile_name
    payload["upgradeAllowed"] = profile.upgrade_allowed
    payload["minFormatScore"] = profile.minimum_custom_format_score
    payload["language"] = dict(ORIGINAL_LANGUAGE)
    if profile.upgrade_until_custom_format_score > 0:
        payload["cutoffFormatScore"] = profile.upgrade_until_custom_format_score

    items = payload.get("items") or []
    mark_allowed_qualities(items, allowed_quality_ids(profile.tiers))
    payload["items"] = items

    cutoff = cutoff_quality_id(profile.cutoff)
    if cutoff > 0:
        payload["cutoff"] = cutoff

    format_items = list(payload.get("formatItems") or [])
    scored = set()
    for item in format_items:
        name = item.get("name")
        if name in profile.format_scores:
            item["score"] = profile.format_scores[name]
            scored.add(name)
    for name, score in profile.format_scores.items():
        if name not in scored and name in format_ids:
            format_items.append({"format": format_ids[name], "name": name, "score": score})
    payload["formatItems"] = format_items
    return payload


def _source_name(quality: Optional[Dict[str, Any]]) -> str:
    if not quality:
        return ""
    return _QUALITY_SOURCES.get(str(quality.get("source", "")).lower(), "")


def _tier_from_item(item: Dict[str, Any]) -> Optional[VideoQualityTierIR]:
    nested = item.get("items") or []
    if nested:
        sources = tuple(
            s for s in (_source_name(sub.get("quality")) for sub in nested) if s
        )
        return VideoQualityTierIR(
            resolution=item.get("name", ""), sources=sources, allowed=bool(item.get("allowed"))
        )
    quality = item.get("quality")
    if not quality:
        return None
    resolution = quality.get("resolution")
    source = _source_name(quality)
    return VideoQualityTierIR(
        resolution=f"{resolution}p" if resolution else "",
        sources=(source,) if source else (),
        allowed=bool(item.get("allowed")),
    )


def _tier_from_quality_id(quality_id: int) -> Optional[VideoQualityTierIR]:
    for name, qid in QUALITY_IDS.items():
        if qid != quality_id or "-" not in name:
            continue
        prefix, resolution = name.split("-", 1)
        for source, known in _QUALITY_NAME_PREFIX.items():
            if known == prefix:
                return VideoQualityTierIR(resolution=resolution, sources=(source,))
    return None


def quality_profile_to_ir(resource: Dict[str, Any]) -> VideoQualityIR:
    tiers = tuple(
        t for t in (_tier_from_item(item) for item in resource.get("items") or []) if t
    )
    scores = {
        item["name"]: item["score"]
        for item in resource.get("formatItems") or []
        if item.get("name") and item.get("score") is not None
    }
    cutoff = resource.get("cutoff")
    return VideoQualityIR(
        profile_name=resource.get("name", ""),
        upgrade_allowed=bool(resource.get("upgradeAllowed")),
        cutoff=_tier_from_quality_id(cutoff) if cutoff else None,
        tiers=tiers,
        format_scores=scores,
        minimum_custom_format_score=resource.get("minFormatScore") or 0,
        upgrade_until_custom_format_score=resource.get("cutoffFormatScore") or 0,
        id=resource.get("id"),
    )


# ==================== Custom formats ====================


def _spec_value(spec: FormatSpecIR) -> Any:
    if spec.type == "SourceSpecification":
        return SOURCE_VALUES.get(spec.value, 0)
    if spec.type == "ResolutionSpecification":
        return RESOLUTION_VALUES.get(spec.value, 0)
    return spec.value


def _spec_value_to_ir(implementation: str, value: Any) -> str:
    if implementation == "SourceSpecification":
        for name, number in SOURCE_VALUES.items():
            if number == value:
                return name
    if implementation == "ResolutionSpecification":
        for name, number in RESOLUTION_VALUES.items():
            if number == value:
                return name
    return "" if value is None else str(value)


def custom_format_payload(cf: CustomFormatIR) -> Dict[str, Any]:
    return {
        "name": cf.name,
        "includeCustomFormatWhenRenaming": cf.include_when_renaming,
        "specifications": [
            {
                "name": spec.name,
                "implementation": spec.type,
                "negate": spec.negate,
                "required": spec.required,
                "fields": [{"name": "value", "value": _spec_value(spec)}],
            }
            for spec in cf.specifications
        ],
    }


def custom_format_to_ir(resource: Dict[str, Any]) -> CustomFormatIR:
    specs = []
    for spec in resource.get("specifications") or []:
        implementation = spec.get("implementation", "")
        value = fields_to_dict(spec.get("fields")).get("value")
        specs.append(
            FormatSpecIR(
                type=implementation,
                name=spec.get("name", ""),
                value=_spec_value_to_ir(implementation, value),
                negate=bool(spec.get("negate")),
                required=bool(spec.get("required")),
            )
        )
    return CustomFormatIR(
        name=resource.get("name", ""),
        include_when_renaming=bool(resource.get("includeCustomFormatWhenRenaming")),
        specifications=tuple(specs),
        id=resource.get("id"),
    )


# ==================== Download clients ====================


def _protocol_value(protocol: str) -> Optional[str]:
    if protocol in (PROTOCOL_TORRENT, PROTOCOL_USENET):
        return protocol
    return None


def download_client_fields(dc: DownloadClientIR) -> Dict[str, Any]:
    fields: Dict[str, Any] = {"host": dc.host, "port": dc.port, "useSsl": dc.use_tls}
    if dc.username:
        fields["username"] = dc.username
    if dc.password:
        fields["password"] = dc.password

    impl = dc.implementation
    if impl == "Transmission":
        fields["urlBase"] = "/transmission/"
        fields["movieCategory"] = dc.category
        fields["addPaused"] = False
    elif impl == "QBittorrent":
        fields["movieCategory"] = dc.category
        fields["initialState"] = 0
    elif impl == "Deluge":
        fields["movieCategory"] = dc.category
        fields["addPaused"] = False
    elif impl in ("Sabnzbd", "NzbGet"):
        fields["movieCategory"] = dc.category
    elif dc.category:
        fields["movieCategory"] = dc.category

    if dc.directory and impl in ("Transmission", "QBittorrent", "Deluge"):
        fields["movieDirectory"] = dc.directory
    return fields


def download_client_payload(dc: DownloadClientIR, tag_id: Optional[int]) -> Dict[str, Any]:
    payload = {
        "name": dc.name,
        "enable": dc.enable,
        "priority": dc.priority,
        "implementation": dc.implementation,
        "configContract": f"{dc.implementation}Settings",
        "removeCompletedDownloads": dc.remove_completed_downloads,
        "removeFailedDownloads": dc.remove_failed_downloads,
        "fields": dict_to_fields(download_client_fields(dc)),
        "tags": _tags_with([], tag_id),
    }
    protocol = _protocol_value(dc.protocol)
    if protocol:
        payload["protocol"] = protocol
    return payload


def download_client_to_ir(resource: Dict[str, Any]) -> DownloadClientIR:
    fields = fields_to_dict(resource.get("fields"))
    return DownloadClientIR(
        name=resource.get("name", ""),
        implementation=resource.get("implementation", ""),
        protocol=resource.get("protocol", ""),
        enable=bool(resource.get("enable")),
        priority=resource.get("priority") or 0,
        remove_completed_downloads=bool(resource.get("removeCompletedDownloads")),
        remove_failed_downloads=bool(resource.get("removeFailedDownloads")),
        host=fields.get("host", ""),
        port=int(fields.get("port") or 0),
        use_tls=bool(fields.get("useSsl")),
        username=fields.get("username", ""),
        category=fields.get("movieCategory", ""),
        directory=fields.get("movieDirectory", ""),
        id=resource.get("id"),
    )


# ==================== Indexers ====================


def indexer_payload(idx: IndexerIR, tag_id: Optional[int]) -> Dict[str, Any]:
    impl = idx.implementation or ("Torznab" if idx.protocol == PROTOCOL_TORRENT else "Newznab")
    fields: Dict[str, Any] = {"baseUrl": idx.url, "apiPath": "/api"}
    if idx.api_key:
        fields["apiKey"] = idx.api_key
    if idx.categories:
        fields["categories"] = list(idx.categories)
    if idx.protocol == PROTOCOL_TORRENT:
        if idx.minimum_seeders > 0:
            fields["minimumSeeders"] = idx.minimum_seeders
        if idx.seed_ratio:
            fields["seedCriteria.seedRatio"] = idx.seed_ratio
        if idx.seed_time_minutes:
            fields["seedCriteria.seedTime"] = idx.seed_time_minutes

    payload = {
        "name": idx.name,
        "priority": idx.priority,
        "implementation": impl,
        "configContract": f"{impl}Settings",
        "enableRss": idx.enable and idx.enable_rss,
        "enableAutomaticSearch": idx.enable and idx.enable_automatic_search,
        "enableInteractiveSearch": idx.enable and idx.enable_interactive_search,
        "fields": dict_to_fields(fields),
        "tags": _tags_with([], tag_id),
    }
    protocol = _protocol_value(idx.protocol)
    if protocol:
        payload["protocol"] = protocol
    return payload


def indexer_to_ir(resource: Dict[str, Any]) -> IndexerIR:
    fields = fields_to_dict(resource.get("fields"))
    rss = bool(resource.get("enableRss"))
    automatic = bool(resource.get("enableAutomaticSearch"))
    interactive = bool(resource.get("enableInteractiveSearch"))
    impl = resource.get("implementation", "")
    protocol = resource.get("protocol", "")
    if not protocol:
        if impl in ("Torznab", "TorrentRssIndexer"):
            protocol = PROTOCOL_TORRENT
        elif impl == "Newznab":
            protocol = PROTOCOL_USENET
    return IndexerIR(
        name=resource.get("name", ""),
        implementation=impl,
        protocol=protocol,
        enable=rss or automatic or interactive,
        priority=resource.get("priority") or 0,
        url=fields.get("baseUrl", ""),
        api_key=fields.get("apiKey", ""),
        categories=tuple(int(c) for c in fields.get("categories") or []),
        minimum_seeders=int(fields.get("minimumSeeders") or 0),
        seed_ratio=fields.get("seedCriteria.seedRatio"),
        seed_time_minutes=fields.get("seedCriteria.seedTime"),
        enable_rss=rss,
        enable_automatic_search=automatic,
        enable_interactive_search=interactive,
        id=resource.get("id"),
    )


# ==================== Root folders and remote path mappings ====================


def root_folder_to_ir(resource: Dict[str, Any]) -> RootFolderIR:
    return RootFolderIR(path=resource.get("path", ""), id=resource.get("id"))


def remote_path_mapping_payload(m: RemotePathMappingIR) -> Dict[str, Any]:
    return {"host": m.host, "remotePath": m.remote_path, "localPath": m.local_path}


def remote_path_mapping_to_ir(resource: Dict[str, Any]) -> RemotePathMappingIR:
    return RemotePathMappingIR(
        host=resource.get("host", ""),
        remote_path=resource.get("remotePath", ""),
        local_path=resource.get("localPath", ""),
        id=resource.get("id"),
    )


# ==================== Naming ====================


def naming_to_ir(resource: Dict[str, Any]) -> RadarrNamingIR:
    colon = 0
    for number, name in COLON_FORMATS.items():
        if name == resource.get("colonReplacementFormat"):
            colon = number
    return RadarrNamingIR(
        rename_movies=bool(resource.get("renameMovies")),
        replace_illegal_characters=bool(resource.get("replaceIllegalCharacters")),
        colon_replacement_format=colon,
        standard_movie_format=resource.get("standardMovieFormat", ""),
        movie_folder_format=resource.get("movieFolderFormat", ""),
        id=resource.get("id"),
    )


def naming_payload(current: Dict[str, Any], naming: RadarrNamingIR) -> Dict[str, Any]:
    """Overlay the desired naming onto the full current resource."""
    return {
        **current,
        "renameMovies": naming.rename_movies,
        "replaceIllegalCharacters": naming.replace_illegal_characters,
        "colonReplacementFormat": COLON_FORMATS.get(naming.colon_replacement_format, "delete"),
        "standardMovieFormat": naming.standard_movie_format,
        "movieFolderFormat": naming.movie_folder_format,
    }


# ==================== Notifications ====================


def notification_payload(n: NotificationIR, tag_id: Optional[int]) -> Dict[str, Any]:
    return {
        "name": n.name,
        "implementation": n.implementation,
        "configContract": n.config_contract or f"{n.implementation}Settings",
        "onGrab": n.on_grab,
        "onDownload": n.on_download,
        "onUpgrade": n.on_upgrade,
        "onRename": n.on_rename,
        "onHealthIssue": n.on_health_issue,
        "onHealthRestored": n.on_health_restored,
        "onApplicationUpdate": n.on_application_update,
        "includeHealthWarnings": n.include_health_warnings,
        "fields": dict_to_fields(n.fields),
        "tags": _tags_with(n.tags, tag_id),
    }


def notification_to_ir(resource: Dict[str, Any]) -> NotificationIR:
    return NotificationIR(
        name=resource.get("name", ""),
        implementation=resource.get("implementation", ""),
        config_contract=resource.get("configContract", ""),
        enabled=True,
        on_grab=bool(resource.get("onGrab")),
        on_download=bool(resource.get("onDownload")),
        on_upgrade=bool(resource.get("onUpgrade")),
        on_rename=bool(resource.get("onRename")),
        on_health_issue=bool(resource.get("onHealthIssue")),
        on_health_restored=bool(resource.get("onHealthRestored")),
        on_application_update=bool(resource.get("onApplicationUpdate")),
        include_health_warnings=bool(resource.get("includeHealthWarnings")),
        fields=fields_to_dict(resource.get("fields")),
        tags=tuple(resource.get("tags") or ()),
        id=resource.get("id"),
    )


# ==================== Delay profiles ====================


def delay_profile_payload(p: DelayProfileIR) -> Dict[str, Any]:
    return {
        "order": p.order,
        "preferredProtocol": p.preferred_protocol or PROTOCOL_USENET,
        "usenetDelay": p.usenet_delay,
        "torrentDelay": p.torrent_delay,
        "enableUsenet": p.enable_usenet,
        "enableTorrent": p.enable_torrent,
        "bypassIfHighestQuality": p.bypass_if_highest_quality,
        "bypassIfAboveCustomFormatScore": p.bypass_if_above_custom_format_score,
        "minimumCustomFormatScore": p.minimum_custom_format_score,
        "tags": list(p.tags),
    }


def delay_profile_to_ir(resource: Dict[str, Any]) -> DelayProfileIR:
    order = resource.get("order") or 0
    return DelayProfileIR(
        name=f"delay-{order}",
        order=order,
        preferred_protocol=resource.get("preferredProtocol") or PROTOCOL_USENET,
        usenet_delay=resource.get("usenetDelay") or 0,
        torrent_delay=resource.get("torrentDelay") or 0,
        enable_usenet=bool(resource.get("enableUsenet")),
        enable_torrent=bool(resource.get("enableTorrent")),
        bypass_if_highest_quality=bool(resource.get("bypassIfHighestQuality")),
        bypass_if_above_custom_format_score=bool(resource.get("bypassIfAboveCustomFormatScore")),
        minimum_custom_format_score=resource.get("minimumCustomFormatScore") or 0,
        tags=tuple(resource.get("tags") or ()),
        id=resource.get("id"),
    )


# ==================== Import lists ====================


def import_list_payload(
    il: ImportListIR,
    schema: Dict[str, Any],
    quality_profile_id: int,
    tag_id: Optional[int],
) -> Dict[str, Any]:
    """Only settings the schema knows about are sent."""
    known = {f.get("name") for f in schema.get("fields") or []}
    fields = {name: value for name, value in il.settings.items() if name in known}
    payload = {
        "name": il.name,
        "enabled": il.enabled,
        "enableAuto": il.enable_auto,
        "searchOnAdd": il.search_on_add,
        "qualityProfileId": quality_profile_id,
        "rootFolderPath": il.root_folder_path,
        "listType": "program",
        "listOrder": 0,
        "implementation": il.type,
        "configContract": schema.get("configContract", f"{il.type}Settings"),
        "fields": dict_to_fields(fields),
        "tags": _tags_with([], tag_id),
    }
    if il.monitor:
        payload["monitor"] = il.monitor
    if il.minimum_availability:
        payload["minimumAvailability"] = il.minimum_availability
    return payload


def import_list_to_ir(resource: Dict[str, Any]) -> ImportListIR:
    return ImportListIR(
        name=resource.get("name", ""),
        type=resource.get("implementation", ""),
        enabled=bool(resource.get("enabled")),
        enable_auto=bool(resource.get("enableAuto")),
        search_on_add=bool(resource.get("searchOnAdd")),
        quality_profile_id=resource.get("qualityProfileId") or 0,
        root_folder_path=resource.get("rootFolderPath", ""),
        monitor=resource.get("monitor", ""),
        minimum_availability=resource.get("minimumAvailability", ""),
        settings={k: str(v) for k, v in fields_to_dict(resource.get("fields")).items()},
        id=resource.get("id"),
    )


# ==================== Media management and authentication ====================

_MEDIA_MANAGEMENT_FIELDS = {
    "recycle_bin": "recycleBin",
    "recycle_bin_cleanup_days": "recycleBinCleanupDays",
    "set_permissions": "setPermissionsLinux",
    "chmod_folder": "chmodFolder",
    "chown_group": "chownGroup",
    "delete_empty_folders": "deleteEmptyFolders",
    "create_empty_folders": "createEmptyMovieFolders",
    "use_hardlinks": "copyUsingHardlinks",
}


def media_management_payload(current: Dict[str, Any], mm: MediaManagementIR) -> Dict[str, Any]:
    """Overlay the declared (non-None) settings onto the current config."""
    payload = dict(current)
    for attr, wire in _MEDIA_MANAGEMENT_FIELDS.items():
        value = getattr(mm, attr)
        if value is not None:
            payload[wire] = value
    return payload


def media_management_to_ir(resource: Dict[str, Any]) -> MediaManagementIR:
    return MediaManagementIR(
        **{attr: resource.get(wire) for attr, wire in _MEDIA_MANAGEMENT_FIELDS.items()}
    )


def host_config_payload(current: Dict[str, Any], auth: AuthenticationIR) -> Dict[str, Any]:
    payload = dict(current)
    payload["authenticationMethod"] = AUTH_METHODS.get(auth.method, "none")
    payload["authenticationRequired"] = AUTH_REQUIRED.get(auth.authentication_required, "enabled")
    if auth.method == "forms" and auth.username:
        payload["username"] = auth.username
    if auth.password:
        payload["password"] = auth.password
        payload["passwordConfirmation"] = auth.password
    return payload


def host_config_to_auth_ir(resource: Dict[str, Any]) -> AuthenticationIR:
    return AuthenticationIR(
        method=str(resource.get("authenticationMethod") or "none").lower(),
        username=resource.get("username") or "",
        authentication_required=resource.get("authenticationRequired") or "enabled",
    )


# ==================== Health ====================


def health_to_status(checks: Iterable[Dict[str, Any]]) -> HealthStatus:
    issues = []
    healthy = True
    for check in checks:
        issue_type = HEALTH_TYPES.get(str(check.get("type", "")).lower(), HEALTH_NOTICE)
        if issue_type == HEALTH_ERROR:
            healthy = False
        issues.append(
            HealthIssue(
                source=check.get("source") or "",
                type=issue_type,
                message=check.get("message") or "",
                wiki_url=check.get("wikiUrl") or "",
            )
        )
    return HealthStatus(healthy=healthy, issues=tuple(issues))
