"""
Schema Validation - JSON Schema checks for instance definition files.

Documents are validated with Draft 7 before they are converted into
compile inputs, so every structural problem is reported at once instead
of failing on the first missing key.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from jsonschema import Draft7Validator, ValidationError

from ir.types import ALL_APPS

logger = logging.getLogger(__name__)

# A secret is either given inline or as {"env": "NAME"}
SECRET_SCHEMA: Dict[str, Any] = {
    "oneOf": [
        {"type": "string"},
        {
            "type": "object",
            "properties": {"env": {"type": "string", "minLength": 1}},
            "required": ["env"],
            "additionalProperties": False,
        },
    ]
}

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

_DOWNLOAD_CLIENT_SCHEMA = {
    "type": "object",
    "required": ["name", "implementation"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "implementation": {"type": "string", "minLength": 1},
        "host": {"type": "string"},
        "port": {"type": "integer", "minimum": 0, "maximum": 65535},
        "use_tls": {"type": "boolean"},
        "username": {"type": "string"},
        "password": SECRET_SCHEMA,
        "category": {"type": "string"},
        "directory": {"type": "string"},
        "priority": {"type": "integer"},
        "remove_completed_downloads": {"type": "boolean"},
        "remove_failed_downloads": {"type": "boolean"},
    },
    "additionalProperties": False,
}

_INDEXER_SCHEMA = {
    "type": "object",
    "required": ["name", "implementation"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "implementation": {"type": "string", "minLength": 1},
        "url": {"type": "string"},
        "protocol": {"type": "string", "enum": ["torrent", "usenet"]},
        "api_key": SECRET_SCHEMA,
        "categories": {"type": "array", "items": {"type": "integer"}},
        "priority": {"type": "integer"},
        "minimum_seeders": {"type": "integer", "minimum": 0},
        "seed_ratio": {"type": "number"},
        "seed_time_minutes": {"type": "integer"},
        "enable_rss": {"type": "boolean"},
        "enable_automatic_search": {"type": "boolean"},
        "enable_interactive_search": {"type": "boolean"},
    },
    "additionalProperties": False,
}

_CUSTOM_FORMAT_SCHEMA = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "score": {"type": "integer"},
        "include_when_renaming": {"type": "boolean"},
        "specifications": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "type", "value"],
                "properties": {
                    "name": {"type": "string"},
                    "type": {"type": "string"},
                    "value": {"type": ["string", "integer"]},
                    "negate": {"type": "boolean"},
                    "required": {"type": "boolean"},
                },
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
}

INSTANCE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "app", "url"],
    "properties": {
        "name": {"type": "string", "pattern": "^[a-z0-9][a-z0-9-]*$"},
        "app": {"type": "string", "enum": list(ALL_APPS)},
        "url": {"type": "string", "pattern": "^https?://"},
        "api_key": SECRET_SCHEMA,
        "insecure_skip_verify": {"type": "boolean"},
        "quality": {
            "type": "object",
            "properties": {
                "preset": {"type": "string"},
                "exclude": _STRING_LIST,
                "prefer_additional": _STRING_LIST,
                "reject_additional": _STRING_LIST,
            },
            "additionalProperties": False,
        },
        "naming": {
            "type": "object",
            "properties": {"preset": {"type": "string"}},
            "additionalProperties": False,
        },
        "download_clients": {"type": "array", "items": _DOWNLOAD_CLIENT_SCHEMA},
        "remote_path_mappings": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["host", "remote_path", "local_path"],
                "properties": {
                    "host": {"type": "string"},
                    "remote_path": {"type": "string"},
                    "local_path": {"type": "string"},
                },
                "additionalProperties": False,
            },
        },
        "indexers": {"type": "array", "items": _INDEXER_SCHEMA},
        "root_folders": _STRING_LIST,
        "import_lists": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "type"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "type": {"type": "string", "minLength": 1},
                    "enabled": {"type": "boolean"},
                    "enable_auto": {"type": "boolean"},
                    "search_on_add": {"type": "boolean"},
                    "quality_profile_name": {"type": "string"},
                    "root_folder_path": {"type": "string"},
                    "monitor": {"type": "string"},
                    "minimum_availability": {"type": "string"},
                    "series_type": {"type": "string"},
                    "season_folder": {"type": "boolean"},
                    "should_monitor": {"type": "string"},
                    "settings": {"type": "object", "additionalProperties": {"type": "string"}},
                },
                "additionalProperties": False,
            },
        },
        "media_management": {
            "type": "object",
            "properties": {
                "recycle_bin": {"type": "string"},
                "recycle_bin_cleanup_days": {"type": "integer", "minimum": 0},
                "set_permissions": {"type": "boolean"},
                "chmod_folder": {"type": "string"},
                "chown_group": {"type": "string"},
                "delete_empty_folders": {"type": "boolean"},
                "create_empty_folders": {"type": "boolean"},
                "use_hardlinks": {"type": "boolean"},
                "watch_library_for_changes": {"type": "boolean"},
                "allow_fingerprinting": {"type": "string"},
            },
            "additionalProperties": False,
        },
        "authentication": {
            "type": "object",
            "properties": {
                "method": {"type": "string", "enum": ["none", "basic", "forms", "external"]},
                "username": {"type": "string"},
                "password": SECRET_SCHEMA,
                "authentication_required": {
                    "type": "string",
                    "enum": ["enabled", "disabledForLocalAddresses"],
                },
            },
            "additionalProperties": False,
        },
        "notifications": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "implementation"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "implementation": {"type": "string", "minLength": 1},
                    "on_grab": {"type": "boolean"},
                    "on_download": {"type": "boolean"},
                    "on_upgrade": {"type": "boolean"},
                    "on_rename": {"type": "boolean"},
                    "on_health_issue": {"type": "boolean"},
                    "on_health_restored": {"type": "boolean"},
                    "on_application_update": {"type": "boolean"},
                    "include_health_warnings": {"type": "boolean"},
                    "fields": {"type": "object"},
                },
                "additionalProperties": False,
            },
        },
        "custom_formats": {"type": "array", "items": _CUSTOM_FORMAT_SCHEMA},
        "delay_profiles": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "order": {"type": "integer", "minimum": 1},
                    "preferred_protocol": {"type": "string", "enum": ["torrent", "usenet"]},
                    "usenet_delay": {"type": "integer", "minimum": 0},
                    "torrent_delay": {"type": "integer", "minimum": 0},
                    "enable_usenet": {"type": "boolean"},
                    "enable_torrent": {"type": "boolean"},
                    "bypass_if_highest_quality": {"type": "boolean"},
                    "bypass_if_above_custom_format_score": {"type": "boolean"},
                    "minimum_custom_format_score": {"type": "integer"},
                    "tags": {"type": "array", "items": {"type": "integer"}},
                },
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
}

INSTANCES_DOCUMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["instances"],
    "properties": {"instances": {"type": "array", "items": INSTANCE_SCHEMA}},
    "additionalProperties": False,
}


def validate_against_schema(
    document: Any, schema: Dict[str, Any]
) -> Tuple[bool, Optional[str]]:
    """
    Validate a document against a JSON Schema.

    Args:
        document: The parsed document to validate
        schema: The Draft 7 JSON Schema to validate against

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        validator = Draft7Validator(schema, format_checker=Draft7Validator.FORMAT_CHECKER)
        errors = sorted(validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path])

        if not errors:
            return True, None

        error_messages = []
        for error in errors:
            path = ".".join(str(p) for p in error.absolute_path) or "(root)"
            error_messages.append(f"{path}: {error.message}")

        return False, "; ".join(error_messages)

    except ValidationError as e:
        return False, f"Validation error: {str(e)}"
    except Exception as e:
        logger.error(f"Unexpected error during validation: {e}")
        return False, f"Validation failed: {str(e)}"


def validate_instances_document(document: Any) -> Tuple[bool, Optional[str]]:
    """Validate a parsed instances file, plus name uniqueness."""
    valid, error = validate_against_schema(document, INSTANCES_DOCUMENT_SCHEMA)
    if not valid:
        return valid, error

    seen = set()
    for instance in document["instances"]:
        if instance["name"] in seen:
            return False, f"instances: duplicate instance name '{instance['name']}'"
        seen.add(instance["name"])
    return True, None
