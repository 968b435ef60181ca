"""Plain-data rendering of IR values (for JSON/YAML output and hashing)."""

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any, Dict

from ir.types import IR

SECRET_FIELDS = frozenset({"api_key", "password", "apikey", "apiKey", "token"})
REDACTED = "********"


def to_plain(value: Any, redact_secrets: bool = False) -> Any:
    """
    Convert dataclasses, tuples and datetimes into JSON-compatible data.

    Args:
        value: Any IR value (dataclass instance, mapping, sequence, scalar)
        redact_secrets: Replace non-empty secret fields with a placeholder

    Returns:
        Nested dicts/lists/scalars
    """
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if redact_secrets and key in SECRET_FIELDS and item:
                result[key] = REDACTED
            else:
                result[key] = to_plain(item, redact_secrets)
        return result
    if isinstance(value, (list, tuple)):
        return [to_plain(item, redact_secrets) for item in value]
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def strip_secrets(data: Any) -> Any:
    """Drop secret keys entirely from already-plain data."""
    if isinstance(data, dict):
        return {k: strip_secrets(v) for k, v in data.items() if k not in SECRET_FIELDS}
    if isinstance(data, list):
        return [strip_secrets(item) for item in data]
    return data


def ir_to_dict(ir: IR, redact_secrets: bool = False) -> Dict[str, Any]:
    """Render an IR as a plain dict."""
    return to_plain(ir, redact_secrets)


def canonical_json(data: Any) -> str:
    """Stable JSON encoding: sorted keys, no insignificant whitespace."""
    return json.dumps(
        to_plain(data), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )
