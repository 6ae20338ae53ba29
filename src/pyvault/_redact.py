"""Helpers for safe debug logging.

Vault entries routinely hold secrets. Entries and request metadata pass
through :func:`redact_for_log` before they reach DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

_REDACTED = "<redacted>"
_SENSITIVE_KEYS: frozenset[str] = frozenset({"value", "password", "secret", "token", "authorization"})


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a copy of *value* with sensitive fields masked.

    Models are dumped to their JSON form first. Mappings are walked
    recursively; long strings are truncated.
    """
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")

    if isinstance(value, Mapping):
        return {
            str(k): _REDACTED if str(k).lower() in _SENSITIVE_KEYS else redact_for_log(v, max_string=max_string)
            for k, v in value.items()
        }

    if isinstance(value, str) and len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    return value
