"""Helpers for moving values between state models and Dashboard JSON.

``build_payload`` and ``apply_response`` walk a schema's attributes and do
the bulk of the work. The ``extract_*`` helpers are for the hand-written
corners where a JSON field does not map one-to-one onto an attribute.
"""

from __future__ import annotations

from typing import Any

from merakiprov.framework.schema import (
    BoolType,
    Float64Type,
    Int64Type,
    StringType,
    apply_response,
    build_payload,
)

__all__ = [
    "apply_response",
    "build_payload",
    "extract_string",
    "extract_int",
    "extract_float",
    "extract_bool",
    "extract_string_list",
    "extract_path",
    "split_import_id",
]


def extract_path(data: Any, *keys: str) -> Any:
    """Follow ``keys`` through nested dicts, returning None on the first miss."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def extract_string(data: dict[str, Any] | None, key: str) -> str | None:
    return StringType.convert((data or {}).get(key))


def extract_int(data: dict[str, Any] | None, key: str) -> int | None:
    """Read an integer that the API may send as an int, a float or a string."""
    return Int64Type.convert((data or {}).get(key))


def extract_float(data: dict[str, Any] | None, key: str) -> float | None:
    return Float64Type.convert((data or {}).get(key))


def extract_bool(data: dict[str, Any] | None, key: str) -> bool | None:
    return BoolType.convert((data or {}).get(key))


def extract_string_list(data: dict[str, Any] | None, key: str, *, as_set: bool = False) -> list[str] | None:
    raw = (data or {}).get(key)
    if not isinstance(raw, list):
        return None
    values = [StringType.convert(v) for v in raw if v is not None]
    if as_set:
        return sorted(set(values))  # type: ignore[type-var]
    return values  # type: ignore[return-value]


def split_import_id(import_id: str, *names: str) -> list[str] | None:
    """Split a comma-separated import id into exactly ``len(names)`` parts.

    Returns None when the id has the wrong number of parts or an empty part.
    """
    parts = [p.strip() for p in import_id.split(",")]
    if len(parts) != len(names) or any(not p for p in parts):
        return None
    return parts
