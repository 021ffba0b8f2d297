"""Tri-state attribute values: known, null (``None``) and unknown."""

from __future__ import annotations

from typing import Any


class _Unknown:
    """Marker for a value that is only known after apply."""

    _instance: _Unknown | None = None

    def __new__(cls) -> _Unknown:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<unknown>"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Unknown:
        return self

    def __deepcopy__(self, memo: dict) -> _Unknown:  # type: ignore[type-arg]
        return self

    def __reduce__(self) -> str:
        return "UNKNOWN"


UNKNOWN = _Unknown()


def is_unknown(value: Any) -> bool:
    return value is UNKNOWN


def is_null(value: Any) -> bool:
    return value is None


def is_known(value: Any) -> bool:
    """True when the value is neither null nor unknown (top level only)."""
    return value is not None and value is not UNKNOWN


def contains_unknown(value: Any) -> bool:
    """True when the value or anything nested inside it is unknown."""
    if value is UNKNOWN:
        return True
    if isinstance(value, dict):
        return any(contains_unknown(v) for v in value.values())
    if isinstance(value, list):
        return any(contains_unknown(v) for v in value)
    return False


def resolve_unknowns(value: Any) -> Any:
    """Return a copy of ``value`` with every unknown replaced by null."""
    if value is UNKNOWN:
        return None
    if isinstance(value, dict):
        return {k: resolve_unknowns(v) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_unknowns(v) for v in value]
    return value
