"""Declarative attribute schemas for resources, data sources and the provider.

An attribute knows its value type, whether it is required, optional and/or
computed, the JSON key it travels under (``api_name``) and how to convert
values between the API's JSON representation and state.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Iterable

from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.planmodifiers import PlanModifier
from merakiprov.framework.validators import Validator
from merakiprov.framework.values import UNKNOWN, contains_unknown, is_known

# ── primitive value types ─────────────────────────────────────────────


def _to_string(raw: Any) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    if isinstance(raw, (int, float)):
        return str(raw)
    return json.dumps(raw, sort_keys=True)


def _to_int(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw)
    if isinstance(raw, str):
        try:
            return int(float(raw))
        except ValueError:
            return None
    return None


def _to_float(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        try:
            return float(raw)
        except ValueError:
            return None
    return None


def _to_bool(raw: Any) -> bool | None:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.lower() in ("true", "false"):
        return raw.lower() == "true"
    return None


@dataclass(frozen=True)
class ValueType:
    """A primitive value type with its JSON conversion."""

    name: str
    python_types: tuple[type, ...]
    convert: Callable[[Any], Any]

    def check(self, value: Any) -> bool:
        if isinstance(value, bool) and bool not in self.python_types:
            return False
        return isinstance(value, self.python_types)


StringType = ValueType("string", (str,), _to_string)
Int64Type = ValueType("int64", (int,), _to_int)
Float64Type = ValueType("float64", (int, float), _to_float)
BoolType = ValueType("bool", (bool,), _to_bool)

_ABSENT = object()


# ── attributes ────────────────────────────────────────────────────────


class Attribute:
    """Base class for all schema attributes."""

    type_name: ClassVar[str] = "attribute"

    def __init__(
        self,
        *,
        description: str = "",
        required: bool = False,
        optional: bool = False,
        computed: bool = False,
        sensitive: bool = False,
        api_name: str | None = None,
        validators: Iterable[Validator] = (),
        plan_modifiers: Iterable[PlanModifier] = (),
        default: Any = None,
        deprecation_message: str = "",
    ) -> None:
        if required and (optional or computed):
            raise ValueError("a required attribute cannot also be optional or computed")
        if not (required or optional or computed):
            raise ValueError("an attribute must be required, optional or computed")
        self.description = description
        self.required = required
        self.optional = optional
        self.computed = computed
        self.sensitive = sensitive
        self.api_name = api_name
        self.validators = list(validators)
        self.plan_modifiers = list(plan_modifiers)
        self.default = default
        self.deprecation_message = deprecation_message

    @property
    def computed_only(self) -> bool:
        return self.computed and not (self.optional or self.required)

    def validate(self, value: Any, path: str, diags: Diagnostics) -> None:
        """Check a known config value's type, then run the validators."""
        if not self._check_type(value, path, diags):
            return
        for validator in self.validators:
            validator.validate(value, path, diags)

    def normalize(self, value: Any) -> Any:
        """Return the canonical state form of a value."""
        return value

    def from_api(self, raw: Any) -> Any:
        """Convert a JSON value from the API into a state value."""
        raise NotImplementedError

    def merge_known(self, current: Any, raw: Any) -> Any:
        """Combine a known planned value with the API's answer.

        Primitives keep the planned value; nested attributes fill in their
        own null/unknown children.
        """
        return self.normalize(current)

    def to_api(self, value: Any) -> Any:
        """Convert a known state value into its JSON payload form."""
        raise NotImplementedError

    def as_data_source(self) -> Attribute:
        clone = copy.copy(self)
        clone.required = False
        clone.optional = False
        clone.computed = True
        clone.plan_modifiers = []
        clone.default = None
        return clone

    def _check_type(self, value: Any, path: str, diags: Diagnostics) -> bool:
        raise NotImplementedError

    def _type_error(self, value: Any, path: str, diags: Diagnostics) -> bool:
        diags.add_error(
            "Incorrect attribute value type",
            f"Attribute {path} expects {self.type_name}, got {type(value).__name__}: {value!r}",
            path,
        )
        return False

    def __repr__(self) -> str:
        flags = [f for f in ("required", "optional", "computed", "sensitive") if getattr(self, f)]
        return f"{type(self).__name__}({', '.join(flags)}, api_name={self.api_name!r})"


class _PrimitiveAttribute(Attribute):
    value_type: ClassVar[ValueType]

    def _check_type(self, value: Any, path: str, diags: Diagnostics) -> bool:
        if not self.value_type.check(value):
            return self._type_error(value, path, diags)
        return True

    def normalize(self, value: Any) -> Any:
        if is_known(value):
            return self.value_type.convert(value)
        return value

    def from_api(self, raw: Any) -> Any:
        return self.value_type.convert(raw)

    def to_api(self, value: Any) -> Any:
        return value


class StringAttribute(_PrimitiveAttribute):
    type_name = "string"
    value_type = StringType


class Int64Attribute(_PrimitiveAttribute):
    type_name = "int64"
    value_type = Int64Type


class Float64Attribute(_PrimitiveAttribute):
    type_name = "float64"
    value_type = Float64Type


class BoolAttribute(_PrimitiveAttribute):
    type_name = "bool"
    value_type = BoolType


class _CollectionAttribute(Attribute):
    def __init__(self, element_type: ValueType = StringType, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.element_type = element_type

    def _convert_elements(self, items: Iterable[Any]) -> list[Any]:
        converted = []
        for item in items:
            if item is UNKNOWN:
                converted.append(item)
                continue
            value = self.element_type.convert(item)
            if value is not None:
                converted.append(value)
        return converted

    def _check_elements(self, items: Iterable[Any], path: str, diags: Diagnostics) -> bool:
        ok = True
        for index, item in enumerate(items):
            if is_known(item) and not self.element_type.check(item):
                diags.add_error(
                    "Incorrect attribute value type",
                    f"Attribute {path}[{index}] expects {self.element_type.name}, got {type(item).__name__}",
                    f"{path}[{index}]",
                )
                ok = False
        return ok


class ListAttribute(_CollectionAttribute):
    type_name = "list"

    def _check_type(self, value: Any, path: str, diags: Diagnostics) -> bool:
        if not isinstance(value, (list, tuple)):
            return self._type_error(value, path, diags)
        return self._check_elements(value, path, diags)

    def normalize(self, value: Any) -> Any:
        if is_known(value):
            return self._convert_elements(value)
        return value

    def from_api(self, raw: Any) -> Any:
        if not isinstance(raw, list):
            return None
        return self._convert_elements(raw)

    def to_api(self, value: Any) -> Any:
        return [v for v in value if is_known(v)]


class SetAttribute(ListAttribute):
    """Unordered, de-duplicated collection, stored as a sorted list."""

    type_name = "set"

    def normalize(self, value: Any) -> Any:
        if not is_known(value):
            return value
        items = self._convert_elements(value)
        if any(item is UNKNOWN for item in items):
            return items
        return sorted(set(items), key=lambda v: (str(type(v)), v))

    def from_api(self, raw: Any) -> Any:
        if not isinstance(raw, list):
            return None
        return self.normalize(raw)


class MapAttribute(_CollectionAttribute):
    type_name = "map"

    def _check_type(self, value: Any, path: str, diags: Diagnostics) -> bool:
        if not isinstance(value, dict):
            return self._type_error(value, path, diags)
        return self._check_elements(value.values(), path, diags)

    def normalize(self, value: Any) -> Any:
        if not is_known(value):
            return value
        return {str(k): v if v is UNKNOWN else self.element_type.convert(v) for k, v in value.items()}

    def from_api(self, raw: Any) -> Any:
        if not isinstance(raw, dict):
            return None
        return self.normalize(raw)

    def to_api(self, value: Any) -> Any:
        return {k: v for k, v in value.items() if is_known(v)}


class _NestedAttribute(Attribute):
    def __init__(self, attributes: dict[str, Attribute], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.attributes = attributes

    def as_data_source(self) -> Attribute:
        clone = super().as_data_source()
        assert isinstance(clone, _NestedAttribute)
        clone.attributes = {name: attr.as_data_source() for name, attr in self.attributes.items()}
        return clone

    def _check_object(self, value: Any, path: str, diags: Diagnostics) -> bool:
        if not isinstance(value, dict):
            return self._type_error(value, path, diags)
        validate_attributes(self.attributes, value, path, diags)
        return True

    def _normalize_object(self, value: Any) -> Any:
        if not is_known(value):
            return value
        return normalize_attributes(self.attributes, value)


class SingleNestedAttribute(_NestedAttribute):
    type_name = "object"

    def _check_type(self, value: Any, path: str, diags: Diagnostics) -> bool:
        return self._check_object(value, path, diags)

    def normalize(self, value: Any) -> Any:
        return self._normalize_object(value)

    def from_api(self, raw: Any) -> Any:
        if not isinstance(raw, dict):
            return None
        return apply_response(self.attributes, {}, raw, overwrite=True)

    def merge_known(self, current: Any, raw: Any) -> Any:
        return apply_response(self.attributes, current, raw if isinstance(raw, dict) else {})

    def to_api(self, value: Any) -> Any:
        return build_payload(self.attributes, value)


class ListNestedAttribute(_NestedAttribute):
    type_name = "list of object"

    def _check_type(self, value: Any, path: str, diags: Diagnostics) -> bool:
        if not isinstance(value, (list, tuple)):
            return self._type_error(value, path, diags)
        ok = True
        for index, item in enumerate(value):
            if is_known(item):
                ok = self._check_object(item, f"{path}[{index}]", diags) and ok
        return ok

    def normalize(self, value: Any) -> Any:
        if not is_known(value):
            return value
        return [self._normalize_object(item) for item in value]

    def from_api(self, raw: Any) -> Any:
        if not isinstance(raw, list):
            return None
        return [apply_response(self.attributes, {}, item, overwrite=True) for item in raw if isinstance(item, dict)]

    def merge_known(self, current: Any, raw: Any) -> Any:
        raw_items = [item for item in raw if isinstance(item, dict)] if isinstance(raw, list) else []
        merged = []
        for index, item in enumerate(current):
            answer = raw_items[index] if index < len(raw_items) else {}
            merged.append(apply_response(self.attributes, item or {}, answer))
        return merged

    def to_api(self, value: Any) -> Any:
        return [build_payload(self.attributes, item) for item in value if is_known(item)]


class SetNestedAttribute(ListNestedAttribute):
    """Unordered collection of objects.

    Fully known sets are stored de-duplicated and sorted by each element's
    JSON form, so the same elements always compare equal regardless of the
    order the API returns them in. Elements are paired with existing ones by
    content, never by position.
    """

    type_name = "set of object"

    @staticmethod
    def canonical(items: list[Any]) -> list[Any]:
        if contains_unknown(items):
            return items
        unique = {json.dumps(item, sort_keys=True, default=str): item for item in items}
        return [unique[key] for key in sorted(unique)]

    @staticmethod
    def match_element(item: Any, candidates: list[Any]) -> int | None:
        """Index of the first candidate agreeing with every known value of ``item``."""
        for index, candidate in enumerate(candidates):
            if _element_matches(item, candidate):
                return index
        return None

    def normalize(self, value: Any) -> Any:
        value = super().normalize(value)
        if not is_known(value):
            return value
        return self.canonical(value)

    def from_api(self, raw: Any) -> Any:
        items = super().from_api(raw)
        if items is None:
            return None
        return self.canonical(items)

    def merge_known(self, current: Any, raw: Any) -> Any:
        answers = [item for item in raw if isinstance(item, dict)] if isinstance(raw, list) else []
        converted = [apply_response(self.attributes, {}, item, overwrite=True) for item in answers]
        merged = []
        for item in current:
            item = item or {}
            answer: dict[str, Any] = {}
            index = self.match_element(item, converted)
            if index is not None:
                converted.pop(index)
                answer = answers.pop(index)
            merged.append(apply_response(self.attributes, item, answer))
        return self.canonical(merged)


def _element_matches(item: Any, candidate: Any) -> bool:
    # null and unknown match anything
    if not is_known(item):
        return True
    if isinstance(item, dict):
        return isinstance(candidate, dict) and all(_element_matches(v, candidate.get(k)) for k, v in item.items())
    return item == candidate


class MapNestedAttribute(_NestedAttribute):
    type_name = "map of object"

    def _check_type(self, value: Any, path: str, diags: Diagnostics) -> bool:
        if not isinstance(value, dict):
            return self._type_error(value, path, diags)
        ok = True
        for key, item in value.items():
            if is_known(item):
                ok = self._check_object(item, f"{path}[{key!r}]", diags) and ok
        return ok

    def normalize(self, value: Any) -> Any:
        if not is_known(value):
            return value
        return {str(k): self._normalize_object(v) for k, v in value.items()}

    def from_api(self, raw: Any) -> Any:
        if not isinstance(raw, dict):
            return None
        return {
            str(k): apply_response(self.attributes, {}, v, overwrite=True) for k, v in raw.items() if isinstance(v, dict)
        }

    def merge_known(self, current: Any, raw: Any) -> Any:
        raw = raw if isinstance(raw, dict) else {}
        return {k: apply_response(self.attributes, v or {}, raw.get(k) or {}) for k, v in current.items()}

    def to_api(self, value: Any) -> Any:
        return {k: build_payload(self.attributes, v) for k, v in value.items() if is_known(v)}


# ── attribute-map helpers ─────────────────────────────────────────────


def validate_attributes(attributes: dict[str, Attribute], config: dict[str, Any], path: str, diags: Diagnostics) -> None:
    """Validate a config object against a set of attributes."""
    prefix = f"{path}." if path else ""
    for key in config:
        if key not in attributes:
            diags.add_error(
                "Unsupported argument",
                f'An argument named "{key}" is not expected here.',
                f"{prefix}{key}",
            )
    for name, attr in attributes.items():
        attr_path = f"{prefix}{name}"
        value = config.get(name)
        if value is None:
            if attr.required:
                diags.add_error(
                    "Missing required argument",
                    f'The argument "{name}" is required, but no definition was found.',
                    attr_path,
                )
            continue
        if attr.computed_only:
            diags.add_error(
                "Invalid Configuration for Read-Only Attribute",
                f'Cannot set value for attribute "{name}" as the provider has marked it as read-only.',
                attr_path,
            )
            continue
        if value is UNKNOWN:
            continue
        attr.validate(value, attr_path, diags)


def normalize_attributes(attributes: dict[str, Attribute], values: dict[str, Any]) -> dict[str, Any]:
    """Return ``values`` in canonical form with every attribute present."""
    return {name: attr.normalize(values.get(name)) for name, attr in attributes.items()}


def build_payload(attributes: dict[str, Attribute], model: dict[str, Any]) -> dict[str, Any]:
    """Copy every known, user-settable attribute of ``model`` into a JSON dict.

    Null and unknown values are left out, as are computed-only attributes and
    attributes without an ``api_name`` (path parameters, synthetic ids).
    """
    payload: dict[str, Any] = {}
    for name, attr in attributes.items():
        if attr.api_name is None or attr.computed_only:
            continue
        value = model.get(name)
        if not is_known(value):
            continue
        payload[attr.api_name] = attr.to_api(value)
    return payload


def apply_response(
    attributes: dict[str, Attribute],
    model: dict[str, Any],
    data: dict[str, Any] | None,
    *,
    overwrite: bool = False,
) -> dict[str, Any]:
    """Fill ``model`` from an API response and return the new model.

    With ``overwrite=False`` (create/update) known planned values are kept
    and only null/unknown attributes take the response's value. With
    ``overwrite=True`` (read/import) the response wins, except that sensitive
    attributes the API does not echo back keep their current value.
    Attributes without an ``api_name`` are copied through untouched.
    """
    data = data or {}
    result = dict(model)
    for name, attr in attributes.items():
        current = model.get(name)
        if attr.api_name is None:
            result[name] = current
            continue
        raw = data.get(attr.api_name, _ABSENT)
        if raw is _ABSENT:
            if attr.sensitive and is_known(current):
                result[name] = current
                continue
            raw = None
        if not overwrite and is_known(current):
            result[name] = attr.merge_known(current, raw)
        else:
            result[name] = attr.from_api(raw)
    return result


@dataclass
class Schema:
    """The attribute set of a resource, data source or provider."""

    attributes: dict[str, Attribute]
    description: str = ""
    version: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    def validate_config(self, config: dict[str, Any], diags: Diagnostics) -> None:
        validate_attributes(self.attributes, config, "", diags)

    def normalize(self, values: dict[str, Any]) -> dict[str, Any]:
        return normalize_attributes(self.attributes, values)

    def empty_model(self) -> dict[str, Any]:
        return {name: None for name in self.attributes}

    def as_data_source(self) -> Schema:
        """Convert a resource schema into an all-computed data-source schema."""
        return Schema(
            attributes={name: attr.as_data_source() for name, attr in self.attributes.items()},
            description=self.description,
        )
