"""Shared plumbing for Dashboard-backed data sources."""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Iterable

from merakiprov.framework.datasource import BaseDataSource
from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.mapping import apply_response
from merakiprov.framework.schema import Attribute, ListNestedAttribute, Schema, StringAttribute
from merakiprov.framework.values import is_known
from merakiprov.resources.base import ApiCallMixin


def item_attributes(schema: Schema, exclude: Iterable[str] = ()) -> dict[str, Attribute]:
    """Computed copies of a resource's attributes, for use as list items."""
    skip = set(exclude)
    return {name: attr.as_data_source() for name, attr in schema.attributes.items() if name not in skip}


def list_schema(
    description: str,
    arguments: dict[str, Attribute],
    items: dict[str, Attribute],
    item_description: str = "",
) -> Schema:
    attributes: dict[str, Attribute] = {"id": StringAttribute(computed=True, description="Example identifier")}
    attributes.update(arguments)
    attributes["list"] = ListNestedAttribute(
        computed=True,
        description=item_description or "List of results",
        attributes={name: attr.as_data_source() for name, attr in items.items()},
    )
    return Schema(attributes=attributes, description=description)


def object_schema(resource_schema: Schema, arguments: dict[str, Attribute], description: str = "") -> Schema:
    """Turn a settings resource schema into a data-source schema keyed by ``arguments``."""
    converted = resource_schema.as_data_source()
    converted.attributes.update(arguments)
    if description:
        converted.description = description
    return converted


def required_string(description: str) -> StringAttribute:
    return StringAttribute(required=True, description=description)


class MerakiDataSource(ApiCallMixin, BaseDataSource):
    """A data source backed by a single Dashboard GET."""

    arg_keys: ClassVar[tuple[str, ...]] = ()
    group: ClassVar[str] = ""
    operation: ClassVar[str] = ""

    def _endpoint(self) -> Callable[..., tuple[Any, Any]]:
        return getattr(getattr(self.client, self.group, None), self.operation, None)

    def query_params(self, config: dict[str, Any]) -> dict[str, Any] | None:
        """Query string parameters derived from optional arguments."""
        return None

    def _fetch(self, config: dict[str, Any], diags: Diagnostics) -> tuple[bool, Any]:
        if not self._require(config, diags, *self.arg_keys):
            return False, None
        args: list[Any] = [config[k] for k in self.arg_keys]
        params = self.query_params(config)
        if params is not None:
            args.append(params)
        return self._call(diags, f"read {self.type_name}", self._endpoint(), *args)

    def _identifier(self, config: dict[str, Any]) -> str:
        return ",".join(str(config[k]) for k in self.arg_keys) or self.type_name


class ListDataSource(MerakiDataSource):
    """Exposes a list endpoint as ``list`` plus the query arguments."""

    def transform(self, items: list[Any]) -> list[Any]:
        return items

    def read(self, config: dict[str, Any], diags: Diagnostics) -> dict[str, Any] | None:
        ok, data = self._fetch(config, diags)
        if not ok:
            return None
        schema = self.schema()
        model = schema.normalize(config)
        items = self.transform(data if isinstance(data, list) else [])
        model["list"] = schema.attributes["list"].from_api(items)
        model["id"] = self._identifier(config)
        self.log.debug(f"{self.type_name}: {len(model['list'])} items")
        return model


class ObjectDataSource(MerakiDataSource):
    """Exposes a single settings object."""

    def transform(self, data: Any) -> Any:
        return data

    def read(self, config: dict[str, Any], diags: Diagnostics) -> dict[str, Any] | None:
        ok, data = self._fetch(config, diags)
        if not ok:
            return None
        schema = self.schema()
        model = schema.normalize(config)
        model = apply_response(schema.attributes, model, self.transform(data), overwrite=True)
        for key in self.arg_keys:
            if is_known(config.get(key)):
                model[key] = config[key]
        model["id"] = self._identifier(config)
        return model
