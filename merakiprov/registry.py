"""Resource and data-source type registry."""

from __future__ import annotations

from typing import Callable, TypeVar

from merakiprov.framework.datasource import BaseDataSource
from merakiprov.framework.resource import BaseResource

_RESOURCE_REGISTRY: dict[str, type[BaseResource]] = {}
_DATA_SOURCE_REGISTRY: dict[str, type[BaseDataSource]] = {}

R = TypeVar("R", bound=type[BaseResource])
D = TypeVar("D", bound=type[BaseDataSource])


def register_resource(type_name: str) -> Callable[[R], R]:
    """Decorator to register a resource class under its type name.

    Usage::

        @register_resource("meraki_network")
        class NetworkResource(MerakiResource):
            ...
    """

    def decorator(cls: R) -> R:
        if type_name in _RESOURCE_REGISTRY:
            raise ValueError(f"Resource type '{type_name}' is already registered")
        cls.type_name = type_name
        _RESOURCE_REGISTRY[type_name] = cls
        return cls

    return decorator


def register_data_source(type_name: str) -> Callable[[D], D]:
    """Decorator to register a data-source class under its type name."""

    def decorator(cls: D) -> D:
        if type_name in _DATA_SOURCE_REGISTRY:
            raise ValueError(f"Data source type '{type_name}' is already registered")
        cls.type_name = type_name
        _DATA_SOURCE_REGISTRY[type_name] = cls
        return cls

    return decorator


def create_resource(type_name: str) -> BaseResource:
    """Instantiate the resource registered as ``type_name``.

    Raises:
        ValueError: If the type is not registered.
    """
    if type_name not in _RESOURCE_REGISTRY:
        available = ", ".join(sorted(_RESOURCE_REGISTRY.keys()))
        raise ValueError(f"Unknown resource type '{type_name}'. Available: {available}")
    return _RESOURCE_REGISTRY[type_name]()


def create_data_source(type_name: str) -> BaseDataSource:
    """Instantiate the data source registered as ``type_name``.

    Raises:
        ValueError: If the type is not registered.
    """
    if type_name not in _DATA_SOURCE_REGISTRY:
        available = ", ".join(sorted(_DATA_SOURCE_REGISTRY.keys()))
        raise ValueError(f"Unknown data source type '{type_name}'. Available: {available}")
    return _DATA_SOURCE_REGISTRY[type_name]()


def list_resources() -> list[str]:
    """Return a sorted list of registered resource type names."""
    return sorted(_RESOURCE_REGISTRY.keys())


def list_data_sources() -> list[str]:
    """Return a sorted list of registered data-source type names."""
    return sorted(_DATA_SOURCE_REGISTRY.keys())
