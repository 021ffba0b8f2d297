"""Workspace configuration loaded from YAML.

The document follows the layout of Terraform's JSON syntax::

    provider:
      meraki:
        api_key: ...
    resource:
      meraki_network:
        lab:
          organization_id: "123456"
          name: lab
          product_types: [appliance, switch]
    data:
      meraki_organizations:
        all: {}

JSON is valid YAML, so ``.tf.json``-style documents load unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NamedTuple

import yaml

from merakiprov.exceptions import ConfigurationError

MANAGED = "managed"
DATA = "data"

META_ARGUMENTS = ("depends_on",)


class Address(NamedTuple):
    """Identifies one block: ``<type>.<name>`` or ``data.<type>.<name>``."""

    mode: str
    type: str
    name: str

    def __str__(self) -> str:
        if self.mode == DATA:
            return f"data.{self.type}.{self.name}"
        return f"{self.type}.{self.name}"

    @classmethod
    def parse(cls, text: str) -> Address:
        parts = text.split(".")
        if len(parts) == 3 and parts[0] == "data":
            return cls(DATA, parts[1], parts[2])
        if len(parts) == 2 and all(parts):
            return cls(MANAGED, parts[0], parts[1])
        raise ConfigurationError(f"Invalid address '{text}': expected <type>.<name> or data.<type>.<name>")


@dataclass
class Block:
    address: Address
    body: dict[str, Any]
    depends_on: list[Address] = field(default_factory=list)


@dataclass
class WorkspaceConfig:
    """A parsed configuration document."""

    provider: dict[str, Any] = field(default_factory=dict)
    blocks: dict[Address, Block] = field(default_factory=dict)
    source: str = ""

    def resources(self) -> list[Block]:
        return [b for b in self.blocks.values() if b.address.mode == MANAGED]

    def data_sources(self) -> list[Block]:
        return [b for b in self.blocks.values() if b.address.mode == DATA]

    def get(self, address: Address) -> Block | None:
        return self.blocks.get(address)


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{where} must be a mapping, got {type(value).__name__}")
    return value


def _parse_blocks(section: Any, mode: str, config: WorkspaceConfig) -> None:
    label = "data" if mode == DATA else "resource"
    for type_name, instances in _mapping(section, label).items():
        for name, body in _mapping(instances, f"{label}.{type_name}").items():
            body = dict(_mapping(body, f"{label}.{type_name}.{name}"))
            address = Address(mode, type_name, name)
            depends_on = body.pop("depends_on", None) or []
            if not isinstance(depends_on, list):
                raise ConfigurationError(f"{address}: depends_on must be a list of addresses")
            config.blocks[address] = Block(
                address=address,
                body=body,
                depends_on=[Address.parse(str(dep)) for dep in depends_on],
            )


def parse_config(document: Any, source: str = "") -> WorkspaceConfig:
    """Turn a loaded YAML/JSON document into a ``WorkspaceConfig``."""
    root = _mapping(document, "configuration")
    unexpected = set(root) - {"provider", "resource", "data", "terraform"}
    if unexpected:
        raise ConfigurationError(f"Unsupported top-level keys: {', '.join(sorted(unexpected))}")

    config = WorkspaceConfig(source=source)
    providers = _mapping(root.get("provider"), "provider")
    for provider_name in providers:
        if provider_name != "meraki":
            raise ConfigurationError(f"Unsupported provider '{provider_name}', only 'meraki' is available")
    config.provider = dict(_mapping(providers.get("meraki"), "provider.meraki"))

    _parse_blocks(root.get("resource"), MANAGED, config)
    _parse_blocks(root.get("data"), DATA, config)
    return config


def load_config(path: str | Path) -> WorkspaceConfig:
    """Read and parse a configuration file.

    Raises:
        ConfigurationError: If the file is missing, not valid YAML, or malformed.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {config_path}")
    try:
        with open(config_path) as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigurationError(f"Could not parse {config_path}: {err}") from err
    return parse_config(document, source=str(config_path))
