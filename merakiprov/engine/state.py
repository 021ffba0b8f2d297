"""Persisted state: one JSON document listing the managed resource instances."""

from __future__ import annotations

import json
import os
import tempfile
from graphlib import CycleError, TopologicalSorter
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from merakiprov.engine.config import MANAGED, Address
from merakiprov.exceptions import StateError
from merakiprov.framework.values import resolve_unknowns

STATE_VERSION = 1


class ResourceInstance(BaseModel):
    type: str
    name: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    dependencies: list[str] = Field(default_factory=list)
    schema_version: int = 0

    @property
    def address(self) -> Address:
        return Address(MANAGED, self.type, self.name)


class StateFile(BaseModel):
    version: int = STATE_VERSION
    serial: int = 0
    provider_version: str = ""
    resources: list[ResourceInstance] = Field(default_factory=list)

    def get(self, address: Address) -> ResourceInstance | None:
        for instance in self.resources:
            if instance.address == address:
                return instance
        return None

    def put(self, instance: ResourceInstance) -> None:
        """Insert or replace an instance. Unknown values are stored as null."""
        instance.attributes = resolve_unknowns(instance.attributes)
        for idx, existing in enumerate(self.resources):
            if existing.address == instance.address:
                self.resources[idx] = instance
                return
        self.resources.append(instance)

    def remove(self, address: Address) -> ResourceInstance | None:
        for idx, existing in enumerate(self.resources):
            if existing.address == address:
                return self.resources.pop(idx)
        return None

    def addresses(self) -> list[Address]:
        return [i.address for i in self.resources]

    def destroy_order(self) -> list[Address]:
        """Instances ordered so that dependents come before what they depend on."""
        known = set(self.addresses())
        graph = {
            i.address: sorted(dep for dep in (Address.parse(d) for d in i.dependencies) if dep in known)
            for i in self.resources
        }
        try:
            ordered = list(TopologicalSorter(graph).static_order())
        except CycleError as err:
            raise StateError(f"State dependencies form a cycle: {err.args[1]}") from err
        return list(reversed(ordered))


class StateStore:
    """Loads and atomically rewrites the state file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.log = logger.bind(classname=self.__class__.__name__)

    def load(self) -> StateFile:
        """Read the state file; a missing file is an empty state.

        Raises:
            StateError: If the file exists but cannot be parsed.
        """
        if not self.path.exists():
            return StateFile()
        try:
            with open(self.path) as f:
                raw = json.load(f)
            state = StateFile.model_validate(raw)
        except (OSError, json.JSONDecodeError, ValidationError) as err:
            raise StateError(f"Could not read state file {self.path}: {err}") from err
        if state.version > STATE_VERSION:
            raise StateError(f"State file {self.path} has version {state.version}, newer than supported {STATE_VERSION}")
        return state

    def save(self, state: StateFile) -> None:
        """Bump the serial and replace the state file in one rename."""
        state.serial += 1
        payload = state.model_dump(mode="json")
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=directory)
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(payload, f, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as err:
            Path(tmp_name).unlink(missing_ok=True)
            raise StateError(f"Could not write state file {self.path}: {err}") from err
        self.log.debug(f"state serial {state.serial} written to {self.path}")
