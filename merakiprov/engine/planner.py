"""Plan computation: refresh state, derive planned values, classify changes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from merakiprov.engine.config import DATA, Address, Block, WorkspaceConfig
from merakiprov.engine.references import Lookup, dependencies, dependency_order, resolve, walk_path
from merakiprov.engine.state import StateFile
from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.planmodifiers import PlanModifyRequest
from merakiprov.framework.resource import Model
from merakiprov.framework.schema import (
    Attribute,
    ListNestedAttribute,
    MapNestedAttribute,
    Schema,
    SetNestedAttribute,
    SingleNestedAttribute,
)
from merakiprov.framework.values import UNKNOWN, contains_unknown, is_unknown
from merakiprov.provider import MerakiProvider


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"
    READ = "read"
    NOOP = "no-op"


@dataclass
class ResourceChange:
    """One planned step for a resource instance (or a deferred data-source read)."""

    address: Address
    action: Action
    before: Model | None = None
    after: Model | None = None
    replace_paths: list[str] = field(default_factory=list)
    dependencies: list[Address] = field(default_factory=list)


@dataclass
class Plan:
    changes: list[ResourceChange] = field(default_factory=list)
    data: dict[Address, Model] = field(default_factory=dict)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def pending(self) -> list[ResourceChange]:
        return [c for c in self.changes if c.action != Action.NOOP]

    def has_changes(self) -> bool:
        return any(c.action not in (Action.NOOP, Action.READ) for c in self.changes)

    def summary(self) -> dict[str, int]:
        counts = {"add": 0, "change": 0, "destroy": 0}
        for change in self.changes:
            if change.action == Action.CREATE:
                counts["add"] += 1
            elif change.action == Action.UPDATE:
                counts["change"] += 1
            elif change.action == Action.DELETE:
                counts["destroy"] += 1
            elif change.action == Action.REPLACE:
                counts["add"] += 1
                counts["destroy"] += 1
        return counts

    def get(self, address: Address) -> ResourceChange | None:
        for change in self.changes:
            if change.address == address:
                return change
        return None


# ── planned values ────────────────────────────────────────────────────


def propose_value(attr: Attribute, config_value: Any, prior_value: Any, has_prior: bool) -> Any:
    """Planned value of one attribute before plan modifiers run.

    Unset computed attributes carry their prior value (or UNKNOWN without
    one); unset attributes with a static default take the default.
    """
    if config_value is None:
        if attr.default is not None:
            return attr.normalize(attr.default)
        if attr.computed:
            return prior_value if has_prior else UNKNOWN
        return None
    if is_unknown(config_value):
        return UNKNOWN

    if isinstance(attr, SingleNestedAttribute) and isinstance(config_value, dict):
        prior_obj = prior_value if isinstance(prior_value, dict) else None
        return _propose_object(attr.attributes, config_value, prior_obj, has_prior)
    if isinstance(attr, SetNestedAttribute) and isinstance(config_value, list):
        pool = [item for item in prior_value if isinstance(item, dict)] if isinstance(prior_value, list) else []
        proposed = []
        for item in attr.normalize(config_value):
            if not isinstance(item, dict):
                proposed.append(item)
                continue
            index = attr.match_element(item, pool)
            prior_item = pool.pop(index) if index is not None else None
            proposed.append(_propose_object(attr.attributes, item, prior_item, has_prior))
        return attr.normalize(proposed)
    if isinstance(attr, ListNestedAttribute) and isinstance(config_value, list):
        prior_items = prior_value if isinstance(prior_value, list) else []
        return [
            _propose_object(
                attr.attributes,
                item,
                prior_items[idx] if idx < len(prior_items) and isinstance(prior_items[idx], dict) else None,
                has_prior,
            )
            if isinstance(item, dict)
            else item
            for idx, item in enumerate(attr.normalize(config_value))
        ]
    if isinstance(attr, MapNestedAttribute) and isinstance(config_value, dict):
        prior_map = prior_value if isinstance(prior_value, dict) else {}
        return {
            str(key): _propose_object(
                attr.attributes,
                item,
                prior_map.get(str(key)) if isinstance(prior_map.get(str(key)), dict) else None,
                has_prior,
            )
            if isinstance(item, dict)
            else item
            for key, item in config_value.items()
        }
    return attr.normalize(config_value)


def _propose_object(attributes: dict[str, Attribute], config: dict[str, Any], prior: dict[str, Any] | None, has_prior: bool) -> dict[str, Any]:
    has_prior = has_prior and prior is not None
    prior = prior or {}
    return {name: propose_value(attr, config.get(name), prior.get(name), has_prior) for name, attr in attributes.items()}


def plan_resource(schema: Schema, config: Model, prior: Model | None) -> tuple[Action, Model, list[str]]:
    """Classify a configured resource against its prior state.

    Returns the action, the planned model and the attributes forcing a
    replacement.
    """
    has_prior = prior is not None
    prior = prior or {}
    planned = {
        name: propose_value(attr, config.get(name), prior.get(name), has_prior) for name, attr in schema.attributes.items()
    }
    if not has_prior:
        return Action.CREATE, _run_modifiers(schema, config, planned, prior, False)[0], []

    changed = [name for name in schema.attributes if planned[name] != prior.get(name)]
    if not changed:
        return Action.NOOP, planned, []

    for name, attr in schema.attributes.items():
        if config.get(name) is None and attr.default is None and attr.computed:
            planned[name] = UNKNOWN
    planned, replace_paths = _run_modifiers(schema, config, planned, prior, True)
    if not replace_paths:
        return Action.UPDATE, planned, []

    # The replacement is a new object: nothing carries over from the prior state.
    fresh = {
        name: propose_value(attr, config.get(name), None, False) for name, attr in schema.attributes.items()
    }
    return Action.REPLACE, _run_modifiers(schema, config, fresh, {}, False)[0], replace_paths


def _run_modifiers(
    schema: Schema, config: Model, planned: Model, prior: Model, has_prior: bool
) -> tuple[Model, list[str]]:
    replace_paths: list[str] = []
    result = dict(planned)
    for name, attr in schema.attributes.items():
        for modifier in attr.plan_modifiers:
            response = modifier.modify(
                PlanModifyRequest(
                    config=config.get(name), planned=result[name], prior=prior.get(name), has_prior_state=has_prior
                )
            )
            result[name] = response.planned
            if response.requires_replace and name not in replace_paths:
                replace_paths.append(name)
    return result, replace_paths


# ── planner ───────────────────────────────────────────────────────────


class Planner:
    """Computes a ``Plan`` for a configuration against the current state.

    The provider must already be configured: refresh and data-source reads
    call the API.
    """

    def __init__(self, provider: MerakiProvider, config: WorkspaceConfig, state: StateFile):
        self.provider = provider
        self.config = config
        self.state = state
        self.log = logger.bind(classname=self.__class__.__name__)

    def refresh(self, diags: Diagnostics) -> None:
        """Re-read every state instance; instances that are gone are dropped."""
        for instance in list(self.state.resources):
            resource = self.provider.resource(instance.type, diags)
            step = Diagnostics()
            model = resource.read(dict(instance.attributes), step)
            diags.extend(step)
            if step.has_error():
                continue
            if model is None:
                self.log.info(f"{instance.address} no longer exists, removing it from state")
                self.state.remove(instance.address)
                continue
            instance.attributes = model

    def lookup(self, values: dict[Address, Model]) -> Lookup:
        def _lookup(address: Address, path: list[str]) -> Any:
            model = values.get(address)
            if model is None:
                return UNKNOWN
            return walk_path(model, path)

        return _lookup

    def read_data_source(self, block: Block, values: dict[Address, Model], diags: Diagnostics) -> tuple[Model, bool]:
        """Read a data source now, or defer it when its arguments are not known yet.

        Returns the model and whether the read was deferred.
        """
        data_source = self.provider.data_source(block.address.type, diags)
        schema = data_source.schema()
        config = resolve(block.body, self.lookup(values))
        schema.validate_config(config, diags)
        if contains_unknown(config):
            deferred: Model = {name: UNKNOWN for name in schema.attributes}
            deferred.update({k: v for k, v in schema.normalize(config).items() if v is not None})
            return deferred, True
        model = data_source.read(schema.normalize(config), diags)
        return model or schema.empty_model(), False

    def plan(self, diags: Diagnostics, refresh: bool = True) -> Plan:
        if refresh:
            self.refresh(diags)
            if diags.has_error():
                return Plan(diagnostics=diags)

        plan = Plan(diagnostics=diags)
        graph = dependencies(self.config)
        values: dict[Address, Model] = {}

        for address in dependency_order(self.config):
            block = self.config.blocks[address]
            deps = sorted(graph[address])
            if address.mode == DATA:
                model, deferred = self.read_data_source(block, values, diags)
                values[address] = model
                plan.data[address] = model
                if deferred:
                    plan.changes.append(ResourceChange(address, Action.READ, after=model, dependencies=deps))
                continue

            resource = self.provider.resource(address.type, diags)
            schema = resource.schema()
            config = resolve(block.body, self.lookup(values))
            schema.validate_config(config, diags)
            instance = self.state.get(address)
            prior = dict(instance.attributes) if instance else None
            action, planned, replace_paths = plan_resource(schema, config, prior)
            values[address] = planned
            plan.changes.append(
                ResourceChange(address, action, before=prior, after=planned, replace_paths=replace_paths, dependencies=deps)
            )

        configured = set(self.config.blocks)
        for address in self.state.destroy_order():
            if address not in configured:
                instance = self.state.get(address)
                assert instance is not None
                plan.changes.append(ResourceChange(address, Action.DELETE, before=dict(instance.attributes)))

        counts = plan.summary()
        self.log.debug(f"plan: {counts['add']} to add, {counts['change']} to change, {counts['destroy']} to destroy")
        return plan
