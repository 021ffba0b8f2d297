"""Workspace operations: validate, plan, apply, destroy, import."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from loguru import logger

from merakiprov.engine.config import DATA, Address, WorkspaceConfig, load_config
from merakiprov.engine.planner import Action, Plan, Planner, ResourceChange, plan_resource
from merakiprov.engine.references import dependency_order, resolve
from merakiprov.engine.state import ResourceInstance, StateFile, StateStore
from merakiprov.exceptions import DiagnosticsError, PlanError
from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.resource import Model
from merakiprov.framework.values import UNKNOWN, contains_unknown
from merakiprov.provider import MerakiProvider
from merakiprov.registry import create_data_source, create_resource, list_data_sources, list_resources

DEFAULT_STATE_FILE = "merakiprov.tfstate.json"


class Workspace:
    """A configuration file plus its state file.

    Every operation raises ``DiagnosticsError`` when it ends with error
    diagnostics; warnings are returned to the caller.
    """

    def __init__(
        self,
        config_path: str | Path,
        state_path: str | Path = DEFAULT_STATE_FILE,
        provider: MerakiProvider | None = None,
    ):
        self.config_path = Path(config_path)
        self.store = StateStore(state_path)
        self.provider = provider or MerakiProvider()
        self.log = logger.bind(classname=self.__class__.__name__)
        self._config: WorkspaceConfig | None = None

    @property
    def config(self) -> WorkspaceConfig:
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    # ── validate ──────────────────────────────────────────────────────

    def validate(self) -> Diagnostics:
        """Check block types, references and every block against its schema, offline."""
        diags = Diagnostics()
        config = self.config
        self.provider.schema().validate_config(config.provider, diags)

        resources, data_sources = set(list_resources()), set(list_data_sources())
        for address, block in config.blocks.items():
            known = data_sources if address.mode == DATA else resources
            if address.type not in known:
                diags.add_error(
                    "Invalid resource type" if address.mode != DATA else "Invalid data source",
                    f"The provider does not support {'data source' if address.mode == DATA else 'resource type'} {address.type!r}.",
                    str(address),
                )
        if diags.has_error():
            raise DiagnosticsError(diags)

        dependency_order(config)
        for address, block in config.blocks.items():
            if address.mode == DATA:
                schema = create_data_source(address.type).schema()
            else:
                schema = create_resource(address.type).schema()
            step = Diagnostics()
            schema.validate_config(resolve(block.body, lambda _a, _p: UNKNOWN), step)
            for diagnostic in step:
                path = f"{address}.{diagnostic.path}" if diagnostic.path else str(address)
                diags.append(replace(diagnostic, path=path))
        if diags.has_error():
            raise DiagnosticsError(diags)
        return diags

    # ── plan / apply ──────────────────────────────────────────────────

    def _configure(self, diags: Diagnostics) -> None:
        if self.provider.client is not None:
            return
        self.provider.configure(self.config.provider, diags)
        if diags.has_error():
            raise DiagnosticsError(diags)

    def plan(self, refresh: bool = True) -> tuple[Plan, StateFile]:
        self.validate()
        diags = Diagnostics()
        self._configure(diags)
        state = self.store.load()
        plan = Planner(self.provider, self.config, state).plan(diags, refresh=refresh)
        if diags.has_error():
            raise DiagnosticsError(diags)
        return plan, state

    def apply(self, plan: Plan | None = None, state: StateFile | None = None) -> tuple[Plan, StateFile]:
        """Execute a plan, writing state after every successful step.

        Deletes run first, dependents before their dependencies; everything
        else follows configuration dependency order. The first error stops
        the run.
        """
        if plan is None or state is None:
            plan, state = self.plan()
        diags = plan.diagnostics
        state.provider_version = self.provider.version

        values: dict[Address, Model] = {
            i.address: dict(i.attributes) for i in state.resources if i.address in self.config.blocks
        }
        values.update(plan.data)

        deletes = [c for c in plan.changes if c.action == Action.DELETE]
        others = [c for c in plan.changes if c.action != Action.DELETE]
        for change in deletes + others:
            if change.action == Action.NOOP:
                continue
            step = Diagnostics()
            self._apply_change(change, values, state, step)
            diags.extend(step)
            if step.has_error():
                self.log.error(f"{change.address}: {change.action.value} failed")
                self.store.save(state)
                raise DiagnosticsError(diags)
        self.store.save(state)
        return plan, state

    def _apply_change(
        self, change: ResourceChange, values: dict[Address, Model], state: StateFile, diags: Diagnostics
    ) -> None:
        address = change.address
        if change.action == Action.DELETE:
            resource = self.provider.resource(address.type, diags)
            assert change.before is not None
            resource.delete(change.before, diags)
            if not diags.has_error():
                state.remove(address)
                self.store.save(state)
                self.log.info(f"{address}: destroyed")
            return

        planner = Planner(self.provider, self.config, state)
        block = self.config.blocks[address]
        if change.action == Action.READ:
            model, deferred = planner.read_data_source(block, values, diags)
            if deferred:
                diags.add_error("Data source arguments unknown", f"{address} still depends on unknown values.")
                return
            values[address] = model
            return

        resource = self.provider.resource(address.type, diags)
        schema = resource.schema()
        config = resolve(block.body, planner.lookup(values))
        instance = state.get(address)
        prior = dict(instance.attributes) if instance else None
        if change.action == Action.REPLACE:
            prior = None
        _, planned, _ = plan_resource(schema, config, prior)

        if change.action == Action.REPLACE:
            assert change.before is not None
            self.log.info(f"{address}: destroying before replacement")
            resource.delete(change.before, diags)
            if diags.has_error():
                return
            state.remove(address)
            self.store.save(state)

        if change.action in (Action.CREATE, Action.REPLACE):
            self.log.info(f"{address}: creating")
            model = resource.create(planned, diags)
        else:
            assert instance is not None
            self.log.info(f"{address}: updating in place")
            model = resource.update(planned, dict(instance.attributes), diags)
        if model is None:
            if not diags.has_error():
                diags.add_error(
                    "Provider produced no result", f"{address}: the {change.action.value} handler returned no state."
                )
            return
        # A handler that returns a model alongside errors left a remote object behind.
        if diags.has_error():
            self.log.warning(f"{address}: {change.action.value} partially failed, keeping the object in state")
        elif contains_unknown(model):
            self.log.warning(f"{address}: some computed attributes stayed unknown after {change.action.value}")
        state.put(
            ResourceInstance(
                type=address.type,
                name=address.name,
                attributes=model,
                dependencies=[str(d) for d in change.dependencies if d.mode != DATA],
                schema_version=schema.version,
            )
        )
        values[address] = state.get(address).attributes  # type: ignore[union-attr]
        self.store.save(state)

    # ── destroy / import / show ───────────────────────────────────────

    def destroy(self) -> StateFile:
        """Delete every instance in state, dependents first."""
        diags = Diagnostics()
        self._configure(diags)
        state = self.store.load()
        for address in state.destroy_order():
            instance = state.get(address)
            assert instance is not None
            resource = self.provider.resource(address.type, diags)
            step = Diagnostics()
            resource.delete(dict(instance.attributes), step)
            diags.extend(step)
            if step.has_error():
                self.store.save(state)
                raise DiagnosticsError(diags)
            state.remove(address)
            self.store.save(state)
            self.log.info(f"{address}: destroyed")
        return state

    def import_resource(self, address_text: str, import_id: str) -> ResourceInstance:
        """Bring an existing remote object under management as ``address``."""
        address = Address.parse(address_text)
        if address.mode == DATA:
            raise PlanError(f"Data sources cannot be imported: {address}")
        diags = Diagnostics()
        if address not in self.config.blocks:
            diags.add_error(
                "Import to non-existent resource address",
                f"Add a configuration block for {address} before importing into it.",
            )
            raise DiagnosticsError(diags)
        self._configure(diags)
        state = self.store.load()
        if state.get(address) is not None:
            diags.add_error("Resource already managed", f"{address} is already in the state file.")
            raise DiagnosticsError(diags)

        resource = self.provider.resource(address.type, diags)
        partial = resource.import_state(import_id, diags)
        if diags.has_error() or partial is None:
            raise DiagnosticsError(diags)
        model = resource.read(partial, diags)
        if diags.has_error():
            raise DiagnosticsError(diags)
        if model is None:
            diags.add_error(
                "Cannot import non-existent remote object",
                f"While attempting to import {address} with ID {import_id!r}, the API reported that it does not exist.",
            )
            raise DiagnosticsError(diags)

        instance = ResourceInstance(
            type=address.type, name=address.name, attributes=model, schema_version=resource.schema().version
        )
        state.provider_version = self.provider.version
        state.put(instance)
        self.store.save(state)
        self.log.info(f"{address}: imported {import_id}")
        return instance

    def show(self) -> StateFile:
        return self.store.load()

    def close(self) -> None:
        self.provider.close()
