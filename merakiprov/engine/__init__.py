"""Plan/apply engine driving the provider from a YAML workspace."""

from merakiprov.engine.config import Address, WorkspaceConfig, load_config, parse_config
from merakiprov.engine.planner import Action, Plan, Planner, ResourceChange, plan_resource
from merakiprov.engine.runner import DEFAULT_STATE_FILE, Workspace
from merakiprov.engine.state import ResourceInstance, StateFile, StateStore

__all__ = [
    "Action",
    "Address",
    "DEFAULT_STATE_FILE",
    "Plan",
    "Planner",
    "ResourceChange",
    "ResourceInstance",
    "StateFile",
    "StateStore",
    "Workspace",
    "WorkspaceConfig",
    "load_config",
    "parse_config",
    "plan_resource",
]
