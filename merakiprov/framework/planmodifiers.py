"""Plan modifiers adjust planned attribute values before apply."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from merakiprov.framework.values import UNKNOWN, is_known


@dataclass
class PlanModifyRequest:
    """Inputs for a single attribute's plan modification."""

    config: Any
    planned: Any
    prior: Any
    has_prior_state: bool


@dataclass
class PlanModifyResponse:
    planned: Any
    requires_replace: bool = False


class PlanModifier(ABC):
    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description used in schema documentation."""

    @abstractmethod
    def modify(self, req: PlanModifyRequest) -> PlanModifyResponse:
        """Return the (possibly) modified planned value."""


class _UseStateForUnknown(PlanModifier):
    @property
    def description(self) -> str:
        return "Once set, the value of this attribute in state will not change."

    def modify(self, req: PlanModifyRequest) -> PlanModifyResponse:
        if req.has_prior_state and req.planned is UNKNOWN and req.prior is not None:
            return PlanModifyResponse(req.prior)
        return PlanModifyResponse(req.planned)


class _RequiresReplace(PlanModifier):
    @property
    def description(self) -> str:
        return "If the value of this attribute changes, the resource will be replaced."

    def modify(self, req: PlanModifyRequest) -> PlanModifyResponse:
        if not req.has_prior_state or not is_known(req.config):
            return PlanModifyResponse(req.planned)
        return PlanModifyResponse(req.planned, requires_replace=req.planned != req.prior)


def use_state_for_unknown() -> PlanModifier:
    return _UseStateForUnknown()


def requires_replace() -> PlanModifier:
    return _RequiresReplace()
