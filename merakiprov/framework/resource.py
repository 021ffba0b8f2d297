"""Abstract base resource: schema plus Create/Read/Update/Delete/Import."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from loguru import logger

from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.schema import Schema

Model = dict[str, Any]


class BaseResource(ABC):
    """Abstract base class for managed resource types.

    Handlers receive plain dict models keyed by attribute name and report
    failures by appending to ``diags``. A handler that fails returns None.
    """

    type_name: ClassVar[str] = ""

    def __init__(self) -> None:
        self.client: Any = None
        self.log = logger.bind(classname=self.__class__.__name__)

    @classmethod
    @abstractmethod
    def schema(cls) -> Schema:
        """Return the resource schema."""

    def configure(self, client: Any, diags: Diagnostics) -> None:
        """Receive the provider's API client."""
        if client is None:
            diags.add_error(
                "Unconfigured API Client",
                f"{self.type_name}: the provider has not been configured. Please report this issue to the provider developers.",
            )
            return
        self.client = client

    @abstractmethod
    def create(self, plan: Model, diags: Diagnostics) -> Model | None:
        """Create the remote object and return the new state."""

    @abstractmethod
    def read(self, state: Model, diags: Diagnostics) -> Model | None:
        """Refresh state from the API. None means the object no longer exists."""

    @abstractmethod
    def update(self, plan: Model, state: Model, diags: Diagnostics) -> Model | None:
        """Apply an in-place change and return the new state."""

    @abstractmethod
    def delete(self, state: Model, diags: Diagnostics) -> None:
        """Delete (or reset) the remote object."""

    def import_state(self, import_id: str, diags: Diagnostics) -> Model | None:
        """Turn an import identifier into a minimal state for ``read``."""
        diags.add_error("Resource Import Not Implemented", f"{self.type_name} does not support import.")
        return None
