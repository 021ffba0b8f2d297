"""Abstract base data source: read-only lookups."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from loguru import logger

from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.schema import Schema


class BaseDataSource(ABC):
    """Abstract base class for data sources."""

    type_name: ClassVar[str] = ""

    def __init__(self) -> None:
        self.client: Any = None
        self.log = logger.bind(classname=self.__class__.__name__)

    @classmethod
    @abstractmethod
    def schema(cls) -> Schema:
        """Return the data-source schema."""

    def configure(self, client: Any, diags: Diagnostics) -> None:
        if client is None:
            diags.add_error(
                "Unconfigured API Client",
                f"{self.type_name}: the provider has not been configured. Please report this issue to the provider developers.",
            )
            return
        self.client = client

    @abstractmethod
    def read(self, config: dict[str, Any], diags: Diagnostics) -> dict[str, Any] | None:
        """Look up remote data for ``config`` and return the full model."""
