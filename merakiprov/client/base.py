"""Abstract base transport for Dashboard API communication."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any, Self

import requests


class BaseTransport(ABC):
    """Abstract base class for Dashboard API transports."""

    @abstractmethod
    def connect(self) -> None:
        """Open the HTTP session."""

    @abstractmethod
    def disconnect(self) -> None:
        """Close the HTTP session."""

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if transport is currently connected."""

    @abstractmethod
    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> tuple[Any, requests.Response]:
        """Send one request and return the decoded body with the raw response."""

    @abstractmethod
    def get_pages(self, path: str, params: dict[str, Any] | None = None) -> tuple[list[Any], requests.Response]:
        """Fetch every page of a paginated list endpoint."""

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        self.disconnect()
