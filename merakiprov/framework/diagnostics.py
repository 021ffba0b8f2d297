"""Structured warning/error reporting returned from provider operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator


class Severity(Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic message, optionally tied to an attribute path."""

    severity: Severity
    summary: str
    detail: str = ""
    path: str = ""

    def __str__(self) -> str:
        prefix = f"{self.severity.value.capitalize()}: {self.summary}"
        if self.path:
            prefix += f" (at {self.path})"
        return f"{prefix}\n{self.detail}" if self.detail else prefix


class Diagnostics:
    """An ordered collection of diagnostics.

    Handlers append to a ``Diagnostics`` instead of raising, mirroring how the
    host tool reports every problem of an operation at once.
    """

    def __init__(self, items: Iterable[Diagnostic] | None = None) -> None:
        self._items: list[Diagnostic] = list(items or [])

    def add_error(self, summary: str, detail: str = "", path: str = "") -> None:
        self._items.append(Diagnostic(Severity.ERROR, summary, detail, path))

    def add_warning(self, summary: str, detail: str = "", path: str = "") -> None:
        self._items.append(Diagnostic(Severity.WARNING, summary, detail, path))

    def append(self, diagnostic: Diagnostic) -> None:
        self._items.append(diagnostic)

    def extend(self, other: Iterable[Diagnostic]) -> None:
        self._items.extend(other)

    def has_error(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self._items)

    def errors(self) -> list[Diagnostic]:
        return [d for d in self._items if d.severity is Severity.ERROR]

    def warnings(self) -> list[Diagnostic]:
        return [d for d in self._items if d.severity is Severity.WARNING]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"Diagnostics({self._items!r})"
