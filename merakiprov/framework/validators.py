"""Attribute validators.

Validators only see known values: null and unknown values are skipped by the
schema before any validator runs.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Iterable

from merakiprov.framework.diagnostics import Diagnostics


class Validator(ABC):
    """Checks a known attribute value and reports problems as diagnostics."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description used in schema documentation."""

    @abstractmethod
    def validate(self, value: Any, path: str, diags: Diagnostics) -> None:
        """Append an error to ``diags`` when ``value`` is invalid."""


class _OneOf(Validator):
    def __init__(self, values: Iterable[Any]) -> None:
        self.values = list(values)

    @property
    def description(self) -> str:
        return "value must be one of: " + ", ".join(repr(v) for v in self.values)

    def validate(self, value: Any, path: str, diags: Diagnostics) -> None:
        if value not in self.values:
            diags.add_error("Invalid Attribute Value Match", f"Attribute {path} {self.description}, got: {value!r}", path)


class _NoneOf(Validator):
    def __init__(self, values: Iterable[Any]) -> None:
        self.values = list(values)

    @property
    def description(self) -> str:
        return "value must be none of: " + ", ".join(repr(v) for v in self.values)

    def validate(self, value: Any, path: str, diags: Diagnostics) -> None:
        if value in self.values:
            diags.add_error("Invalid Attribute Value Match", f"Attribute {path} {self.description}, got: {value!r}", path)


class _LengthBetween(Validator):
    def __init__(self, minimum: int, maximum: int) -> None:
        self.minimum = minimum
        self.maximum = maximum

    @property
    def description(self) -> str:
        return f"string length must be between {self.minimum} and {self.maximum}"

    def validate(self, value: Any, path: str, diags: Diagnostics) -> None:
        if not self.minimum <= len(value) <= self.maximum:
            diags.add_error("Invalid Attribute Value Length", f"Attribute {path} {self.description}, got: {len(value)}", path)


class _RegexMatches(Validator):
    def __init__(self, pattern: str, message: str = "") -> None:
        self.pattern = re.compile(pattern)
        self.message = message

    @property
    def description(self) -> str:
        return self.message or f"value must match regular expression '{self.pattern.pattern}'"

    def validate(self, value: Any, path: str, diags: Diagnostics) -> None:
        if not self.pattern.search(value):
            diags.add_error("Invalid Attribute Value Match", f"Attribute {path} {self.description}, got: {value!r}", path)


class _Between(Validator):
    def __init__(self, minimum: float, maximum: float) -> None:
        self.minimum = minimum
        self.maximum = maximum

    @property
    def description(self) -> str:
        return f"value must be between {self.minimum} and {self.maximum}"

    def validate(self, value: Any, path: str, diags: Diagnostics) -> None:
        if not self.minimum <= value <= self.maximum:
            diags.add_error("Invalid Attribute Value", f"Attribute {path} {self.description}, got: {value}", path)


class _ValueStringsAre(Validator):
    def __init__(self, *validators: Validator) -> None:
        self.validators = validators

    @property
    def description(self) -> str:
        return "element values must satisfy all validations: " + " + ".join(v.description for v in self.validators)

    def validate(self, value: Any, path: str, diags: Diagnostics) -> None:
        items = value.values() if isinstance(value, dict) else value
        for index, item in enumerate(items):
            if not isinstance(item, str):
                continue
            for validator in self.validators:
                validator.validate(item, f"{path}[{index}]", diags)


def one_of(*values: Any) -> Validator:
    return _OneOf(values)


def none_of(*values: Any) -> Validator:
    return _NoneOf(values)


def length_between(minimum: int, maximum: int) -> Validator:
    return _LengthBetween(minimum, maximum)


def regex_matches(pattern: str, message: str = "") -> Validator:
    return _RegexMatches(pattern, message)


def between(minimum: float, maximum: float) -> Validator:
    return _Between(minimum, maximum)


def value_strings_are(*validators: Validator) -> Validator:
    return _ValueStringsAre(*validators)
