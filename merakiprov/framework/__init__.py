"""Schema, value and diagnostics framework shared by resources and data sources."""

from merakiprov.framework.datasource import BaseDataSource
from merakiprov.framework.diagnostics import Diagnostic, Diagnostics, Severity
from merakiprov.framework.mapping import apply_response, build_payload
from merakiprov.framework.resource import BaseResource
from merakiprov.framework.schema import (
    Attribute,
    BoolAttribute,
    Float64Attribute,
    Int64Attribute,
    ListAttribute,
    ListNestedAttribute,
    MapAttribute,
    MapNestedAttribute,
    Schema,
    SetAttribute,
    SetNestedAttribute,
    SingleNestedAttribute,
    StringAttribute,
)
from merakiprov.framework.values import UNKNOWN, contains_unknown, is_known, is_null, is_unknown, resolve_unknowns

__all__ = [
    "UNKNOWN",
    "Attribute",
    "BaseDataSource",
    "BaseResource",
    "BoolAttribute",
    "Diagnostic",
    "Diagnostics",
    "Float64Attribute",
    "Int64Attribute",
    "ListAttribute",
    "ListNestedAttribute",
    "MapAttribute",
    "MapNestedAttribute",
    "Schema",
    "SetAttribute",
    "SetNestedAttribute",
    "Severity",
    "SingleNestedAttribute",
    "StringAttribute",
    "apply_response",
    "build_payload",
    "contains_unknown",
    "is_known",
    "is_null",
    "is_unknown",
    "resolve_unknowns",
]
