"""``${...}`` references between configuration blocks and their ordering."""

from __future__ import annotations

import re
from graphlib import CycleError, TopologicalSorter
from typing import Any, Callable, Iterable

from merakiprov.engine.config import DATA, MANAGED, Address, WorkspaceConfig
from merakiprov.exceptions import PlanError
from merakiprov.framework.values import UNKNOWN, is_unknown

REFERENCE_RE = re.compile(r"\$\{([^}]+)\}")

Lookup = Callable[[Address, list[str]], Any]


def parse_reference(expression: str) -> tuple[Address, list[str]]:
    """Split ``type.name.attr[.sub...]`` or ``data.type.name.attr`` into address and path."""
    parts = [p.strip() for p in expression.strip().split(".")]
    if parts and parts[0] == "data":
        if len(parts) < 4:
            raise PlanError(f"Invalid reference '${{{expression}}}': expected data.<type>.<name>.<attribute>")
        return Address(DATA, parts[1], parts[2]), parts[3:]
    if len(parts) < 3:
        raise PlanError(f"Invalid reference '${{{expression}}}': expected <type>.<name>.<attribute>")
    return Address(MANAGED, parts[0], parts[1]), parts[2:]


def find_references(value: Any) -> set[Address]:
    """Collect the addresses referenced anywhere inside ``value``."""
    found: set[Address] = set()
    if isinstance(value, str):
        for match in REFERENCE_RE.finditer(value):
            found.add(parse_reference(match.group(1))[0])
    elif isinstance(value, dict):
        for item in value.values():
            found |= find_references(item)
    elif isinstance(value, list):
        for item in value:
            found |= find_references(item)
    return found


def walk_path(value: Any, path: Iterable[str]) -> Any:
    """Follow attribute names and list indexes into a model. Missing parts yield None."""
    for part in path:
        if is_unknown(value):
            return UNKNOWN
        if isinstance(value, dict):
            value = value.get(part)
        elif isinstance(value, list) and part.isdigit():
            index = int(part)
            value = value[index] if index < len(value) else None
        else:
            return None
    return value


def _interpolate(text: str, lookup: Lookup) -> Any:
    whole = REFERENCE_RE.fullmatch(text.strip())
    if whole and text.strip() == text:
        address, path = parse_reference(whole.group(1))
        return lookup(address, path)

    pieces: list[str] = []
    position = 0
    for match in REFERENCE_RE.finditer(text):
        pieces.append(text[position : match.start()])
        address, path = parse_reference(match.group(1))
        value = lookup(address, path)
        if is_unknown(value):
            return UNKNOWN
        if isinstance(value, bool):
            value = str(value).lower()
        pieces.append("" if value is None else str(value))
        position = match.end()
    pieces.append(text[position:])
    return "".join(pieces)


def resolve(value: Any, lookup: Lookup) -> Any:
    """Replace references inside ``value``.

    A string that is exactly one reference takes the referenced value with
    its type; references embedded in text are interpolated as strings. A
    reference to a value that is not known yet resolves to UNKNOWN.
    """
    if isinstance(value, str):
        if "${" not in value:
            return value
        return _interpolate(value, lookup)
    if isinstance(value, dict):
        return {k: resolve(v, lookup) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve(v, lookup) for v in value]
    return value


def dependencies(config: WorkspaceConfig) -> dict[Address, set[Address]]:
    """Map every block to the blocks it references or explicitly depends on.

    Raises:
        PlanError: If a block refers to an address that is not configured.
    """
    graph: dict[Address, set[Address]] = {}
    for address, block in config.blocks.items():
        deps = find_references(block.body) | set(block.depends_on)
        for dep in deps:
            if dep not in config.blocks:
                raise PlanError(f"{address} refers to undeclared {dep}")
        graph[address] = deps
    for dep in find_references(config.provider):
        raise PlanError(f"provider configuration cannot refer to {dep}")
    return graph


def dependency_order(config: WorkspaceConfig) -> list[Address]:
    """Return block addresses so that every block follows the blocks it references.

    Raises:
        PlanError: On a dependency cycle or a dangling reference.
    """
    graph = dependencies(config)
    sorter = TopologicalSorter({addr: sorted(deps) for addr, deps in sorted(graph.items())})
    try:
        return list(sorter.static_order())
    except CycleError as err:
        cycle = " -> ".join(str(a) for a in err.args[1])
        raise PlanError(f"Cycle between configuration blocks: {cycle}") from err
