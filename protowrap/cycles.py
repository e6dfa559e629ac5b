"""Detect package import cycles that would make the generated Go code invalid."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from .errors import CycleError, ResolutionError
from .logging import get_logger
from .models import PackageGraph, PackageUnit

logger = get_logger("cycles")


@dataclass
class _Visit:
    """Per-run Tarjan bookkeeping for one package."""

    index: int
    low_link: int
    on_stack: bool = True


def find_components(
    graph: PackageGraph, roots: Iterable[str] | None = None
) -> List[List[PackageUnit]]:
    """Return the strongly connected components reachable from ``roots``.

    ``roots`` defaults to the graph's needed packages and is visited in key
    order. Components are emitted in Tarjan order (dependencies first), each
    sorted by package key.
    See https://en.wikipedia.org/wiki/Tarjan%27s_strongly_connected_components_algorithm
    """
    packages = graph.packages
    ordered_roots = sorted(graph.needed if roots is None else roots)
    visits: Dict[str, _Visit] = {}
    stack: List[str] = []
    components: List[List[PackageUnit]] = []
    counter = itertools.count(1)

    def successors(key: str) -> Iterator[str]:
        for dep_key in packages[key].imported_packages():
            if dep_key not in packages:
                raise ResolutionError(f"{dep_key!r} not found among collected packages")
            yield dep_key

    def visit(key: str) -> Tuple[str, Iterator[str]]:
        index = next(counter)
        visits[key] = _Visit(index=index, low_link=index)
        stack.append(key)
        return key, successors(key)

    for root in ordered_roots:
        if root in visits:
            continue
        work = [visit(root)]
        while work:
            key, children = work[-1]
            node = visits[key]
            for child in children:
                seen = visits.get(child)
                if seen is None:
                    work.append(visit(child))
                    break
                if seen.on_stack:
                    node.low_link = min(node.low_link, seen.index)
            else:
                work.pop()
                if node.low_link == node.index:
                    component: List[PackageUnit] = []
                    while True:
                        member = stack.pop()
                        visits[member].on_stack = False
                        component.append(packages[member])
                        if member == key:
                            break
                    components.append(sorted(component, key=lambda pkg: pkg.computed_package))
                if work:
                    parent = visits[work[-1][0]]
                    parent.low_link = min(parent.low_link, node.low_link)

    return components


def find_cycles(graph: PackageGraph) -> List[List[PackageUnit]]:
    """Return only the components spanning more than one package."""
    return [component for component in find_components(graph) if len(component) > 1]


def explain_component(graph: PackageGraph, component: Sequence[PackageUnit]) -> str:
    """Describe which file imports tie the packages of ``component`` together."""
    in_cycle = {pkg.computed_package for pkg in component}
    lines: List[str] = []
    for pkg in component:
        for other in pkg.imported_packages():
            if other not in in_cycle:
                continue
            lines.append(f" {pkg.computed_package} --> {other}")
            for member in pkg.members:
                for dep_name in member.dependencies:
                    dep = graph.files[dep_name]
                    if dep.computed_package == other:
                        lines.append(f"  {member.name} imports {dep.name}")
    return "\n".join(lines)


def check_cycles(graph: PackageGraph) -> List[List[PackageUnit]]:
    """Return all components, raising ``CycleError`` if any of them is a cycle."""
    components = find_components(graph)
    cycles = [component for component in components if len(component) > 1]
    logger.debug("Found %d components, %d cycles", len(components), len(cycles))
    if cycles:
        explanation = "\n".join(explain_component(graph, component) for component in cycles)
        raise CycleError(f"cycles found:\n{explanation}\n", cycles)
    return components


__all__ = ["check_cycles", "explain_component", "find_components", "find_cycles"]
