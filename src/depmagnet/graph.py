"""Module import graph: construction, transitive closure and cycle search."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from depmagnet.errors import CommandError, DepMagnetError
from depmagnet.model import ModuleImport
from depmagnet.packages import Package

logger = logging.getLogger(__name__)

ImportGraph = dict[str, set[ModuleImport]]
CycleEdge = tuple[str, ModuleImport]


class ModuleGraph:
    """Import graph over every module of the given packages, keyed by module name."""

    def __init__(self, packages: list[Package]):
        self.packages = packages
        self._import_graph: ImportGraph | None = None

    @property
    def import_graph(self) -> ImportGraph:
        if self._import_graph is None:
            self._import_graph = build_import_graph(self.packages)
        return self._import_graph

    def full_dependency_list(self, modules: Iterable[str]) -> set[str]:
        """Return *modules* plus everything reachable from them."""
        graph = self.import_graph
        to_check = set(modules)
        result: set[str] = set()
        while to_check:
            module = to_check.pop()
            result.add(module)

            dependency_names = {edge.name for edge in graph.get(module, ())}
            to_check |= dependency_names - result
            result |= dependency_names
        return result

    def import_cycle(self) -> list[CycleEdge] | None:
        """Return the edges of some import cycle, or None if the graph is acyclic.

        The returned edges form a closed loop: the target of the last edge is
        the module of the first.
        """
        search = _CycleSearch(self.import_graph)
        for module in self.import_graph:
            edges = search.visit(module)
            if edges is not None:
                return _closed_loop(edges)
        return None


def build_import_graph(packages: list[Package]) -> ImportGraph:
    """Merge direct and bridged-sibling imports for every module.

    Raises DepMagnetError(DUPLICATE_MODULE) if two modules share a name.
    """
    result: ImportGraph = {}

    for package in packages:
        for module in package.modules.values():
            if module.name in result:
                raise DepMagnetError(
                    CommandError.DUPLICATE_MODULE,
                    f"Import graph generation found invalid duplicate module: {module.name}",
                )

            # Direct imports first so they win over bridged ones of the same name.
            edges = {ModuleImport(name) for name in module.imported_modules}

            for bridged_type in module.type.bridged_sibling_imports:
                sibling = package.modules.get(bridged_type)
                if sibling is None:
                    continue
                for name in sibling.imported_modules:
                    edge = ModuleImport(name, bridge=bridged_type)
                    if edge.name != module.name and edge not in edges:
                        edges.add(edge)

            result[module.name] = edges

    logger.debug(
        "Import graph: %d modules, %d edges",
        len(result),
        sum(len(v) for v in result.values()),
    )
    return result


class _CycleSearch:
    """Depth-first search state for one ``import_cycle`` call."""

    def __init__(self, graph: ImportGraph):
        self.graph = graph
        self.visited: set[str] = set()
        self.on_stack: set[str] = set()

    def visit(self, module: str) -> list[CycleEdge] | None:
        if module in self.visited:
            return None

        self.visited.add(module)
        self.on_stack.add(module)
        try:
            for edge in self.graph.get(module, ()):
                if edge.name not in self.visited:
                    found = self.visit(edge.name)
                    if found is not None:
                        return [(module, edge)] + found
                if edge.name in self.on_stack:
                    return [(module, edge)]
            return None
        finally:
            self.on_stack.discard(module)


def _closed_loop(edges: list[CycleEdge]) -> list[CycleEdge]:
    # The search may reach the cycle through a non-cyclic prefix; drop it.
    start = edges[-1][1].name
    for index, (module, _edge) in enumerate(edges):
        if module == start:
            return edges[index:]
    return edges


def describe_cycle(edges: list[CycleEdge]) -> list[str]:
    """Render cycle edges as ``A -> B`` lines, noting bridged edges."""
    lines = []
    for module, edge in edges:
        line = f"{module} -> {edge.name}"
        if edge.bridge is not None:
            line += f" (bridged from {edge.bridge.value})"
        lines.append(line)
    return lines
