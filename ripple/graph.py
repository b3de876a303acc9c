"""Dependency graph utilities.

A small generic directed graph with a pull-style topological traversal,
plus the builder that turns workspace manifests into a dependency graph.
Edges point from a dependency to its dependents, so walking the graph in
topological order visits a package only after everything it depends on.
"""

from __future__ import annotations

import heapq
from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

from .errors import CyclicDependencyError, ManifestError
from .models import PackageInfo

T = TypeVar("T")


class Graph(Generic[T]):
    """Directed graph over integer node ids with a payload per node."""

    def __init__(self) -> None:
        self._nodes: list[T] = []
        self._incoming: list[set[int]] = []
        self._outgoing: list[set[int]] = []

    def add_node(self, payload: T) -> int:
        self._nodes.append(payload)
        self._incoming.append(set())
        self._outgoing.append(set())
        return len(self._nodes) - 1

    def add_edge(self, source: int, target: int) -> None:
        self._outgoing[source].add(target)
        self._incoming[target].add(source)

    def incoming(self, node: int) -> set[int]:
        return self._incoming[node]

    def outgoing(self, node: int) -> set[int]:
        return self._outgoing[node]

    def sources(self) -> list[int]:
        """Nodes without incoming edges."""
        return [n for n in range(len(self._nodes)) if not self._incoming[n]]

    def edges(self) -> list[tuple[int, int]]:
        return sorted((s, t) for s in range(len(self._nodes)) for t in self._outgoing[s])

    def reachable(self, seeds: Iterable[int]) -> set[int]:
        """Seeds plus every node reachable from them along edges."""
        seen = set(seeds)
        queue = list(seen)
        while queue:
            node = queue.pop(0)
            for target in self._outgoing[node]:
                if target not in seen:
                    seen.add(target)
                    queue.append(target)
        return seen

    def traverse(self, seeds: Iterable[int] | None = None) -> Traversal:
        """Start a topological traversal, optionally restricted to seeds."""
        nodes = set(range(len(self._nodes))) if seeds is None else self.reachable(seeds)
        return Traversal(self, nodes)

    def topological_order(self) -> list[int]:
        """All nodes with dependencies before dependents.

        Raises:
            CyclicDependencyError: If the graph has a cycle.
        """
        traversal = self.traverse()
        order = list(traversal)
        if not traversal.is_done:
            remaining = sorted(traversal.pending())
            raise CyclicDependencyError([self.label(n) for n in remaining])
        return order

    def label(self, node: int) -> str:
        """Human-readable name of a node, used in error messages."""
        return str(self._nodes[node])

    def __getitem__(self, node: int) -> T:
        return self._nodes[node]

    def __len__(self) -> int:
        return len(self._nodes)


class Traversal:
    """Pull-style topological traversal over a subset of a graph.

    A node becomes ready once every node with an edge into it that is part
    of the traversal has been completed. Ready nodes are handed out lowest
    id first, which keeps the order deterministic.

    Example:
        traversal = graph.traverse([changed])
        while (node := traversal.take()) is not None:
            ...
            traversal.complete(node)
    """

    def __init__(self, graph: Graph, nodes: set[int]) -> None:
        self._graph = graph
        self._nodes = nodes
        # Count incoming edges from within the traversal only
        self._in_degree = {
            n: sum(1 for s in graph.incoming(n) if s in nodes) for n in nodes
        }
        self._ready = [n for n, d in self._in_degree.items() if d == 0]
        heapq.heapify(self._ready)
        self._taken: set[int] = set()
        self._completed: set[int] = set()

    def ready(self) -> list[int]:
        """Nodes that may be taken now."""
        return sorted(self._ready)

    def take(self) -> int | None:
        """Take the next ready node, or None if nothing is ready."""
        if not self._ready:
            return None
        node = heapq.heappop(self._ready)
        self._taken.add(node)
        return node

    def complete(self, node: int) -> None:
        """Mark a taken node as done, releasing its dependents."""
        if node not in self._taken or node in self._completed:
            raise ValueError(f"Node {node} was not taken or is already complete")
        self._completed.add(node)
        for target in sorted(self._graph.outgoing(node)):
            if target not in self._nodes:
                continue
            self._in_degree[target] -= 1
            if self._in_degree[target] == 0:
                heapq.heappush(self._ready, target)

    def pending(self) -> set[int]:
        """Nodes not yet completed."""
        return self._nodes - self._completed

    @property
    def is_done(self) -> bool:
        return self._completed == self._nodes

    def __iter__(self) -> Iterator[int]:
        """Take and complete nodes one by one."""
        while (node := self.take()) is not None:
            yield node
            self.complete(node)


class DependencyGraph(Graph[PackageInfo]):
    """Graph of named, versioned workspace packages."""

    def __init__(self) -> None:
        super().__init__()
        self._by_name: dict[str, int] = {}

    def add_node(self, payload: PackageInfo) -> int:
        node = super().add_node(payload)
        self._by_name[payload.name] = node
        return node

    def label(self, node: int) -> str:
        return self[node].name

    def node(self, name: str) -> int | None:
        return self._by_name.get(name)

    def names(self, nodes: Iterable[int]) -> list[str]:
        return [self[n].name for n in nodes]


def build_dependency_graph(packages: Iterable[PackageInfo]) -> DependencyGraph:
    """Build the dependency graph of a workspace.

    Only packages with both a name and a version become nodes; workspace
    root manifests without them are excluded. Dependencies on packages
    outside the workspace and self-dependencies are ignored.

    Args:
        packages: All manifests in the workspace.

    Returns:
        Graph with an edge from each dependency to each of its dependents.

    Raises:
        ManifestError: If two packages share a name.
        CyclicDependencyError: If a dependency cycle is detected.

    Example:
        If B depends on A: nodes {A, B}, edges {A → B}
    """
    graph = DependencyGraph()
    for info in packages:
        if not info.name or not info.version:
            continue
        if graph.node(info.name) is not None:
            raise ManifestError(f"Duplicate package name in workspace: {info.name}")
        graph.add_node(info)

    for node in range(len(graph)):
        for dep in graph[node].deps:
            source = graph.node(dep)
            if source is not None and source != node:
                graph.add_edge(source, node)

    # Propagation needs a topological order, so cycles are fatal here
    graph.topological_order()
    return graph


def topo_sort(packages: Iterable[PackageInfo]) -> list[str]:
    """Names of all versioned packages, dependencies before dependents."""
    graph = build_dependency_graph(packages)
    return graph.names(graph.topological_order())
