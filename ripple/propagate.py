"""Bump propagation through the workspace dependency graph.

When a package is bumped, every package that depends on it must be bumped
too, since its pinned dependency versions change. Propagation walks the
dependency graph in topological order, starting from the packages with
changes of their own, and asks for a decision at every package:

- a package without workspace dependencies gets exactly its own increment;
- any other package may choose between its own increment (the floor) and
  the increments its dependencies resolved to, dropping everything below
  the floor. If any dependency was bumped, "no bump" is not an option.

Decisions are made by the caller. `Propagation` is a resumable state
machine yielding one Decision at a time, so the answer can come from a
prompt, a policy or a test. `propagate` drives it with a callback.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from .errors import InvalidDecisionError
from .graph import DependencyGraph, Traversal
from .models import Decision, Increment, increment_key
from .versions import bump_version

Candidates = Sequence[Increment | None]
DecideFn = Callable[[str, str, Candidates], Increment | None]


class Propagation:
    """Step-by-step bump propagation over a dependency graph.

    Example:
        propagation = Propagation(graph, {"pkg-a": Increment.MINOR})
        while (decision := propagation.next_decision()) is not None:
            propagation.resolve(decision.candidates[-1])
        versions = propagation.version_map()
    """

    def __init__(
        self, graph: DependencyGraph, increments: Mapping[str, Increment | None]
    ) -> None:
        self.graph = graph
        self._own: dict[int, Increment | None] = {
            node: increments.get(graph[node].name) for node in range(len(graph))
        }
        changed = [node for node, inc in self._own.items() if inc is not None]
        self._traversal: Traversal = graph.traverse(changed)
        # Written once per node, read only by the node's dependents
        self._resolved: dict[int, Increment | None] = {}
        self._current: int | None = None
        self._candidates: tuple[Increment | None, ...] = ()

    def candidates(self, node: int) -> tuple[Increment | None, ...]:
        """Legal increments for a node whose dependencies are resolved."""
        own = self._own[node]
        deps = self.graph.incoming(node)
        if not deps:
            return (own,)

        values = {self._resolved.get(dep) for dep in deps} | {own}
        floor = increment_key(own)
        allowed = {v for v in values if increment_key(v) >= floor}
        if any(v is not None for v in allowed):
            allowed.discard(None)
        return tuple(sorted(allowed, key=increment_key))

    def next_decision(self) -> Decision | None:
        """The next pending decision, or None when propagation is done."""
        if self._current is None:
            self._current = self._traversal.take()
            if self._current is None:
                return None
            self._candidates = self.candidates(self._current)

        info = self.graph[self._current]
        return Decision(name=info.name, version=info.version, candidates=self._candidates)

    def resolve(self, increment: Increment | None) -> None:
        """Answer the pending decision.

        Raises:
            InvalidDecisionError: If increment is not one of the candidates.
        """
        if self._current is None:
            raise RuntimeError("No pending decision; call next_decision() first")
        if increment not in self._candidates:
            name = self.graph[self._current].name
            raise InvalidDecisionError(name, increment, list(self._candidates))

        self._resolved[self._current] = increment
        self._traversal.complete(self._current)
        self._current = None

    @property
    def is_done(self) -> bool:
        return self._current is None and self._traversal.is_done

    def resolved(self) -> dict[str, Increment | None]:
        """Resolved increments so far, keyed by package name."""
        return {self.graph[n].name: inc for n, inc in self._resolved.items()}

    def version_map(self) -> dict[str, str]:
        """Next version of every bumped package.

        Packages that resolved to no bump are omitted.
        """
        if not self.is_done:
            raise RuntimeError("Propagation is not finished")
        versions: dict[str, str] = {}
        for node in sorted(self._resolved):
            increment = self._resolved[node]
            if increment is not None:
                info = self.graph[node]
                versions[info.name] = bump_version(info.version, increment)
        return versions


def propagate(
    graph: DependencyGraph,
    increments: Mapping[str, Increment | None],
    decide: DecideFn,
) -> dict[str, str]:
    """Propagate increments through the graph and compute next versions.

    Args:
        graph: Workspace dependency graph.
        increments: Increment each package requires from its own changes.
        decide: Called as decide(name, current_version, candidates) for
                every affected package, in dependency order. Any exception
                it raises aborts propagation without a result.

    Returns:
        Map of package name → next version, for bumped packages only.
    """
    propagation = Propagation(graph, increments)
    while (decision := propagation.next_decision()) is not None:
        propagation.resolve(decide(decision.name, decision.version, decision.candidates))
    return propagation.version_map()


def highest(name: str, version: str, candidates: Candidates) -> Increment | None:
    """Decision policy: always take the largest candidate."""
    return candidates[-1]


def lowest(name: str, version: str, candidates: Candidates) -> Increment | None:
    """Decision policy: always take the smallest candidate."""
    return candidates[0]


POLICIES: dict[str, DecideFn] = {"highest": highest, "lowest": lowest}
