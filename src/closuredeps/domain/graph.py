"""DependencyGraph: package registry with cycle-safe edge insertion.

Packages are keyed by name in a NetworkX DiGraph. An edge ``a -> b`` means
"a requires b". NetworkX keeps successors in insertion order, so each
package's dependency sequence is ordered and that order drives traversal.

INVARIANT: The edge set is always acyclic. ``add_dependency`` checks
reachability before inserting, and a rejected call leaves the graph untouched.

Both walks (cycle check and closure) use an explicit stack, so chain depth is
bounded by memory rather than the interpreter's recursion limit.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import networkx as nx

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class DependencyError(Exception):
    """Base class for rejected graph operations.

    Attributes:
        from_package: The requiring side of the edge, if any.
        to_package: The required side of the edge, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        from_package: str | None = None,
        to_package: str | None = None,
    ) -> None:
        super().__init__(message)
        self.from_package = from_package
        self.to_package = to_package


class UnknownPackageError(DependencyError):
    """A package name is not registered in the graph."""

    def __init__(
        self,
        package: str,
        *,
        from_package: str | None = None,
        to_package: str | None = None,
    ) -> None:
        if from_package is not None and to_package is not None:
            msg = f"Package not found: {package!r} (edge {from_package} -> {to_package})"
        else:
            msg = f"Package not found: {package!r}"
        super().__init__(msg, from_package=from_package, to_package=to_package)
        self.package = package


class CycleDetectedError(DependencyError):
    """Adding the edge would make a package depend on itself."""

    def __init__(self, from_package: str, to_package: str) -> None:
        msg = f"Circular dependency between {from_package!r} and {to_package!r}"
        super().__init__(msg, from_package=from_package, to_package=to_package)


# ---------------------------------------------------------------------------
# Node
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Node:
    """A registered package and the file that backs it."""

    name: str
    path: Path


# ---------------------------------------------------------------------------
# DependencyGraph
# ---------------------------------------------------------------------------


class DependencyGraph:
    """Registry of packages and their ordered dependency edges.

    Usage::

        graph = DependencyGraph()
        graph.register_file("app.main", "src/main.js")
        graph.register_file("app.util", "src/util.js")
        graph.add_dependency("app.main", "app.util")
        [n.path for n in graph.get_dependencies(["app.main"])]
        # [PosixPath('src/util.js'), PosixPath('src/main.js')]

    Not thread-safe. Populate fully, then query; callers that share a graph
    across threads must hold their own lock around populate-then-query.
    """

    def __init__(self) -> None:
        self._g: nx.DiGraph = nx.DiGraph()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return self._g.number_of_nodes()

    def __contains__(self, name: object) -> bool:
        return name in self._g

    def __iter__(self) -> Iterator[str]:
        return iter(self._g)

    def __repr__(self) -> str:
        return f"DependencyGraph(packages={len(self)}, edges={self.edge_count()})"

    def edge_count(self) -> int:
        return self._g.number_of_edges()

    def get(self, name: str) -> Node | None:
        """Return the node registered as *name*, or None."""
        if name not in self._g:
            return None
        return self._node(name)

    def dependencies_of(self, name: str) -> list[Node]:
        """Direct dependencies of *name* in insertion order ([] if unknown)."""
        if name not in self._g:
            return []
        return [self._node(dep) for dep in self._g.successors(name)]

    def _node(self, name: str) -> Node:
        return Node(name=name, path=self._g.nodes[name]["path"])

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def register_file(self, name: str, path: str | Path) -> None:
        """Register *name* as provided by *path*, replacing any previous node.

        Replacement is destructive: the old node's outgoing edges are dropped.
        Packages that already required *name* keep their edge and now reach
        the new, edge-free node. Register every file before adding any edge
        to avoid losing dependencies.
        """
        if not name:
            msg = "Package name must be a non-empty string"
            raise ValueError(msg)
        if name in self._g:
            self._g.remove_edges_from(list(self._g.out_edges(name)))
        self._g.add_node(name, path=Path(path))

    def add_dependency(self, from_package: str, to_package: str) -> None:
        """Record that *from_package* requires *to_package*.

        The edge is appended after any existing dependencies of
        *from_package*. Adding an edge that already exists is a no-op.

        Raises:
            UnknownPackageError: Either endpoint is not registered.
            CycleDetectedError: *to_package* already reaches *from_package*
                (including the self-edge case).
        """
        for name in (from_package, to_package):
            if name not in self._g:
                raise UnknownPackageError(
                    name, from_package=from_package, to_package=to_package
                )

        if self._reaches(to_package, from_package):
            raise CycleDetectedError(from_package, to_package)

        if not self._g.has_edge(from_package, to_package):
            self._g.add_edge(from_package, to_package)

    def _reaches(self, start: str, target: str) -> bool:
        """Return True if *target* is reachable from *start* (inclusive).

        Each package is pushed at most once per call, so the walk is
        O(nodes + edges) even for diamond-heavy graphs.
        """
        if start == target:
            return True
        checked: set[str] = {start}
        stack = [start]
        while stack:
            for dep in self._g.successors(stack.pop()):
                if dep == target:
                    return True
                if dep not in checked:
                    checked.add(dep)
                    stack.append(dep)
        return False

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def get_dependencies_of_package(self, name: str) -> list[Node]:
        """Dependency-first closure of a single package ([] if unknown)."""
        if name not in self._g:
            return []
        return self.get_dependencies([name])

    def get_dependencies(self, entries: Iterable[str]) -> list[Node]:
        """Deduplicated, dependency-first union of the closures of *entries*.

        Entries are expanded in the order given; each package's dependencies
        are followed in insertion order and fully emitted before the package
        itself. A package reachable from several entries (or several paths)
        is expanded and emitted once.

        Raises:
            UnknownPackageError: An entry is not registered.
        """
        entries = list(entries)
        for entry in entries:
            if entry not in self._g:
                raise UnknownPackageError(entry)

        ordered: list[Node] = []
        seen: set[str] = set()
        for entry in entries:
            if entry in seen:
                continue
            seen.add(entry)
            stack = [(entry, iter(self._g.successors(entry)))]
            while stack:
                name, pending = stack[-1]
                for dep in pending:
                    if dep not in seen:
                        seen.add(dep)
                        stack.append((dep, iter(self._g.successors(dep))))
                        break
                else:
                    stack.pop()
                    ordered.append(self._node(name))
        return ordered
