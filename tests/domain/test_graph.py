"""Tests for DependencyGraph: registration, edge insertion, and resolution."""

from __future__ import annotations

import random
from pathlib import Path

import networkx as nx
import pytest

from closuredeps.domain.graph import (
    CycleDetectedError,
    DependencyError,
    DependencyGraph,
    Node,
    UnknownPackageError,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _names(nodes: list[Node]) -> list[str]:
    return [n.name for n in nodes]


def _build(edges: list[tuple[str, str]], extra: list[str] | None = None) -> DependencyGraph:
    """Register every endpoint as ``<name>.js`` then add *edges* in order."""
    graph = DependencyGraph()
    names = dict.fromkeys([n for edge in edges for n in edge] + (extra or []))
    for name in names:
        graph.register_file(name, f"{name}.js")
    for src, dst in edges:
        graph.add_dependency(src, dst)
    return graph


def _chain_graph() -> DependencyGraph:
    graph = DependencyGraph()
    graph.register_file("pkg1", "file1")
    graph.register_file("pkg2", "file2")
    graph.register_file("pkg3", "file3")
    graph.add_dependency("pkg1", "pkg2")
    graph.add_dependency("pkg2", "pkg3")
    graph.add_dependency("pkg1", "pkg3")
    return graph


def _as_digraph(graph: DependencyGraph) -> nx.DiGraph:
    g = nx.DiGraph()
    for name in graph:
        g.add_node(name)
        for dep in graph.dependencies_of(name):
            g.add_edge(name, dep.name)
    return g


# ---------------------------------------------------------------------------
# Construction and registration
# ---------------------------------------------------------------------------


class TestNew:
    def test_new_graph_is_empty(self) -> None:
        graph = DependencyGraph()
        assert len(graph) == 0
        assert graph.edge_count() == 0
        assert list(graph) == []

    def test_repr(self) -> None:
        assert repr(_chain_graph()) == "DependencyGraph(packages=3, edges=3)"


class TestRegisterFile:
    def test_register_creates_node(self) -> None:
        graph = DependencyGraph()
        graph.register_file("pkg1", "file1")
        assert "pkg1" in graph
        assert graph.get("pkg1") == Node(name="pkg1", path=Path("file1"))
        assert graph.dependencies_of("pkg1") == []

    def test_get_unknown_returns_none(self) -> None:
        assert DependencyGraph().get("nope") is None

    def test_iteration_in_registration_order(self) -> None:
        graph = DependencyGraph()
        for name in ["c", "a", "b"]:
            graph.register_file(name, f"{name}.js")
        assert list(graph) == ["c", "a", "b"]

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            DependencyGraph().register_file("", "file")

    def test_same_path_for_two_packages(self) -> None:
        graph = DependencyGraph()
        graph.register_file("a", "shared.js")
        graph.register_file("b", "shared.js")
        assert graph.get("a").path == graph.get("b").path  # type: ignore[union-attr]
        assert len(graph) == 2

    def test_reregister_drops_outgoing_edges(self) -> None:
        graph = _chain_graph()
        graph.register_file("pkg2", "file2-new")
        assert graph.dependencies_of("pkg2") == []
        assert graph.get("pkg2").path == Path("file2-new")  # type: ignore[union-attr]

    def test_reregister_keeps_incoming_edges(self) -> None:
        graph = _chain_graph()
        graph.register_file("pkg2", "file2-new")
        assert _names(graph.dependencies_of("pkg1")) == ["pkg2", "pkg3"]
        # pkg1 still reaches pkg3 directly, but no longer through pkg2.
        assert _names(graph.get_dependencies_of_package("pkg2")) == ["pkg2"]
        assert _names(graph.get_dependencies_of_package("pkg1")) == ["pkg2", "pkg3", "pkg1"]

    def test_reregister_reopens_previously_cyclic_edge(self) -> None:
        graph = _chain_graph()
        with pytest.raises(CycleDetectedError):
            graph.add_dependency("pkg3", "pkg1")
        graph.register_file("pkg1", "file1")
        graph.add_dependency("pkg3", "pkg1")
        assert _names(graph.get_dependencies_of_package("pkg3")) == ["pkg1", "pkg3"]


# ---------------------------------------------------------------------------
# add_dependency
# ---------------------------------------------------------------------------


class TestAddDependency:
    def test_chain_scenario(self) -> None:
        graph = _chain_graph()
        with pytest.raises(CycleDetectedError):
            graph.add_dependency("pkg3", "pkg2")
        with pytest.raises(UnknownPackageError):
            graph.add_dependency("pkg4", "pkg3")

    def test_edges_appended_in_order(self) -> None:
        graph = _build([], extra=["root", "c", "a", "b"])
        for dep in ["c", "a", "b"]:
            graph.add_dependency("root", dep)
        assert _names(graph.dependencies_of("root")) == ["c", "a", "b"]

    def test_unknown_from(self) -> None:
        graph = _build([], extra=["known"])
        with pytest.raises(UnknownPackageError) as exc_info:
            graph.add_dependency("missing", "known")
        err = exc_info.value
        assert err.package == "missing"
        assert err.from_package == "missing"
        assert err.to_package == "known"
        assert "missing" in str(err)

    def test_unknown_to(self) -> None:
        graph = _build([], extra=["known"])
        with pytest.raises(UnknownPackageError) as exc_info:
            graph.add_dependency("known", "missing")
        assert exc_info.value.package == "missing"
        assert graph.dependencies_of("known") == []

    def test_unknown_checked_before_cycle(self) -> None:
        with pytest.raises(UnknownPackageError):
            DependencyGraph().add_dependency("x", "x")

    def test_self_edge_is_cycle(self) -> None:
        graph = _build([], extra=["a"])
        with pytest.raises(CycleDetectedError) as exc_info:
            graph.add_dependency("a", "a")
        assert exc_info.value.from_package == "a"
        assert exc_info.value.to_package == "a"

    def test_direct_back_edge_is_cycle(self) -> None:
        graph = _build([("a", "b")])
        with pytest.raises(CycleDetectedError):
            graph.add_dependency("b", "a")

    def test_long_back_edge_is_cycle(self) -> None:
        graph = _build([("a", "b"), ("b", "c"), ("c", "d"), ("d", "e")])
        with pytest.raises(CycleDetectedError) as exc_info:
            graph.add_dependency("e", "a")
        assert "'e'" in str(exc_info.value)
        assert "'a'" in str(exc_info.value)

    def test_errors_share_base_class(self) -> None:
        assert issubclass(UnknownPackageError, DependencyError)
        assert issubclass(CycleDetectedError, DependencyError)

    def test_duplicate_edge_is_noop(self) -> None:
        graph = _build([("root", "a"), ("root", "b")])
        graph.add_dependency("root", "a")
        assert _names(graph.dependencies_of("root")) == ["a", "b"]
        assert graph.edge_count() == 2

    def test_cross_edges_in_dag_allowed(self) -> None:
        graph = _build([("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
        graph.add_dependency("b", "c")
        assert _names(graph.get_dependencies_of_package("a")) == ["d", "c", "b", "a"]


class TestRejectedEdgeAtomicity:
    def test_cycle_rejection_leaves_graph_unchanged(self) -> None:
        graph = _chain_graph()
        before = [
            _names(graph.get_dependencies_of_package(p)) for p in ("pkg1", "pkg2", "pkg3")
        ]
        edges_before = graph.edge_count()
        with pytest.raises(CycleDetectedError):
            graph.add_dependency("pkg3", "pkg1")
        after = [_names(graph.get_dependencies_of_package(p)) for p in ("pkg1", "pkg2", "pkg3")]
        assert after == before
        assert graph.edge_count() == edges_before

    def test_unknown_rejection_leaves_graph_unchanged(self) -> None:
        graph = _chain_graph()
        before = graph.get_dependencies(["pkg1"])
        with pytest.raises(UnknownPackageError):
            graph.add_dependency("pkg1", "pkg9")
        assert graph.get_dependencies(["pkg1"]) == before
        assert "pkg9" not in graph

    def test_rejected_edge_can_be_retried_after_registration(self) -> None:
        graph = _chain_graph()
        with pytest.raises(UnknownPackageError):
            graph.add_dependency("pkg4", "pkg3")
        graph.register_file("pkg4", "file4")
        graph.add_dependency("pkg4", "pkg3")
        assert _names(graph.get_dependencies_of_package("pkg4")) == ["pkg3", "pkg4"]


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestGetDependenciesOfPackage:
    @pytest.mark.parametrize(
        ("package", "expected"),
        [
            ("pkg1", ["pkg3", "pkg2", "pkg1"]),
            ("pkg2", ["pkg3", "pkg2"]),
            ("pkg3", ["pkg3"]),
        ],
    )
    def test_chain_closures(self, package: str, expected: list[str]) -> None:
        assert _names(_chain_graph().get_dependencies_of_package(package)) == expected

    def test_paths_follow_names(self) -> None:
        nodes = _chain_graph().get_dependencies_of_package("pkg1")
        assert [n.path for n in nodes] == [Path("file3"), Path("file2"), Path("file1")]

    def test_unknown_package_is_empty(self) -> None:
        assert _chain_graph().get_dependencies_of_package("nope") == []


class TestGetDependencies:
    def test_empty_entries(self) -> None:
        assert _chain_graph().get_dependencies([]) == []

    def test_unknown_entry_raises(self) -> None:
        with pytest.raises(UnknownPackageError) as exc_info:
            _chain_graph().get_dependencies(["pkg1", "ghost"])
        assert exc_info.value.package == "ghost"
        assert exc_info.value.from_package is None

    def test_diamond_shared_dependency_once(self) -> None:
        graph = _build([("A", "C"), ("B", "C")])
        assert _names(graph.get_dependencies(["A", "B"])) == ["C", "A", "B"]

    def test_entries_processed_in_given_order(self) -> None:
        graph = _build([("A", "C"), ("B", "D"), ("B", "C")])
        assert _names(graph.get_dependencies(["A", "B"])) == ["C", "A", "D", "B"]
        assert _names(graph.get_dependencies(["B", "A"])) == ["D", "C", "B", "A"]

    def test_entry_already_emitted_is_skipped(self) -> None:
        graph = _build([("A", "C")])
        assert _names(graph.get_dependencies(["A", "C", "A"])) == ["C", "A"]

    def test_entry_that_is_a_dependency_of_later_entry(self) -> None:
        graph = _build([("A", "C")])
        assert _names(graph.get_dependencies(["C", "A"])) == ["C", "A"]

    def test_accepts_any_iterable(self) -> None:
        graph = _chain_graph()
        assert _names(graph.get_dependencies(iter(["pkg2"]))) == ["pkg3", "pkg2"]

    def test_order_follows_edge_insertion_not_names(self) -> None:
        graph = _build([], extra=["root", "z", "a", "m"])
        for dep in ["z", "a", "m"]:
            graph.add_dependency("root", dep)
        assert _names(graph.get_dependencies(["root"])) == ["z", "a", "m", "root"]

    def test_idempotent_queries(self) -> None:
        graph = _build([("A", "B"), ("A", "C"), ("B", "D"), ("C", "D")])
        first = graph.get_dependencies(["A", "D"])
        second = graph.get_dependencies(["A", "D"])
        assert first == second

    def test_matches_networkx_postorder(self) -> None:
        graph = _build([("A", "B"), ("A", "C"), ("B", "D"), ("C", "D"), ("C", "E")])
        expected = list(nx.dfs_postorder_nodes(_as_digraph(graph), source="A"))
        assert _names(graph.get_dependencies(["A"])) == expected


# ---------------------------------------------------------------------------
# Properties over random edge sequences
# ---------------------------------------------------------------------------


def _random_graph(seed: int, size: int = 30, attempts: int = 150) -> DependencyGraph:
    rng = random.Random(seed)
    graph = DependencyGraph()
    names = [f"p{i}" for i in range(size)]
    for name in names:
        graph.register_file(name, f"{name}.js")
    for _ in range(attempts):
        src, dst = rng.choice(names), rng.choice(names)
        try:
            graph.add_dependency(src, dst)
        except CycleDetectedError:
            pass
    return graph


@pytest.mark.parametrize("seed", range(10))
class TestGraphProperties:
    def test_always_acyclic(self, seed: int) -> None:
        graph = _random_graph(seed)
        assert nx.is_directed_acyclic_graph(_as_digraph(graph))

    def test_dependencies_precede_dependents(self, seed: int) -> None:
        graph = _random_graph(seed)
        order = _names(graph.get_dependencies(list(graph)))
        position = {name: i for i, name in enumerate(order)}
        for name in order:
            for dep in graph.dependencies_of(name):
                assert position[dep.name] < position[name]

    def test_each_package_once(self, seed: int) -> None:
        graph = _random_graph(seed)
        rng = random.Random(seed)
        entries = rng.sample(list(graph), 8)
        order = _names(graph.get_dependencies(entries))
        assert len(order) == len(set(order))

    def test_result_is_exact_closure(self, seed: int) -> None:
        graph = _random_graph(seed)
        g = _as_digraph(graph)
        entries = ["p0", "p1", "p2"]
        expected = set(entries).union(*(nx.descendants(g, e) for e in entries))
        assert set(_names(graph.get_dependencies(entries))) == expected


# ---------------------------------------------------------------------------
# Scale
# ---------------------------------------------------------------------------


class TestScale:
    def test_layered_diamonds_stay_linear(self) -> None:
        """200 layers of width 2, fully connected between layers.

        A walk without a visited set explores 2**200 paths here.
        """
        graph = DependencyGraph()
        layers = [[f"l{i}a", f"l{i}b"] for i in range(200)]
        for layer in layers:
            for name in layer:
                graph.register_file(name, f"{name}.js")
        for upper, lower in zip(layers, layers[1:], strict=False):
            for src in upper:
                for dst in lower:
                    graph.add_dependency(src, dst)

        with pytest.raises(CycleDetectedError):
            graph.add_dependency("l199a", "l0a")

        order = graph.get_dependencies(["l0a", "l0b"])
        assert len(order) == 400
        assert order[-1].name == "l0b"

    def test_deep_chain_has_no_recursion_limit(self) -> None:
        graph = DependencyGraph()
        depth = 20_000
        for i in range(depth):
            graph.register_file(f"n{i}", f"n{i}.js")
        for i in range(depth - 1):
            graph.add_dependency(f"n{i}", f"n{i + 1}")

        order = graph.get_dependencies_of_package("n0")
        assert len(order) == depth
        assert order[0].name == f"n{depth - 1}"
        assert order[-1].name == "n0"
        with pytest.raises(CycleDetectedError):
            graph.add_dependency(f"n{depth - 1}", "n0")
