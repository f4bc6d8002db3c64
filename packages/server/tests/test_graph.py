"""
Unit tests for the dependency-graph algorithms (no database).
"""

from __future__ import annotations

from collections import defaultdict

import pytest

from app.core.errors import CycleDetected
from app.services.graph import (
    Edge,
    ancestors,
    build_adjacency,
    compute_schedule,
    find_path,
    topological_order,
    would_create_cycle,
)
from sitework_shared.schemas.common import DependencyType


class TestFindPath:
    def test_direct_edge(self):
        adj = {"A": ["B"]}
        assert find_path(adj, "A", "B") == ["A", "B"]

    def test_transitive_path(self):
        adj = {"A": ["B"], "B": ["C"]}
        assert find_path(adj, "A", "C") == ["A", "B", "C"]

    def test_unreachable(self):
        adj = {"A": ["B"], "C": ["D"]}
        assert find_path(adj, "A", "D") is None

    def test_diamond_visits_each_node_once(self):
        adj = {"A": ["B", "C"], "B": ["D"], "C": ["D"], "D": []}
        assert find_path(adj, "A", "E") is None
        assert find_path(adj, "A", "D") in (["A", "B", "D"], ["A", "C", "D"])

    def test_long_chain_does_not_recurse(self):
        adj = {i: [i + 1] for i in range(5000)}
        path = find_path(adj, 0, 5000)
        assert path is not None
        assert len(path) == 5001


class TestWouldCreateCycle:
    def test_no_cycle_on_empty_graph(self):
        assert would_create_cycle({}, "A", "B") is None

    def test_self_edge_is_a_cycle(self):
        assert would_create_cycle({}, "A", "A") == ["A", "A"]

    def test_direct_cycle(self):
        # A depends on B; B depending on A closes the loop
        adj = {"A": ["B"]}
        assert would_create_cycle(adj, "B", "A") == ["B", "A", "B"]

    def test_indirect_cycle(self):
        adj = {"A": ["B"], "B": ["C"]}
        assert would_create_cycle(adj, "C", "A") == ["C", "A", "B", "C"]

    def test_no_indirect_cycle(self):
        adj: dict[str, list[str]] = defaultdict(list)
        adj["A"].append("B")
        adj["C"].append("D")
        assert would_create_cycle(adj, "D", "A") is None


def test_ancestors_is_transitive_closure():
    adj = build_adjacency([("D", "C"), ("C", "B"), ("C", "A"), ("B", "A"), ("X", "D")])
    assert ancestors(adj, "D") == {"C", "B", "A"}
    assert ancestors(adj, "A") == set()
    assert ancestors(adj, "X") == {"D", "C", "B", "A"}


class TestTopologicalOrder:
    def test_prerequisites_first(self):
        adj = {"framing": ["foundation"], "drywall": ["framing"]}
        order = topological_order(["drywall", "framing", "foundation"], adj)
        assert order == ["foundation", "framing", "drywall"]

    def test_ties_broken_by_key(self):
        adj = {"c": ["a", "b"]}
        assert topological_order(["c", "b", "a"], adj) == ["a", "b", "c"]
        priority = {"a": 2, "b": 1, "c": 0}
        assert topological_order(["c", "b", "a"], adj, key=priority.__getitem__) == ["b", "a", "c"]

    def test_edges_outside_node_set_are_ignored(self):
        adj = {"b": ["a", "elsewhere"]}
        assert topological_order(["a", "b"], adj) == ["a", "b"]

    def test_cycle_raises(self):
        adj = {"a": ["b"], "b": ["a"], "c": []}
        with pytest.raises(CycleDetected) as exc_info:
            topological_order(["a", "b", "c"], adj)
        assert exc_info.value.path == ["a", "b"]


class TestComputeSchedule:
    def test_finish_to_start_chain_with_lag(self):
        durations = {"foundation": 3, "framing": 5, "drywall": 2}
        edges = [
            Edge("framing", "foundation", DependencyType.FINISH_TO_START, 2),
            Edge("drywall", "framing", DependencyType.FINISH_TO_START, 1),
        ]
        schedule = compute_schedule(durations, edges)

        assert schedule.order == ["foundation", "framing", "drywall"]
        assert schedule.entries["framing"].earliest_start == 5
        assert schedule.entries["drywall"].earliest_start == 11
        assert schedule.length == 13
        assert schedule.critical_path == ["foundation", "framing", "drywall"]

    def test_slack_on_parallel_branch(self):
        durations = {"A": 3, "B": 1, "C": 2}
        edges = [Edge("C", "A"), Edge("C", "B")]
        schedule = compute_schedule(durations, edges)

        assert schedule.entries["C"].earliest_start == 3
        assert schedule.entries["B"].slack == 2
        assert not schedule.entries["B"].critical
        assert schedule.critical_path == ["A", "C"]
        assert schedule.length == 5

    def test_start_to_start(self):
        schedule = compute_schedule(
            {"A": 4, "B": 2}, [Edge("B", "A", DependencyType.START_TO_START, 1)]
        )
        assert schedule.entries["B"].earliest_start == 1
        assert schedule.length == 4

    def test_finish_to_finish(self):
        schedule = compute_schedule(
            {"A": 4, "B": 2}, [Edge("B", "A", DependencyType.FINISH_TO_FINISH, 0)]
        )
        assert schedule.entries["B"].earliest_start == 2
        assert schedule.entries["B"].earliest_finish == 4

    def test_start_to_finish_never_before_day_zero(self):
        schedule = compute_schedule(
            {"A": 4, "B": 2}, [Edge("B", "A", DependencyType.START_TO_FINISH, 0)]
        )
        assert schedule.entries["B"].earliest_start == 0

    def test_string_dependency_type_accepted(self):
        schedule = compute_schedule({"A": 2, "B": 1}, [Edge("B", "A", "finish_to_start", 0)])
        assert schedule.entries["B"].earliest_start == 2

    def test_empty(self):
        schedule = compute_schedule({}, [])
        assert schedule.order == []
        assert schedule.length == 0
