"""
Dependency-graph algorithms.

Pure functions over an adjacency mapping ``task -> [prerequisites]`` (the
direction a TaskDependency row points). Nothing here touches the database;
services load the edges for one project and hand them over.
"""

from __future__ import annotations

import heapq
import itertools
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Hashable, Iterable, Mapping, Optional, Sequence

from app.core.errors import CycleDetected
from sitework_shared.schemas.common import DependencyType

Node = Hashable
Adjacency = Mapping[Node, Sequence[Node]]


def build_adjacency(edges: Iterable[tuple[Node, Node]]) -> dict[Node, list[Node]]:
    """``[(task, prerequisite), ...]`` -> ``{task: [prerequisite, ...]}``."""
    adjacency: dict[Node, list[Node]] = defaultdict(list)
    for task, prerequisite in edges:
        adjacency[task].append(prerequisite)
    return adjacency


def find_path(adjacency: Adjacency, start: Node, goal: Node) -> Optional[list[Node]]:
    """Depth-first search along prerequisite edges.

    Returns the node path ``[start, ..., goal]`` or None when ``goal`` is not
    reachable from ``start``.
    """
    if start == goal:
        return [start]

    visited = {start}
    path = [start]
    stack = [iter(adjacency.get(start, ()))]
    while stack:
        for child in stack[-1]:
            if child == goal:
                return path + [child]
            if child not in visited:
                visited.add(child)
                path.append(child)
                stack.append(iter(adjacency.get(child, ())))
                break
        else:
            stack.pop()
            path.pop()
    return None


def would_create_cycle(
    adjacency: Adjacency, task: Node, prerequisite: Node
) -> Optional[list[Node]]:
    """Check the edge ``task -> prerequisite`` before it is stored.

    The edge closes a cycle iff ``task`` is already reachable from
    ``prerequisite``. Returns the cycle as ``[task, prerequisite, ..., task]``
    or None.
    """
    path = find_path(adjacency, prerequisite, task)
    if path is None:
        return None
    if task == prerequisite:
        return [task, task]
    return [task] + path


def ancestors(adjacency: Adjacency, task: Node) -> set[Node]:
    """Every task ``task`` transitively depends on."""
    seen: set[Node] = set()
    stack = list(adjacency.get(task, ()))
    while stack:
        node = stack.pop()
        if node in seen or node == task:
            continue
        seen.add(node)
        stack.extend(adjacency.get(node, ()))
    return seen


def topological_order(
    nodes: Iterable[Node],
    adjacency: Adjacency,
    key: Optional[Callable[[Node], object]] = None,
) -> list[Node]:
    """Kahn's algorithm, prerequisites first.

    Edges to nodes outside ``nodes`` are ignored. Among tasks that are ready
    at the same time the smallest ``key`` goes first (default: ``str``), so
    the order is deterministic. Raises CycleDetected if the graph has a cycle.
    """
    key = key or str
    node_set = set(nodes)
    indegree = {n: 0 for n in node_set}
    dependents: dict[Node, list[Node]] = defaultdict(list)
    for task in node_set:
        for prerequisite in set(adjacency.get(task, ())):
            if prerequisite in node_set:
                indegree[task] += 1
                dependents[prerequisite].append(task)

    counter = itertools.count()
    ready = [(key(n), next(counter), n) for n, deg in indegree.items() if deg == 0]
    heapq.heapify(ready)

    order: list[Node] = []
    while ready:
        _, _, node = heapq.heappop(ready)
        order.append(node)
        for dependent in dependents[node]:
            indegree[dependent] -= 1
            if indegree[dependent] == 0:
                heapq.heappush(ready, (key(dependent), next(counter), dependent))

    if len(order) != len(node_set):
        stuck = sorted((n for n, deg in indegree.items() if deg > 0), key=key)
        raise CycleDetected(
            f"Dependency graph contains a cycle through {len(stuck)} task(s)",
            path=stuck,
        )
    return order


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Edge:
    task: Node
    prerequisite: Node
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lag_days: int = 0


@dataclass
class ScheduleEntry:
    duration: int
    earliest_start: int = 0
    latest_start: int = 0

    @property
    def earliest_finish(self) -> int:
        return self.earliest_start + self.duration

    @property
    def latest_finish(self) -> int:
        return self.latest_start + self.duration

    @property
    def slack(self) -> int:
        return self.latest_start - self.earliest_start

    @property
    def critical(self) -> bool:
        return self.slack == 0


@dataclass
class Schedule:
    order: list[Node]
    entries: dict[Node, ScheduleEntry]
    length: int
    critical_path: list[Node] = field(default_factory=list)


def _start_offset(edge: Edge, durations: Mapping[Node, int]) -> int:
    """Minimum gap between the prerequisite's start and the dependent's start."""
    lag = edge.lag_days
    kind = DependencyType(edge.dependency_type)
    if kind is DependencyType.FINISH_TO_START:
        return durations[edge.prerequisite] + lag
    if kind is DependencyType.START_TO_START:
        return lag
    if kind is DependencyType.FINISH_TO_FINISH:
        return durations[edge.prerequisite] + lag - durations[edge.task]
    return lag - durations[edge.task]  # START_TO_FINISH


def compute_schedule(
    durations: Mapping[Node, int],
    edges: Iterable[Edge],
    key: Optional[Callable[[Node], object]] = None,
) -> Schedule:
    """Earliest/latest start per task in whole days from day 0.

    Every edge is reduced to ``start(task) >= start(prerequisite) + offset``;
    a forward pass gives earliest starts (never before day 0), a backward pass
    from the project length gives latest starts. Zero-slack tasks form the
    critical path, listed in topological order.
    """
    relevant = [e for e in edges if e.task in durations and e.prerequisite in durations]
    adjacency = build_adjacency((e.task, e.prerequisite) for e in relevant)
    order = topological_order(durations.keys(), adjacency, key=key)

    incoming: dict[Node, list[tuple[Node, int]]] = defaultdict(list)
    outgoing: dict[Node, list[tuple[Node, int]]] = defaultdict(list)
    for e in relevant:
        offset = _start_offset(e, durations)
        incoming[e.task].append((e.prerequisite, offset))
        outgoing[e.prerequisite].append((e.task, offset))

    entries = {n: ScheduleEntry(duration=durations[n]) for n in order}

    for node in order:
        entry = entries[node]
        entry.earliest_start = max(
            [0] + [entries[p].earliest_start + off for p, off in incoming[node]]
        )

    length = max((e.earliest_finish for e in entries.values()), default=0)

    for node in reversed(order):
        entry = entries[node]
        entry.latest_start = min(
            [length - entry.duration]
            + [entries[d].latest_start - off for d, off in outgoing[node]]
        )

    critical = [n for n in order if entries[n].critical]
    return Schedule(order=order, entries=entries, length=length, critical_path=critical)
