"""Breadth-first walks over the commit DAG.

One walker serves cycle detection, ancestor detection and lane propagation. The
direction is chosen by the neighbour function (``parents`` walks toward roots,
``children`` walks toward heads), and an optional ``expand`` predicate decides
whether a visited node is yielded and its neighbours followed.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable, Iterator, Mapping

import networkx as nx

from git_explorer.graph import Commit

Neighbours = Callable[[str], Iterable[str]]


def walk(
    start: str | Iterable[str],
    neighbours: Neighbours,
    expand: Callable[[str], bool] | None = None,
) -> Iterator[str]:
    """Yield node ids reachable from ``start`` in breadth-first order.

    Each node is visited at most once. When ``expand`` returns False for a node,
    that node is neither yielded nor expanded (the walk stops there on that
    path).
    """
    starts = [start] if isinstance(start, str) else list(start)
    visited: set[str] = set()
    queue: deque[str] = deque()
    for node in starts:
        if node not in visited:
            visited.add(node)
            queue.append(node)

    while queue:
        node = queue.popleft()
        if expand is not None and not expand(node):
            continue
        yield node
        for nb in neighbours(node):
            if nb not in visited:
                visited.add(nb)
                queue.append(nb)


def parents(commits: Mapping[str, Commit]) -> Neighbours:
    """Neighbour function following ``parent_ids`` toward roots.

    Parent ids not present in ``commits`` are skipped.
    """

    def _parents(node: str) -> Iterable[str]:
        commit = commits.get(node)
        if commit is None:
            return ()
        return [p for p in commit.parent_ids if p in commits]

    return _parents


def children(commits: Mapping[str, Commit]) -> Neighbours:
    """Neighbour function following the inverse parent relation toward heads.

    The parent → child DiGraph is built once from the given snapshot, so the
    relation seen by the walk is the one at call time. Successors come back in
    store order.
    """
    g: nx.DiGraph = nx.DiGraph()
    g.add_nodes_from(commits)
    for commit in commits.values():
        g.add_edges_from((p, commit.id) for p in commit.parent_ids if p in commits)

    def _children(node: str) -> Iterable[str]:
        return g.successors(node) if node in g else ()

    return _children


def reaches(start: str, target: str, neighbours: Neighbours) -> bool:
    """True if ``target`` is reachable from ``start`` (inclusive)."""
    return any(node == target for node in walk(start, neighbours))


def is_ancestor(commits: Mapping[str, Commit], ancestor_id: str, descendant_id: str) -> bool:
    """True if ``ancestor_id`` is reachable from ``descendant_id`` via parents.

    A commit counts as its own ancestor.
    """
    return reaches(descendant_id, ancestor_id, parents(commits))


def descendants(commits: Mapping[str, Commit], commit_id: str) -> list[str]:
    """Ids of all commits that have ``commit_id`` in their ancestry, BFS order."""
    return [node for node in walk(commit_id, children(commits)) if node != commit_id]
