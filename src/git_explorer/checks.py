"""Diagnostics — collision detection and store invariant checks.

Nothing here changes a layout or a store; findings are returned (and logged)
for tests and developer warnings.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import networkx as nx

from git_explorer.graph import INITIAL_BRANCH_NAME, GraphStore
from git_explorer.layout import PositionedCommit
from git_explorer.traversal import parents, walk

logger = logging.getLogger(__name__)

COLLISION_THRESHOLD: float = 2.0  # pixels


def find_collisions(
    positioned: Sequence[PositionedCommit],
    threshold: float = COLLISION_THRESHOLD,
) -> list[tuple[str, str]]:
    """Return every unordered pair of commits rendered closer than ``threshold``.

    Pairwise O(n²) scan. Each pair is reported once, ordered as the commits
    appear in ``positioned``.
    """
    collisions: list[tuple[str, str]] = []
    for i, a in enumerate(positioned):
        for b in positioned[i + 1 :]:
            if math.hypot(a.x - b.x, a.y - b.y) < threshold:
                logger.warning(
                    "COLLISION: Commits '%s' and '%s' overlap at (%d, %d)",
                    a.id,
                    b.id,
                    a.x,
                    a.y,
                )
                collisions.append((a.id, b.id))
    return collisions


def orphaned_commits(store: GraphStore) -> list[str]:
    """Ids of commits unreachable from every branch head, in store order."""
    heads = [b.head_commit_id for b in store.branches.values() if b.head_commit_id in store.commits]
    reachable = set(walk(heads, parents(store.commits)))
    return [cid for cid in store.commits if cid not in reachable]


def check_invariants(store: GraphStore, initial_branch: str = INITIAL_BRANCH_NAME) -> list[str]:
    """Describe every violated structural invariant; empty when the store is sound.

    Checked: no self-parents, acyclic parent relation, depth consistency,
    branch heads present, initial branch on lane 0, unique branch lanes.
    """
    problems: list[str] = []

    for commit in store.commits.values():
        if commit.id in commit.parent_ids:
            problems.append(f"{commit.id} lists itself as a parent")

    g = store.to_digraph()
    if not nx.is_directed_acyclic_graph(g):
        cycle = nx.find_cycle(g)
        problems.append("cycle through " + " -> ".join(src for src, _ in cycle))
    else:
        for commit in store.commits.values():
            known = [store.commits[p].depth for p in commit.parent_ids if p in store.commits]
            expected = 1 + max(known) if known else 0
            if known and commit.depth != expected:
                problems.append(f"{commit.id} has depth {commit.depth}, expected {expected}")
            elif not commit.parent_ids and commit.depth != 0:
                problems.append(f"root {commit.id} has depth {commit.depth}, expected 0")

    lanes_seen: dict[int, str] = {}
    for branch in store.branches.values():
        if branch.head_commit_id not in store.commits:
            problems.append(f"branch {branch.name} points at missing commit {branch.head_commit_id}")
        if branch.name == initial_branch and branch.lane != 0:
            problems.append(f"initial branch {branch.name} is on lane {branch.lane}")
        other = lanes_seen.setdefault(branch.lane, branch.name)
        if other != branch.name:
            problems.append(f"branches {other} and {branch.name} share lane {branch.lane}")

    for problem in problems:
        logger.warning("Invariant violated: %s", problem)
    return problems
