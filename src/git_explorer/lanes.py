"""Lane assignment — gives every branch and every commit a horizontal lane.

Pipeline (recomputed from scratch on every call, no hidden state):
  1. Branch ordering by fork signature (latest fork, newest head first)
  2. Branch lane numbering (initial branch fixed at lane 0)
  3. Mainline propagation (everything reachable from the initial head → lane 0)
  4. Branch propagation (first claim by a smaller lane wins)
  5. Slot resolution (no two commits share a (depth, lane) cell)

The result is a pure function of topology, depths and timestamps. Orphaned
commits, unreachable from every branch head, keep their previous lane as the
starting point for slot resolution, which keeps the whole pass idempotent.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping

from git_explorer.graph import INITIAL_BRANCH_NAME, Branch, Commit, GraphStore
from git_explorer.traversal import parents, walk

logger = logging.getLogger(__name__)

ForkSignature = tuple[int, int]

# Sorts after every real signature (depths and timestamps are >= -1 / >= 0).
DANGLING_SIGNATURE: ForkSignature = (-1, -1)


# ─── Branch Ordering ──────────────────────────────────────────────────────────


def fork_signature(branch: Branch, commits: Mapping[str, Commit]) -> ForkSignature:
    """Compute ``(fork_parent_depth, head_timestamp)`` for a branch.

    ``fork_parent_depth`` is the depth of the first parent of the head commit.
    A root head uses ``head.depth - 1``; an unknown parent uses -1. A head that
    is missing from ``commits`` yields ``DANGLING_SIGNATURE``.
    """
    head = commits.get(branch.head_commit_id)
    if head is None:
        return DANGLING_SIGNATURE

    if head.is_root:
        fork_depth = head.depth - 1
    else:
        parent = commits.get(head.parent_ids[0])
        fork_depth = parent.depth if parent is not None else -1
    return (fork_depth, head.timestamp)


def order_branches(
    commits: Mapping[str, Commit],
    branches: Mapping[str, Branch],
    initial_branch: str = INITIAL_BRANCH_NAME,
) -> list[str]:
    """Names of non-initial branches in lane order.

    Descending by fork signature: branches forking deeper into history, then
    those with newer heads, come first. Names break remaining ties.
    """
    others = [name for name in branches if name != initial_branch]

    def sort_key(name: str) -> tuple[int, int, str]:
        fork_depth, head_ts = fork_signature(branches[name], commits)
        return (-fork_depth, -head_ts, name)

    return sorted(others, key=sort_key)


def number_branches(
    commits: Mapping[str, Commit],
    branches: Mapping[str, Branch],
    initial_branch: str = INITIAL_BRANCH_NAME,
) -> dict[str, int]:
    """Map branch name → lane. The initial branch (if present) gets lane 0."""
    lanes: dict[str, int] = {}
    if initial_branch in branches:
        lanes[initial_branch] = 0
    for lane, name in enumerate(order_branches(commits, branches, initial_branch), start=1):
        lanes[name] = lane
    return lanes


# ─── Commit Propagation ───────────────────────────────────────────────────────


def propagate_commit_lanes(
    commits: Mapping[str, Commit],
    branches: Mapping[str, Branch],
    branch_lanes: Mapping[str, int],
) -> dict[str, int]:
    """Stamp each reachable commit with the lane of the branch that claims it.

    Branches are processed in ascending lane order. A walk from a branch head
    stops at any commit already stamped with a strictly smaller lane; commits
    stamped with an equal or larger lane (or unstamped) are taken over.

    Returns commit id → lane for reachable commits only.
    """
    stamps: dict[str, int] = {}
    follow_parents = parents(commits)

    for name in sorted(branch_lanes, key=lambda n: branch_lanes[n]):
        lane = branch_lanes[name]
        head_id = branches[name].head_commit_id
        if head_id not in commits:
            logger.debug("Branch %s has dangling head %s; skipped", name, head_id)
            continue

        def claimable(node: str, lane: int = lane) -> bool:
            return stamps.get(node, lane) >= lane

        for node in walk(head_id, follow_parents, expand=claimable):
            stamps[node] = lane

    return stamps


def resolve_slot_conflicts(
    commits: Mapping[str, Commit],
    lanes: Mapping[str, int],
    reachable: Collection[str] | None = None,
) -> dict[str, int]:
    """Move commits off occupied ``(depth, lane)`` cells.

    Commits are visited in layout order ``(depth, timestamp, lane)``; the first
    one keeps a cell and later ones move to the next free lane at their depth.
    When ``reachable`` is given, those commits are visited before all others so
    orphans never push a live commit out of its lane.
    """
    resolved: dict[str, int] = {}
    occupied: set[tuple[int, int]] = set()

    def visit_key(c: Commit) -> tuple[bool, int, int, int]:
        orphan = reachable is not None and c.id not in reachable
        return (orphan, c.depth, c.timestamp, lanes[c.id])

    ordered = sorted(commits.values(), key=visit_key)
    for commit in ordered:
        lane = lanes[commit.id]
        while (commit.depth, lane) in occupied:
            lane += 1
        if lane != lanes[commit.id]:
            logger.debug("Commit %s moved from lane %d to free lane %d", commit.id, lanes[commit.id], lane)
        occupied.add((commit.depth, lane))
        resolved[commit.id] = lane

    return resolved


# ─── Entry Points ─────────────────────────────────────────────────────────────


def assign_lanes(
    commits: Mapping[str, Commit],
    branches: Mapping[str, Branch],
    initial_branch: str = INITIAL_BRANCH_NAME,
) -> tuple[dict[str, Commit], dict[str, Branch]]:
    """Recompute branch lanes and commit lanes.

    Pure and total: the inputs are not modified and new dicts are returned.
    Records whose lane does not change are reused as-is.
    """
    branch_lanes = number_branches(commits, branches, initial_branch)
    stamps = propagate_commit_lanes(commits, branches, branch_lanes)

    # Orphans start from the lane they already hold.
    lanes = {cid: stamps.get(cid, commit.branch_lane) for cid, commit in commits.items()}
    lanes = resolve_slot_conflicts(commits, lanes, reachable=stamps)

    new_commits: dict[str, Commit] = {}
    for cid, commit in commits.items():
        lane = lanes[cid]
        new_commits[cid] = commit if commit.branch_lane == lane else commit.evolve(branch_lane=lane)

    new_branches: dict[str, Branch] = {}
    for name, branch in branches.items():
        lane = branch_lanes[name]
        new_branches[name] = branch if branch.lane == lane else branch.evolve(lane=lane)

    logger.debug(
        "Assigned lanes: %d branches, %d commits, %d orphaned",
        len(new_branches),
        len(new_commits),
        len(commits) - len(stamps),
    )
    return new_commits, new_branches


def assign_store_lanes(store: GraphStore, initial_branch: str = INITIAL_BRANCH_NAME) -> GraphStore:
    """Run ``assign_lanes`` over a snapshot and return the normalized snapshot."""
    commits, branches = assign_lanes(store.commits, store.branches, initial_branch)
    return store.evolve(commits=commits, branches=branches)
