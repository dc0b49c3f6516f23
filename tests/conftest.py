"""Shared builders for commit graphs used across the test modules."""

from __future__ import annotations

import pytest

from git_explorer.graph import Branch, Commit, GraphStore, build_store
from git_explorer.lanes import assign_store_lanes


def make_commit(
    commit_id: str,
    *parent_ids: str,
    depth: int = 0,
    timestamp: int = 0,
    lane: int = 0,
) -> Commit:
    """Create a minimal Commit for testing."""
    return Commit(id=commit_id, parent_ids=tuple(parent_ids), timestamp=timestamp, depth=depth, branch_lane=lane)


def linear_chain(count: int, start: int = 0) -> list[Commit]:
    """``commit-<start>`` … as a single parent chain; timestamp = index + 1."""
    commits: list[Commit] = []
    for i in range(start, start + count):
        parents = (f"commit-{i - 1}",) if i > start else ()
        commits.append(
            Commit(id=f"commit-{i}", parent_ids=parents, timestamp=i + 1, depth=i - start)
        )
    return commits


def feature_store() -> GraphStore:
    """``master`` commit-0..commit-9, branch ``F`` with head commit-10 forked from commit-4.

    commit-10 sits at depth 5 and is the newest commit (timestamp 11).
    """
    commits = linear_chain(10)
    commits.append(Commit(id="commit-10", parent_ids=("commit-4",), timestamp=11, depth=5))
    branches = [
        Branch(name="master", head_commit_id="commit-9"),
        Branch(name="F", head_commit_id="commit-10"),
    ]
    return assign_store_lanes(build_store(commits, branches))


@pytest.fixture
def store() -> GraphStore:
    return feature_store()
