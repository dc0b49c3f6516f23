"""Graph model — commits, branches and the immutable store snapshot.

A ``GraphStore`` is the unit every engine consumes and produces. It is never
edited in place: mutations build fresh dicts and wrap them in a new snapshot via
``GraphStore.evolve``. The issuing counters (commit index, branch number and the
logical clock) travel with the snapshot so the engines stay stateless.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import networkx as nx

INITIAL_BRANCH_NAME: str = "master"
STARTING_BRANCH_NUMBER: int = 132
COMMIT_ID_PREFIX: str = "commit-"


@dataclass(frozen=True)
class Commit:
    """A node in the commit DAG.

    ``parent_ids`` order matters for merges: index 0 is the mainline parent,
    index 1 the incoming (merged) parent.
    """

    id: str
    parent_ids: tuple[str, ...]
    timestamp: int
    depth: int
    branch_lane: int = 0
    message: str = ""
    label: str | None = None
    is_custom: bool = False

    @property
    def is_root(self) -> bool:
        return not self.parent_ids

    @property
    def is_merge(self) -> bool:
        return len(self.parent_ids) > 1

    def evolve(self, **changes: object) -> Commit:
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class Branch:
    """A movable named pointer to a head commit."""

    name: str
    head_commit_id: str
    lane: int = 0

    def evolve(self, **changes: object) -> Branch:
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class GraphStore:
    """Immutable snapshot of commits and branches.

    Attributes:
        commits: Maps commit id → Commit.
        branches: Maps branch name → Branch.
        next_commit_index: Numeric suffix of the next issued commit id.
        next_branch_number: Next generated numeric branch name.
        clock: Last issued logical timestamp.
    """

    commits: dict[str, Commit] = field(default_factory=dict)
    branches: dict[str, Branch] = field(default_factory=dict)
    next_commit_index: int = 0
    next_branch_number: int = STARTING_BRANCH_NUMBER
    clock: int = 0

    # -- Lookup --

    def commit(self, commit_id: str) -> Commit | None:
        return self.commits.get(commit_id)

    def branch(self, name: str) -> Branch | None:
        return self.branches.get(name)

    def head_of(self, name: str) -> Commit | None:
        """Head commit of a branch, or None if the branch or its head is missing."""
        branch = self.branches.get(name)
        if branch is None:
            return None
        return self.commits.get(branch.head_commit_id)

    # -- Snapshot construction --

    def evolve(
        self,
        *,
        commits: Mapping[str, Commit] | None = None,
        branches: Mapping[str, Branch] | None = None,
        **counters: int,
    ) -> GraphStore:
        """Return a new snapshot with the given collections/counters replaced.

        Collections are copied into fresh dicts so the new snapshot never
        aliases a scratch mapping the caller keeps mutating.
        """
        return dataclasses.replace(
            self,
            commits=dict(commits) if commits is not None else dict(self.commits),
            branches=dict(branches) if branches is not None else dict(self.branches),
            **counters,
        )

    def to_digraph(self) -> nx.DiGraph:
        """Build a networkx DiGraph with parent → child edges.

        Each node carries its ``Commit`` under the ``data`` attribute. Parent
        references that are not in the store are dropped.
        """
        g: nx.DiGraph = nx.DiGraph()
        for commit in self.commits.values():
            g.add_node(commit.id, data=commit)
        for commit in self.commits.values():
            for parent_id in commit.parent_ids:
                if parent_id in self.commits:
                    g.add_edge(parent_id, commit.id)
        return g


def make_commit_id(index: int) -> str:
    return f"{COMMIT_ID_PREFIX}{index}"


def commit_message(index: int, branch_name: str | None = None) -> str:
    """Human-readable commit text, e.g. ``"Commit 12 (on 139)"``."""
    if branch_name is None or branch_name == INITIAL_BRANCH_NAME:
        return f"Commit {index}"
    return f"Commit {index} (on {branch_name})"


def build_store(commits: Iterable[Commit], branches: Iterable[Branch]) -> GraphStore:
    """Assemble a snapshot from ready-made records.

    Counters are derived so that newly issued ids and timestamps never clash
    with the supplied ones.
    """
    commit_map = {c.id: c for c in commits}
    branch_map = {b.name: b for b in branches}

    indices = [
        int(cid[len(COMMIT_ID_PREFIX) :])
        for cid in commit_map
        if cid.startswith(COMMIT_ID_PREFIX) and cid[len(COMMIT_ID_PREFIX) :].isdigit()
    ]
    numeric_names = [int(name) for name in branch_map if name.isdigit()]

    return GraphStore(
        commits=commit_map,
        branches=branch_map,
        next_commit_index=max(indices, default=-1) + 1,
        next_branch_number=max(STARTING_BRANCH_NUMBER, max(numeric_names, default=0) + 1),
        clock=max((c.timestamp for c in commit_map.values()), default=0),
    )
