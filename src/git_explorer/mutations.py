"""Mutation engine — structural operations on a ``GraphStore`` snapshot.

Every operation validates first and raises a ``GraphError`` subclass before
anything is built, then assembles the result in a private scratch draft and
publishes it as one new snapshot. Arguments are never modified.

Operations that change branch topology (create, custom commits, merge, move,
delete) finish with a full lane pass. ``add_commit`` skips it: extending a
branch head downward cannot change the lane of any existing commit.
"""

from __future__ import annotations

import logging

import networkx as nx

from git_explorer.errors import (
    AlreadyMerged,
    CycleDetected,
    InvalidOperation,
    MissingHead,
    SameBranch,
    SelfParent,
    UnknownBranch,
    UnknownCommit,
)
from git_explorer.graph import (
    INITIAL_BRANCH_NAME,
    Branch,
    Commit,
    GraphStore,
    commit_message,
    make_commit_id,
)
from git_explorer.lanes import assign_store_lanes
from git_explorer.traversal import children, descendants, is_ancestor, reaches

logger = logging.getLogger(__name__)

CUSTOM_COMMIT_COUNT: int = 4


# ─── Scratch Draft ────────────────────────────────────────────────────────────


class _Draft:
    """Mutable scratch copy of a snapshot, used while one operation runs.

    Only the operation that created it ever sees it; ``publish`` freezes the
    result into a new ``GraphStore``.
    """

    def __init__(self, store: GraphStore) -> None:
        self.base = store
        self.commits: dict[str, Commit] = dict(store.commits)
        self.branches: dict[str, Branch] = dict(store.branches)
        self.next_commit_index = store.next_commit_index
        self.next_branch_number = store.next_branch_number
        self.clock = store.clock

    def tick(self) -> int:
        """Issue the next logical timestamp."""
        self.clock += 1
        return self.clock

    def new_commit(
        self,
        parent_ids: tuple[str, ...],
        depth: int,
        lane: int,
        branch_name: str | None = None,
        *,
        message: str | None = None,
        label: str | None = None,
        is_custom: bool = False,
    ) -> Commit:
        index = self.next_commit_index
        self.next_commit_index += 1
        commit = Commit(
            id=make_commit_id(index),
            parent_ids=parent_ids,
            timestamp=self.tick(),
            depth=depth,
            branch_lane=lane,
            message=message if message is not None else commit_message(index, branch_name),
            label=label,
            is_custom=is_custom,
        )
        self.commits[commit.id] = commit
        return commit

    def point_branch(self, name: str, head_commit_id: str, lane: int | None = None) -> Branch:
        existing = self.branches.get(name)
        if existing is None:
            branch = Branch(name=name, head_commit_id=head_commit_id, lane=lane or 0)
        else:
            branch = existing.evolve(head_commit_id=head_commit_id)
        self.branches[name] = branch
        return branch

    def claim_branch_name(self, name: str) -> None:
        """Keep the generated-name counter ahead of numeric names in use."""
        if name.isdigit():
            self.next_branch_number = max(self.next_branch_number, int(name) + 1)

    def publish(self) -> GraphStore:
        return self.base.evolve(
            commits=self.commits,
            branches=self.branches,
            next_commit_index=self.next_commit_index,
            next_branch_number=self.next_branch_number,
            clock=self.clock,
        )


# ─── Validation Helpers ───────────────────────────────────────────────────────


def _require_commit(store: GraphStore, commit_id: str) -> Commit:
    commit = store.commit(commit_id)
    if commit is None:
        raise UnknownCommit(commit_id)
    return commit


def _require_branch(store: GraphStore, name: str) -> Branch:
    branch = store.branch(name)
    if branch is None:
        raise UnknownBranch(name)
    return branch


def _require_head(store: GraphStore, branch: Branch) -> Commit:
    head = store.commit(branch.head_commit_id)
    if head is None:
        raise MissingHead(branch.name, branch.head_commit_id)
    return head


def next_branch_name(store: GraphStore) -> str:
    """Next free numeric branch name, never below the store's counter."""
    numeric = [int(name) for name in store.branches if name.isdigit()]
    number = max(store.next_branch_number, max(numeric, default=0) + 1)
    while str(number) in store.branches:
        number += 1
    return str(number)


def _new_branch_name(store: GraphStore, requested: str | None) -> str:
    if requested is None:
        return next_branch_name(store)
    if not requested:
        raise InvalidOperation("Branch name must not be empty")
    if requested in store.branches:
        raise InvalidOperation(f"Branch {requested} already exists")
    return requested


# ─── Operations ───────────────────────────────────────────────────────────────


def add_commit(store: GraphStore, branch_name: str) -> GraphStore:
    """Append one commit to a branch head and advance the head.

    The new commit takes the branch's lane, or the next lane to the right
    when another commit already sits in that cell at the new depth. No lane
    pass is run.

    Raises:
        UnknownBranch: no such branch.
        MissingHead: the branch head is not in the store.
    """
    branch = _require_branch(store, branch_name)
    head = _require_head(store, branch)

    depth = head.depth + 1
    occupied = {c.branch_lane for c in store.commits.values() if c.depth == depth}
    lane = branch.lane
    while lane in occupied:
        lane += 1

    draft = _Draft(store)
    commit = draft.new_commit((head.id,), depth, lane, branch.name)
    draft.point_branch(branch.name, commit.id)

    logger.info("Added %s to branch %s", commit.id, branch.name)
    return draft.publish()


def create_branch(store: GraphStore, commit_id: str, new_branch_name: str | None = None) -> GraphStore:
    """Create a branch off ``commit_id`` whose head is a brand-new commit.

    When ``new_branch_name`` is omitted the next numeric name is generated.

    Raises:
        UnknownCommit: ``commit_id`` is not in the store.
        InvalidOperation: the requested name is empty or already taken.
    """
    parent = _require_commit(store, commit_id)
    name = _new_branch_name(store, new_branch_name)

    draft = _Draft(store)
    draft.claim_branch_name(name)
    commit = draft.new_commit((parent.id,), parent.depth + 1, 0, name)
    draft.point_branch(name, commit.id, lane=0)

    logger.info("Created branch %s from %s with head %s", name, parent.id, commit.id)
    return assign_store_lanes(draft.publish())


def add_custom_commits(
    store: GraphStore,
    commit_id: str,
    count: int = CUSTOM_COMMIT_COUNT,
    branch_name: str | None = None,
) -> GraphStore:
    """Create a new branch off ``commit_id`` holding a chain of ``count`` custom commits.

    Equivalent to ``create_branch`` followed by ``count - 1`` ``add_commit``
    calls, except that the commits carry the custom marker and a label.

    Raises:
        UnknownCommit: ``commit_id`` is not in the store.
        InvalidOperation: ``count`` < 1, or the requested name is taken.
    """
    base = _require_commit(store, commit_id)
    if count < 1:
        raise InvalidOperation(f"Custom commit count must be positive, got {count}")
    name = _new_branch_name(store, branch_name)

    draft = _Draft(store)
    draft.claim_branch_name(name)
    parent = base
    for i in range(count):
        parent = draft.new_commit(
            (parent.id,),
            parent.depth + 1,
            0,
            name,
            label=f"Custom {i + 1}",
            is_custom=True,
        )
    draft.point_branch(name, parent.id, lane=0)

    logger.info("Added %d custom commits on branch %s from %s", count, name, base.id)
    return assign_store_lanes(draft.publish())


def move_commit(store: GraphStore, commit_id: str, new_parent_id: str) -> GraphStore:
    """Re-parent ``commit_id`` onto ``new_parent_id``.

    The moved commit gets a single parent and a fresh timestamp. Every
    descendant is restamped in topological order: ``depth`` becomes
    ``1 + max(parent depths)``, the lane is inherited from the first parent and
    timestamps increase strictly. Branch heads are left where they are even if
    the move detached them from their former ancestry.

    Raises:
        UnknownCommit: either id is not in the store.
        SelfParent: ``commit_id == new_parent_id``.
        CycleDetected: ``new_parent_id`` is a descendant of ``commit_id``.
    """
    commit = _require_commit(store, commit_id)
    new_parent = _require_commit(store, new_parent_id)
    if commit_id == new_parent_id:
        raise SelfParent(commit_id)
    if reaches(commit_id, new_parent_id, children(store.commits)):
        raise CycleDetected(commit_id, new_parent_id)

    draft = _Draft(store)
    draft.commits[commit_id] = commit.evolve(
        parent_ids=(new_parent_id,),
        depth=new_parent.depth + 1,
        branch_lane=new_parent.branch_lane,
        timestamp=draft.tick(),
    )

    # BFS rank keeps sibling order deterministic inside the topological sort.
    bfs_rank = {cid: rank for rank, cid in enumerate(descendants(draft.commits, commit_id))}
    subgraph = draft.publish().to_digraph().subgraph(bfs_rank)
    for cid in nx.lexicographical_topological_sort(subgraph, key=bfs_rank.__getitem__):
        child = draft.commits[cid]
        known_parents = [draft.commits[p] for p in child.parent_ids if p in draft.commits]
        draft.commits[cid] = child.evolve(
            depth=1 + max((p.depth for p in known_parents), default=-1),
            branch_lane=known_parents[0].branch_lane if known_parents else child.branch_lane,
            timestamp=draft.tick(),
        )

    logger.info("Moved %s onto %s (%d descendants restamped)", commit_id, new_parent_id, len(bfs_rank))
    return assign_store_lanes(draft.publish())


def merge_branch(store: GraphStore, target: str, source: str) -> GraphStore:
    """Merge ``source`` into ``target`` with a two-parent commit.

    The merge commit's parents are ``(target_head, source_head)`` in that
    order. Only ``target`` advances; ``source`` keeps its head.

    Raises:
        UnknownBranch: either branch is missing.
        SameBranch: ``target == source``.
        MissingHead: either head is not in the store.
        AlreadyMerged: ``source``'s head is already an ancestor of ``target``'s.
    """
    target_branch = _require_branch(store, target)
    source_branch = _require_branch(store, source)
    if target == source:
        raise SameBranch(target)
    target_head = _require_head(store, target_branch)
    source_head = _require_head(store, source_branch)
    if is_ancestor(store.commits, source_head.id, target_head.id):
        raise AlreadyMerged(target, source)

    draft = _Draft(store)
    commit = draft.new_commit(
        (target_head.id, source_head.id),
        max(target_head.depth, source_head.depth) + 1,
        target_branch.lane,
        message=f"Merge branch {source} into {target}",
    )
    draft.point_branch(target, commit.id)

    logger.info("Merged %s into %s as %s", source, target, commit.id)
    return assign_store_lanes(draft.publish())


def delete_branch(store: GraphStore, name: str, initial_branch: str = INITIAL_BRANCH_NAME) -> GraphStore:
    """Remove a branch pointer. Its commits stay in the store.

    Raises:
        UnknownBranch: no such branch.
        InvalidOperation: attempting to delete the initial branch.
    """
    _require_branch(store, name)
    if name == initial_branch:
        raise InvalidOperation(f"Cannot delete the initial branch {initial_branch}")

    draft = _Draft(store)
    del draft.branches[name]

    logger.info("Deleted branch %s", name)
    return assign_store_lanes(draft.publish(), initial_branch)


# ─── Seed History ─────────────────────────────────────────────────────────────

# (branch name, index of the master commit it forks from, number of commits)
SEED_BRANCHES: tuple[tuple[str, int, int], ...] = (
    ("139", 7, 5),
    ("136", 4, 4),
    ("134", 2, 3),
)
SEED_MASTER_LENGTH: int = 10


def seed_store() -> GraphStore:
    """Build the demo history the explorer starts with.

    ``master`` holds a linear chain of ten commits; branches ``139``, ``136``
    and ``134`` fork from its eighth, fifth and third commits.
    """
    draft = _Draft(GraphStore())

    master: list[Commit] = []
    parent_ids: tuple[str, ...] = ()
    for depth in range(SEED_MASTER_LENGTH):
        commit = draft.new_commit(parent_ids, depth, 0)
        master.append(commit)
        parent_ids = (commit.id,)
    draft.point_branch(INITIAL_BRANCH_NAME, master[-1].id, lane=0)

    for lane, (name, fork_index, length) in enumerate(SEED_BRANCHES, start=1):
        parent = master[fork_index]
        for _ in range(length):
            parent = draft.new_commit((parent.id,), parent.depth + 1, lane, name)
        draft.point_branch(name, parent.id, lane=lane)
        draft.claim_branch_name(name)

    return assign_store_lanes(draft.publish())
