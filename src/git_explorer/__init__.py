"""git_explorer — lane/depth layout and structural mutations for a commit DAG."""

from git_explorer.checks import check_invariants, find_collisions, orphaned_commits
from git_explorer.errors import (
    AlreadyMerged,
    CycleDetected,
    GraphError,
    InvalidOperation,
    MissingHead,
    SameBranch,
    SelfParent,
    UnknownBranch,
    UnknownCommit,
    UnknownEntity,
)
from git_explorer.graph import INITIAL_BRANCH_NAME, Branch, Commit, GraphStore, build_store
from git_explorer.lanes import assign_lanes, assign_store_lanes
from git_explorer.layout import LayoutResult, PositionedCommit, RenderEdge, layout
from git_explorer.mutations import (
    add_commit,
    add_custom_commits,
    create_branch,
    delete_branch,
    merge_branch,
    move_commit,
    next_branch_name,
    seed_store,
)
from git_explorer.session import ExplorerSession, Notice

__all__ = [
    "INITIAL_BRANCH_NAME",
    "AlreadyMerged",
    "Branch",
    "Commit",
    "CycleDetected",
    "ExplorerSession",
    "GraphError",
    "GraphStore",
    "InvalidOperation",
    "LayoutResult",
    "MissingHead",
    "Notice",
    "PositionedCommit",
    "RenderEdge",
    "SameBranch",
    "SelfParent",
    "UnknownBranch",
    "UnknownCommit",
    "UnknownEntity",
    "add_commit",
    "add_custom_commits",
    "assign_lanes",
    "assign_store_lanes",
    "build_store",
    "check_invariants",
    "create_branch",
    "delete_branch",
    "find_collisions",
    "layout",
    "merge_branch",
    "move_commit",
    "next_branch_name",
    "orphaned_commits",
    "seed_store",
]
