"""Error types raised by the mutation engine.

Every error is recoverable: operations validate up front and raise before a new
snapshot is built, so the caller's store is never partially changed.
"""

from __future__ import annotations


class GraphError(Exception):
    """Base class for rejected graph operations.

    Attributes:
        code: Stable short identifier the UI layer can switch on.
    """

    code = "GraphError"


# ─── Unknown entities ─────────────────────────────────────────────────────────


class UnknownEntity(GraphError):
    """A referenced commit or branch does not exist in the store."""

    code = "UnknownEntity"


class UnknownCommit(UnknownEntity):
    code = "UnknownCommit"

    def __init__(self, commit_id: str) -> None:
        self.commit_id = commit_id
        super().__init__(f"Unknown commit: {commit_id}")


class UnknownBranch(UnknownEntity):
    code = "UnknownBranch"

    def __init__(self, branch_name: str) -> None:
        self.branch_name = branch_name
        super().__init__(f"Unknown branch: {branch_name}")


class MissingHead(UnknownEntity):
    """The branch exists but its head commit is not in the store."""

    code = "MissingHead"

    def __init__(self, branch_name: str, head_commit_id: str) -> None:
        self.branch_name = branch_name
        self.head_commit_id = head_commit_id
        super().__init__(f"Head commit {head_commit_id} of branch {branch_name} not found")


# ─── Invalid operations ───────────────────────────────────────────────────────


class InvalidOperation(GraphError):
    code = "InvalidOperation"


class SelfParent(InvalidOperation):
    code = "SelfParent"

    def __init__(self, commit_id: str) -> None:
        self.commit_id = commit_id
        super().__init__(f"Cannot move commit {commit_id} onto itself")


class SameBranch(InvalidOperation):
    code = "SameBranch"

    def __init__(self, branch_name: str) -> None:
        self.branch_name = branch_name
        super().__init__(f"Cannot merge branch {branch_name} into itself")


class CycleDetected(GraphError):
    """Re-parenting would make a commit its own ancestor."""

    code = "CycleDetected"

    def __init__(self, commit_id: str, new_parent_id: str) -> None:
        self.commit_id = commit_id
        self.new_parent_id = new_parent_id
        super().__init__(f"Moving {commit_id} onto {new_parent_id} creates a cycle")


class AlreadyMerged(GraphError):
    """The source head is already an ancestor of the target head.

    Informational rather than a failure: the merge is a no-op.
    """

    code = "AlreadyMerged"

    def __init__(self, target: str, source: str) -> None:
        self.target = target
        self.source = source
        super().__init__(f"Branch {source} is already merged into {target}")
