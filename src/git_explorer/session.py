"""Session controller — owns the current snapshot and the UI selection state.

The engines are stateless; everything that survives between user intents
(current store, selected commit/branch, move mode, pending notices) lives here.
Rejected intents become ``Notice`` records and leave the snapshot untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from git_explorer import mutations
from git_explorer.checks import find_collisions
from git_explorer.errors import AlreadyMerged, GraphError
from git_explorer.graph import INITIAL_BRANCH_NAME, GraphStore
from git_explorer.layout import LayoutResult, layout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """A message for the user, shown by the UI as a toast."""

    title: str
    description: str
    variant: str = "default"  # "default" or "destructive"
    code: str | None = None


class ExplorerSession:
    """Dispatches user intents to the mutation engine.

    Operations act on the current selection, the way the explorer's controls
    do: ``add_commit`` extends the selected branch, ``create_branch`` forks
    from the selected commit, ``merge`` merges a source into the selected
    branch.
    """

    def __init__(self, store: GraphStore | None = None) -> None:
        self.store = store if store is not None else mutations.seed_store()
        self.selected_branch_name: str | None = (
            INITIAL_BRANCH_NAME if INITIAL_BRANCH_NAME in self.store.branches else None
        )
        head = self.store.head_of(self.selected_branch_name) if self.selected_branch_name else None
        self.selected_commit_id: str | None = head.id if head is not None else None
        self.move_mode = False
        self.notices: list[Notice] = []

    # -- Selection --

    def select_commit(self, commit_id: str) -> None:
        self.selected_commit_id = commit_id
        self.move_mode = False

    def select_branch(self, name: str) -> None:
        self.selected_branch_name = name
        branch = self.store.branch(name)
        if branch is not None:
            self.selected_commit_id = branch.head_commit_id
        self.move_mode = False

    def toggle_move_mode(self) -> bool:
        if not self.move_mode and self.selected_commit_id is None:
            self._notify(Notice("Error", "Select a commit to move first.", "destructive"))
            return False
        self.move_mode = not self.move_mode
        return self.move_mode

    # -- Intents --

    def add_commit(self) -> bool:
        name = self.selected_branch_name
        if name is None:
            return self._reject("No branch selected to add commit.")
        if not self._apply(lambda s: mutations.add_commit(s, name)):
            return False
        head = self.store.head_of(name)
        self.selected_commit_id = head.id if head is not None else None
        self._notify(Notice("Commit Added", f"{head.message if head else ''} added to branch {name}."))
        return True

    def create_branch(self, name: str | None = None) -> bool:
        commit_id = self.selected_commit_id
        if commit_id is None:
            return self._reject("No commit selected to create branch from.")
        new_name = name if name is not None else mutations.next_branch_name(self.store)
        if not self._apply(lambda s: mutations.create_branch(s, commit_id, new_name)):
            return False
        self.select_branch(new_name)
        self._notify(Notice("Branch Created", f"Branch {new_name} created from {commit_id}."))
        return True

    def add_custom_commits(self, count: int = mutations.CUSTOM_COMMIT_COUNT) -> bool:
        commit_id = self.selected_commit_id
        if commit_id is None:
            return self._reject("No commit selected to apply customisations to.")
        new_name = mutations.next_branch_name(self.store)
        if not self._apply(lambda s: mutations.add_custom_commits(s, commit_id, count, new_name)):
            return False
        self.select_branch(new_name)
        self._notify(Notice("Customisations Applied", f"{count} custom commits added on branch {new_name}."))
        return True

    def merge(self, source: str) -> bool:
        target = self.selected_branch_name
        if target is None:
            return self._reject("No target branch selected for merge.")
        if not self._apply(lambda s: mutations.merge_branch(s, target, source)):
            return False
        self.select_branch(target)
        self._notify(Notice("Branches Merged", f"Branch {source} merged into {target}."))
        return True

    def move(self, commit_id: str, new_parent_id: str) -> bool:
        self.move_mode = False
        if not self._apply(lambda s: mutations.move_commit(s, commit_id, new_parent_id)):
            return False
        self.selected_commit_id = commit_id
        self._notify(Notice("Commit Moved", f"Commit {commit_id} re-parented to {new_parent_id}."))
        return True

    def delete_branch(self, name: str) -> bool:
        if not self._apply(lambda s: mutations.delete_branch(s, name)):
            return False
        if self.selected_branch_name == name:
            self.select_branch(INITIAL_BRANCH_NAME)
        self._notify(Notice("Branch Deleted", f"Branch {name} deleted."))
        return True

    # -- Rendering --

    def view(self) -> LayoutResult:
        """Lay out the current snapshot; collisions are logged as warnings."""
        result = layout(self.store.commits, self.store.branches)
        find_collisions(result.positioned_commits)
        return result

    # -- Internals --

    def _apply(self, operation: Callable[[GraphStore], GraphStore]) -> bool:
        try:
            self.store = operation(self.store)
        except AlreadyMerged as e:
            self._notify(Notice("Already Merged", str(e), code=e.code))
            return False
        except GraphError as e:
            logger.warning("Rejected intent: %s", e)
            self._notify(Notice("Error", str(e), "destructive", code=e.code))
            return False
        return True

    def _reject(self, description: str) -> bool:
        self._notify(Notice("Error", description, "destructive"))
        return False

    def _notify(self, notice: Notice) -> None:
        self.notices.append(notice)
