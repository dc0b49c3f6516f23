"""Tests for checks.py — collision scan and invariant diagnostics."""

from __future__ import annotations

import logging

from conftest import feature_store, linear_chain, make_commit

from git_explorer.checks import check_invariants, find_collisions, orphaned_commits
from git_explorer.graph import Branch, build_store
from git_explorer.layout import PositionedCommit, layout
from git_explorer.mutations import delete_branch, seed_store


def positioned(commit_id: str, x: int, y: int) -> PositionedCommit:
    return PositionedCommit(commit=make_commit(commit_id), x=x, y=y)


# ─── find_collisions Tests ────────────────────────────────────────────────────


class TestFindCollisions:
    def test_identical_positions(self):
        assert find_collisions([positioned("a", 100, 100), positioned("b", 100, 100)]) == [("a", "b")]

    def test_within_threshold(self):
        assert find_collisions([positioned("a", 100, 100), positioned("b", 101, 101)]) == [("a", "b")]

    def test_far_apart(self):
        assert find_collisions([positioned("a", 100, 100), positioned("b", 150, 150)]) == []

    def test_multiple_pairs_reported_once(self):
        commits = [
            positioned("a", 0, 0),
            positioned("b", 0, 0),
            positioned("c", 500, 500),
            positioned("d", 500, 501),
        ]
        assert find_collisions(commits) == [("a", "b"), ("c", "d")]

    def test_three_way_pile_up(self):
        commits = [positioned(cid, 10, 10) for cid in ("a", "b", "c")]
        assert find_collisions(commits) == [("a", "b"), ("a", "c"), ("b", "c")]

    def test_custom_threshold(self):
        commits = [positioned("a", 0, 0), positioned("b", 0, 30)]
        assert find_collisions(commits) == []
        assert find_collisions(commits, threshold=40) == [("a", "b")]

    def test_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="git_explorer.checks"):
            find_collisions([positioned("commit1", 5, 5), positioned("commit2", 5, 5)])
        assert "COLLISION: Commits 'commit1' and 'commit2' overlap" in caplog.text

    def test_seed_layout_is_collision_free(self):
        s = seed_store()
        assert find_collisions(layout(s.commits, s.branches).positioned_commits) == []


# ─── orphaned_commits Tests ───────────────────────────────────────────────────


class TestOrphanedCommits:
    def test_none_in_seed(self):
        assert orphaned_commits(seed_store()) == []

    def test_deleted_branch_leaves_orphans(self):
        s = delete_branch(seed_store(), "134")
        assert orphaned_commits(s) == ["commit-19", "commit-20", "commit-21"]


# ─── check_invariants Tests ───────────────────────────────────────────────────


class TestCheckInvariants:
    def test_sound_store(self):
        assert check_invariants(feature_store()) == []

    def test_depth_mismatch(self):
        commits = linear_chain(2)
        commits.append(make_commit("bad", "commit-1", depth=7, timestamp=9))
        problems = check_invariants(build_store(commits, [Branch("master", "bad")]))
        assert problems == ["bad has depth 7, expected 2"]

    def test_cycle(self):
        commits = [
            make_commit("a", "b", depth=1, timestamp=1),
            make_commit("b", "a", depth=2, timestamp=2),
        ]
        problems = check_invariants(build_store(commits, [Branch("master", "a")]))
        assert any(p.startswith("cycle through") for p in problems)

    def test_self_parent(self):
        commits = [make_commit("a", "a", depth=1)]
        problems = check_invariants(build_store(commits, [Branch("master", "a")]))
        assert "a lists itself as a parent" in problems

    def test_branch_problems(self):
        commits = linear_chain(3)
        branches = [
            Branch("master", "commit-2", lane=1),
            Branch("x", "commit-1", lane=1),
            Branch("ghost", "missing", lane=2),
        ]
        problems = check_invariants(build_store(commits, branches))
        assert "initial branch master is on lane 1" in problems
        assert "branches master and x share lane 1" in problems
        assert "branch ghost points at missing commit missing" in problems

    def test_root_depth(self):
        commits = [make_commit("r", depth=3)]
        assert check_invariants(build_store(commits, [Branch("master", "r")])) == [
            "root r has depth 3, expected 0"
        ]
