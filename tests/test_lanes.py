"""Tests for lanes.py — branch ordering, commit lane propagation, slot resolution.

Covers:
  - fork_signature (normal, root head, dangling head, unknown parent)
  - order_branches / number_branches (deepest fork and newest head first)
  - propagate_commit_lanes (mainline claim, first claim by smaller lane wins)
  - resolve_slot_conflicts (no shared (depth, lane) cell)
  - assign_lanes properties: idempotence, lane uniqueness, purity, orphans
"""

from __future__ import annotations

from conftest import feature_store, linear_chain, make_commit

from git_explorer.graph import Branch, Commit, build_store
from git_explorer.lanes import (
    DANGLING_SIGNATURE,
    assign_lanes,
    assign_store_lanes,
    fork_signature,
    number_branches,
    order_branches,
    propagate_commit_lanes,
    resolve_slot_conflicts,
)
from git_explorer.mutations import add_custom_commits, create_branch, delete_branch, merge_branch, seed_store

# ─── Helpers ──────────────────────────────────────────────────────────────────


def two_forks() -> tuple[dict[str, Commit], dict[str, Branch]]:
    """master commit-0..commit-9; A forks from commit-2, B from commit-6."""
    commits = {c.id: c for c in linear_chain(10)}
    commits["a1"] = make_commit("a1", "commit-2", depth=3, timestamp=20)
    commits["b1"] = make_commit("b1", "commit-6", depth=7, timestamp=21)
    branches = {
        "master": Branch("master", "commit-9"),
        "A": Branch("A", "a1"),
        "B": Branch("B", "b1"),
    }
    return commits, branches


def lanes_of(commits: dict[str, Commit]) -> dict[str, int]:
    return {cid: c.branch_lane for cid, c in commits.items()}


# ─── fork_signature Tests ─────────────────────────────────────────────────────


class TestForkSignature:
    def test_uses_first_parent_depth(self):
        commits, branches = two_forks()
        assert fork_signature(branches["A"], commits) == (2, 20)
        assert fork_signature(branches["B"], commits) == (6, 21)

    def test_root_head(self):
        """A root head uses its own depth minus one."""
        commits = {"r": make_commit("r", depth=0, timestamp=5)}
        assert fork_signature(Branch("x", "r"), commits) == (-1, 5)

    def test_dangling_head(self):
        assert fork_signature(Branch("x", "nope"), {}) == DANGLING_SIGNATURE

    def test_unknown_parent(self):
        commits = {"c": make_commit("c", "gone", depth=3, timestamp=9)}
        assert fork_signature(Branch("x", "c"), commits) == (-1, 9)


# ─── Branch Ordering Tests ────────────────────────────────────────────────────


class TestBranchOrdering:
    def test_deeper_fork_first(self):
        commits, branches = two_forks()
        assert order_branches(commits, branches) == ["B", "A"]

    def test_newer_head_first_on_equal_fork_depth(self):
        commits = {c.id: c for c in linear_chain(5)}
        commits["x1"] = make_commit("x1", "commit-3", depth=4, timestamp=30)
        commits["y1"] = make_commit("y1", "commit-3", depth=4, timestamp=31)
        branches = {"master": Branch("master", "commit-4"), "X": Branch("X", "x1"), "Y": Branch("Y", "y1")}
        assert order_branches(commits, branches) == ["Y", "X"]

    def test_dangling_branch_sorts_last(self):
        commits, branches = two_forks()
        branches["D"] = Branch("D", "missing")
        assert order_branches(commits, branches)[-1] == "D"

    def test_initial_branch_is_lane_zero(self):
        commits, branches = two_forks()
        lanes = number_branches(commits, branches)
        assert lanes == {"master": 0, "B": 1, "A": 2}

    def test_without_initial_branch_lanes_start_at_one(self):
        commits, branches = two_forks()
        del branches["master"]
        assert number_branches(commits, branches) == {"B": 1, "A": 2}


# ─── Propagation Tests ────────────────────────────────────────────────────────


class TestPropagation:
    def test_mainline_ancestry_is_lane_zero(self):
        commits, branches = two_forks()
        stamps = propagate_commit_lanes(commits, branches, number_branches(commits, branches))
        assert all(stamps[f"commit-{i}"] == 0 for i in range(10))
        assert stamps["b1"] == 1
        assert stamps["a1"] == 2

    def test_smaller_lane_claims_shared_ancestry(self):
        """G (lane 1) and F (lane 2) share f1; G claims it and F's walk stops there."""
        commits = {c.id: c for c in linear_chain(10)}
        commits["f1"] = make_commit("f1", "commit-4", depth=5, timestamp=11)
        commits["f2"] = make_commit("f2", "f1", depth=6, timestamp=12)
        commits["g1"] = make_commit("g1", "f1", depth=6, timestamp=13)
        branches = {
            "master": Branch("master", "commit-9"),
            "F": Branch("F", "f2"),
            "G": Branch("G", "g1"),
        }
        lanes = number_branches(commits, branches)
        assert lanes == {"master": 0, "G": 1, "F": 2}

        stamps = propagate_commit_lanes(commits, branches, lanes)
        assert stamps["g1"] == 1
        assert stamps["f1"] == 1
        assert stamps["f2"] == 2
        assert stamps["commit-4"] == 0

    def test_dangling_head_is_skipped(self):
        commits = {c.id: c for c in linear_chain(3)}
        branches = {"master": Branch("master", "commit-2"), "D": Branch("D", "missing")}
        stamps = propagate_commit_lanes(commits, branches, number_branches(commits, branches))
        assert "missing" not in stamps
        assert set(stamps) == {"commit-0", "commit-1", "commit-2"}


# ─── Slot Resolution Tests ────────────────────────────────────────────────────


class TestSlotResolution:
    def test_later_commit_moves_to_next_free_lane(self):
        commits = {
            "a": make_commit("a", depth=1, timestamp=1),
            "b": make_commit("b", depth=1, timestamp=2),
            "c": make_commit("c", depth=1, timestamp=3),
        }
        resolved = resolve_slot_conflicts(commits, {"a": 0, "b": 0, "c": 0})
        assert resolved == {"a": 0, "b": 1, "c": 2}

    def test_different_depths_do_not_conflict(self):
        commits = {
            "a": make_commit("a", depth=1, timestamp=1),
            "b": make_commit("b", depth=2, timestamp=2),
        }
        assert resolve_slot_conflicts(commits, {"a": 0, "b": 0}) == {"a": 0, "b": 0}

    def test_reachable_commits_win_over_orphans(self):
        commits = {
            "orphan": make_commit("orphan", depth=1, timestamp=1),
            "live": make_commit("live", depth=1, timestamp=2),
        }
        resolved = resolve_slot_conflicts(commits, {"orphan": 0, "live": 0}, reachable={"live"})
        assert resolved == {"live": 0, "orphan": 1}


# ─── assign_lanes Tests ───────────────────────────────────────────────────────


class TestAssignLanes:
    def test_idempotent_on_seed(self):
        s = seed_store()
        once = assign_lanes(s.commits, s.branches)
        twice = assign_lanes(*once)
        assert once == twice

    def test_idempotent_after_merge_and_delete(self):
        s = merge_branch(seed_store(), "master", "139")
        s = delete_branch(s, "136")
        once = assign_lanes(s.commits, s.branches)
        assert assign_lanes(*once) == once

    def test_branch_lanes_unique(self):
        s = add_custom_commits(create_branch(seed_store(), "commit-3"), "commit-12")
        _, branches = assign_lanes(s.commits, s.branches)
        lanes = [b.lane for b in branches.values()]
        assert len(lanes) == len(set(lanes))
        assert branches["master"].lane == 0
        assert all(b.lane >= 1 for name, b in branches.items() if name != "master")

    def test_initial_lane_overridden(self):
        commits = {c.id: c for c in linear_chain(3)}
        branches = {"master": Branch("master", "commit-2", lane=5)}
        _, new_branches = assign_lanes(commits, branches)
        assert new_branches["master"].lane == 0

    def test_inputs_untouched(self):
        commits, branches = two_forks()
        commits_before = dict(commits)
        branches_before = dict(branches)
        assign_lanes(commits, branches)
        assert commits == commits_before
        assert branches == branches_before

    def test_seed_branch_lanes(self):
        s = seed_store()
        assert {name: b.lane for name, b in s.branches.items()} == {
            "master": 0,
            "139": 1,
            "136": 2,
            "134": 3,
        }
        assert s.commits["commit-10"].branch_lane == 1  # first commit on 139
        assert s.commits["commit-15"].branch_lane == 2  # first commit on 136
        assert s.commits["commit-19"].branch_lane == 3  # first commit on 134
        assert s.commits["commit-9"].branch_lane == 0

    def test_merged_ancestry_moves_off_mainline_cells(self):
        """After master merges F, F's head is mainline-reachable but must not sit on commit-5's cell."""
        s = merge_branch(feature_store(), "master", "F")
        assert s.commits["commit-5"].branch_lane == 0
        assert s.commits["commit-10"].branch_lane == 1
        cells = [(c.depth, c.branch_lane) for c in s.commits.values()]
        assert len(cells) == len(set(cells))

    def test_orphan_keeps_stale_lane(self):
        commits = linear_chain(3)
        commits.append(make_commit("lost", "commit-0", depth=1, timestamp=50, lane=7))
        s = assign_store_lanes(build_store(commits, [Branch("master", "commit-2")]))
        assert s.commits["lost"].branch_lane == 7

    def test_store_counters_preserved(self):
        s = seed_store()
        normalized = assign_store_lanes(s)
        assert normalized.next_commit_index == s.next_commit_index
        assert normalized.clock == s.clock
        assert normalized == s
