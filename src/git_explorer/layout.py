"""Layout — maps lane/depth assignments onto 2D pixel coordinates.

Phases:
  1. Ordering   (depth, timestamp, lane) for stable rendering order
  2. Coordinates (x from lane, y from depth)
  3. Edges      (one per commit → parent pair whose parent is positioned)
  4. Bounds     (max coordinate + one spacing unit, with a minimum canvas)

Lanes and depths must already be final; see ``git_explorer.lanes``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from git_explorer.graph import Branch, Commit

logger = logging.getLogger(__name__)

# Pixel geometry shared with the collision checker.
LANE_WIDTH: int = 120  # horizontal distance between adjacent lanes
ROW_HEIGHT: int = 80  # vertical distance between adjacent depths
PADDING: int = 50  # canvas margin on the top/left edges
MIN_WIDTH: int = 600
MIN_HEIGHT: int = 400


@dataclass(frozen=True)
class Point:
    """A 2D point in pixel coordinates."""

    x: int
    y: int


@dataclass(frozen=True)
class PositionedCommit:
    """A commit together with its rendered position.

    Attributes:
        commit: The underlying commit record.
        x, y: Pixel coordinates of the commit's centre.
        branch_names: Branches whose head is this commit (for labels).
    """

    commit: Commit
    x: int
    y: int
    branch_names: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return self.commit.id

    @property
    def depth(self) -> int:
        return self.commit.depth

    @property
    def lane(self) -> int:
        return self.commit.branch_lane

    @property
    def point(self) -> Point:
        return Point(x=self.x, y=self.y)

    @property
    def is_branch_head(self) -> bool:
        return bool(self.branch_names)


@dataclass(frozen=True)
class RenderEdge:
    """A straight edge from a child commit to one of its parents.

    ``is_merge`` marks the edge to the incoming parent (``parent_ids[1]``) of a
    merge commit, which the renderer draws differently from mainline edges.
    """

    from_id: str
    to_id: str
    from_point: Point
    to_point: Point
    is_merge: bool = False


@dataclass(frozen=True)
class LayoutResult:
    """Everything the render layer needs for one frame."""

    positioned_commits: list[PositionedCommit]
    edges: list[RenderEdge]
    width: int
    height: int
    branch_lanes: dict[str, int] = field(default_factory=dict)

    def position_of(self, commit_id: str) -> PositionedCommit | None:
        for pc in self.positioned_commits:
            if pc.id == commit_id:
                return pc
        return None


# ─── Ordering ─────────────────────────────────────────────────────────────────


def render_order(commits: Mapping[str, Commit]) -> list[Commit]:
    """Commits sorted by ``(depth, timestamp, branch_lane)``, all ascending."""
    return sorted(commits.values(), key=lambda c: (c.depth, c.timestamp, c.branch_lane))


# ─── Edges ────────────────────────────────────────────────────────────────────


def build_edges(positioned: list[PositionedCommit]) -> list[RenderEdge]:
    """Build one edge per (commit, parent) pair where the parent is positioned.

    Parent references outside the positioned set are dropped silently: a commit
    may legitimately point at a parent that is not part of the current view.
    """
    by_id: dict[str, PositionedCommit] = {pc.id: pc for pc in positioned}
    edges: list[RenderEdge] = []
    dropped = 0

    for child in positioned:
        parent_ids = child.commit.parent_ids
        for index, parent_id in enumerate(parent_ids):
            parent = by_id.get(parent_id)
            if parent is None:
                dropped += 1
                continue
            edges.append(
                RenderEdge(
                    from_id=child.id,
                    to_id=parent.id,
                    from_point=child.point,
                    to_point=parent.point,
                    is_merge=len(parent_ids) > 1 and index == 1,
                )
            )

    if dropped:
        logger.debug("Dropped %d edges to parents outside the view", dropped)
    return edges


# ─── Full Layout ──────────────────────────────────────────────────────────────


def layout(
    commits: Mapping[str, Commit],
    branches: Mapping[str, Branch] | None = None,
) -> LayoutResult:
    """Lay out commits with the default spacing constants."""
    return layout_with_spacing(commits, branches, LANE_WIDTH, ROW_HEIGHT, PADDING)


def layout_with_spacing(
    commits: Mapping[str, Commit],
    branches: Mapping[str, Branch] | None,
    lane_width: int,
    row_height: int,
    padding: int,
) -> LayoutResult:
    """Like ``layout`` but lets the caller control spacing and padding.

    The bounding box is the largest coordinate plus one spacing unit on each
    axis, floored at ``MIN_WIDTH`` × ``MIN_HEIGHT`` so an empty or tiny graph
    still yields a usable canvas.
    """
    branches = branches or {}

    heads: dict[str, list[str]] = {}
    for branch in branches.values():
        heads.setdefault(branch.head_commit_id, []).append(branch.name)

    positioned: list[PositionedCommit] = []
    max_x = 0
    max_y = 0
    for commit in render_order(commits):
        x = commit.branch_lane * lane_width + padding
        y = commit.depth * row_height + padding
        positioned.append(
            PositionedCommit(
                commit=commit,
                x=x,
                y=y,
                branch_names=tuple(heads.get(commit.id, ())),
            )
        )
        max_x = max(max_x, x)
        max_y = max(max_y, y)

    if positioned:
        width = max_x + lane_width
        height = max_y + row_height
    else:
        width = height = padding * 2

    return LayoutResult(
        positioned_commits=positioned,
        edges=build_edges(positioned),
        width=max(width, MIN_WIDTH),
        height=max(height, MIN_HEIGHT),
        branch_lanes={b.name: b.lane for b in branches.values()},
    )
