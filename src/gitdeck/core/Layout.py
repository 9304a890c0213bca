# gitdeck/core/Layout.py
"""Layout Module
=============
Derives panel geometry from the terminal size and the focused panel.

`compute_layout` is a pure function: the same ``(width, height, focused,
ratios)`` always yields the same `LayoutPlan`. It is recomputed by the
dashboard only on resize and on focus change.

The left column stacks Status, Files, Branches, Commits and Stash; the right
column stacks Main and Secondary. The bottom row belongs to the help bar.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from gitdeck.core.PanelState import LEFT_COLUMN, RIGHT_COLUMN, Panel


HELP_BAR_HEIGHT = 1
BORDER_WIDTH = 2
TITLE_BAR_HEIGHT = 2
MIN_WIDTH = 60
MIN_HEIGHT = 16

FLEX_PANELS = (Panel.FILES, Panel.BRANCHES, Panel.COMMITS)


@dataclass(frozen=True)
class LayoutRatios:
    left_ratio: float = 0.35
    expanded_ratio: float = 0.4
    collapsed_height: int = 3
    status_height: int = 3
    files_ratio: float = 0.4
    branches_ratio: float = 0.3

    @classmethod
    def from_config(cls, config: Optional[dict[str, Any]]) -> "LayoutRatios":
        section = (config or {}).get("layout", {})
        defaults = cls()
        return cls(
            left_ratio=float(section.get("left_ratio", defaults.left_ratio)),
            expanded_ratio=float(section.get("expanded_ratio", defaults.expanded_ratio)),
            collapsed_height=int(section.get("collapsed_height", defaults.collapsed_height)),
            status_height=int(section.get("status_height", defaults.status_height)),
            files_ratio=float(section.get("files_ratio", defaults.files_ratio)),
            branches_ratio=float(section.get("branches_ratio", defaults.branches_ratio)),
        )


@dataclass(frozen=True)
class Rect:
    y: int
    x: int
    height: int
    width: int

    def contains(self, y: int, x: int) -> bool:
        return self.y <= y < self.y + self.height and self.x <= x < self.x + self.width


@dataclass(frozen=True)
class LayoutPlan:
    width: int
    height: int
    left_width: int
    right_width: int
    heights: dict[Panel, int] = field(default_factory=dict)
    expanded: frozenset[Panel] = frozenset()

    @property
    def content_height(self) -> int:
        return max(0, self.height - HELP_BAR_HEIGHT)

    def column_width(self, panel: Panel) -> int:
        return self.left_width if panel in LEFT_COLUMN else self.right_width

    def viewport_size(self, panel: Panel) -> tuple[int, int]:
        """Returns ``(width, height)`` of the panel's inner text area."""
        return (
            max(0, self.column_width(panel) - BORDER_WIDTH),
            max(0, self.heights.get(panel, 0) - TITLE_BAR_HEIGHT),
        )

    def rects(self) -> dict[Panel, Rect]:
        """Screen rectangles of every panel, top to bottom within each column."""
        out: dict[Panel, Rect] = {}
        for column, x, width in (
            (LEFT_COLUMN, 0, self.left_width),
            (RIGHT_COLUMN, self.left_width, self.right_width),
        ):
            y = 0
            for panel in column:
                h = self.heights.get(panel, 0)
                out[panel] = Rect(y, x, h, width)
                y += h
        return out


def compute_layout(
    width: int,
    height: int,
    focused: Panel,
    ratios: Optional[LayoutRatios] = None,
) -> LayoutPlan:
    r = ratios or LayoutRatios()
    content = max(0, height - HELP_BAR_HEIGHT)
    expanded_height = int(content * r.expanded_ratio)
    collapsed = r.collapsed_height
    heights: dict[Panel, int] = {}
    expanded: set[Panel] = set()

    # Right column
    if focused is Panel.SECONDARY:
        heights[Panel.SECONDARY] = expanded_height
        expanded.add(Panel.SECONDARY)
    else:
        heights[Panel.SECONDARY] = collapsed
    heights[Panel.MAIN] = content - heights[Panel.SECONDARY]

    # Left column
    heights[Panel.STATUS] = r.status_height
    if focused is Panel.STASH:
        heights[Panel.STASH] = expanded_height
        expanded.add(Panel.STASH)
    else:
        heights[Panel.STASH] = collapsed
    flex = content - heights[Panel.STATUS] - heights[Panel.STASH]

    if focused in FLEX_PANELS:
        heights[focused] = expanded_height
        expanded.add(focused)
        others = [p for p in FLEX_PANELS if p is not focused]
        remaining = flex - expanded_height
        share = remaining // 2
        heights[others[0]] = share
        heights[others[1]] = remaining - share
    else:
        heights[Panel.FILES] = int(flex * r.files_ratio)
        heights[Panel.BRANCHES] = int(flex * r.branches_ratio)
        heights[Panel.COMMITS] = flex - heights[Panel.FILES] - heights[Panel.BRANCHES]

    left_width = int(width * r.left_ratio)
    return LayoutPlan(
        width=width,
        height=height,
        left_width=left_width,
        right_width=width - left_width,
        heights=heights,
        expanded=frozenset(expanded),
    )
