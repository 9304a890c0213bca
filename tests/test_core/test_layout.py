# tests/test_core/test_layout.py
"""Unit tests for `compute_layout` and `LayoutPlan`."""

import pytest

from gitdeck.core.Layout import MIN_HEIGHT, MIN_WIDTH, LayoutRatios, compute_layout
from gitdeck.core.PanelState import LEFT_COLUMN, RIGHT_COLUMN, Panel


class TestComputeLayout:
    """Panel heights and column widths for a given size and focus."""

    def test_stash_focused_expands_stash(self) -> None:
        plan = compute_layout(100, 30, Panel.STASH)
        h = plan.heights
        assert h[Panel.STASH] == 11
        assert h[Panel.STATUS] == 3
        assert (h[Panel.FILES], h[Panel.BRANCHES], h[Panel.COMMITS]) == (6, 4, 5)
        assert h[Panel.SECONDARY] == 3
        assert h[Panel.MAIN] == 26

    def test_flex_panel_focus_splits_remainder(self) -> None:
        plan = compute_layout(100, 30, Panel.BRANCHES)
        h = plan.heights
        assert h[Panel.BRANCHES] == 11
        # flex = 29 - 3 - 3 = 23; the other two share 23 - 11 = 12
        assert (h[Panel.FILES], h[Panel.COMMITS]) == (6, 6)
        assert plan.expanded == frozenset({Panel.BRANCHES})

    def test_odd_remainder_goes_to_later_panel(self) -> None:
        # content 31, expanded 12, flex 25, remaining 13
        plan = compute_layout(100, 32, Panel.FILES)
        h = plan.heights
        assert h[Panel.FILES] == 12
        assert (h[Panel.BRANCHES], h[Panel.COMMITS]) == (6, 7)

    def test_secondary_focus_expands_right_column(self) -> None:
        plan = compute_layout(100, 30, Panel.SECONDARY)
        assert plan.heights[Panel.SECONDARY] == 11
        assert plan.heights[Panel.MAIN] == 18

    @pytest.mark.parametrize("focused", list(Panel))
    @pytest.mark.parametrize("width", [MIN_WIDTH, 101, 200])
    @pytest.mark.parametrize("height", [MIN_HEIGHT, MIN_HEIGHT + 1, 20, 31, 40, 73])
    def test_columns_fill_content_height(self, focused: Panel, width: int, height: int) -> None:
        plan = compute_layout(width, height, focused)
        assert sum(plan.heights[p] for p in LEFT_COLUMN) == height - 1
        assert sum(plan.heights[p] for p in RIGHT_COLUMN) == height - 1
        assert all(h >= 0 for h in plan.heights.values())
        assert plan.left_width + plan.right_width == width

    def test_widths(self) -> None:
        plan = compute_layout(101, 30, Panel.STATUS)
        assert plan.left_width == 35
        assert plan.right_width == 66

    def test_viewport_size_subtracts_borders(self) -> None:
        plan = compute_layout(100, 30, Panel.STASH)
        assert plan.viewport_size(Panel.STASH) == (33, 9)
        assert plan.viewport_size(Panel.MAIN) == (63, 24)

    def test_rects_stack_from_top(self) -> None:
        plan = compute_layout(100, 30, Panel.STATUS)
        rects = plan.rects()
        assert rects[Panel.STATUS].y == 0
        assert rects[Panel.FILES].y == 3
        assert rects[Panel.MAIN].x == plan.left_width
        assert rects[Panel.SECONDARY].y == plan.heights[Panel.MAIN]

    def test_ratios_from_config(self) -> None:
        ratios = LayoutRatios.from_config({"layout": {"left_ratio": 0.5}})
        assert compute_layout(100, 30, Panel.STATUS, ratios).left_width == 50
