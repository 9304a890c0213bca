# tests/ui/test_hit_test.py
"""Unit tests for the per-frame `HitTestRegistry`."""

from gitdeck.core.Layout import Rect
from gitdeck.core.PanelState import Panel
from gitdeck.ui.HitTest import HELP_BUTTON_ID, HitTestRegistry, ZoneKind


def make_registry() -> HitTestRegistry:
    registry = HitTestRegistry()
    registry.reset()
    registry.register_panel(Panel.FILES, Rect(0, 0, 10, 20))
    registry.register_line(Panel.FILES, 3, Rect(4, 1, 1, 18))
    registry.register_panel(Panel.MAIN, Rect(0, 20, 10, 40))
    registry.register_button(HELP_BUTTON_ID, Rect(9, 50, 1, 8))
    return registry


class TestHitTestRegistry:
    def test_line_wins_over_panel(self) -> None:
        zone = make_registry().resolve(4, 5)
        assert zone.kind is ZoneKind.LINE
        assert zone.panel is Panel.FILES
        assert zone.line_index == 3
        assert zone.zone_id == "panel-files-line-3"

    def test_button_wins_over_panel(self) -> None:
        zone = make_registry().resolve(9, 52)
        assert zone.kind is ZoneKind.BUTTON
        assert zone.zone_id == HELP_BUTTON_ID

    def test_panel_and_miss(self) -> None:
        registry = make_registry()
        assert registry.resolve(2, 5).zone_id == "panel-files"
        assert registry.panel_at(9, 52) is Panel.MAIN
        assert registry.resolve(20, 5) is None
        assert registry.panel_at(20, 5) is None

    def test_reset_starts_new_frame(self) -> None:
        registry = make_registry()
        frame = registry.frame
        assert len(registry) == 4
        registry.reset()
        assert registry.frame == frame + 1
        assert len(registry) == 0
        assert registry.get("panel-files") is None
