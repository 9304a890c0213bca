# tests/ui/test_renderer.py
"""Unit tests for the pure frame renderer.
==========================================

`render()` is exercised against the `dashboard` fixture (100x30, loaded from
the fake repository), inspecting the returned `ScreenBuffer` cells and the
zones registered in `dashboard.hit_test`.
"""

from gitdeck.core.Messages import ResizeMsg
from gitdeck.core.PanelState import BranchLine, CommitLine, FileLine, Panel, StashLine
from gitdeck.ui.HitTest import HELP_BUTTON_ID, ZoneKind
from gitdeck.ui.Renderer import (
    branch_segments,
    commit_segments,
    diff_segments,
    file_segments,
    line_segments,
    panel_title,
    render,
    stash_segments,
)


def rows(buf) -> list[str]:
    return [buf.row_text(y) for y in range(buf.height)]


class TestSegments:
    """Styling of individual lines."""

    def test_diff_segments(self) -> None:
        assert diff_segments("+added") == (("+added", "diff_added"),)
        assert diff_segments("-removed") == (("-removed", "diff_removed"),)
        assert diff_segments("@@ -1,2 +1,3 @@")[0][1] == "diff_hunk"
        assert all(style == "normal" for _, style in diff_segments(" context"))

    def test_file_segments(self) -> None:
        segs = file_segments(FileLine("└─", "MM", "app.py", "src/app.py"))
        assert ("M", "git_staged") in segs
        assert ("M", "git_unstaged") in segs
        assert file_segments(FileLine("├─", "??", "n.txt", "n.txt"))[1] == ("??", "git_untracked")
        assert file_segments(FileLine("├─", "UU", "c.txt", "c.txt"))[1] == ("UU", "git_conflicted")
        assert file_segments(FileLine("├─", "", "src", "src", is_dir=True))[-1] == ("src", "tree_dir")

    def test_branch_and_stash_segments(self) -> None:
        current = branch_segments(BranchLine("2 hours ago", "main", is_current=True))
        assert current[-1] == ("(*) → main", "branch_current")
        assert branch_segments(BranchLine("3 days ago", "feature"))[-1] == ("feature", "normal")
        assert stash_segments(StashLine("stash@{0}", "wip"))[0] == ("stash@{0}", "stash_name")

    def test_commit_segments(self) -> None:
        merge = commit_segments(CommitLine("○ ", "abc1234", "AL", "Merge feature"))
        assert merge[0] == ("○", "graph_node")
        assert ("abc1234", "commit_sha") in merge
        assert ("AL", "commit_merge") in merge
        plain = commit_segments(CommitLine("○ ", "def5678", "BO", "Add app"))
        assert ("BO", "commit_author") in plain
        assert commit_segments(CommitLine("|\\")) == [("|\\", "graph_edge")]

    def test_command_log_lines(self, dashboard) -> None:
        state = dashboard.panels[Panel.SECONDARY]
        state.set_text("10:00:00 ✓ add .\n10:00:01 ✗ commit -m 'x'")
        assert line_segments(dashboard, state, 0) == [("10:00:00 ✓ add .", "log_ok")]
        assert line_segments(dashboard, state, 1)[0][1] == "log_fail"

    def test_error_lines(self, dashboard) -> None:
        state = dashboard.panels[Panel.MAIN]
        state.set_text("Error: boom")
        assert line_segments(dashboard, state, 0) == [("Error: boom", "error")]


class TestFrame:
    """Whole-frame rendering and zone registration."""

    def test_panels_and_titles(self, dashboard) -> None:
        buf = render(dashboard)
        assert (buf.height, buf.width) == (30, 100)
        text = "\n".join(rows(buf))
        for title in ("[0] Main", "[1] Status", "[2] Files", "[3] Branches", "[4] Commits", "[5] Stash"):
            assert title in text
        assert "[6] Command Log" in text
        assert " help:? " in rows(buf)[-1]

    def test_zones_registered(self, dashboard) -> None:
        render(dashboard)
        registry = dashboard.hit_test
        for panel in Panel:
            assert registry.get(panel.zone_id) is not None
        button = registry.get(HELP_BUTTON_ID)
        assert button.rect.y == 29
        line_zones = [z for z in registry.zones() if z.kind is ZoneKind.LINE]
        assert {z.panel for z in line_zones} <= {Panel.FILES, Panel.BRANCHES, Panel.COMMITS, Panel.STASH}
        assert any(z.panel is Panel.BRANCHES and z.line_index == 1 for z in line_zones)

    def test_selected_line_of_focused_panel(self, dashboard) -> None:
        dashboard.set_focus(Panel.BRANCHES)
        buf = render(dashboard)
        rect = dashboard.layout.rects()[Panel.BRANCHES]
        state = dashboard.panels[Panel.BRANCHES]
        y = rect.y + 1 + state.cursor - state.viewport.y_offset
        assert buf.style_at(y, rect.x + 1) == "selected"
        assert buf.style_at(rect.y, rect.x) == "active_border"
        assert panel_title(state) == f"[3] Branches ({state.cursor + 1}/2)"

    def test_too_small(self, dashboard) -> None:
        dashboard.update(ResizeMsg(width=50, height=10))
        buf = render(dashboard)
        assert any("Terminal too small (50x10). Minimum is 60x16." in row for row in rows(buf))
        assert len(dashboard.hit_test) == 0

    def test_help_overlay(self, dashboard) -> None:
        dashboard.toggle_help()
        text = "\n".join(rows(render(dashboard)))
        assert " Help " in text
        assert "--- Navigation ---" in text

    def test_prompt_overlay(self, dashboard) -> None:
        dashboard.prompt("Commit summary", "Enter commit message", lambda value: None)
        text = "\n".join(rows(render(dashboard)))
        assert "Commit summary" in text
        assert "Enter commit message" in text

    def test_confirm_overlay(self, dashboard) -> None:
        dashboard.confirm("Drop stash@{0}?", lambda: None)
        text = "\n".join(rows(render(dashboard)))
        assert "Drop stash@{0}? [y/N]" in text
