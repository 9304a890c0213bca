# gitdeck/ui/Renderer.py
"""Renderer
========================
Turns the dashboard state into a `ScreenBuffer` of styled cells and rebuilds
the `HitTestRegistry` for the frame being drawn. No curses calls happen here;
`DrawScreen` copies the finished buffer to the terminal.

Frame composition, back to front:
- one bordered box per panel (title bar, scrollbar thumb, styled lines),
- the help bar on the last row with the clickable ``" help:? "`` button,
- the help overlay, a text prompt or a confirmation box when active.

Diff-shaped detail text (Files, Commits and Stash sources) is tokenised with
the pygments `DiffLexer`; a token inherits the style of its nearest styled
parent type.
"""

import functools
import logging
from typing import TYPE_CHECKING, Optional

from pygments import lex
from pygments.lexers import DiffLexer
from pygments.token import Token

from gitdeck.core.ContentPipeline import DIFF_SOURCES, ERROR_PREFIX
from gitdeck.core.InputMode import Confirm, TextPrompt
from gitdeck.core.Layout import HELP_BAR_HEIGHT, MIN_HEIGHT, MIN_WIDTH, Rect
from gitdeck.core.PanelState import (
    BranchLine,
    CommitLine,
    FileLine,
    Panel,
    PanelState,
    StashLine,
)
from gitdeck.ui.HitTest import HELP_BUTTON_ID, HitTestRegistry
from gitdeck.ui.KeyBinder import HELP_TITLE_MARGIN
from gitdeck.ui.ScreenBuffer import ScreenBuffer, text_width, truncate_string


if TYPE_CHECKING:
    from gitdeck.core.Dashboard import Dashboard


logger = logging.getLogger("gitdeck")

BOX_TOP_LEFT, BOX_TOP_RIGHT = "╭", "╮"
BOX_BOTTOM_LEFT, BOX_BOTTOM_RIGHT = "╰", "╯"
BOX_HORIZONTAL, BOX_VERTICAL = "─", "│"
SCROLLBAR_THUMB = "▐"
GRAPH_NODE = "○"
HELP_BUTTON_TEXT = " help:? "
HELP_WIDTH_RATIO = 0.5
HELP_HEIGHT_RATIO = 0.75
PROMPT_HEIGHT = 3

# Panels whose scrollbar appears only while they hold focus.
FOCUS_ONLY_SCROLLBAR = frozenset({Panel.STASH, Panel.SECONDARY})

DIFF_TOKEN_STYLES = {
    Token.Generic.Inserted: "diff_added",
    Token.Generic.Deleted: "diff_removed",
    Token.Generic.Subheading: "diff_hunk",
    Token.Generic.Heading: "diff_header",
}

Segments = list[tuple[str, str]]


# ==================== Line styling ====================

@functools.lru_cache(maxsize=4096)
def diff_segments(line: str) -> tuple[tuple[str, str], ...]:
    """Styled segments of one diff line, via the pygments `DiffLexer`."""
    segments: list[tuple[str, str]] = []
    for token_type, value in lex(line, DiffLexer()):
        value = value.rstrip("\n")
        if not value:
            continue
        style = "normal"
        current = token_type
        while current:
            if current in DIFF_TOKEN_STYLES:
                style = DIFF_TOKEN_STYLES[current]
                break
            current = current.parent
        segments.append((value, style))
    return tuple(segments) if segments else ((line, "normal"),)


def file_segments(line: FileLine) -> Segments:
    segments: Segments = [(f"{line.prefix} ", "normal")]
    if line.is_dir:
        segments.append(("   ", "normal"))
        segments.append((line.name, "tree_dir"))
        return segments

    status = line.status or "  "
    if line.is_untracked:
        segments.append((status, "git_untracked"))
    elif "U" in status or status in ("AA", "DD"):
        segments.append((status, "git_conflicted"))
    else:
        segments.append((status[0], "git_staged"))
        segments.append((status[1:], "git_unstaged"))
    segments.append((f" {line.name}", "normal"))
    return segments


def branch_segments(line: BranchLine) -> Segments:
    name_style = "branch_current" if line.is_current else "normal"
    return [(line.date, "branch_date"), (" ", "normal"), (line.label, name_style)]


def commit_segments(line: CommitLine) -> Segments:
    segments: Segments = []
    for i, part in enumerate(line.graph.split(GRAPH_NODE)):
        if i:
            segments.append((GRAPH_NODE, "graph_node"))
        if part:
            segments.append((part, "graph_edge"))
    if not line.is_commit:
        return segments
    author_style = "commit_merge" if line.is_merge else "commit_author"
    segments += [
        (" ", "normal"),
        (line.sha, "commit_sha"),
        (" ", "normal"),
        (line.author, author_style),
        (" ", "normal"),
        (line.subject, "normal"),
    ]
    return segments


def stash_segments(line: StashLine) -> Segments:
    return [(line.stash_id, "stash_name"), (" ", "normal"), (line.message, "stash_message")]


def line_segments(dashboard: "Dashboard", state: PanelState, index: int) -> Segments:
    """Styled segments for line `index` of a panel that is not the selected one."""
    panel = state.panel
    if panel.is_selectable and index < len(state.lines):
        record = state.lines[index]
        if isinstance(record, FileLine):
            return file_segments(record)
        if isinstance(record, BranchLine):
            return branch_segments(record)
        if isinstance(record, CommitLine):
            return commit_segments(record)
        if isinstance(record, StashLine):
            return stash_segments(record)

    text = state.viewport.lines[index] if index < len(state.viewport.lines) else ""
    if text.startswith(ERROR_PREFIX):
        return [(text, "error")]
    if panel is Panel.MAIN and dashboard.active_source in DIFF_SOURCES:
        return list(diff_segments(text))
    if panel is Panel.SECONDARY:
        if " ✗ " in text:
            return [(text, "log_fail")]
        if " ✓ " in text:
            return [(text, "log_ok")]
    if not panel.is_selectable or index >= len(state.lines):
        return [(text, "normal")]
    return [(text, "placeholder")]


# ==================== Panels ====================

def panel_title(state: PanelState) -> str:
    panel = state.panel
    title = f"[{int(panel)}] {panel.title}"
    if panel.is_selectable and state.lines:
        title += f" ({state.cursor + 1}/{len(state.lines)})"
    return title


def draw_box(buf: ScreenBuffer, rect: Rect, title: str, active: bool) -> None:
    border = "active_border" if active else "inactive_border"
    right = rect.x + rect.width - 1
    bottom = rect.y + rect.height - 1
    buf.put(rect.y, rect.x, BOX_TOP_LEFT + BOX_HORIZONTAL * (rect.width - 2) + BOX_TOP_RIGHT, border)
    for y in range(rect.y + 1, bottom):
        buf.put(y, rect.x, BOX_VERTICAL, border)
        buf.put(y, right, BOX_VERTICAL, border)
    buf.put(bottom, rect.x, BOX_BOTTOM_LEFT + BOX_HORIZONTAL * (rect.width - 2) + BOX_BOTTOM_RIGHT, border)
    if title and rect.width > 4:
        label = truncate_string(f" {title} ", rect.width - 4)
        buf.put(rect.y, rect.x + 2, label, "active_title" if active else "inactive_title")


def draw_panel(
    dashboard: "Dashboard", buf: ScreenBuffer, registry: HitTestRegistry, state: PanelState, rect: Rect
) -> None:
    panel = state.panel
    focused = dashboard.focused is panel
    registry.register_panel(panel, rect)
    if rect.height < 2 or rect.width < 2:
        return
    draw_box(buf, rect, panel_title(state), focused)

    viewport = state.viewport
    inner_x = rect.x + 1
    inner_w = rect.width - 2
    inner_h = rect.height - 2
    max_x = inner_x + inner_w

    for row in range(inner_h):
        index = viewport.y_offset + row
        if index >= viewport.total_lines:
            break
        y = rect.y + 1 + row
        if panel.is_selectable and index < len(state.lines):
            registry.register_line(panel, index, Rect(y, inner_x, 1, inner_w))

        if focused and panel.is_selectable and index == state.cursor:
            text = viewport.lines[index].replace("\t", " ")
            buf.fill(y, inner_x, inner_w, "selected")
            buf.put(y, inner_x, text, "selected", max_x=max_x)
            continue

        x = inner_x
        for text, style in line_segments(dashboard, state, index):
            if x >= max_x:
                break
            x = buf.put(y, x, text, style, max_x=max_x)

    show_scrollbar = viewport.is_scrollable() and (panel not in FOCUS_ONLY_SCROLLBAR or focused)
    if show_scrollbar and inner_h > 0:
        thumb_row = int((inner_h - 1) * viewport.scroll_percent())
        buf.put(rect.y + 1 + thumb_row, rect.x + rect.width - 1, SCROLLBAR_THUMB, "scrollbar_thumb")


# ==================== Help bar and overlays ====================

def draw_help_bar(dashboard: "Dashboard", buf: ScreenBuffer, registry: HitTestRegistry) -> None:
    y = buf.height - HELP_BAR_HEIGHT
    if y < 0:
        return
    button_w = text_width(HELP_BUTTON_TEXT)
    button_x = max(0, buf.width - button_w)
    x = 1
    for label, desc in dashboard.keymap.short_help(dashboard.focused, dashboard.show_help):
        x = buf.put(y, x, label, "help_key", max_x=button_x - 1)
        x = buf.put(y, x, f" {desc}", "help_desc", max_x=button_x - 1)
        x = buf.put(y, x, "  ", "normal", max_x=button_x - 1)
    buf.put(y, button_x, HELP_BUTTON_TEXT, "help_button")
    registry.register_button(HELP_BUTTON_ID, Rect(y, button_x, 1, button_w))


def centered_rect(buf: ScreenBuffer, height: int, width: int) -> Rect:
    height = min(height, buf.height)
    width = min(width, buf.width)
    return Rect((buf.height - height) // 2, (buf.width - width) // 2, height, width)


def draw_help(dashboard: "Dashboard", buf: ScreenBuffer) -> None:
    rect = centered_rect(buf, int(buf.height * HELP_HEIGHT_RATIO), int(buf.width * HELP_WIDTH_RATIO))
    if rect.height < 3 or rect.width < 4:
        return
    for y in range(rect.y, rect.y + rect.height):
        buf.fill(y, rect.x, rect.width)
    draw_box(buf, rect, "Help", True)

    viewport = dashboard.help_viewport
    max_x = rect.x + rect.width - 1
    for row, line in enumerate(viewport.visible_lines()[: rect.height - 2]):
        y = rect.y + 1 + row
        if line.startswith(" " * HELP_TITLE_MARGIN + "---"):
            buf.put(y, rect.x + 1, line, "help_title", max_x=max_x)
            continue
        label, _, desc = line.lstrip().partition(" ")
        indent = len(line) - len(line.lstrip())
        x = buf.put(y, rect.x + 1, " " * indent, "normal", max_x=max_x)
        x = buf.put(y, x, label, "help_key", max_x=max_x)
        buf.put(y, x, f" {desc}" if desc else "", "help_desc", max_x=max_x)

    if viewport.is_scrollable():
        thumb_row = int((rect.height - 3) * viewport.scroll_percent())
        buf.put(rect.y + 1 + thumb_row, max_x, SCROLLBAR_THUMB, "scrollbar_thumb")


def draw_prompt(buf: ScreenBuffer, prompt: TextPrompt) -> None:
    rect = centered_rect(buf, PROMPT_HEIGHT, max(20, int(buf.width * HELP_WIDTH_RATIO)))
    buf.fill(rect.y + 1, rect.x, rect.width)
    draw_box(buf, rect, prompt.title, True)
    inner_x = rect.x + 1
    inner_w = rect.width - 2
    y = rect.y + 1

    if not prompt.buffer:
        buf.put(y, inner_x, prompt.placeholder, "placeholder", max_x=inner_x + inner_w)
        buf.put(y, inner_x, prompt.placeholder[:1] or " ", "selected")
        return

    # Scroll horizontally so the cursor cell stays inside the box.
    start = 0
    cursor_cells = prompt.cursor_cells()
    while cursor_cells >= inner_w and start < prompt.cursor:
        cursor_cells -= text_width(prompt.buffer[start])
        start += 1
    buf.put(y, inner_x, prompt.buffer[start:], "normal", max_x=inner_x + inner_w)
    under = prompt.buffer[prompt.cursor] if prompt.cursor < len(prompt.buffer) else " "
    buf.put(y, inner_x + max(0, cursor_cells), under, "selected", max_x=inner_x + inner_w)


def draw_confirm(buf: ScreenBuffer, confirm: Confirm) -> None:
    message = f"{confirm.message} [y/N]"
    width = min(buf.width, max(24, text_width(message) + 4))
    rect = centered_rect(buf, PROMPT_HEIGHT, width)
    buf.fill(rect.y + 1, rect.x, rect.width)
    draw_box(buf, rect, confirm.title, True)
    buf.put(rect.y + 1, rect.x + 2, message, "normal", max_x=rect.x + rect.width - 1)


def draw_too_small(buf: ScreenBuffer, min_width: int, min_height: int) -> None:
    msg = f"Terminal too small ({buf.width}x{buf.height}). Minimum is {min_width}x{min_height}."
    y = buf.height // 2
    x = max(0, (buf.width - text_width(msg)) // 2)
    buf.put(y, x, msg, "error")


# ==================== Frame ====================

def render(dashboard: "Dashboard", buf: Optional[ScreenBuffer] = None) -> ScreenBuffer:
    """Renders the whole frame and rebuilds `dashboard.hit_test`."""
    if buf is None:
        buf = ScreenBuffer(dashboard.height, dashboard.width)
    registry = dashboard.hit_test
    registry.reset()

    if dashboard.too_small or dashboard.layout is None:
        draw_too_small(buf, MIN_WIDTH, MIN_HEIGHT)
        return buf

    for panel, rect in dashboard.layout.rects().items():
        draw_panel(dashboard, buf, registry, dashboard.panels[panel], rect)
    draw_help_bar(dashboard, buf, registry)

    if dashboard.show_help:
        draw_help(dashboard, buf)
    elif isinstance(dashboard.mode, TextPrompt):
        draw_prompt(buf, dashboard.mode)
    elif isinstance(dashboard.mode, Confirm):
        draw_confirm(buf, dashboard.mode)
    logger.debug(f"Rendered frame {registry.frame} with {len(registry)} zones")
    return buf
