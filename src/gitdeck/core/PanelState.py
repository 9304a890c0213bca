# gitdeck/core/PanelState.py
"""PanelState Module
=================
Per-panel state of the dashboard: the `Panel` enumeration, the scrollable
`Viewport`, the typed line records shown by the selectable panels, and the
`PanelState` record that ties them together.

Line records replace tab-delimited strings: every record carries its parsed
fields alongside a plain `text` rendering, so actions and the detail fetch
read fields directly instead of re-splitting display text.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union


INITIAL_CONTENT = "Loading..."
NO_STASH_TEXT = "No stashed changes."


class Panel(IntEnum):
    """Logical UI regions. The ordinal doubles as the focus shortcut digit."""

    MAIN = 0
    STATUS = 1
    FILES = 2
    BRANCHES = 3
    COMMITS = 4
    STASH = 5
    SECONDARY = 6

    @property
    def title(self) -> str:
        return PANEL_TITLES[self]

    @property
    def zone_id(self) -> str:
        return f"panel-{self.name.lower()}"

    @property
    def is_selectable(self) -> bool:
        return self in SELECTABLE_PANELS

    def next(self) -> "Panel":
        """Next panel in Tab order; Secondary is never reached by cycling."""
        cycle = list(CYCLE_ORDER)
        if self not in cycle:
            return cycle[0]
        return cycle[(cycle.index(self) + 1) % len(cycle)]

    def prev(self) -> "Panel":
        cycle = list(CYCLE_ORDER)
        if self not in cycle:
            return cycle[-1]
        return cycle[(cycle.index(self) - 1) % len(cycle)]


PANEL_TITLES = {
    Panel.MAIN: "Main",
    Panel.STATUS: "Status",
    Panel.FILES: "Files",
    Panel.BRANCHES: "Branches",
    Panel.COMMITS: "Commits",
    Panel.STASH: "Stash",
    Panel.SECONDARY: "Command Log",
}

SELECTABLE_PANELS = frozenset({Panel.FILES, Panel.BRANCHES, Panel.COMMITS, Panel.STASH})
DATA_PANELS = (Panel.STATUS, Panel.FILES, Panel.BRANCHES, Panel.COMMITS, Panel.STASH)
CYCLE_ORDER = tuple(p for p in Panel if p is not Panel.SECONDARY)
LEFT_COLUMN = (Panel.STATUS, Panel.FILES, Panel.BRANCHES, Panel.COMMITS, Panel.STASH)
RIGHT_COLUMN = (Panel.MAIN, Panel.SECONDARY)


# ==================== Line records ====================

@dataclass(frozen=True)
class TextLine:
    """A plain line of text with no structure (status, detail, placeholders)."""

    text: str


@dataclass(frozen=True)
class FileLine:
    """One row of the flattened file tree.

    Directories have an empty `status` and `is_dir=True`. `path` is the full
    path relative to the repository root and is what cursor restoration and
    diff lookups key on.
    """

    prefix: str
    status: str
    name: str
    path: str
    is_dir: bool = False
    is_renamed: bool = False

    @property
    def text(self) -> str:
        return f"{self.prefix} {self.status or '  '} {self.name}"

    @property
    def is_untracked(self) -> bool:
        return self.status == "??"

    @property
    def is_staged(self) -> bool:
        return len(self.status) == 2 and self.status[0] not in (" ", "?")

    @property
    def has_unstaged(self) -> bool:
        return len(self.status) == 2 and self.status[1] != " "


@dataclass(frozen=True)
class BranchLine:
    date: str
    name: str
    is_current: bool = False

    @property
    def label(self) -> str:
        return f"(*) → {self.name}" if self.is_current else self.name

    @property
    def text(self) -> str:
        return f"{self.date} {self.label}"


@dataclass(frozen=True)
class CommitLine:
    """A commit log row. Graph-only rows have an empty `sha`."""

    graph: str
    sha: str = ""
    author: str = ""
    subject: str = ""

    @property
    def is_commit(self) -> bool:
        return bool(self.sha)

    @property
    def is_merge(self) -> bool:
        return self.subject.lower().startswith("merge")

    @property
    def text(self) -> str:
        if not self.sha:
            return self.graph
        return f"{self.graph} {self.sha} {self.author} {self.subject}"


@dataclass(frozen=True)
class StashLine:
    stash_id: str
    message: str

    @property
    def text(self) -> str:
        return f"{self.stash_id} {self.message}"


LineRecord = Union[TextLine, FileLine, BranchLine, CommitLine, StashLine]


# ==================== Viewport ====================

class Viewport:
    """A scrollable window over a list of text lines.

    `y_offset` is always kept inside ``[0, max(0, len(lines) - height)]``.
    """

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self.y_offset = 0
        self.lines: list[str] = []

    def set_size(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self.set_y_offset(self.y_offset)

    def set_content(self, content: Union[str, list[str]]) -> None:
        self.lines = content.split("\n") if isinstance(content, str) else list(content)
        if self.y_offset > self.max_y_offset:
            self.goto_bottom()

    @property
    def total_lines(self) -> int:
        return len(self.lines)

    @property
    def max_y_offset(self) -> int:
        return max(0, len(self.lines) - self.height)

    def set_y_offset(self, offset: int) -> None:
        self.y_offset = min(max(0, offset), self.max_y_offset)

    def goto_top(self) -> None:
        self.y_offset = 0

    def goto_bottom(self) -> None:
        self.y_offset = self.max_y_offset

    def scroll_up(self, n: int = 1) -> None:
        self.set_y_offset(self.y_offset - n)

    def scroll_down(self, n: int = 1) -> None:
        self.set_y_offset(self.y_offset + n)

    def at_top(self) -> bool:
        return self.y_offset <= 0

    def at_bottom(self) -> bool:
        return self.y_offset >= self.max_y_offset

    def is_scrollable(self) -> bool:
        return not self.at_top() or not self.at_bottom()

    def scroll_percent(self) -> float:
        if self.height >= len(self.lines):
            return 1.0
        percent = self.y_offset / (len(self.lines) - self.height)
        return min(1.0, max(0.0, percent))

    def ensure_visible(self, index: int) -> None:
        """Scrolls the minimum amount needed to bring line `index` into view."""
        if self.height <= 0:
            return
        if index < self.y_offset:
            self.set_y_offset(index)
        elif index >= self.y_offset + self.height:
            self.set_y_offset(index - self.height + 1)

    def visible_lines(self) -> list[str]:
        return self.lines[self.y_offset:self.y_offset + self.height]


# ==================== PanelState ====================

class PanelState:
    """State of one panel: raw content, parsed lines, cursor and viewport.

    Invariant: ``0 <= cursor < len(lines)`` when `lines` is non-empty,
    ``cursor == 0`` otherwise.
    """

    def __init__(self, panel: Panel) -> None:
        self.panel = panel
        self.content: str = INITIAL_CONTENT
        self.lines: list[LineRecord] = [TextLine(INITIAL_CONTENT)]
        self.cursor: int = 0
        self.viewport = Viewport()
        self.viewport.set_content(INITIAL_CONTENT)

    def set_lines(self, content: str, lines: list[LineRecord]) -> None:
        self.content = content
        self.lines = list(lines)
        self.clamp_cursor()
        self.viewport.set_content([line.text for line in self.lines])

    def set_text(self, content: str) -> None:
        """Replaces the panel with unstructured text (Main, Status, Secondary)."""
        self.set_lines(content, [TextLine(t) for t in content.split("\n")])

    def clamp_cursor(self) -> None:
        if not self.lines:
            self.cursor = 0
        elif self.cursor >= len(self.lines):
            self.cursor = len(self.lines) - 1
        elif self.cursor < 0:
            self.cursor = 0

    def selected(self) -> Optional[LineRecord]:
        if 0 <= self.cursor < len(self.lines):
            return self.lines[self.cursor]
        return None

    def move_cursor(self, delta: int) -> bool:
        """Moves the cursor without wrapping. Returns True when it moved."""
        if not self.lines:
            return False
        target = min(max(0, self.cursor + delta), len(self.lines) - 1)
        if target == self.cursor:
            return False
        self.cursor = target
        self.viewport.ensure_visible(self.cursor)
        return True

    def select(self, index: int) -> None:
        self.cursor = index
        self.clamp_cursor()
        self.viewport.ensure_visible(self.cursor)
