# gitdeck/core/ContentPipeline.py
"""ContentPipeline Module
======================
Fetching and reconciling panel content.

The pipeline has three halves:

- `fetch_panel` and `fetch_detail` run on worker threads of the
  `AsyncEngine`. They call the synchronous `GitBridge` and return raw
  payloads; they never touch `PanelState`.
- `build_lines` turns a payload into display records on the controller thread.
- `apply_panel_content` swaps the new records into a `PanelState` while keeping
  the user's selection: by path for the Files panel, by clamped index for the
  others.
"""

import logging
from typing import Any, Optional

from gitdeck.core.FileTree import build_file_lines
from gitdeck.core.PanelState import (
    NO_STASH_TEXT,
    BranchLine,
    CommitLine,
    FileLine,
    LineRecord,
    Panel,
    PanelState,
    StashLine,
    TextLine,
)
from gitdeck.integrations.GitBridge import Branch, CommitLog, GitBridge, Stash


logger = logging.getLogger("gitdeck")

SELECT_ITEM_TEXT = "Select an item to see details."
UNTRACKED_FILE_TEXT = "Untracked file: Stage to see content as a diff."
ERROR_PREFIX = "Error: "

WELCOME_TEXT = """\
gitdeck

Welcome, {user}!

Everything on the left is live: the panels refresh whenever the
repository changes on disk.

  tab / shift+tab   move between panels
  1 .. 6, 0         jump to a panel
  j / k             move the selection
  ?                 all key bindings
  q                 quit
"""

# Panels whose detail is a unified diff and gets diff highlighting.
DIFF_SOURCES = frozenset({Panel.FILES, Panel.COMMITS, Panel.STASH})


def error_text(exc: BaseException) -> str:
    return f"{ERROR_PREFIX}{exc}"


# ==================== worker side ====================

def fetch_panel(git: GitBridge, panel: Panel) -> Any:
    """Runs the git query backing `panel`. Raises `GitError` on failure."""
    if panel is Panel.STATUS:
        repo_name, branch = git.repo_info()
        return f"{repo_name} → {branch}"
    if panel is Panel.FILES:
        return git.status()
    if panel is Panel.BRANCHES:
        return git.branches()
    if panel is Panel.COMMITS:
        return git.commit_graph()
    if panel is Panel.STASH:
        return git.stashes()
    raise ValueError(f"Panel {panel.name} has no repository content")


def fetch_detail(git: GitBridge, source: Panel, line: Optional[LineRecord]) -> str:
    """Builds the Main panel text for the selected `line` of `source`.

    A line that does not carry the fields the source needs yields the neutral
    placeholder instead of an error.
    """
    content = ""
    if source is Panel.STATUS:
        content = WELCOME_TEXT.format(user=git.user_name() or "there")
    elif source is Panel.FILES and isinstance(line, FileLine):
        if line.is_dir:
            content = git.diff(line.path, against_head=True)
        elif line.is_untracked:
            content = UNTRACKED_FILE_TEXT
        elif line.is_staged:
            content = git.diff(line.path, cached=True)
        elif line.has_unstaged:
            content = git.diff(line.path)
    elif source is Panel.BRANCHES and isinstance(line, BranchLine):
        content = git.branch_log(line.name)
    elif source is Panel.COMMITS and isinstance(line, CommitLine) and line.is_commit:
        content = git.show_commit(line.sha)
    elif source is Panel.STASH:
        if isinstance(line, StashLine):
            content = git.stash_show(line.stash_id)
        elif isinstance(line, TextLine) and line.text == NO_STASH_TEXT:
            content = NO_STASH_TEXT

    if not content.strip():
        return SELECT_ITEM_TEXT
    return content.rstrip("\n")


# ==================== controller side ====================

def build_lines(panel: Panel, payload: Any) -> tuple[str, list[LineRecord]]:
    """Converts a fetch payload into ``(content, lines)`` for `panel`."""
    if panel is Panel.FILES:
        content = str(payload)
        return content, list(build_file_lines(content))
    if panel is Panel.BRANCHES:
        lines: list[LineRecord] = [
            BranchLine(date=b.last_commit, name=b.name, is_current=b.is_current)
            for b in _records(payload, Branch)
        ]
        return "\n".join(line.text for line in lines), lines
    if panel is Panel.COMMITS:
        lines = [
            CommitLine(graph=c.graph, sha=c.sha, author=c.author_initials, subject=c.subject)
            for c in _records(payload, CommitLog)
        ]
        return "\n".join(line.text for line in lines), lines
    if panel is Panel.STASH:
        stashes = _records(payload, Stash)
        if not stashes:
            return NO_STASH_TEXT, [TextLine(NO_STASH_TEXT)]
        lines = [StashLine(s.name, f"{s.branch}: {s.message}" if s.message else s.branch) for s in stashes]
        return "\n".join(line.text for line in lines), lines
    content = str(payload)
    return content, [TextLine(t) for t in content.split("\n")]


def _records(payload: Any, kind: type) -> list[Any]:
    return [item for item in (payload or []) if isinstance(item, kind)]


def apply_panel_content(state: PanelState, content: str, lines: list[LineRecord]) -> None:
    """Replaces the content of `state`, preserving the selection."""
    if state.panel is Panel.FILES:
        previous = state.selected()
        old_path = previous.path if isinstance(previous, FileLine) else None
        state.set_lines(content, lines)
        state.cursor = find_path(lines, old_path) if old_path is not None else 0
    else:
        state.set_lines(content, lines)
    state.viewport.ensure_visible(state.cursor)


def apply_panel_error(state: PanelState, exc_text: str) -> None:
    """Shows an error in place of the panel content; the cursor is clamped."""
    state.set_lines(exc_text, [TextLine(t) for t in exc_text.split("\n")])


def find_path(lines: list[LineRecord], path: str) -> int:
    for i, line in enumerate(lines):
        if isinstance(line, FileLine) and line.path == path:
            return i
    return 0


def selection_identifier(line: Optional[LineRecord]) -> Optional[str]:
    """The value copied to the clipboard for a selected line."""
    if isinstance(line, FileLine):
        return line.path
    if isinstance(line, BranchLine):
        return line.name
    if isinstance(line, CommitLine) and line.is_commit:
        return line.sha
    if isinstance(line, StashLine):
        return line.stash_id
    return None
