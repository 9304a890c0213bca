# gitdeck/ui/Themes.py
"""Colour palettes and the semantic style table used by the renderer.

A style is ``(foreground, background, bold)`` where colours name palette
slots. `DrawScreen` turns them into curses colour pairs.
"""

from dataclasses import dataclass
from typing import Optional


PALETTES: dict[str, dict[str, str]] = {
    "GitHub Dark": {
        "Black": "#24292E", "Red": "#ff7b72", "Green": "#3fb950", "Yellow": "#d29922",
        "Blue": "#58a6ff", "Magenta": "#bc8cff", "Cyan": "#39c5cf", "White": "#b1bac4",
        "BrightBlack": "#6e7681", "BrightRed": "#ffa198", "BrightGreen": "#56d364",
        "BrightYellow": "#e3b341", "BrightBlue": "#79c0ff", "BrightMagenta": "#d2a8ff",
        "BrightCyan": "#56d4dd", "BrightWhite": "#f0f6fc",
        "DarkBlack": "#1b1f23", "DarkRed": "#d73a49", "DarkGreen": "#28a745",
        "DarkYellow": "#dbab09", "DarkBlue": "#2188ff", "DarkMagenta": "#a041f5",
        "DarkCyan": "#12aab5", "DarkWhite": "#8b949e",
        "Bg": "#0d1117", "Fg": "#c9d1d9",
    },
    "Gruvbox": {
        "Black": "#282828", "Red": "#cc241d", "Green": "#98971a", "Yellow": "#d79921",
        "Blue": "#458588", "Magenta": "#b16286", "Cyan": "#689d6a", "White": "#a89984",
        "BrightBlack": "#928374", "BrightRed": "#fb4934", "BrightGreen": "#b8bb26",
        "BrightYellow": "#fabd2f", "BrightBlue": "#83a598", "BrightMagenta": "#d3869b",
        "BrightCyan": "#8ec07c", "BrightWhite": "#ebdbb2",
        "DarkBlack": "#1d2021", "DarkRed": "#9d0006", "DarkGreen": "#79740e",
        "DarkYellow": "#b57614", "DarkBlue": "#076678", "DarkMagenta": "#8f3f71",
        "DarkCyan": "#427b58", "DarkWhite": "#928374",
        "Bg": "#282828", "Fg": "#ebdbb2",
    },
}

THEME_NAMES = tuple(PALETTES)

# style name -> (fg slot, bg slot or None for the terminal default, bold)
STYLES: dict[str, tuple[str, Optional[str], bool]] = {
    "normal": ("Fg", None, False),
    "active_border": ("BrightCyan", None, False),
    "inactive_border": ("BrightBlack", None, False),
    "active_title": ("Bg", "BrightCyan", True),
    "inactive_title": ("Fg", "Black", False),
    "selected": ("BrightWhite", "DarkBlue", False),
    "scrollbar_thumb": ("BrightGreen", None, False),
    "git_staged": ("Green", None, False),
    "git_unstaged": ("Red", None, False),
    "git_untracked": ("BrightBlack", None, False),
    "git_conflicted": ("BrightRed", None, True),
    "tree_dir": ("Blue", None, False),
    "branch_current": ("Green", None, True),
    "branch_date": ("Yellow", None, False),
    "commit_sha": ("Yellow", None, False),
    "commit_author": ("Green", None, False),
    "commit_merge": ("Magenta", None, False),
    "graph_edge": ("BrightBlack", None, False),
    "graph_node": ("Green", None, False),
    "stash_name": ("Yellow", None, False),
    "stash_message": ("Fg", None, False),
    "help_title": ("Green", None, True),
    "help_key": ("Yellow", None, False),
    "help_desc": ("DarkWhite", None, False),
    "help_button": ("Bg", "Green", False),
    "diff_added": ("Green", None, False),
    "diff_removed": ("Red", None, False),
    "diff_hunk": ("Cyan", None, False),
    "diff_header": ("BrightWhite", None, True),
    "error": ("BrightRed", None, False),
    "placeholder": ("BrightBlack", None, False),
    "log_ok": ("Green", None, False),
    "log_fail": ("Red", None, False),
}

STYLE_NAMES = tuple(STYLES)


@dataclass(frozen=True)
class Theme:
    name: str
    palette: dict[str, str]

    def colors(self, style: str) -> tuple[str, Optional[str], bool]:
        """Resolves a style name to ``(fg hex, bg hex or None, bold)``."""
        fg_slot, bg_slot, bold = STYLES.get(style, STYLES["normal"])
        bg = self.palette[bg_slot] if bg_slot else None
        return self.palette[fg_slot], bg, bold


def get_theme(name: str) -> Theme:
    if name not in PALETTES:
        name = THEME_NAMES[0]
    return Theme(name=name, palette=PALETTES[name])


def basic_color_name(slot: str) -> str:
    """Maps a palette slot to one of the eight basic terminal colour names."""
    if slot == "Bg":
        return "black"
    if slot == "Fg":
        return "white"
    for prefix in ("Bright", "Dark"):
        if slot.startswith(prefix):
            slot = slot[len(prefix):]
    return slot.lower()
