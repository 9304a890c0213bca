# gitdeck/ui/KeyBinder.py
"""KeyBinder Module
================
Keyboard and mouse input for the dashboard.

- `KeyMap` is the immutable action -> keys table built once from the
  configuration and handed to the `Dashboard`. Keys are logical names:
  printable characters as themselves ("q", "S", "?"), and named keys such as
  "enter", "space", "tab", "shift+tab", "esc", "up", "pageup", "ctrl+t",
  "alt-x", "f1".
- `KeyBinder` reads curses input and turns it into `KeyMsg`, `MouseMsg` or
  `ResizeMsg`, decoding raw escape sequences for terminals where curses
  keypad mode does not.
"""

import curses
import logging
import re
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from gitdeck.core.Messages import KeyMsg, MouseAction, MouseMsg, ResizeMsg
from gitdeck.core.PanelState import Panel
from gitdeck.utils.logging_config import KEY_LOGGER
from gitdeck.utils.utils import DEFAULT_CONFIG


logger = logging.getLogger("gitdeck")

InputMsg = Union[KeyMsg, MouseMsg, ResizeMsg]

KEY_ALIASES = {
    "return": "enter",
    "escape": "esc",
    "pgup": "pageup",
    "pgdn": "pagedown",
    "del": "delete",
    "btab": "shift+tab",
    " ": "space",
}

ACTION_HELP: dict[str, str] = {
    "quit": "quit",
    "toggle_help": "toggle help",
    "cancel": "cancel",
    "switch_theme": "switch theme",
    "focus_next": "Focus Next Window",
    "focus_prev": "Focus Previous Window",
    "focus_main": "Focus Main Window",
    "focus_status": "Focus Status Window",
    "focus_files": "Focus Files Window",
    "focus_branches": "Focus Branches Window",
    "focus_commits": "Focus Commits Window",
    "focus_stash": "Focus Stash Window",
    "focus_secondary": "Focus Command log Window",
    "up": "up",
    "down": "down",
    "page_up": "page up",
    "page_down": "page down",
    "copy_selection": "Copy to clipboard",
    "stage_item": "Stage Item",
    "stage_all": "Stage All",
    "discard": "Discard",
    "stash": "Stash",
    "stash_all": "Stash all",
    "commit": "Commit",
    "checkout": "Checkout",
    "new_branch": "New Branch",
    "delete_branch": "Delete",
    "rename_branch": "Rename",
    "amend_commit": "Amend",
    "revert": "Revert",
    "reset_to_commit": "Reset to Commit",
    "stash_apply": "Apply",
    "stash_pop": "Pop",
    "stash_drop": "Drop",
}

HELP_SECTIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Navigation", (
        "focus_next", "focus_prev", "focus_main", "focus_status", "focus_files",
        "focus_branches", "focus_commits", "focus_stash", "focus_secondary",
        "up", "down", "page_up", "page_down",
    )),
    ("Files", ("commit", "stash", "stash_all", "stage_item", "stage_all", "discard", "amend_commit")),
    ("Branches", ("checkout", "new_branch", "delete_branch", "rename_branch")),
    ("Commits", ("amend_commit", "revert", "reset_to_commit")),
    ("Stash", ("stash_apply", "stash_pop", "stash_drop")),
    ("Misc", ("copy_selection", "switch_theme", "toggle_help", "cancel", "quit")),
)

SHORT_HELP = ("toggle_help", "cancel", "quit")
PANEL_SHORT_HELP: dict[Panel, tuple[str, ...]] = {
    Panel.FILES: ("commit", "stash", "discard", "stage_item"),
    Panel.BRANCHES: ("checkout", "new_branch", "delete_branch"),
    Panel.COMMITS: ("amend_commit", "revert", "reset_to_commit"),
    Panel.STASH: ("stash_apply", "stash_pop", "stash_drop"),
}

HELP_KEY_WIDTH = 12
HELP_TITLE_MARGIN = 9


def normalize_key(spec: Union[str, int]) -> str:
    """Canonical logical name of a key specification from the configuration.

    Single characters keep their case ("S" and "s" are different keys);
    named keys are lower-cased, "ctrl-x" becomes "ctrl+x" and "alt+x"
    becomes "alt-x".

    Raises:
        ValueError: If the specification is empty or not a string.
    """
    if isinstance(spec, int):
        if 32 <= spec < 127:
            return normalize_key(chr(spec))
        raise ValueError(f"Numeric key codes are not supported: {spec}")
    if not isinstance(spec, str):
        raise ValueError(f"Invalid key specification type: {type(spec)}")
    if spec == " ":
        return "space"
    s = spec.strip()
    if not s:
        raise ValueError("Key string cannot be empty.")
    if len(s) == 1:
        return s
    s = s.lower()
    s = KEY_ALIASES.get(s, s)
    if s.startswith("ctrl-"):
        s = "ctrl+" + s[5:]
    if s.startswith("alt+"):
        s = "alt-" + s[4:]
    return s


def key_label(key: str) -> str:
    """Short label used in help texts: "space" -> "<space>", "ctrl+t" -> "<c+t>"."""
    if len(key) == 1:
        return key
    if key.startswith("ctrl+"):
        return f"<c+{key[5:]}>"
    if key.startswith("shift+"):
        return f"<s+{key[6:]}>"
    if key in ("up", "down"):
        return {"up": "↑", "down": "↓"}[key]
    return f"<{key}>"


class KeyMap:
    """Immutable mapping of action names to the logical keys that trigger them."""

    def __init__(self, bindings: Mapping[str, tuple[str, ...]]) -> None:
        self._bindings = MappingProxyType({k: tuple(v) for k, v in bindings.items()})

    @classmethod
    def from_config(cls, config: Optional[dict[str, Any]] = None) -> "KeyMap":
        defaults = DEFAULT_CONFIG["keybindings"]
        user = (config or {}).get("keybindings", {})
        parsed: dict[str, tuple[str, ...]] = {}

        for action, default_spec in defaults.items():
            spec = user.get(action, default_spec)
            if not spec:
                logger.debug("Keybinding for action %r is disabled or empty.", action)
                continue
            if isinstance(spec, list):
                items = spec
            elif isinstance(spec, str) and "|" in spec and spec.strip() != "|":
                items = [s.strip() for s in spec.split("|")]
            else:
                items = [spec]

            keys: list[str] = []
            for item in items:
                try:
                    key = normalize_key(item)
                except ValueError as e:
                    logger.error(
                        "Error parsing keybinding item %r for action %r: %s. "
                        "This specific binding for the action will be ignored.",
                        item, action, e,
                    )
                    continue
                if key not in keys:
                    keys.append(key)

            if keys:
                parsed[action] = tuple(keys)
            else:
                logger.warning("No valid keys found for action %r. It will not be bound.", action)

        for action in user:
            if action not in defaults:
                logger.warning("Unknown keybinding action %r in configuration ignored.", action)

        logger.debug("Loaded keybindings: %s", parsed)
        return cls(parsed)

    def keys(self, action: str) -> tuple[str, ...]:
        return self._bindings.get(action, ())

    def matches(self, action: str, key: str) -> bool:
        return key in self._bindings.get(action, ())

    def lookup(self, key: str, actions: Optional[tuple[str, ...]] = None) -> Optional[str]:
        """First action (optionally restricted to `actions`) bound to `key`."""
        for action in actions if actions is not None else tuple(self._bindings):
            if key in self._bindings.get(action, ()):
                return action
        return None

    def label(self, action: str) -> str:
        keys = self.keys(action)
        if action in ("up", "down") and len(keys) > 1:
            return "/".join(key_label(k) for k in keys)
        return key_label(keys[0]) if keys else ""

    def short_help(self, panel: Panel, help_shown: bool = False) -> list[tuple[str, str]]:
        actions = SHORT_HELP if help_shown else PANEL_SHORT_HELP.get(panel, ()) + SHORT_HELP
        return [(self.label(a), ACTION_HELP[a]) for a in actions if self.keys(a)]

    def help_lines(self) -> list[str]:
        """Plain-text help: section titles ("--- Files ---") followed by key rows."""
        lines: list[str] = []
        for title, actions in HELP_SECTIONS:
            lines.append(" " * HELP_TITLE_MARGIN + f"--- {title} ---")
            for action in actions:
                if not self.keys(action):
                    continue
                lines.append(f"{self.label(action):>{HELP_KEY_WIDTH}} {ACTION_HELP[action]}")
            lines.append("")
        return lines[:-1] if lines else lines


# ==================== KeyBinder ====================

ESCAPE_SEQUENCE_MAP: dict[str, str] = {
    "[A": "up", "[B": "down", "[C": "right", "[D": "left",
    "OA": "up", "OB": "down", "OC": "right", "OD": "left",
    "[H": "home", "[F": "end", "OH": "home", "OF": "end",
    "[1~": "home", "[4~": "end", "[7~": "home", "[8~": "end",
    "[2~": "insert", "[3~": "delete",
    "[5~": "pageup", "[6~": "pagedown",
    "[Z": "shift+tab",
    "OP": "f1", "OQ": "f2", "OR": "f3", "OS": "f4",
}

CHAR_NAMES = {
    "\t": "tab",
    "\n": "enter",
    "\r": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
    " ": "space",
    "\x1b": "esc",
}


def _curses_key_names() -> dict[int, str]:
    names = {
        curses.KEY_UP: "up",
        curses.KEY_DOWN: "down",
        curses.KEY_LEFT: "left",
        curses.KEY_RIGHT: "right",
        curses.KEY_HOME: "home",
        getattr(curses, "KEY_END", curses.KEY_LL): "end",
        curses.KEY_PPAGE: "pageup",
        curses.KEY_NPAGE: "pagedown",
        curses.KEY_DC: "delete",
        curses.KEY_IC: "insert",
        curses.KEY_BACKSPACE: "backspace",
        curses.KEY_ENTER: "enter",
        getattr(curses, "KEY_BTAB", 353): "shift+tab",
    }
    for n in range(1, 13):
        names[getattr(curses, f"KEY_F{n}")] = f"f{n}"
    return names


def _wheel_down_mask() -> int:
    # ncurses 6 reports wheel-down as BUTTON5; older builds as REPORT_MOUSE_POSITION
    return getattr(curses, "BUTTON5_PRESSED", 0) or getattr(curses, "REPORT_MOUSE_POSITION", 0)


def decode_char(ch: str) -> str:
    """Logical key name of a character returned by `get_wch`."""
    if ch in CHAR_NAMES:
        return CHAR_NAMES[ch]
    code = ord(ch)
    if 1 <= code <= 26:
        return f"ctrl+{chr(code + 96)}"
    return ch


def decode_mouse_state(bstate: int) -> Optional[MouseAction]:
    if bstate & getattr(curses, "BUTTON4_PRESSED", 0):
        return MouseAction.WHEEL_UP
    wheel_down = _wheel_down_mask()
    if wheel_down and bstate & wheel_down:
        return MouseAction.WHEEL_DOWN
    if bstate & (curses.BUTTON1_RELEASED | curses.BUTTON1_CLICKED):
        return MouseAction.RELEASE
    if bstate & curses.BUTTON1_PRESSED:
        return MouseAction.PRESS
    return None


class KeyBinder:
    """Reads curses input and produces dashboard messages."""

    def __init__(self, stdscr: Any, timeout_ms: int = 50) -> None:
        self.stdscr = stdscr
        self.timeout_ms = timeout_ms
        self._key_names = _curses_key_names()

    def get_key_input(self) -> Optional[InputMsg]:
        """Returns the next input message, or None when no input is pending."""
        try:
            raw = self.stdscr.get_wch()
        except curses.error:
            return None

        if isinstance(raw, int):
            if raw == curses.KEY_RESIZE:
                height, width = self.stdscr.getmaxyx()
                return ResizeMsg(width=width, height=height)
            if raw == curses.KEY_MOUSE:
                return self._read_mouse()
            name = self._key_names.get(raw)
            if name is None:
                KEY_LOGGER.debug("unmapped key code %r", raw)
                return None
            KEY_LOGGER.debug("key code %r -> %r", raw, name)
            return KeyMsg(name)

        if raw == "\x1b":
            key = self._read_escape_sequence()
        else:
            key = decode_char(raw)
        KEY_LOGGER.debug("key %r -> %r", raw, key)
        return KeyMsg(key)

    def _read_mouse(self) -> Optional[MouseMsg]:
        try:
            _id, x, y, _z, bstate = curses.getmouse()
        except curses.error:
            return None
        action = decode_mouse_state(bstate)
        if action is None:
            return None
        KEY_LOGGER.debug("mouse %s at (%d, %d)", action.value, y, x)
        return MouseMsg(y=y, x=x, action=action)

    def _read_escape_sequence(self) -> str:
        """Lone ESC, an Alt chord ("alt-x") or a CSI/SS3 sequence."""
        seq = ""
        self.stdscr.nodelay(True)
        try:
            while True:
                try:
                    nx = self.stdscr.get_wch()
                except curses.error:
                    break
                seq += nx if isinstance(nx, str) else f"<{nx}>"
        finally:
            self.stdscr.nodelay(False)
            self.stdscr.timeout(self.timeout_ms)

        if not seq:
            return "esc"
        if seq.startswith("\x1b"):
            seq = seq[1:]
        if len(seq) == 1 and seq.isprintable():
            return f"alt-{seq}"

        mapped = ESCAPE_SEQUENCE_MAP.get(seq)
        if mapped is None:
            cleaned = "".join(re.findall(r"[\[O0-9;~A-Za-z]", seq))
            mapped = ESCAPE_SEQUENCE_MAP.get(cleaned)
        if mapped is None:
            logger.warning("get_key_input: unknown escape sequence: ESC + %r", seq)
            return "esc"
        return mapped
