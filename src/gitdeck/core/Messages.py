# gitdeck/core/Messages.py
"""Messages Module
===============
Every event the dashboard controller reacts to is one of the small immutable
records below. Input decoding, background fetches and the file watcher all
produce messages; `Dashboard.update` consumes exactly one at a time.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from gitdeck.core.PanelState import Panel


class MouseAction(Enum):
    PRESS = "press"
    RELEASE = "release"
    WHEEL_UP = "wheel_up"
    WHEEL_DOWN = "wheel_down"


@dataclass(frozen=True)
class KeyMsg:
    """A decoded key press. `key` is a logical name such as "q", "ctrl+t", "enter"."""

    key: str


@dataclass(frozen=True)
class MouseMsg:
    y: int
    x: int
    action: MouseAction


@dataclass(frozen=True)
class ResizeMsg:
    width: int
    height: int


@dataclass(frozen=True)
class PanelContentMsg:
    """Result of a panel fetch.

    `payload` is the raw result of the git query (text or a list of records);
    `error` is set instead when the git call failed.
    """

    panel: Panel
    payload: Any
    generation: int = 0
    error: Optional[str] = None


@dataclass(frozen=True)
class MainContentMsg:
    content: str
    generation: int = 0
    source: Optional[Panel] = None


@dataclass(frozen=True)
class LineClickedMsg:
    panel: Panel
    index: int


@dataclass(frozen=True)
class FileChangedMsg:
    pass


@dataclass(frozen=True)
class ActionResultMsg:
    """Completion of a repository action (stage, commit, checkout, ...)."""

    description: str
    ok: bool
    error: Optional[str] = None
    refresh: bool = True


@dataclass(frozen=True)
class TaskErrorMsg:
    """A background task raised something other than a git error."""

    task: str
    error: str
