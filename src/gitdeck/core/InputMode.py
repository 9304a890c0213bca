# gitdeck/core/InputMode.py
"""InputMode Module
================
The three input modes of the dashboard: `NormalMode`, `TextPrompt` and
`Confirm`. While a prompt or confirmation is active every key press is routed
to it; `handle_key` reports whether the mode stays open, was submitted or was
cancelled, and the dashboard performs the transition back to `NormalMode`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Union

from wcwidth import wcswidth


class ModeOutcome(Enum):
    KEEP = "keep"
    SUBMIT = "submit"
    CANCEL = "cancel"


@dataclass
class NormalMode:
    pass


@dataclass
class TextPrompt:
    """A single-line text prompt.

    Attributes:
        title: Shown in the overlay border.
        placeholder: Shown dimmed while the buffer is empty.
        on_submit: Called with the entered text when a non-blank value is submitted.
        buffer: Current text.
        cursor: Insertion point inside `buffer` (in characters).
    """

    title: str
    placeholder: str
    on_submit: Callable[[str], None]
    buffer: str = ""
    cursor: int = 0

    @property
    def value(self) -> str:
        return self.buffer.strip()

    def cursor_cells(self) -> int:
        width = wcswidth(self.buffer[:self.cursor])
        return width if width >= 0 else self.cursor

    def handle_key(self, key: str) -> ModeOutcome:
        if key == "esc":
            return ModeOutcome.CANCEL
        if key == "enter":
            # blank input keeps the prompt open and dispatches nothing
            return ModeOutcome.SUBMIT if self.value else ModeOutcome.KEEP
        if key == "backspace":
            if self.cursor > 0:
                self.buffer = self.buffer[:self.cursor - 1] + self.buffer[self.cursor:]
                self.cursor -= 1
        elif key == "delete":
            self.buffer = self.buffer[:self.cursor] + self.buffer[self.cursor + 1:]
        elif key == "left":
            self.cursor = max(0, self.cursor - 1)
        elif key == "right":
            self.cursor = min(len(self.buffer), self.cursor + 1)
        elif key == "home":
            self.cursor = 0
        elif key == "end":
            self.cursor = len(self.buffer)
        else:
            text = " " if key == "space" else key
            if len(text) == 1 and text.isprintable():
                self.buffer = self.buffer[:self.cursor] + text + self.buffer[self.cursor:]
                self.cursor += 1
        return ModeOutcome.KEEP


# enter follows the [y/N] default
CONFIRM_KEYS = frozenset({"y", "Y"})
DECLINE_KEYS = frozenset({"n", "N", "esc", "enter"})


@dataclass
class Confirm:
    message: str
    on_decision: Callable[[bool], None]
    title: str = "Confirm"
    decision: bool = field(default=False)

    def handle_key(self, key: str) -> ModeOutcome:
        if key in CONFIRM_KEYS:
            self.decision = True
            return ModeOutcome.SUBMIT
        if key in DECLINE_KEYS:
            self.decision = False
            return ModeOutcome.SUBMIT
        return ModeOutcome.KEEP


InputMode = Union[NormalMode, TextPrompt, Confirm]
