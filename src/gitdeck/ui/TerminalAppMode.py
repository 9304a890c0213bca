# gitdeck/ui/TerminalAppMode.py
from __future__ import annotations

import curses
import logging
from typing import Optional


logger = logging.getLogger("gitdeck")

MOUSE_EVENTS = curses.ALL_MOUSE_EVENTS | curses.REPORT_MOUSE_POSITION


class TerminalAppMode:
    """
    Put the terminal into the state the dashboard expects:

    - Alternate screen buffer (smcup/rmcup) so the shell prompt is hidden.
    - Application cursor keys (smkx/rmkx).
    - raw + noecho (cbreak fallback), keypad(True), hidden cursor.
    - Mouse reporting for clicks and the wheel, with click resolution disabled
      so releases arrive immediately.

    Always pair `enter(stdscr)` with `exit()` (try/finally).
    """

    def __init__(self) -> None:
        self._entered: bool = False
        self._stdscr: Optional[curses.window] = None
        self._old_mousemask: int = 0
        self._old_cursor: Optional[int] = None

    def enter(self, stdscr: curses.window) -> None:
        self._stdscr = stdscr

        self._tputs("smcup")
        self._tputs("smkx")

        try:
            curses.raw()
        except curses.error:
            curses.cbreak()
        curses.noecho()
        stdscr.keypad(True)

        try:
            self._old_cursor = curses.curs_set(0)
        except curses.error:
            self._old_cursor = None

        try:
            _, self._old_mousemask = curses.mousemask(MOUSE_EVENTS)
            curses.mouseinterval(0)
        except curses.error as e:
            logger.debug("Mouse reporting unavailable: %r", e)

        stdscr.scrollok(False)
        stdscr.leaveok(True)
        stdscr.clearok(True)
        stdscr.erase()
        stdscr.refresh()

        self._entered = True
        logger.debug("TerminalAppMode: entered (alternate screen + mouse reporting).")

    def exit(self) -> None:
        if not self._entered:
            return

        try:
            curses.mousemask(self._old_mousemask)
        except curses.error:
            pass
        if self._old_cursor is not None:
            try:
                curses.curs_set(self._old_cursor)
            except curses.error:
                pass
        if self._stdscr is not None:
            try:
                self._stdscr.keypad(False)
            except curses.error:
                pass

        try:
            curses.noraw()
        except curses.error:
            curses.nocbreak()
        curses.echo()

        self._tputs("rmkx")
        self._tputs("rmcup")

        self._entered = False
        logger.debug("TerminalAppMode: exited (restored terminal modes).")

    # ── helpers ───────────────────────────────────────────────────────────────

    def _tputs(self, capname: str) -> None:
        try:
            s = curses.tigetstr(capname)
            if s:
                curses.putp(s)
        except curses.error as e:
            # Capability missing (linux console, dumb terminals).
            logger.debug("tputs(%s) skipped: %r", capname, e)
