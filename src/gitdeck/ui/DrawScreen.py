# gitdeck/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen copies a rendered `ScreenBuffer` to the curses screen.

It is responsible for:
- initialising one colour pair per semantic style of the active theme,
- re-initialising those pairs when the theme changes,
- blitting styled runs of cells with `addstr`,
- double-buffered refresh (`noutrefresh` + `curses.doupdate`).

All curses errors are caught and logged per call so that a single bad write
(usually the bottom-right cell) never aborts a frame.
"""

import curses
import logging
from typing import TYPE_CHECKING

from gitdeck.ui.Renderer import render
from gitdeck.ui.ScreenBuffer import ScreenBuffer
from gitdeck.ui.Themes import STYLE_NAMES, STYLES, basic_color_name, get_theme
from gitdeck.utils.utils import hex_to_xterm


if TYPE_CHECKING:
    from gitdeck.core.Dashboard import Dashboard


logger = logging.getLogger("gitdeck")

BASIC_COLORS = {
    "black": curses.COLOR_BLACK,
    "red": curses.COLOR_RED,
    "green": curses.COLOR_GREEN,
    "yellow": curses.COLOR_YELLOW,
    "blue": curses.COLOR_BLUE,
    "magenta": curses.COLOR_MAGENTA,
    "cyan": curses.COLOR_CYAN,
    "white": curses.COLOR_WHITE,
}


class DrawScreen:
    """DrawScreen Class
    =========================
    Terminal output stage of the dashboard.

    Attributes:
        stdscr (curses.window): The main curses window object.
        dashboard (Dashboard): State being drawn.
        colors (dict[str, int]): Style name to curses attribute (colour pair plus bold).
        theme_name (str): Theme the colour pairs were last initialised for.

    Methods:
        draw(): Renders the dashboard and pushes the frame to the terminal.
        init_colors(theme_name): (Re)creates the colour pairs for a theme.
        blit(buffer): Writes every styled run of the buffer to `stdscr`.
    """

    def __init__(self, stdscr: "curses.window", dashboard: "Dashboard") -> None:
        self.stdscr = stdscr
        self.dashboard = dashboard
        self.colors: dict[str, int] = {}
        self.theme_name: str = ""
        self.init_colors(dashboard.theme_name)

    def init_colors(self, theme_name: str) -> None:
        """Creates colour pairs based on terminal capabilities.
        - 256-colour: palette hex values mapped to xterm indices.
        - 8/16-colour: nearest basic colour name.
        - No colour support: A_REVERSE for highlighted styles, A_NORMAL otherwise.
        """
        theme = get_theme(theme_name)
        self.theme_name = theme.name
        self.colors = {}

        try:
            curses.start_color()
            curses.use_default_colors()
        except curses.error:
            pass

        if not curses.has_colors():
            self._fallback_colors()
            return

        max_colors = curses.COLORS
        for pair_number, style in enumerate(STYLE_NAMES, start=1):
            fg_slot, bg_slot, bold = STYLES[style]
            if max_colors >= 256:
                fg_hex, bg_hex, _ = theme.colors(style)
                fg_idx = hex_to_xterm(fg_hex)
                bg_idx = hex_to_xterm(bg_hex) if bg_hex else -1
            else:
                fg_idx = BASIC_COLORS.get(basic_color_name(fg_slot), curses.COLOR_WHITE)
                bg_idx = BASIC_COLORS.get(basic_color_name(bg_slot), -1) if bg_slot else -1
            try:
                curses.init_pair(pair_number, fg_idx, bg_idx)
            except curses.error as exc:
                logger.warning(f"init_pair failed for {style} ({exc}), roll back to A_REVERSE")
                self._fallback_colors()
                return
            self.colors[style] = curses.color_pair(pair_number) | (curses.A_BOLD if bold else 0)
        logger.debug(f"Initialised {len(self.colors)} colour pairs for theme {theme.name}")

    def _fallback_colors(self) -> None:
        for style in STYLE_NAMES:
            _, bg_slot, bold = STYLES[style]
            attr = curses.A_REVERSE if bg_slot else curses.A_NORMAL
            self.colors[style] = attr | (curses.A_BOLD if bold else 0)

    def draw(self) -> None:
        """The main screen drawing method."""
        if self.dashboard.theme_name != self.theme_name:
            self.init_colors(self.dashboard.theme_name)
        try:
            height, width = self.stdscr.getmaxyx()
            buffer = render(self.dashboard, ScreenBuffer(height, width))
            self.stdscr.erase()
            self.blit(buffer)
            self._update_display()
        except curses.error as e:
            logger.error(f"Curses error in DrawScreen.draw(): {e}", exc_info=True)

    def blit(self, buffer: ScreenBuffer) -> None:
        for y in range(buffer.height):
            for x, text, style in buffer.segments(y):
                if not text.strip() and style == "normal":
                    continue
                try:
                    self.stdscr.addstr(y, x, text, self.colors.get(style, curses.A_NORMAL))
                except curses.error:
                    # Writing the bottom-right cell moves the cursor off-screen.
                    if y != buffer.height - 1:
                        logger.debug(f"addstr failed at ({y}, {x}) for style {style}")

    def _update_display(self) -> None:
        try:
            self.stdscr.noutrefresh()
            curses.doupdate()
        except curses.error as e:
            logger.error(f"Curses doupdate error: {e}")
