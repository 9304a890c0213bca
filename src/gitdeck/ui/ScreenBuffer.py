# gitdeck/ui/ScreenBuffer.py
"""ScreenBuffer.py
========================
An in-memory grid of styled cells. The renderer draws a whole frame into a
`ScreenBuffer`; `DrawScreen` then copies it to curses in one pass.

Widths are measured with `wcwidth`. A double-width glyph occupies its cell
and a continuation cell holding an empty string; a glyph that would straddle
the right clip edge is replaced by a space.
"""

from dataclasses import dataclass

from wcwidth import wcwidth


TAB_REPLACEMENT = "  "


@dataclass
class Cell:
    char: str = " "
    style: str = "normal"


def char_width(ch: str) -> int:
    w = wcwidth(ch)
    if w < 0:  # non-printable -> single cell
        return 1
    return w


def text_width(text: str) -> int:
    return sum(char_width(ch) for ch in text)


def truncate_string(s: str, max_width: int) -> str:
    """Return `s` clipped to visual width `max_width`."""
    result: list[str] = []
    consumed = 0
    for ch in s:
        w = char_width(ch)
        if consumed + w > max_width:
            break
        result.append(ch)
        consumed += w
    return "".join(result)


class ScreenBuffer:
    def __init__(self, height: int, width: int) -> None:
        self.height = max(0, height)
        self.width = max(0, width)
        self.cells: list[list[Cell]] = [
            [Cell() for _ in range(self.width)] for _ in range(self.height)
        ]

    def put(self, y: int, x: int, text: str, style: str = "normal", max_x: int = -1) -> int:
        """Writes `text` at ``(y, x)`` clipped at column `max_x` (exclusive).

        Returns the column after the last written cell.
        """
        limit = self.width if max_x < 0 else min(max_x, self.width)
        if not 0 <= y < self.height:
            return x
        text = text.replace("\t", TAB_REPLACEMENT)
        for ch in text:
            w = char_width(ch)
            if w == 0:
                continue
            if x + w > limit:
                if x < limit:
                    self.cells[y][x] = Cell(" ", style)
                    x += 1
                break
            if x >= 0:
                self.cells[y][x] = Cell(ch, style)
                if w == 2:
                    self.cells[y][x + 1] = Cell("", style)
            x += w
        return x

    def fill(self, y: int, x: int, width: int, style: str = "normal", char: str = " ") -> None:
        if not 0 <= y < self.height:
            return
        for col in range(max(0, x), min(self.width, x + width)):
            self.cells[y][col] = Cell(char, style)

    def row_text(self, y: int) -> str:
        return "".join(cell.char for cell in self.cells[y])

    def style_at(self, y: int, x: int) -> str:
        return self.cells[y][x].style

    def segments(self, y: int) -> list[tuple[int, str, str]]:
        """Runs of equally styled cells in row `y` as ``(x, text, style)``."""
        runs: list[tuple[int, str, str]] = []
        row = self.cells[y]
        start = 0
        while start < len(row):
            style = row[start].style
            end = start
            chars: list[str] = []
            while end < len(row) and row[end].style == style:
                chars.append(row[end].char)
                end += 1
            runs.append((start, "".join(chars), style))
            start = end
        return runs
