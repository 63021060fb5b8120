"""
Curses drawing helpers and list selection state for the Lakach TUI.
"""

import curses
from typing import Optional

# Color pair ids
PAIR_CYAN = 1
PAIR_YELLOW = 2
PAIR_GREEN = 3
PAIR_RED = 4
PAIR_GRAY = 5
PAIR_GAUGE = 6


def init_colors():
    """Register the color pairs used by the UI (no-op on monochrome terminals)."""
    if not curses.has_colors():
        return
    curses.start_color()
    try:
        curses.use_default_colors()
        background = -1
    except curses.error:
        background = curses.COLOR_BLACK
    curses.init_pair(PAIR_CYAN, curses.COLOR_CYAN, background)
    curses.init_pair(PAIR_YELLOW, curses.COLOR_YELLOW, background)
    curses.init_pair(PAIR_GREEN, curses.COLOR_GREEN, background)
    curses.init_pair(PAIR_RED, curses.COLOR_RED, background)
    curses.init_pair(PAIR_GRAY, curses.COLOR_WHITE, background)
    curses.init_pair(PAIR_GAUGE, curses.COLOR_BLACK, curses.COLOR_CYAN)


def color(pair: int) -> int:
    if not curses.has_colors():
        return 0
    return curses.color_pair(pair)


class ListState:
    """Selected row and scroll offset of a list widget."""

    def __init__(self):
        self.selected: Optional[int] = None
        self.offset = 0

    def reset(self, length: int):
        """Select the first row, or nothing for an empty list."""
        self.selected = 0 if length else None
        self.offset = 0

    def clamp(self, length: int):
        """Keep the selection valid after the list shrank."""
        if length == 0:
            self.selected = None
        elif self.selected is None:
            self.selected = 0
        elif self.selected >= length:
            self.selected = length - 1

    def next(self, length: int):
        if length == 0:
            return
        if self.selected is None or self.selected >= length - 1:
            self.selected = 0
        else:
            self.selected += 1

    def previous(self, length: int):
        if length == 0:
            return
        if self.selected is None:
            self.selected = 0
        elif self.selected == 0:
            self.selected = length - 1
        else:
            self.selected -= 1

    def page_up(self, length: int, page_size: int):
        if length == 0:
            return
        self.selected = max((self.selected or 0) - page_size, 0)

    def page_down(self, length: int, page_size: int):
        if length == 0:
            return
        self.selected = min((self.selected or 0) + page_size, length - 1)

    def visible_range(self, length: int, height: int):
        """Rows to draw so the selection stays on screen."""
        if height <= 0:
            return range(0)
        if self.selected is not None:
            if self.selected < self.offset:
                self.offset = self.selected
            elif self.selected >= self.offset + height:
                self.offset = self.selected - height + 1
        self.offset = max(0, min(self.offset, max(length - height, 0)))
        return range(self.offset, min(self.offset + height, length))


def put(win, y: int, x: int, text: str, attr: int = 0, width: Optional[int] = None):
    """addstr that truncates to width and ignores writes off the screen edge."""
    if width is not None:
        if width <= 0:
            return
        text = text[:width]
    try:
        win.addstr(y, x, text, attr)
    except curses.error:
        pass


def draw_box(win, y: int, x: int, height: int, width: int, title: str = "", attr: int = 0):
    """Bordered rectangle with an optional title in the top edge."""
    if height < 2 or width < 2:
        return
    try:
        win.attron(attr)
        win.hline(y, x + 1, curses.ACS_HLINE, width - 2)
        win.hline(y + height - 1, x + 1, curses.ACS_HLINE, width - 2)
        win.vline(y + 1, x, curses.ACS_VLINE, height - 2)
        win.vline(y + 1, x + width - 1, curses.ACS_VLINE, height - 2)
        win.addch(y, x, curses.ACS_ULCORNER)
        win.addch(y, x + width - 1, curses.ACS_URCORNER)
        win.addch(y + height - 1, x, curses.ACS_LLCORNER)
        win.insch(y + height - 1, x + width - 1, curses.ACS_LRCORNER)
    except curses.error:
        pass
    finally:
        win.attroff(attr)
    if title:
        put(win, y, x + 1, title, attr | curses.A_BOLD, width - 2)


def draw_gauge(win, y: int, x: int, width: int, percent: int, label: str):
    """One-row progress bar with a centered label."""
    if width <= 0:
        return
    filled = width * max(0, min(percent, 100)) // 100
    text = label.center(width)[:width]
    put(win, y, x, text[:filled], color(PAIR_GAUGE) | curses.A_BOLD)
    put(win, y, x + filled, text[filled:], color(PAIR_CYAN))
