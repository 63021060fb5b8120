#!/usr/bin/env python3
"""
Lakach TUI

Full-screen curses interface with three tabs: a remote folder browser, the
download queue, and the session history. The loop polls the keyboard with a
short timeout and redraws every tick, reading download progress from the
backend without ever blocking on it.
"""

import curses
import locale
import logging
import os
from enum import Enum
from typing import Optional

from lakach.backend.exceptions import RemoteListingError
from lakach.backend.models.download_job import JobStatus
from lakach.backend.services.download_service import DownloadService
from lakach.backend.services.folder_browser_service import FolderBrowser
from lakach.frontends.tui.widgets import (
    ListState,
    PAIR_CYAN,
    PAIR_GRAY,
    PAIR_GREEN,
    PAIR_RED,
    PAIR_YELLOW,
    color,
    draw_box,
    draw_gauge,
    init_colors,
    put,
)

logger = logging.getLogger(__name__)

KEY_TAB = 9
KEY_ESC = 27
ENTER_KEYS = (10, 13, curses.KEY_ENTER)
BACKSPACE_KEYS = (8, 127, curses.KEY_BACKSPACE)
LEGEND_WIDTH = 20


class Tab(Enum):
    BROWSER = "Browser"
    DOWNLOADS = "Downloads"
    HISTORY = "History"


TAB_ORDER = [Tab.BROWSER, Tab.DOWNLOADS, Tab.HISTORY]


class InputMode(Enum):
    NORMAL = "normal"
    EDITING_PATH = "editing_path"
    FILTERING = "filtering"


LEGENDS = {
    Tab.BROWSER: [
        "j/k: Navigate", "↑/↓: Navigate", "PgUp/Dn: Page", "Enter: Open",
        "Bksp: Back", "/: Filter", "d: Download", "T: Change dest",
        "Tab: Switch tab", "q: Quit",
    ],
    Tab.DOWNLOADS: [
        "j/k: Navigate", "↑/↓: Navigate", "PgUp/Dn: Page", "Tab: Switch tab", "q: Quit",
    ],
    Tab.HISTORY: [
        "j/k: Navigate", "↑/↓: Navigate", "PgUp/Dn: Page", "x: Clear item",
        "X: Clear all", "Tab: Switch tab", "q: Quit",
    ],
}

STATUS_COLORS = {
    JobStatus.QUEUED: PAIR_YELLOW,
    JobStatus.RUNNING: PAIR_CYAN,
    JobStatus.COMPLETED: PAIR_GREEN,
    JobStatus.FAILED: PAIR_RED,
}


class LakachTUI:
    """
    Application state and key handling.

    handle_key() holds all behaviour and needs no terminal; run() adds the
    curses loop around it.
    """

    def __init__(self, browser: FolderBrowser, downloads: DownloadService,
                 page_size: int = 10, refresh_interval: float = 0.1):
        self.browser = browser
        self.downloads = downloads
        self.page_size = page_size
        self.refresh_interval = refresh_interval

        self.current_tab = Tab.BROWSER
        self.input_mode = InputMode.NORMAL
        self.input_buffer = ""
        self.saved_filter_query = ""
        self.status_message = ""
        self.running = True

        self.list_states = {tab: ListState() for tab in TAB_ORDER}
        self.list_states[Tab.BROWSER].reset(len(self.browser.folders))

    # ------------------------------------------------------------------
    # Tabs & lists
    # ------------------------------------------------------------------

    def _list_length(self, tab: Tab) -> int:
        if tab == Tab.BROWSER:
            return len(self.browser.folders)
        if tab == Tab.DOWNLOADS:
            return len(self.downloads.queue)
        return len(self.downloads.history)

    @property
    def _state(self) -> ListState:
        return self.list_states[self.current_tab]

    def next_tab(self):
        self.current_tab = TAB_ORDER[(TAB_ORDER.index(self.current_tab) + 1) % len(TAB_ORDER)]

    def prev_tab(self):
        self.current_tab = TAB_ORDER[(TAB_ORDER.index(self.current_tab) - 1) % len(TAB_ORDER)]

    def next(self):
        self._state.next(self._list_length(self.current_tab))

    def previous(self):
        self._state.previous(self._list_length(self.current_tab))

    def page_up(self):
        self._state.page_up(self._list_length(self.current_tab), self.page_size)

    def page_down(self):
        self._state.page_down(self._list_length(self.current_tab), self.page_size)

    def _selected_folder(self) -> Optional[str]:
        index = self.list_states[Tab.BROWSER].selected
        if index is None or index >= len(self.browser.folders):
            return None
        return self.browser.folders[index]

    # ------------------------------------------------------------------
    # Browser actions
    # ------------------------------------------------------------------

    def enter_folder(self):
        if self.current_tab != Tab.BROWSER:
            return
        folder = self._selected_folder()
        if folder is None:
            return
        try:
            self.browser.enter(folder)
        except RemoteListingError as e:
            self.status_message = f"Error entering folder: {e}"
            return
        self.list_states[Tab.BROWSER].reset(len(self.browser.folders))
        self.status_message = f"Entered: {folder}"

    def go_back(self):
        if self.current_tab != Tab.BROWSER:
            return
        try:
            moved = self.browser.go_back()
        except RemoteListingError as e:
            self.status_message = f"Error going back: {e}"
            return
        if not moved:
            self.status_message = "Already at base path"
            return
        self.list_states[Tab.BROWSER].reset(len(self.browser.folders))
        self.status_message = "Went back"

    def queue_download(self):
        if self.current_tab != Tab.BROWSER:
            return
        folder = self._selected_folder()
        if folder is None:
            return
        self.downloads.queue_download(folder, self.browser.remote_descriptor(folder))
        self.status_message = f"Queued: {folder}"

    # ------------------------------------------------------------------
    # Filter & destination input
    # ------------------------------------------------------------------

    def start_filtering(self):
        if self.current_tab != Tab.BROWSER:
            return
        self.saved_filter_query = self.browser.filter_query
        self.input_mode = InputMode.FILTERING
        self.input_buffer = self.browser.filter_query
        self.status_message = "Filter (Enter: confirm, Esc: cancel)"

    def _apply_filter(self, query: str):
        self.browser.set_filter(query)
        self.list_states[Tab.BROWSER].reset(len(self.browser.folders))

    def confirm_filter(self):
        self.input_mode = InputMode.NORMAL
        self.input_buffer = ""
        if self.browser.filter_query:
            self.status_message = f"Filter: {self.browser.filter_query} ({len(self.browser.folders)} results)"
        else:
            self.status_message = "Filter cleared"

    def cancel_filter(self):
        self._apply_filter(self.saved_filter_query)
        self.input_mode = InputMode.NORMAL
        self.input_buffer = ""
        if self.browser.filter_query:
            self.status_message = f"Filter restored: {self.browser.filter_query} ({len(self.browser.folders)} results)"
        else:
            self.status_message = "Filter cancelled"

    def start_editing_path(self):
        self.input_mode = InputMode.EDITING_PATH
        self.input_buffer = self.downloads.local_dest
        self.status_message = "Editing download destination (Enter: save, Esc: cancel)"

    def confirm_path_change(self):
        if self.input_buffer:
            self.downloads.set_local_dest(self.input_buffer)
            self.status_message = f"Download destination changed to: {self.downloads.local_dest}"
        self.input_mode = InputMode.NORMAL
        self.input_buffer = ""

    def cancel_input(self):
        self.input_mode = InputMode.NORMAL
        self.input_buffer = ""
        self.status_message = "Cancelled"

    def handle_input_char(self, ch: str):
        self.input_buffer += ch
        if self.input_mode == InputMode.FILTERING:
            self._apply_filter(self.input_buffer)

    def handle_input_backspace(self):
        self.input_buffer = self.input_buffer[:-1]
        if self.input_mode == InputMode.FILTERING:
            self._apply_filter(self.input_buffer)

    # ------------------------------------------------------------------
    # History actions
    # ------------------------------------------------------------------

    def clear_history_item(self):
        if self.current_tab != Tab.HISTORY:
            return
        state = self.list_states[Tab.HISTORY]
        if state.selected is None:
            return
        removed = self.downloads.history.remove(state.selected)
        if removed is not None:
            self.status_message = f"Removed: {removed.name}"
        state.clamp(len(self.downloads.history))

    def clear_all_history(self):
        if self.current_tab != Tab.HISTORY:
            return
        count = self.downloads.history.clear()
        self.list_states[Tab.HISTORY].selected = None
        self.status_message = f"Cleared {count} history items"

    # ------------------------------------------------------------------
    # Key dispatch
    # ------------------------------------------------------------------

    def handle_key(self, key):
        """Dispatch one key from get_wch(): a str for characters, an int for special keys."""
        code = ord(key) if isinstance(key, str) and len(key) == 1 else key

        if self.input_mode == InputMode.NORMAL:
            self._handle_normal_key(key, code)
        else:
            self._handle_input_key(key, code)

    def _handle_normal_key(self, key, code):
        if key == "q":
            self.running = False
        elif key == "T":
            self.start_editing_path()
        elif code == KEY_TAB:
            self.next_tab()
        elif code == curses.KEY_BTAB:
            self.prev_tab()
        elif key == "/":
            self.start_filtering()
        elif key == "d":
            self.queue_download()
        elif key == "x":
            self.clear_history_item()
        elif key == "X":
            self.clear_all_history()
        elif code in ENTER_KEYS:
            self.enter_folder()
        elif code in BACKSPACE_KEYS:
            self.go_back()
        elif key == "j" or code == curses.KEY_DOWN:
            self.next()
        elif key == "k" or code == curses.KEY_UP:
            self.previous()
        elif code == curses.KEY_PPAGE:
            self.page_up()
        elif code == curses.KEY_NPAGE:
            self.page_down()

    def _handle_input_key(self, key, code):
        if code in ENTER_KEYS:
            if self.input_mode == InputMode.FILTERING:
                self.confirm_filter()
            else:
                self.confirm_path_change()
        elif code == KEY_ESC:
            if self.input_mode == InputMode.FILTERING:
                self.cancel_filter()
            else:
                self.cancel_input()
        elif code in BACKSPACE_KEYS:
            self.handle_input_backspace()
        elif isinstance(key, str) and key.isprintable():
            self.handle_input_char(key)

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    def tick(self):
        """Per-frame housekeeping done before drawing."""
        self.downloads.refresh()
        self.list_states[Tab.DOWNLOADS].clamp(len(self.downloads.queue))

    def title_text(self) -> str:
        if self.current_tab == Tab.BROWSER:
            if self.browser.filter_query:
                return f"{self.browser.location} | Filter: {self.browser.filter_query}"
            return self.browser.location
        if self.current_tab == Tab.DOWNLOADS:
            counts = self.downloads.counts()
            return (f"Active: {counts['running']} | Queued: {counts['queued']} | "
                    f"Total: {counts['total']}")
        return f"Downloaded this session: {len(self.downloads.history)}"

    def draw(self, stdscr):
        stdscr.erase()
        height, width = stdscr.getmaxyx()
        if height < 14 or width < 40:
            put(stdscr, 0, 0, "Terminal too small", color(PAIR_RED), width)
            stdscr.refresh()
            return

        self._draw_tabs(stdscr, 0, width)
        draw_box(stdscr, 3, 0, 3, width)
        put(stdscr, 4, 1, self.title_text(), color(PAIR_CYAN), width - 2)

        bottom_height = 4
        main_height = height - 6 - bottom_height
        list_width = width - LEGEND_WIDTH
        self._draw_list(stdscr, 6, 0, main_height, list_width)
        self._draw_legend(stdscr, 6, list_width, main_height, LEGEND_WIDTH)
        self._draw_bottom(stdscr, height - bottom_height, width, bottom_height)
        stdscr.refresh()

    def _draw_tabs(self, stdscr, y, width):
        draw_box(stdscr, y, 0, 3, width, "Lakach")
        x = 2
        for index, tab in enumerate(TAB_ORDER):
            if index:
                put(stdscr, y + 1, x, " | ", color(PAIR_GRAY))
                x += 3
            attr = color(PAIR_CYAN) | curses.A_BOLD if tab == self.current_tab else color(PAIR_GRAY)
            put(stdscr, y + 1, x, tab.value, attr, width - x - 1)
            x += len(tab.value)

    def _list_items(self):
        if self.current_tab == Tab.BROWSER:
            return "Folders", [(name, 0) for name in self.browser.folders]
        if self.current_tab == Tab.DOWNLOADS:
            return "Downloads", [
                (job.display_text, color(STATUS_COLORS[job.status]))
                for job in self.downloads.jobs()
            ]
        return "History", [(entry.display_text, 0) for entry in self.downloads.history.entries()]

    def _draw_list(self, stdscr, y, x, height, width):
        title, items = self._list_items()
        draw_box(stdscr, y, x, height, width, title)
        state = self._state
        state.clamp(len(items))
        inner_width = width - 2
        for row, index in enumerate(state.visible_range(len(items), height - 2)):
            text, attr = items[index]
            if index == state.selected:
                put(stdscr, y + 1 + row, x + 1, f">> {text}".ljust(inner_width),
                    attr | curses.A_BOLD | curses.A_REVERSE, inner_width)
            else:
                put(stdscr, y + 1 + row, x + 1, f"   {text}", attr, inner_width)

    def _draw_legend(self, stdscr, y, x, height, width):
        draw_box(stdscr, y, x, height, width, "Keys")
        for row, text in enumerate(LEGENDS[self.current_tab][:max(height - 2, 0)]):
            put(stdscr, y + 1 + row, x + 1, text, color(PAIR_GRAY), width - 2)

    def _draw_bottom(self, stdscr, y, width, height):
        if self.input_mode != InputMode.NORMAL:
            if self.input_mode == InputMode.EDITING_PATH:
                title = "Download Destination (Enter: save, Esc: cancel)"
            else:
                title = "Filter (Enter: confirm, Esc: cancel)"
            draw_box(stdscr, y, 0, height, width, title)
            put(stdscr, y + 1, 1, self.input_buffer + "_", 0, width - 2)
            return

        half = width // 2
        draw_box(stdscr, y, 0, height, half, "Status")
        put(stdscr, y + 1, 1, self.status_message, color(PAIR_YELLOW), half - 2)

        draw_box(stdscr, y, half, height, width - half, "Active Download")
        progress = self.downloads.active_progress()
        if progress is not None:
            inner = width - half - 2
            put(stdscr, y + 1, half + 1, progress.file_name, color(PAIR_CYAN), inner)
            draw_gauge(stdscr, y + 2, half + 1, inner, progress.percentage, progress.gauge_label)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self, stdscr):
        """curses.wrapper target: redraw, then wait up to one tick for a key."""
        init_colors()
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        stdscr.keypad(True)
        stdscr.timeout(int(self.refresh_interval * 1000))

        while self.running:
            self.tick()
            self.draw(stdscr)
            try:
                key = stdscr.get_wch()
            except curses.error:
                continue
            if key == curses.KEY_RESIZE:
                continue
            self.handle_key(key)


def run_tui(browser: FolderBrowser, downloads: DownloadService, page_size: int = 10,
            refresh_interval: float = 0.1) -> int:
    """Run the TUI until the user quits. Stops any running rsync on the way out."""
    locale.setlocale(locale.LC_ALL, "")
    os.environ.setdefault("ESCDELAY", "25")
    app = LakachTUI(browser, downloads, page_size=page_size, refresh_interval=refresh_interval)
    try:
        curses.wrapper(app.run)
    finally:
        downloads.shutdown()
    return 0
