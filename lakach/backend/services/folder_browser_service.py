"""
Folder Browser Service

Navigation state for the remote directory browser: where we are, what is
listed there, and the active fuzzy filter.
"""

import logging
from typing import Callable, List, Optional

from lakach.backend.handlers.remote_listing_handler import list_children
from lakach.shared.fuzzy import fuzzy_filter

logger = logging.getLogger(__name__)


def parent_path(path: str, base_path: str) -> str:
    """Drop the last segment of path; fall back to base_path at the top."""
    head, sep, _ = path.rpartition("/")
    return head if sep else base_path


class FolderBrowser:
    """
    Remote folder navigation.

    Listing errors propagate as RemoteListingError; enter() restores the
    previous location before re-raising so the browser never points at a
    directory it could not list.
    """

    def __init__(self, host: str, base_path: str = "",
                 lister: Optional[Callable[[str, str], List[str]]] = None):
        self.host = host
        self.base_path = base_path
        self.current_path = base_path
        self._lister = lister or list_children
        self.all_folders: List[str] = []
        self.folders: List[str] = []
        self.filter_query = ""

    @property
    def location(self) -> str:
        """host:path as shown in the title bar ('~' for the remote home)."""
        return f"{self.host}:{self.current_path or '~'}"

    @property
    def at_base(self) -> bool:
        return self.current_path == self.base_path

    def refresh(self) -> List[str]:
        """Re-list the current path and clear the filter."""
        names = self._lister(self.host, self.current_path)
        self.all_folders = sorted(names, key=str.lower)
        self.filter_query = ""
        self.folders = list(self.all_folders)
        logger.debug(f"Listed {len(self.folders)} folders at {self.location}")
        return self.folders

    def full_path(self, name: str) -> str:
        """Remote path of a child of the current directory."""
        return f"{self.current_path}/{name}" if self.current_path else name

    def remote_descriptor(self, name: str) -> str:
        """host:path for a child folder, as handed to rsync."""
        return f"{self.host}:{self.full_path(name)}"

    def enter(self, name: str) -> List[str]:
        """Descend into a child folder."""
        previous = self.current_path
        self.current_path = self.full_path(name)
        try:
            return self.refresh()
        except Exception:
            self.current_path = previous
            raise

    def go_back(self) -> bool:
        """
        Go up one level.

        Returns:
            bool: False if already at the base path (nothing changes)
        """
        if self.at_base:
            return False
        self.current_path = parent_path(self.current_path, self.base_path)
        self.refresh()
        return True

    def set_filter(self, query: str) -> List[str]:
        """Apply a fuzzy filter to the listing; empty clears it."""
        self.filter_query = query
        self.folders = fuzzy_filter(self.all_folders, query)
        return self.folders
