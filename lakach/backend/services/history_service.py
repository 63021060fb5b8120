"""
History Service

Session log of finished downloads. Completed jobs are promoted into it
from the live queue once per UI refresh.
"""

import logging
from typing import List, Optional

from lakach.backend.models.download_job import HistoryEntry
from lakach.backend.services.download_queue_service import DownloadQueue

logger = logging.getLogger(__name__)


class HistoryService:
    """Append-only (apart from user deletes) list of finished transfers. UI thread only."""

    def __init__(self):
        self._entries: List[HistoryEntry] = []

    def promote_from(self, queue: DownloadQueue) -> List[HistoryEntry]:
        """
        Move completed jobs out of the queue into the history.

        Returns:
            The newly added entries, oldest first
        """
        promoted = queue.promote_completed()
        if promoted:
            self._entries.extend(promoted)
            logger.debug(f"Moved {len(promoted)} completed download(s) to history")
        return promoted

    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def remove(self, index: int) -> Optional[HistoryEntry]:
        """Delete one entry. Returns it, or None if the index is out of range."""
        if 0 <= index < len(self._entries):
            return self._entries.pop(index)
        return None

    def clear(self) -> int:
        """Delete every entry and return how many there were."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)
