#!/usr/bin/env python3
"""
Download Service

Wires the queue, worker, progress channel and history together behind the
handful of calls the frontends need.
"""

import logging
from typing import Callable, Dict, List, Optional

from lakach.backend.core.download_operations import (
    DownloadWorker,
    LocalDestination,
    ProgressChannel,
)
from lakach.backend.handlers.config_handler import ConfigHandler
from lakach.backend.handlers.subprocess_utils import ProcessManager
from lakach.backend.models.download_job import DownloadJob, HistoryEntry
from lakach.backend.services.download_queue_service import DownloadQueue
from lakach.backend.services.history_service import HistoryService
from lakach.shared.progress_models import ProgressSnapshot

logger = logging.getLogger(__name__)


class DownloadService:
    """
    Service facade over the download engine.

    The UI thread calls queue_download() and, once per frame, refresh() and
    active_progress(); everything blocking happens on the worker thread.
    """

    def __init__(self, local_dest: str, config_handler: Optional[ConfigHandler] = None,
                 process_factory: Callable[[List[str]], ProcessManager] = ProcessManager):
        self.config_handler = config_handler or ConfigHandler()
        self.destination = LocalDestination(local_dest)
        self.channel = ProgressChannel()
        self.queue = DownloadQueue()
        self.history = HistoryService()
        self.worker = DownloadWorker(
            self.queue,
            self.channel,
            self.destination,
            command_prefix=self.config_handler.get_rsync_command_prefix,
            process_factory=process_factory,
        )
        self.queue.set_activator(self.worker.start)

    @property
    def local_dest(self) -> str:
        return self.destination.get()

    def set_local_dest(self, path: str, remember: bool = True):
        """Change where future downloads go; the one in flight is unaffected."""
        self.destination.set(path)
        if remember:
            self.config_handler.set_last_local_dest(path)

    def queue_download(self, name: str, remote_path: str) -> int:
        """Queue a remote folder (host:path) for download. Returns the job id."""
        return self.queue.enqueue(name, remote_path)

    def refresh(self) -> List[HistoryEntry]:
        """Per-frame housekeeping: promote completed jobs into history."""
        return self.history.promote_from(self.queue)

    def active_progress(self) -> Optional[ProgressSnapshot]:
        return self.channel.current()

    def jobs(self) -> List[DownloadJob]:
        return self.queue.snapshot()

    def counts(self) -> Dict[str, int]:
        return self.queue.counts()

    def is_busy(self) -> bool:
        """True while a drain loop is alive."""
        return self.queue.is_draining

    def shutdown(self):
        """Stop any rsync still running; called when the user quits."""
        self.worker.terminate_active()
