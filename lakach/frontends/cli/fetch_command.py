"""
Fetch Command

Headless mode: queue one or more remote folders and mirror them without the
curses UI, drawing a tqdm bar for the job in flight.
"""

import logging
import time
from typing import List, Optional

from tqdm import tqdm

from lakach.backend.models.download_job import JobStatus
from lakach.backend.services.download_service import DownloadService
from lakach.backend.services.folder_browser_service import FolderBrowser
from lakach.shared.colors import COLOR_ERROR, COLOR_INFO, COLOR_RESET, COLOR_SUCCESS

logger = logging.getLogger(__name__)


class FetchCommand:
    """Download a fixed list of remote folders, then exit."""

    def __init__(self, downloads: DownloadService, poll_interval: float = 0.1):
        self.downloads = downloads
        self.poll_interval = poll_interval

    def execute(self, browser: FolderBrowser, names: List[str]) -> int:
        """
        Queue each name below the browser's current path and wait for the queue to drain.

        Returns:
            int: 0 if every download completed, 1 otherwise
        """
        if not names:
            print(f"{COLOR_ERROR}Nothing to fetch{COLOR_RESET}")
            return 1

        print(f"{COLOR_INFO}Fetching {len(names)} folder(s) into {self.downloads.local_dest}{COLOR_RESET}")
        for name in names:
            remote = browser.remote_descriptor(name)
            job_id = self.downloads.queue_download(name, remote)
            logger.info(f"Queued #{job_id}: {remote}")

        try:
            self._wait_with_progress()
        except KeyboardInterrupt:
            print(f"\n{COLOR_ERROR}Interrupted, stopping rsync{COLOR_RESET}")
            self.downloads.shutdown()
            return 130

        return self._report()

    def _wait_with_progress(self):
        bar: Optional[tqdm] = None
        bar_job: Optional[int] = None

        while self.downloads.is_busy():
            running = [job for job in self.downloads.jobs() if job.status == JobStatus.RUNNING]
            current = running[0] if running else None

            if current is None or current.id != bar_job:
                if bar is not None:
                    bar.close()
                    bar = None
                if current is not None:
                    bar = tqdm(total=100, desc=current.name, unit="%",
                               bar_format="{desc}: {percentage:3.0f}%|{bar}| {postfix}")
                bar_job = current.id if current else None

            progress = self.downloads.active_progress()
            if bar is not None and progress is not None:
                bar.n = progress.percentage
                bar.set_postfix_str(f"{progress.speed} {progress.file_name}".strip(), refresh=False)
                bar.refresh()

            time.sleep(self.poll_interval)

        if bar is not None:
            # the channel is cleared before the bar sees 100%
            finished = self.downloads.queue.get(bar_job)
            if finished is not None and finished.status == JobStatus.COMPLETED:
                bar.n = 100
                bar.refresh()
            bar.close()

    def _report(self) -> int:
        self.downloads.refresh()
        failed = 0
        for job in self.downloads.jobs():
            if job.status == JobStatus.FAILED:
                failed += 1
                print(f"{COLOR_ERROR}{job.display_text}{COLOR_RESET}")
        for entry in self.downloads.history.entries():
            print(f"{COLOR_SUCCESS}Downloaded {entry.display_text}{COLOR_RESET}")
        return 1 if failed else 0
