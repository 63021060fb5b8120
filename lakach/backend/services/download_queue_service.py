"""
Download Queue Service

Thread-safe, FIFO queue of download jobs shared between the UI thread
(which enqueues and promotes) and the download worker (which claims jobs
and records their outcome).
"""

import itertools
import logging
import threading
from typing import Callable, Dict, List, Optional

from lakach.backend.models.download_job import (
    ALLOWED_TRANSITIONS,
    DownloadJob,
    HistoryEntry,
    JobStatus,
    now_epoch,
)

logger = logging.getLogger(__name__)


class DownloadQueue:
    """
    Ordered collection of download jobs guarded by a single lock.

    The queue also owns the "a drain loop is alive" flag. It is raised in
    the same critical section as the enqueue that needs a worker, and only
    lowered by claim_next() when it finds nothing left to do, so at most
    one worker ever drains the queue.

    Callers only ever receive copies of jobs; the live records never leave
    the lock.
    """

    def __init__(self, on_activate: Optional[Callable[[], None]] = None):
        """
        Args:
            on_activate: Called (outside the lock) whenever an enqueue finds
                no worker draining. Must start one.
        """
        self._lock = threading.Lock()
        self._jobs: List[DownloadJob] = []
        self._ids = itertools.count(1)
        self._draining = False
        self._on_activate = on_activate

    def set_activator(self, on_activate: Optional[Callable[[], None]]):
        with self._lock:
            self._on_activate = on_activate

    @property
    def is_draining(self) -> bool:
        with self._lock:
            return self._draining

    def enqueue(self, name: str, remote_path: str) -> int:
        """
        Append a new QUEUED job and wake the worker if it is idle.

        Returns:
            int: The new job's id
        """
        with self._lock:
            job_id = next(self._ids)
            self._jobs.append(DownloadJob(id=job_id, name=name, remote_path=remote_path))
            activate = None
            if self._on_activate is not None and not self._draining:
                self._draining = True
                activate = self._on_activate

        logger.info(f"Queued download #{job_id}: {remote_path}")
        if activate is not None:
            try:
                activate()
            except Exception:
                with self._lock:
                    self._draining = False
                raise
        return job_id

    def find_next_queued(self) -> Optional[DownloadJob]:
        """Return a copy of the oldest QUEUED job, or None."""
        with self._lock:
            job = self._first_queued()
            return job.copy() if job else None

    def claim_next(self) -> Optional[DownloadJob]:
        """
        Take the oldest QUEUED job and mark it RUNNING.

        When nothing is queued the drain flag is lowered in the same critical
        section, so a concurrent enqueue either lands before the check (and
        is claimed) or after it (and starts a new worker).

        Returns:
            Copy of the claimed job, or None when the queue is drained
        """
        with self._lock:
            job = self._first_queued()
            if job is None:
                self._draining = False
                return None
            job.status = JobStatus.RUNNING
            job.started_at = now_epoch()
            return job.copy()

    def transition(self, job_id: int, status: JobStatus,
                   timestamp: Optional[int] = None, reason: Optional[str] = None) -> bool:
        """
        Move a job to a new status, looked up by id.

        Args:
            job_id: Job to update
            status: New status; must be a forward move from the current one
            timestamp: Epoch seconds for started_at/completed_at (default: now)
            reason: Short failure reason, for FAILED

        Returns:
            bool: False if the id is unknown or the move is not allowed
        """
        when = timestamp if timestamp is not None else now_epoch()
        with self._lock:
            job = self._find(job_id)
            if job is None:
                logger.warning(f"Ignoring {status.value} for unknown download #{job_id}")
                return False
            if status not in ALLOWED_TRANSITIONS[job.status]:
                logger.warning(f"Ignoring {job.status.value} -> {status.value} for download #{job_id}")
                return False

            job.status = status
            if status == JobStatus.RUNNING:
                job.started_at = when
            elif status.is_finished:
                job.completed_at = when
                if status == JobStatus.FAILED:
                    job.failure_reason = reason or "unknown error"

        logger.debug(f"Download #{job_id} is now {status.value}")
        return True

    def promote_completed(self) -> List[HistoryEntry]:
        """
        Remove every COMPLETED job and return a history entry for each,
        oldest first. QUEUED, RUNNING and FAILED jobs stay put.
        """
        with self._lock:
            completed = [job for job in self._jobs if job.status == JobStatus.COMPLETED]
            if not completed:
                return []
            self._jobs = [job for job in self._jobs if job.status != JobStatus.COMPLETED]

        return [HistoryEntry.from_job(job) for job in completed]

    def snapshot(self) -> List[DownloadJob]:
        """Copies of all jobs, in queue order."""
        with self._lock:
            return [job.copy() for job in self._jobs]

    def get(self, job_id: int) -> Optional[DownloadJob]:
        with self._lock:
            job = self._find(job_id)
            return job.copy() if job else None

    def counts(self) -> Dict[str, int]:
        """Number of jobs per state plus the total, for the title bar."""
        with self._lock:
            result = {status.value: 0 for status in JobStatus}
            for job in self._jobs:
                result[job.status.value] += 1
            result["total"] = len(self._jobs)
            return result

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def _first_queued(self) -> Optional[DownloadJob]:
        for job in self._jobs:
            if job.status == JobStatus.QUEUED:
                return job
        return None

    def _find(self, job_id: int) -> Optional[DownloadJob]:
        for job in self._jobs:
            if job.id == job_id:
                return job
        return None
