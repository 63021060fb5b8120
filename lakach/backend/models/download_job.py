"""
Download Data Models

Data structures for queued downloads and the session's download history.
"""

import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Dict, Any


class JobStatus(Enum):
    """Lifecycle of a download: QUEUED -> RUNNING -> COMPLETED | FAILED."""
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_finished(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


# Statuses each state may move to
ALLOWED_TRANSITIONS = {
    JobStatus.QUEUED: {JobStatus.RUNNING},
    JobStatus.RUNNING: {JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
}


def now_epoch() -> int:
    """Current wall clock time in whole seconds since the epoch."""
    return int(time.time())


@dataclass
class DownloadJob:
    """One requested mirror of a remote folder."""
    id: int
    name: str  # Leaf folder name, for display
    remote_path: str  # host:path handed to rsync
    status: JobStatus = JobStatus.QUEUED
    failure_reason: Optional[str] = None
    started_at: Optional[int] = None
    completed_at: Optional[int] = None

    @property
    def status_text(self) -> str:
        """Get status text for the downloads list."""
        if self.status == JobStatus.QUEUED:
            return "Queued"
        if self.status == JobStatus.RUNNING:
            return "Downloading..."
        if self.status == JobStatus.COMPLETED:
            return "Completed"
        return f"Failed: {self.failure_reason or 'unknown error'}"

    @property
    def display_text(self) -> str:
        return f"{self.name} - {self.status_text}"

    def copy(self) -> "DownloadJob":
        """Detached copy safe to hand out of the queue lock."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'remote_path': self.remote_path,
            'status': self.status.value,
            'failure_reason': self.failure_reason,
            'started_at': self.started_at,
            'completed_at': self.completed_at,
        }


@dataclass(frozen=True)
class HistoryEntry:
    """A finished transfer, kept for the rest of the session."""
    name: str
    remote_path: str
    downloaded_at: int

    @property
    def display_text(self) -> str:
        return f"{self.name} ({self.remote_path})"

    @classmethod
    def from_job(cls, job: DownloadJob) -> "HistoryEntry":
        """Create from a completed job."""
        return cls(
            name=job.name,
            remote_path=job.remote_path,
            downloaded_at=job.completed_at if job.completed_at is not None else now_epoch(),
        )
