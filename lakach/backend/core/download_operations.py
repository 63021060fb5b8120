"""
Download Operations

The background side of Lakach: a worker that drains the download queue one
job at a time, runs rsync for each job, and publishes live progress parsed
from rsync's output for the UI to poll.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, IO, List, Optional, Tuple

from lakach.backend.handlers.progress_parser import RsyncProgressParser
from lakach.backend.handlers.subprocess_utils import ProcessManager, iter_stream_lines
from lakach.backend.models.download_job import DownloadJob, JobStatus, now_epoch
from lakach.backend.services.download_queue_service import DownloadQueue
from lakach.shared.progress_models import ProgressSnapshot

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_PREFIX = ["rsync", "-vrtzhP", "--info=progress2"]


class ProgressChannel:
    """
    Single-slot, last-writer-wins holder for the in-flight job's progress.

    Reader threads overwrite it, the UI thread reads it every frame. Only the
    newest value matters, so nothing is ever queued.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: Optional[ProgressSnapshot] = None

    def publish(self, snapshot: ProgressSnapshot):
        with self._lock:
            self._snapshot = snapshot

    def clear(self):
        with self._lock:
            self._snapshot = None

    def current(self) -> Optional[ProgressSnapshot]:
        with self._lock:
            return self._snapshot


class LocalDestination:
    """Download directory, changeable at runtime; read once per spawned job."""

    def __init__(self, path: str):
        self._lock = threading.Lock()
        self._path = str(path)

    def get(self) -> str:
        with self._lock:
            return self._path

    def set(self, path: str):
        with self._lock:
            self._path = str(path)
        logger.info(f"Download destination changed to: {path}")


def build_rsync_command(prefix: List[str], remote_path: str, local_dest: str) -> List[str]:
    """Full rsync invocation: <rsync> <flags> <host:path> <local_dest>."""
    return [*prefix, remote_path, local_dest]


class DownloadWorker:
    """
    Drains a DownloadQueue, one rsync process at a time.

    The queue calls start() when a job is enqueued and nobody is draining;
    the drain loop exits as soon as claim_next() finds the queue empty.
    """

    def __init__(self, queue: DownloadQueue, channel: ProgressChannel,
                 destination: LocalDestination,
                 command_prefix: Optional[Callable[[], List[str]]] = None,
                 process_factory: Callable[[List[str]], ProcessManager] = ProcessManager):
        """
        Args:
            queue: Jobs to drain
            channel: Where reader threads publish progress
            destination: Local directory; read when each process is spawned
            command_prefix: Returns the rsync executable plus flags
            process_factory: Starts a process for a command line
        """
        self.queue = queue
        self.channel = channel
        self.destination = destination
        self._command_prefix = command_prefix or (lambda: list(DEFAULT_COMMAND_PREFIX))
        self._process_factory = process_factory
        self._process_lock = threading.Lock()
        self._process: Optional[ProcessManager] = None
        self._thread: Optional[threading.Thread] = None
        self._stopping = threading.Event()

    def start(self) -> threading.Thread:
        """Run the drain loop on a new daemon thread."""
        thread = threading.Thread(target=self.drain, name="lakach-download-worker", daemon=True)
        self._thread = thread
        thread.start()
        return thread

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the current drain loop. Returns True once it has exited."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    @property
    def stopping(self) -> bool:
        return self._stopping.is_set()

    def drain(self):
        """Process queued jobs in FIFO order until none are left or shutdown begins."""
        logger.debug("Download worker started")
        while not self._stopping.is_set():
            job = self.queue.claim_next()
            if job is None:
                break

            try:
                success, reason = self.run_job(job)
            except Exception as e:
                logger.exception(f"Unexpected error while downloading {job.remote_path}")
                success, reason = False, f"internal error: {e}"
            finally:
                self.channel.clear()

            if self._stopping.is_set():
                # the job stays RUNNING; the process is exiting
                logger.info(f"Download #{job.id} interrupted by shutdown: {job.remote_path}")
                break

            if success:
                self.queue.transition(job.id, JobStatus.COMPLETED, now_epoch())
                logger.info(f"Download #{job.id} completed: {job.remote_path}")
            else:
                self.queue.transition(job.id, JobStatus.FAILED, now_epoch(), reason=reason)
                logger.warning(f"Download #{job.id} failed: {job.remote_path} ({reason})")
        logger.debug("Download worker stopped")

    def run_job(self, job: DownloadJob) -> Tuple[bool, Optional[str]]:
        """
        Mirror one job with rsync, streaming progress into the channel.

        Returns:
            (success, failure reason or None)
        """
        local_dest = self.destination.get()
        cmd = build_rsync_command(self._command_prefix(), job.remote_path, local_dest)
        logger.info(f"Starting download #{job.id}: {' '.join(cmd)}")

        try:
            Path(local_dest).expanduser().mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # rsync creates the final directory itself; it reports anything worse
            logger.debug(f"Could not pre-create {local_dest}: {e}")

        if self._stopping.is_set():
            return False, "shutting down"

        try:
            process = self._process_factory(cmd)
        except OSError as e:
            return False, f"failed to launch {cmd[0]}: {e.strerror or e}"

        with self._process_lock:
            self._process = process
            stop_now = self._stopping.is_set()
        if stop_now:
            process.terminate()

        readers = [
            self._start_reader(process.stdout, "stdout"),
            self._start_reader(process.stderr, "stderr"),
        ]
        try:
            returncode = process.wait()
        finally:
            for reader in readers:
                if reader is not None:
                    reader.join()
            process.close()
            with self._process_lock:
                self._process = None

        if returncode == 0:
            return True, None
        return False, f"{Path(cmd[0]).name} exited with code {returncode}"

    def _start_reader(self, stream: Optional[IO[bytes]], label: str) -> Optional[threading.Thread]:
        if stream is None:
            return None
        thread = threading.Thread(
            target=self._read_stream,
            args=(stream, label),
            name=f"lakach-{label}-reader",
            daemon=True,
        )
        thread.start()
        return thread

    def _read_stream(self, stream: IO[bytes], label: str):
        """Feed one pipe through its own parser until end-of-stream."""
        parser = RsyncProgressParser()
        for line in iter_stream_lines(stream):
            snapshot = parser.parse_line(line)
            if snapshot is not None:
                self.channel.publish(snapshot)
            elif line.strip():
                logger.debug(f"rsync {label}: {line.strip()}")

    def terminate_active(self):
        """
        Stop the drain loop and the rsync process tree of the job in flight (used on quit).

        After this no job is ever claimed again, and the interrupted job keeps
        its RUNNING status.
        """
        with self._process_lock:
            self._stopping.set()
            process = self._process
        if process is not None:
            logger.info("Terminating running rsync before exit")
            process.terminate()
