import logging
import os
import subprocess
from typing import IO, Iterator, List, Optional

import psutil

logger = logging.getLogger(__name__)


def get_clean_subprocess_env(extra_env=None):
    """
    Returns a copy of os.environ with bundled-runtime variables removed.
    extra_env, if given, is applied last.
    Ensures the usual system directories are on PATH so rsync and ssh resolve
    even when Lakach is launched from a stripped-down environment.
    """
    env = os.environ.copy()

    # AppImage launcher state must not leak into rsync or ssh
    for key in ['APPIMAGE', 'APPDIR', 'ARGV0', 'OWD']:
        env.pop(key, None)

    # PyInstaller unpack dirs
    for k in list(env):
        if k.startswith('_MEIPASS'):
            del env[k]

    path_parts = [p for p in env.get('PATH', '').split(os.pathsep) if p]
    for sys_path in ['/usr/local/bin', '/usr/bin', '/bin']:
        if sys_path not in path_parts and os.path.isdir(sys_path):
            path_parts.append(sys_path)
    env['PATH'] = os.pathsep.join(path_parts)

    if extra_env:
        env.update(extra_env)
    return env


def iter_stream_lines(stream: IO[bytes], encoding: str = 'utf-8') -> Iterator[str]:
    """
    Yield decoded lines from a binary pipe until end-of-stream.

    Both '\\n' and '\\r' end a line: rsync redraws its progress line in place
    with carriage returns and only emits a newline once a file finishes.
    A read error ends the stream quietly.
    """
    buffer = b''
    while True:
        try:
            chunk = stream.read(1)
        except (OSError, ValueError) as e:
            logger.debug(f"Stream read ended with error: {e}")
            break
        if not chunk:
            break
        if chunk in (b'\n', b'\r'):
            yield buffer.decode(encoding, errors='replace')
            buffer = b''
        else:
            buffer += chunk

    if buffer:
        yield buffer.decode(encoding, errors='replace')


def child_processes(pid: int) -> List[psutil.Process]:
    """Every descendant of pid (rsync's ssh transport and its helpers)."""
    try:
        return psutil.Process(pid).children(recursive=True)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return []


def terminate_processes(procs: List[psutil.Process], timeout: float = 3.0) -> None:
    """SIGTERM each process, then SIGKILL whatever is still alive after timeout."""
    for proc in procs:
        try:
            proc.terminate()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

    _, alive = psutil.wait_procs(procs, timeout=timeout)
    for proc in alive:
        try:
            logger.warning(f"Process {proc.pid} ignored SIGTERM, killing")
            proc.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue


class ProcessManager:
    """
    Launches a child with stdout and stderr on separate pipes and keeps
    track of it until it exits.
    """
    def __init__(self, cmd: List[str], env=None, cwd=None):
        self.cmd = cmd
        # Default to cleaned environment if None
        if env is None:
            self.env = get_clean_subprocess_env()
        else:
            self.env = env
        self.cwd = cwd
        self.proc: Optional[subprocess.Popen] = None
        self._start_process()

    def _start_process(self):
        self.proc = subprocess.Popen(
            self.cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=self.env,
            cwd=self.cwd,
        )
        logger.debug(f"Started pid {self.proc.pid}: {' '.join(self.cmd)}")

    @property
    def pid(self) -> Optional[int]:
        return self.proc.pid if self.proc else None

    @property
    def stdout(self):
        return self.proc.stdout if self.proc else None

    @property
    def stderr(self):
        return self.proc.stderr if self.proc else None

    def is_running(self):
        return self.proc is not None and self.proc.poll() is None

    def wait(self, timeout=None):
        if self.proc:
            return self.proc.wait(timeout=timeout)
        return None

    def terminate(self, timeout: float = 3.0):
        """
        Stop the child and everything it spawned.

        Descendants go through psutil; the direct child is signalled and
        reaped through Popen only, so wait() reports its real exit status.
        """
        if not self.is_running():
            return
        descendants = child_processes(self.proc.pid)
        self.proc.terminate()
        terminate_processes(descendants, timeout=timeout)
        try:
            self.proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"Process {self.proc.pid} ignored SIGTERM, killing")
            self.proc.kill()
            self.proc.wait()

    def close(self):
        """Close our ends of the pipes."""
        if not self.proc:
            return
        for pipe in (self.proc.stdout, self.proc.stderr):
            if pipe is not None:
                try:
                    pipe.close()
                except OSError:
                    pass

