"""
Remote Listing Handler

Lists the immediate subdirectories of a remote path by running ``find``
over ssh.
"""

import logging
import shlex
import subprocess
from pathlib import PurePosixPath
from typing import List, Optional, Tuple

from lakach.backend.exceptions import RemoteListingError
from lakach.backend.handlers.subprocess_utils import get_clean_subprocess_env

logger = logging.getLogger(__name__)


def split_remote_source(remote_source: str) -> Tuple[str, str]:
    """
    Split 'user@host:path' into (host, path).

    Only the first ':' separates; without one the path is empty, meaning
    the remote home directory.
    """
    host, sep, path = remote_source.partition(":")
    if not sep:
        return remote_source, ""
    return host, path


def quote_remote_path(path: str) -> str:
    """Shell-quote a remote path, leaving a leading '~/' for the remote shell to expand."""
    if path == "~":
        return path
    if path.startswith("~/"):
        rest = path[2:]
        return "~/" + shlex.quote(rest) if rest else "~/"
    return shlex.quote(path)


def build_listing_command(host: str, path: str, ssh_path: str = "ssh") -> List[str]:
    """ssh command that prints every directory directly below path."""
    target = quote_remote_path(path or ".")
    return [ssh_path, host, f"find {target} -maxdepth 1 -type d -not -path {target}"]


def parse_listing_output(output: str) -> List[str]:
    """Basenames of the non-blank lines printed by find."""
    names = []
    for line in output.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        name = PurePosixPath(trimmed).name
        if name and name != "..":
            names.append(name)
    return names


def list_children(host: str, path: str, ssh_path: str = "ssh",
                  timeout: Optional[float] = 30) -> List[str]:
    """
    List immediate child directories of a remote path.

    Args:
        host: ssh destination, e.g. 'user@example.com'
        path: Remote directory; empty for the remote home
        ssh_path: ssh executable
        timeout: Seconds before the listing is abandoned

    Returns:
        List of directory names, in the order find printed them

    Raises:
        RemoteListingError: ssh could not be run, timed out or exited non-zero
    """
    cmd = build_listing_command(host, path, ssh_path)
    logger.debug(f"Listing remote folders: {cmd}")
    try:
        result = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=get_clean_subprocess_env(),
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        raise RemoteListingError(host, path, f"listing timed out after {timeout}s")
    except OSError as e:
        raise RemoteListingError(host, path, f"could not run {ssh_path}: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace")
        logger.warning(f"Remote listing of {host}:{path} failed ({result.returncode}): {stderr.strip()}")
        raise RemoteListingError(host, path, stderr)

    names = parse_listing_output(result.stdout.decode("utf-8", errors="replace"))
    logger.debug(f"Found {len(names)} folders in {host}:{path or '~'}")
    return names
