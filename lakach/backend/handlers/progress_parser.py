"""
Progress Parser

Parses rsync's human-readable output (``-vP --info=progress2``) into
structured progress snapshots.

rsync interleaves bare file name lines with periodic rate lines such as::

    photos/2023/photo.jpg
         1,234,567  45%    1.23MB/s    0:00:12

so the parser remembers the last file name it saw and attaches it to the
next rate line.
"""

import logging
import re
from pathlib import PurePosixPath
from typing import Optional, Tuple

from lakach.shared.progress_models import ProgressSnapshot, SYNCING_PLACEHOLDER

logger = logging.getLogger(__name__)

# rsync status lines that are never file names
STATUS_PREFIXES = ("receiving", "sending", "sent", "total", "building")
STATUS_MARKERS = ("speedup", "bytes/sec", "to-check", "to-chk")
MAX_FILE_NAME_LINE = 200

_PERCENT_DIGITS = re.compile(r"\+?[0-9]+")
# Largest value an unsigned 16-bit percentage field holds
MAX_PERCENT_VALUE = 65535


class RsyncProgressParser:
    """
    Incremental parser for one rsync output stream.

    Each stream (stdout, stderr) needs its own instance: the file name
    cursor is per-stream, lines from the two pipes interleave arbitrarily.

    Usage:
        parser = RsyncProgressParser()
        for line in stream:
            snapshot = parser.parse_line(line)
    """

    def __init__(self, current_file: str = ""):
        self.current_file = current_file

    def parse_line(self, line: str) -> Optional[ProgressSnapshot]:
        """
        Parse a single line of rsync output.

        Args:
            line: Raw line, with or without trailing newline

        Returns:
            ProgressSnapshot for rate lines, None for everything else
        """
        snapshot, self.current_file = parse_line(line, self.current_file)
        return snapshot

    def reset(self):
        """Forget the current file name."""
        self.current_file = ""


def parse_line(line: str, current_file: str) -> Tuple[Optional[ProgressSnapshot], str]:
    """
    Classify one line of rsync output.

    Progress lines (containing both ``%`` and ``/s``) are checked first and
    never change the cursor. Anything else that looks like a path replaces
    the cursor with its basename.

    Args:
        line: Raw output line
        current_file: File name cursor carried over from previous lines

    Returns:
        (snapshot or None, updated cursor)
    """
    trimmed = line.strip()

    if "%" in trimmed and "/s" in trimmed:
        return _parse_progress_line(trimmed, current_file), current_file

    if _looks_like_file_name(trimmed):
        name = PurePosixPath(trimmed).name
        if name and name != "..":
            return None, name

    return None, current_file


def parse_percentage(token: str) -> int:
    """
    Parse a percentage token like '45%'.

    Returns:
        int: Value clamped to [0, 100], or 0 when the digits are malformed
            or exceed MAX_PERCENT_VALUE
    """
    digits = token.rstrip("%")
    if not _PERCENT_DIGITS.fullmatch(digits):
        return 0
    value = int(digits)
    if value > MAX_PERCENT_VALUE:
        return 0
    return min(value, 100)


def _parse_progress_line(trimmed: str, current_file: str) -> Optional[ProgressSnapshot]:
    """Build a snapshot from a rate line like '1,234  45%  1.23MB/s  0:00:05'."""
    percentage = 0
    speed = ""
    for part in trimmed.split():
        if "/s" in part:
            speed = part
        # A malformed token keeps whatever an earlier token produced
        if part.endswith("%") and _PERCENT_DIGITS.fullmatch(part.rstrip("%")):
            percentage = parse_percentage(part)

    if not speed:
        return None

    return ProgressSnapshot(
        file_name=current_file or SYNCING_PLACEHOLDER,
        percentage=percentage,
        speed=speed,
    )


def _looks_like_file_name(trimmed: str) -> bool:
    """Heuristic: a non-empty, reasonably short line that isn't rsync chatter."""
    if not trimmed or trimmed[0].isspace():
        return False
    if trimmed.startswith(STATUS_PREFIXES):
        return False
    if any(marker in trimmed for marker in STATUS_MARKERS):
        return False
    return len(trimmed) < MAX_FILE_NAME_LINE
