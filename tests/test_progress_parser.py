from __future__ import annotations

import pytest

from lakach.backend.handlers.progress_parser import (
    RsyncProgressParser,
    parse_line,
    parse_percentage,
)
from lakach.shared.progress_models import SYNCING_PLACEHOLDER


def test_file_name_then_progress_line() -> None:
    parser = RsyncProgressParser()
    assert parser.parse_line("photo.jpg") is None
    snapshot = parser.parse_line("   1,234  45%  1.23MB/s  0:00:05")

    assert snapshot is not None
    assert snapshot.file_name == "photo.jpg"
    assert snapshot.percentage == 45
    assert snapshot.speed == "1.23MB/s"


def test_progress_before_any_file_uses_placeholder() -> None:
    snapshot, cursor = parse_line("  10,000  3%  512.00kB/s  0:01:10", "")
    assert snapshot is not None
    assert snapshot.file_name == SYNCING_PLACEHOLDER
    assert cursor == ""


@pytest.mark.parametrize("value", [0, 1, 45, 99, 100])
def test_valid_percentages_pass_through(value: int) -> None:
    snapshot, _ = parse_line(f"1,000 {value}% 1.00MB/s 0:00:01", "f")
    assert snapshot is not None
    assert snapshot.percentage == value


def test_percentage_token_parsing() -> None:
    assert parse_percentage("45%") == 45
    assert parse_percentage("+7%") == 7
    assert parse_percentage("abc%") == 0
    assert parse_percentage("4.5%") == 0
    assert parse_percentage("%") == 0
    assert parse_percentage("250%") == 100
    assert parse_percentage("65535%") == 100
    assert parse_percentage("70000%") == 0


def test_malformed_percentage_falls_back_to_zero() -> None:
    snapshot, _ = parse_line("1,000 x% 1.00MB/s", "f")
    assert snapshot is not None
    assert snapshot.percentage == 0


def test_progress_line_keeps_cursor() -> None:
    _, cursor = parse_line("dir/a.txt 100% 2.00MB/s 0:00:00", "previous.bin")
    assert cursor == "previous.bin"


def test_file_name_line_sets_basename_without_snapshot() -> None:
    snapshot, cursor = parse_line("photos/2023/holiday.jpg\n", "old")
    assert snapshot is None
    assert cursor == "holiday.jpg"


def test_trailing_slash_directory_uses_last_segment() -> None:
    _, cursor = parse_line("photos/2023/", "old")
    assert cursor == "2023"


@pytest.mark.parametrize(
    "line",
    [
        "receiving incremental file list",
        "sending incremental file list",
        "sent 1,234 bytes  received 5,678 bytes  1,000.00 bytes/sec",
        "total size is 12.34M  speedup is 1.00",
        "building file list ... done",
        "          1,234 100%   (xfr#1, to-chk=3/5)",
        "(xfr#2, to-check=0/10)",
        "",
        "   ",
        "x" * 200,
    ],
)
def test_status_lines_leave_cursor_alone(line: str) -> None:
    snapshot, cursor = parse_line(line, "keep.me")
    assert snapshot is None
    assert cursor == "keep.me"


def test_indented_file_name_is_trimmed_first() -> None:
    _, cursor = parse_line("   sub/file.txt", "old")
    assert cursor == "file.txt"


def test_streams_have_independent_cursors() -> None:
    out = RsyncProgressParser()
    err = RsyncProgressParser()
    out.parse_line("a.txt")
    err.parse_line("b.txt")

    assert out.parse_line("1 10% 1kB/s").file_name == "a.txt"
    assert err.parse_line("1 20% 1kB/s").file_name == "b.txt"

    out.reset()
    assert out.current_file == ""


def test_out_of_range_percentage_line_reports_zero() -> None:
    snapshot, _ = parse_line("1,000 70000% 1.00MB/s 0:00:01", "f")
    assert snapshot is not None
    assert snapshot.percentage == 0
