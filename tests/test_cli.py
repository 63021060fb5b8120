from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from lakach import __version__
from lakach.frontends.cli.main import main

FAKE_RSYNC = r"""
import os, sys
remote, dest = sys.argv[1], sys.argv[2]
print(remote.rsplit("/", 1)[-1])
print("  1,000  100%  1.00MB/s  0:00:01")
if remote.endswith("broken"):
    sys.exit(12)
os.makedirs(os.path.join(dest, remote.rsplit("/", 1)[-1]), exist_ok=True)
"""


def write_config(tmp_path: Path, **settings) -> None:
    path = tmp_path / "config" / "config.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"version": "0.1.0", **settings}))


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["-V"])
    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_missing_destination_is_a_usage_error(isolated_dirs: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["host:media", "--fetch", "films"])
    assert excinfo.value.code == 2


def test_fetch_downloads_folders(isolated_dirs: Path) -> None:
    write_config(isolated_dirs, rsync_path=sys.executable, rsync_flags=["-c", FAKE_RSYNC])
    dest = isolated_dirs / "downloads"

    with pytest.raises(SystemExit) as excinfo:
        main(["host:media", dest.as_posix(), "--fetch", "films", "--fetch", "music"])

    assert excinfo.value.code == 0
    assert (dest / "films").is_dir()
    assert (dest / "music").is_dir()


def test_fetch_reports_failure(isolated_dirs: Path) -> None:
    write_config(
        isolated_dirs,
        rsync_path=sys.executable,
        rsync_flags=["-c", FAKE_RSYNC],
        default_local_dest=(isolated_dirs / "saved").as_posix(),
    )

    with pytest.raises(SystemExit) as excinfo:
        main(["host:media", "--fetch", "broken", "--fetch", "ok"])

    assert excinfo.value.code == 1
    assert (isolated_dirs / "saved" / "ok").is_dir()
