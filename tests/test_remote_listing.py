from __future__ import annotations

import subprocess

import pytest

from lakach.backend.exceptions import RemoteListingError
from lakach.backend.handlers import remote_listing_handler
from lakach.backend.handlers.remote_listing_handler import (
    build_listing_command,
    list_children,
    parse_listing_output,
    quote_remote_path,
    split_remote_source,
)


def test_split_remote_source() -> None:
    assert split_remote_source("user@host:media/films") == ("user@host", "media/films")
    assert split_remote_source("host:") == ("host", "")
    assert split_remote_source("host") == ("host", "")
    assert split_remote_source("host:a:b") == ("host", "a:b")


def test_quote_remote_path() -> None:
    assert quote_remote_path("plain") == "plain"
    assert quote_remote_path("with space") == "'with space'"
    assert quote_remote_path("~/My Files") == "~/'My Files'"
    assert quote_remote_path("~") == "~"


def test_build_listing_command() -> None:
    assert build_listing_command("host", "media") == [
        "ssh", "host", "find media -maxdepth 1 -type d -not -path media",
    ]
    assert build_listing_command("host", "")[2] == "find . -maxdepth 1 -type d -not -path ."


def test_parse_listing_output() -> None:
    output = "media/films\nmedia/music\n\n  media/tv shows  \n"
    assert parse_listing_output(output) == ["films", "music", "tv shows"]
    assert parse_listing_output("./a\n./b\n") == ["a", "b"]


class Completed:
    def __init__(self, returncode: int, stdout: bytes = b"", stderr: bytes = b"") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def test_list_children_success(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return Completed(0, b"data/a\ndata/b\n")

    monkeypatch.setattr(remote_listing_handler.subprocess, "run", fake_run)
    assert list_children("host", "data") == ["a", "b"]
    assert calls[0][:2] == ["ssh", "host"]


def test_list_children_nonzero_exit(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        remote_listing_handler.subprocess,
        "run",
        lambda cmd, **kwargs: Completed(1, stderr=b"find: 'nope': No such file or directory\n"),
    )
    with pytest.raises(RemoteListingError) as excinfo:
        list_children("host", "nope")
    assert excinfo.value.stderr == "find: 'nope': No such file or directory"
    assert str(excinfo.value).startswith("host:nope: ")


def test_list_children_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    def slow(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))

    monkeypatch.setattr(remote_listing_handler.subprocess, "run", slow)
    with pytest.raises(RemoteListingError, match="timed out"):
        list_children("host", "", timeout=1)


def test_list_children_missing_ssh() -> None:
    with pytest.raises(RemoteListingError, match="could not run"):
        list_children("host", "", ssh_path="/nonexistent/ssh-binary")
