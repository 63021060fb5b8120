from __future__ import annotations

import pytest

from lakach.backend.exceptions import RemoteListingError
from lakach.backend.services.folder_browser_service import FolderBrowser, parent_path

TREE = {
    "data": ["music", "Photos", "archive"],
    "data/music": ["jazz", "rock"],
    "data/music/jazz": [],
    "": ["data", "tmp"],
    "tmp": [],
}


def fake_lister(host: str, path: str) -> list[str]:
    if path not in TREE:
        raise RemoteListingError(host, path, "find: No such file or directory")
    return list(TREE[path])


def test_parent_path() -> None:
    assert parent_path("data/music/jazz", "data") == "data/music"
    assert parent_path("music", "") == ""
    assert parent_path("/srv", "/srv") == ""


def test_refresh_sorts_case_insensitively() -> None:
    browser = FolderBrowser("user@host", "data", lister=fake_lister)
    assert browser.refresh() == ["archive", "music", "Photos"]
    assert browser.location == "user@host:data"


def test_home_location() -> None:
    browser = FolderBrowser("host", "", lister=fake_lister)
    browser.refresh()
    assert browser.location == "host:~"
    assert browser.remote_descriptor("tmp") == "host:tmp"


def test_enter_and_go_back() -> None:
    browser = FolderBrowser("host", "data", lister=fake_lister)
    browser.refresh()

    assert browser.enter("music") == ["jazz", "rock"]
    assert browser.current_path == "data/music"
    assert browser.remote_descriptor("jazz") == "host:data/music/jazz"

    assert browser.go_back()
    assert browser.current_path == "data"
    assert not browser.go_back()


def test_failed_enter_restores_location() -> None:
    browser = FolderBrowser("host", "data", lister=fake_lister)
    browser.refresh()

    with pytest.raises(RemoteListingError):
        browser.enter("Photos")
    assert browser.current_path == "data"
    assert browser.folders == ["archive", "music", "Photos"]


def test_filter_and_refresh_clears_it() -> None:
    browser = FolderBrowser("host", "data", lister=fake_lister)
    browser.refresh()

    assert browser.set_filter("mu") == ["music"]
    assert browser.filter_query == "mu"
    assert browser.set_filter("") == ["archive", "music", "Photos"]

    browser.set_filter("ph")
    browser.enter("music")
    assert browser.filter_query == ""
    assert browser.folders == ["jazz", "rock"]
