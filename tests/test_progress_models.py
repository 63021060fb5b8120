from __future__ import annotations

from lakach.shared.progress_models import SYNCING_PLACEHOLDER, ProgressSnapshot


def test_defaults() -> None:
    snapshot = ProgressSnapshot()
    assert snapshot.file_name == SYNCING_PLACEHOLDER
    assert snapshot.percentage == 0
    assert snapshot.gauge_label == "0%"


def test_percentage_is_clamped() -> None:
    assert ProgressSnapshot(percentage=150).percentage == 100
    assert ProgressSnapshot(percentage=-5).percentage == 0


def test_gauge_label_includes_speed() -> None:
    assert ProgressSnapshot("a", 45, "1.23MB/s").gauge_label == "45% @ 1.23MB/s"
