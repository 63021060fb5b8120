from __future__ import annotations

from lakach.backend.models.download_job import JobStatus
from lakach.backend.services.download_queue_service import DownloadQueue
from lakach.backend.services.history_service import HistoryService


def completed_queue(*names: str) -> DownloadQueue:
    queue = DownloadQueue()
    for name in names:
        job_id = queue.enqueue(name, f"host:{name}")
        queue.transition(job_id, JobStatus.RUNNING)
        queue.transition(job_id, JobStatus.COMPLETED)
    return queue


def test_promote_appends_in_order() -> None:
    history = HistoryService()
    history.promote_from(completed_queue("a", "b"))
    history.promote_from(completed_queue("c"))
    assert [entry.name for entry in history.entries()] == ["a", "b", "c"]
    assert history.entries()[0].display_text == "a (host:a)"


def test_second_promote_is_noop() -> None:
    queue = completed_queue("a")
    history = HistoryService()
    assert len(history.promote_from(queue)) == 1
    assert history.promote_from(queue) == []
    assert len(history) == 1


def test_remove_and_clear() -> None:
    history = HistoryService()
    history.promote_from(completed_queue("a", "b", "c"))

    assert history.remove(1).name == "b"
    assert history.remove(10) is None
    assert [entry.name for entry in history.entries()] == ["a", "c"]
    assert history.clear() == 2
    assert len(history) == 0
