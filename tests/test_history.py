"""History persistence degrades gracefully and returns newest records first."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timedelta, UTC

from db.models import SentimentRecord
from db.session import get_db_session
from services.history import HistoryService
from services.sentiment import analyze


def _analysis(text: str) -> dict:
    return {**analyze(text).to_dict(), "text": text}


@contextmanager
def _broken_session():
    raise RuntimeError("database unavailable")
    yield  # pragma: no cover


def test_save_persists_every_column() -> None:
    service = HistoryService()

    record = service.save_analysis("user-1", _analysis("good good good bad"))

    assert record is not None
    with get_db_session() as session:
        stored = session.query(SentimentRecord).first()
    assert stored is record
    assert stored.user_id == "user-1"
    assert stored.text == "good good good bad"
    assert stored.sentiment == "positive"
    assert stored.score == 0.75
    assert stored.language == "english"
    assert "3 positive words" in stored.explanation


def test_save_without_user_is_skipped() -> None:
    service = HistoryService()

    assert service.save_analysis("", _analysis("good")) is None
    assert service.save_analysis(None, _analysis("good")) is None
    with get_db_session() as session:
        assert session.query(SentimentRecord).count() == 0


def test_history_is_newest_first_and_limited_to_ten() -> None:
    service = HistoryService()
    base = datetime(2024, 1, 1, tzinfo=UTC)
    for i in range(12):
        record = service.save_analysis("user-1", _analysis(f"entry {i}"))
        record.created_at = base + timedelta(minutes=i)

    history = service.get_user_history("user-1")

    assert len(history) == 10
    assert [item["text"] for item in history] == [f"entry {i}" for i in range(11, 1, -1)]
    assert history[0]["created_at"] == (base + timedelta(minutes=11)).isoformat()


def test_history_is_scoped_to_user() -> None:
    service = HistoryService()
    service.save_analysis("alice", _analysis("good"))
    service.save_analysis("bob", _analysis("bad"))

    history = service.get_user_history("alice")

    assert [item["user_id"] for item in history] == ["alice"]
    assert service.get_user_history("carol") == []
    assert service.get_user_history(None) == []


def test_same_timestamp_keeps_latest_insert_first() -> None:
    service = HistoryService()
    stamp = datetime(2024, 5, 1, tzinfo=UTC)
    for text in ("first", "second"):
        service.save_analysis("user-1", _analysis(text)).created_at = stamp

    assert [item["text"] for item in service.get_user_history("user-1")] == ["second", "first"]


def test_storage_failures_are_swallowed() -> None:
    service = HistoryService(session_factory=_broken_session)

    assert service.save_analysis("user-1", _analysis("good")) is None
    assert service.get_user_history("user-1") == []


def test_incomplete_analysis_is_not_saved() -> None:
    service = HistoryService()

    assert service.save_analysis("user-1", {"text": "good"}) is None
    assert service.get_user_history("user-1") == []
