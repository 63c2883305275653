"""
Analysis history persistence.

Every analysis made by an authenticated caller is stored as a
``SentimentRecord``. Storage problems never reach the caller: a failed
save is logged and skipped, a failed read is logged and treated as an
empty history.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from config import get_config
from db.models import SentimentRecord
from db.session import get_db_session
from services.logging_utils import get_logger, log_extra
from services.observability import record_external_call

logger = get_logger(__name__)


class HistoryService:
    """Saves and lists per-user sentiment analyses."""

    def __init__(self, session_factory=get_db_session):
        self.config = get_config()
        self._session_factory = session_factory

    def save_analysis(self, user_id: Optional[str], analysis: Mapping[str, Any]) -> Optional[SentimentRecord]:
        """Persist ``analysis`` for ``user_id``.

        ``analysis`` must carry ``text``, ``sentiment``, ``score``,
        ``language`` and ``explanation``. Returns the stored record, or
        ``None`` when there is no user or the write failed.
        """
        if not user_id:
            return None

        try:
            with self._session_factory() as session:
                record = SentimentRecord(
                    user_id=user_id,
                    text=analysis["text"],
                    sentiment=analysis["sentiment"],
                    score=float(analysis["score"]),
                    language=analysis["language"],
                    explanation=analysis["explanation"],
                )
                session.add(record)
                session.commit()
        except Exception as e:
            logger.error(f"Error saving to history: {e}", extra=log_extra(user_id=user_id))
            record_external_call("history", "error")
            return None

        record_external_call("history", "success")
        return record

    def get_user_history(self, user_id: Optional[str], limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Return the newest analyses of ``user_id``, most recent first."""
        if not user_id:
            return []

        limit = self.config.HISTORY_LIMIT if limit is None else limit
        try:
            with self._session_factory() as session:
                records = (
                    session.query(SentimentRecord)
                    .filter(lambda r: r.user_id == user_id)
                    .order_by(lambda r: r.created_at, descending=True)
                    .limit(limit)
                    .all()
                )
        except Exception as e:
            logger.error(f"Error fetching history: {e}", extra=log_extra(user_id=user_id))
            record_external_call("history", "error")
            return []

        return [record.to_dict() for record in records]


__all__ = ["HistoryService"]
