"""Data models held by the in-memory store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, Dict
import uuid


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class SentimentRecord:
    """One persisted analysis, owned by an authenticated user."""

    user_id: str
    text: str
    sentiment: str  # positive|neutral|negative
    score: float
    language: str
    explanation: str
    id: str = field(default_factory=_uuid)
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "text": self.text,
            "sentiment": self.sentiment,
            "score": self.score,
            "language": self.language,
            "explanation": self.explanation,
            "created_at": self.created_at.isoformat(),
        }


__all__ = ["SentimentRecord"]
