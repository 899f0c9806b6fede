from dataclasses import dataclass
from datetime import datetime, timezone


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class Recognition:
    """An item identified by the vision model, before it is recorded."""
    english: str
    translation: str
    pronunciation: str
    cultural_context: str = ""

    def attrs(self):
        return {
            "translation": self.translation,
            "pronunciation": self.pronunciation,
            "cultural_note": self.cultural_context,
        }


@dataclass
class WordRecord:
    user_id: str
    lexical_key: str
    translation: str
    pronunciation: str
    cultural_note: str
    times_seen: int
    last_seen_at: datetime
    next_review_at: datetime
    created_at: datetime

    def to_dict(self):
        return {
            "userId": self.user_id,
            "english": self.lexical_key,
            "translation": self.translation,
            "pronunciation": self.pronunciation,
            "culturalContext": self.cultural_note,
            "timesSeen": self.times_seen,
            "lastSeenAt": _iso(self.last_seen_at),
            "nextReviewAt": _iso(self.next_review_at),
            "createdAt": _iso(self.created_at),
        }
