import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

from origin.config import config
from origin.errors import StorageUnavailable
from origin.models import WordRecord
from origin.services import scheduler

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)

SCHEMA = """
CREATE TABLE IF NOT EXISTS word_records (
    user_id TEXT NOT NULL,
    lexical_key TEXT NOT NULL,
    translation TEXT NOT NULL DEFAULT '',
    pronunciation TEXT NOT NULL DEFAULT '',
    cultural_note TEXT NOT NULL DEFAULT '',
    times_seen INTEGER NOT NULL CHECK (times_seen >= 1),
    last_seen_at INTEGER NOT NULL,
    next_review_at INTEGER NOT NULL,
    created_at INTEGER NOT NULL,
    PRIMARY KEY (user_id, lexical_key)
);
CREATE INDEX IF NOT EXISTS idx_word_records_due ON word_records (user_id, next_review_at);
CREATE INDEX IF NOT EXISTS idx_word_records_recent ON word_records (user_id, last_seen_at);
"""

_COLUMNS = "user_id, lexical_key, translation, pronunciation, cultural_note, times_seen, last_seen_at, next_review_at, created_at"


def _to_micros(dt):
    # Naive datetimes are taken as UTC.
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // _MICROSECOND


def _from_micros(value):
    return EPOCH + timedelta(microseconds=int(value))


def _row_to_record(row):
    return WordRecord(
        user_id=row["user_id"],
        lexical_key=row["lexical_key"],
        translation=row["translation"],
        pronunciation=row["pronunciation"],
        cultural_note=row["cultural_note"],
        times_seen=row["times_seen"],
        last_seen_at=_from_micros(row["last_seen_at"]),
        next_review_at=_from_micros(row["next_review_at"]),
        created_at=_from_micros(row["created_at"]),
    )


class VocabularyStore:
    """Per-user word records with their review schedule, kept in SQLite.

    Each call opens its own connection, so instances are safe to share
    between request threads and between processes using the same file.
    """

    def __init__(self, db_path=None, busy_timeout_s=10.0):
        self._db_path = db_path
        self.busy_timeout_s = busy_timeout_s

    @property
    def db_path(self):
        return self._db_path or config.DATABASE_PATH

    @contextmanager
    def _connect(self):
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout_s, isolation_level=None)
        except sqlite3.Error as e:
            logger.error("Cannot open vocabulary database %s: %s", self.db_path, e)
            raise StorageUnavailable() from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as e:
            logger.error("Vocabulary storage error: %s", e)
            raise StorageUnavailable() from e
        finally:
            conn.close()

    @contextmanager
    def _transaction(self):
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def init_schema(self):
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA)

    def find_by_key(self, user_id, lexical_key):
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM word_records WHERE user_id = ? AND lexical_key = ?",
                (user_id, lexical_key),
            ).fetchone()
        return _row_to_record(row) if row else None

    def upsert_observation(self, user_id, lexical_key, attrs, now):
        """Record one observation of ``lexical_key`` by ``user_id``.

        Returns ``(record, is_review)``. The read, the schedule computation and
        the write share one ``BEGIN IMMEDIATE`` transaction, so concurrent
        observations of the same word never create a second row or lose an
        increment.
        """
        now_us = _to_micros(now)
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT times_seen FROM word_records WHERE user_id = ? AND lexical_key = ?",
                (user_id, lexical_key),
            ).fetchone()
            current = row["times_seen"] if row else None
            times_seen, next_review_at = scheduler.next_review(current, _from_micros(now_us))
            conn.execute(
                """
                INSERT INTO word_records (
                    user_id, lexical_key, translation, pronunciation, cultural_note,
                    times_seen, last_seen_at, next_review_at, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id, lexical_key) DO UPDATE SET
                    translation = excluded.translation,
                    pronunciation = excluded.pronunciation,
                    cultural_note = excluded.cultural_note,
                    times_seen = excluded.times_seen,
                    last_seen_at = excluded.last_seen_at,
                    next_review_at = excluded.next_review_at
                """,
                (
                    user_id,
                    lexical_key,
                    attrs.get("translation") or "",
                    attrs.get("pronunciation") or "",
                    attrs.get("cultural_note") or "",
                    times_seen,
                    now_us,
                    _to_micros(next_review_at),
                    now_us,
                ),
            )
            saved = conn.execute(
                f"SELECT {_COLUMNS} FROM word_records WHERE user_id = ? AND lexical_key = ?",
                (user_id, lexical_key),
            ).fetchone()
        return _row_to_record(saved), row is not None

    def list_by_user(self, user_id, limit=None):
        sql = f"SELECT {_COLUMNS} FROM word_records WHERE user_id = ? ORDER BY last_seen_at DESC, lexical_key"
        params = [user_id]
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_record(r) for r in rows]

    def list_due(self, user_id, now):
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM word_records WHERE user_id = ? AND next_review_at <= ? "
                "ORDER BY next_review_at ASC, lexical_key",
                (user_id, _to_micros(now)),
            ).fetchall()
        return [_row_to_record(r) for r in rows]

vocabulary_store = VocabularyStore()
