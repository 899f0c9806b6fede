from datetime import datetime, timedelta

REVIEW_INTERVAL = timedelta(days=1)


def next_review(times_seen, now: datetime):
    """Return ``(new_times_seen, next_review_at)`` for an observation at ``now``.

    ``times_seen`` is ``None`` for a word the user has never seen. The review
    interval grows by one day per observation, and an early review still
    pushes the next one further out.
    """
    new_times_seen = 1 if times_seen is None else int(times_seen) + 1
    return new_times_seen, now + new_times_seen * REVIEW_INTERVAL
