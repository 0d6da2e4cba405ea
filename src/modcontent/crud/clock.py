"""Store-assigned timestamps"""

from datetime import datetime, timedelta


def next_timestamp(previous: datetime | None = None) -> datetime:
    """Current time, bumped past previous so per-key timestamps strictly increase."""
    now = datetime.now()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now
