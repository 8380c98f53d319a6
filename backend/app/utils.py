from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def current_season(now: datetime | None = None) -> int:
    """Return the starting year of the football season running at ``now``.

    Seasons run August to May: January-July belong to the season that
    started the previous calendar year.
    """
    now = now or utcnow()
    if now.month < 8:
        return now.year - 1
    return now.year
