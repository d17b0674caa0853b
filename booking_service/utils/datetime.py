"""UTC datetime utilities."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This function should be used instead of datetime.now() or datetime.utcnow()
    to ensure all timestamps are timezone-aware and stored in UTC.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def nights_between(start: date, end: date | None) -> int:
    """
    Number of nights in a stay, at least one.

    Example:
        >>> nights_between(date(2025, 6, 1), date(2025, 6, 5))
        4
    """
    if end is None:
        return 1
    return max((end - start).days, 1)
