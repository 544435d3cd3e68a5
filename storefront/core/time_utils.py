from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def expires_in(days: int) -> datetime:
    return utcnow() + timedelta(days=days)
