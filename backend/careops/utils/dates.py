from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching how columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def short_date(value: datetime) -> str:
    return value.strftime("%b %d, %Y")
