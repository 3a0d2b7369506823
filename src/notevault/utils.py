from collections.abc import Callable
from datetime import UTC, datetime

type Clock = Callable[[], datetime]


def now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (MongoDB stores UTC without tzinfo)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def token_prefix(token: str) -> str:
    """Shortened token for log lines."""
    return token[:6] + "..."


def to_mongo_datetime(value: datetime) -> datetime:
    """Naive UTC datetime truncated to milliseconds, matching what BSON stores."""
    value = ensure_utc(value)
    return value.replace(tzinfo=None, microsecond=value.microsecond // 1000 * 1000)
