"""Naive-UTC clock and bucket truncation helpers."""

from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1)


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def truncate_timestamp(value: datetime, bucket_seconds: int) -> datetime:
    """
    Floor a timestamp to the start of its bucket.

    Buckets are aligned on the Unix epoch, so 3600 truncates to the hour and
    86400 truncates to midnight UTC.

    Args:
        value: Naive UTC timestamp (aware values are converted to UTC first)
        bucket_seconds: Bucket width in seconds

    Returns:
        datetime: Bucket start with sub-bucket fields zeroed
    """
    if bucket_seconds < 1:
        raise ValueError("bucket_seconds must be at least 1")

    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)

    delta = value - EPOCH
    seconds = delta.days * 86400 + delta.seconds
    return EPOCH + timedelta(seconds=seconds - seconds % bucket_seconds)


def utc_isoformat(value: datetime) -> str:
    """ISO 8601 with an explicit ``+00:00`` offset for a naive UTC timestamp."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
