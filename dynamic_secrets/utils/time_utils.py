from datetime import UTC, datetime


class Datetime:
    """
    UTC-only datetime helpers.

    Everything persisted or compared inside the service is timezone aware.
    """

    @staticmethod
    def now() -> datetime:
        return datetime.now(UTC)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """Treat naive values as UTC (SQLite drops tzinfo on read)."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=UTC)
        return dt.astimezone(UTC)
