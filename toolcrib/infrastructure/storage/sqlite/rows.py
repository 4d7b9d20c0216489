"""Column encoding shared by the SQLite stores."""

from datetime import datetime

from toolcrib.core.entities.stock import utc_now


def to_db_timestamp(value: datetime | None) -> str | None:
    """Fixed-width ISO text so lexical order matches time order."""
    if value is None:
        return None
    return value.isoformat(timespec="microseconds")


def from_db_timestamp(value: str | None, default: datetime | None = None) -> datetime | None:
    if value:
        try:
            return datetime.fromisoformat(value)
        except (ValueError, TypeError):
            pass
    return default


def from_db_timestamp_or_now(value: str | None) -> datetime:
    return from_db_timestamp(value) or utc_now()


def to_db_factory(factory_id: str | None) -> str:
    """Factory ids are stored as '' when absent so the unique key holds."""
    return factory_id or ""


def from_db_factory(value: str | None) -> str | None:
    return value or None
