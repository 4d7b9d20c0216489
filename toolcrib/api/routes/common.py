"""Query helpers shared by the routers."""

from datetime import date, datetime, time


def day_bounds(day: date | None) -> tuple[datetime | None, datetime | None]:
    """Inclusive [start, end] of a calendar day, or no bounds."""
    if day is None:
        return None, None
    return datetime.combine(day, time.min), datetime.combine(day, time.max)
