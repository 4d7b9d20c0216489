"""Catalog entities: tool types and equipment."""

import re
from datetime import datetime

from pydantic import BaseModel, Field

from toolcrib.core.entities.stock import MAX_QUANTITY, utc_now

# One optional location letter, e.g. "C007" on the floor for machine 7
_EQUIPMENT_REFERENCE = re.compile(r"[A-Za-z]?(\d+)", re.ASCII)


class ToolType(BaseModel):
    """An endmill catalog entry."""

    id: int | None = None
    code: str
    name: str = ""
    unit_cost: float = 0.0
    created_at: datetime = Field(default_factory=utc_now)


class Equipment(BaseModel):
    """A CNC machine."""

    id: int | None = None
    equipment_number: int
    location: str | None = None
    factory_id: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


def normalize_equipment_number(value: str | int | None) -> int | None:
    """Parse an equipment reference like ``C007``, ``007`` or ``7``.

    Returns None for blank, non-numeric or out-of-range references.
    """
    if value is None:
        return None
    if isinstance(value, int):
        number = value
    else:
        match = _EQUIPMENT_REFERENCE.fullmatch(value.strip())
        if match is None or len(match.group(1)) > len(str(MAX_QUANTITY)):
            return None
        number = int(match.group(1))
    if not 0 <= number <= MAX_QUANTITY:
        return None
    return number
