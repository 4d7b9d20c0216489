"""Tool-change history entity."""

from datetime import datetime

from pydantic import BaseModel, Field

from toolcrib.core.entities.stock import utc_now


class ToolChangeRecord(BaseModel):
    """Which tool type went into which machine tool position, and why."""

    id: int | None = None
    equipment_id: int
    equipment_number: int | None = None
    tool_position: int
    tool_type_id: int
    tool_type_code: str | None = None
    change_reason: str
    change_date: datetime = Field(default_factory=utc_now)
    changed_by: str | None = None
    notes: str | None = None
