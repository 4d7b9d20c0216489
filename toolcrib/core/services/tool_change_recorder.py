"""Tool-change history linked to outbound movements."""

from datetime import timedelta

from toolcrib.config import get_logger
from toolcrib.core.entities.catalog import ToolType, normalize_equipment_number
from toolcrib.core.entities.stock import StockTransaction, TransactionType, utc_now
from toolcrib.core.entities.tool_change import ToolChangeRecord
from toolcrib.core.interfaces.tool_change_store import IToolChangeStore

logger = get_logger(__name__)


class ToolChangeRecorder:
    """
    Appends a tool-change record when stock is dispensed to a machine position.

    Records are correlated with their outbound transaction only by
    equipment, tool position, tool type and time. No key links the two,
    so machine history survives transaction corrections.
    """

    def __init__(
        self,
        store: IToolChangeStore,
        replace_purpose: str = "replace",
        replace_reason: str = "preventive_replacement",
        fallback_reason: str = "end_of_life",
        window: timedelta = timedelta(seconds=60),
    ):
        self._store = store
        self._replace_purpose = replace_purpose
        self._replace_reason = replace_reason
        self._fallback_reason = fallback_reason
        self._window = window

    def change_reason_for(self, purpose: str | None) -> str:
        """Map an outbound purpose to a change reason."""
        if purpose == self._replace_purpose:
            return self._replace_reason
        return purpose or self._fallback_reason

    async def record_from_outbound(
        self,
        transaction: StockTransaction,
        tool_type: ToolType | None = None,
        purpose: str | None = None,
    ) -> ToolChangeRecord | None:
        """
        Append a history record for an outbound transaction.

        Returns None when the transaction has no equipment or no tool
        position, i.e. stock issued ahead of use.
        """
        if transaction.transaction_type != TransactionType.OUTBOUND:
            return None
        if not transaction.has_equipment_link:
            logger.debug(
                "tool_change_skipped",
                transaction_id=transaction.id,
                reason="no_equipment_link",
            )
            return None

        record = ToolChangeRecord(
            equipment_id=transaction.equipment_id,  # type: ignore[arg-type]
            equipment_number=normalize_equipment_number(transaction.equipment_number),
            tool_position=transaction.tool_position,  # type: ignore[arg-type]
            tool_type_id=transaction.tool_type_id,
            tool_type_code=tool_type.code if tool_type else None,
            change_reason=self.change_reason_for(
                purpose if purpose is not None else transaction.counterparty
            ),
            change_date=utc_now(),
            changed_by=transaction.processed_by,
            notes=transaction.notes,
        )
        record = await self._store.add(record)
        logger.info(
            "tool_change_recorded",
            record_id=record.id,
            transaction_id=transaction.id,
            equipment_id=record.equipment_id,
            tool_position=record.tool_position,
        )
        return record

    async def delete_linked_to(
        self,
        transaction: StockTransaction,
        within: timedelta | None = None,
    ) -> int:
        """Best-effort removal of the record created for a transaction.

        Matches on equipment, tool position and tool type with a change
        date inside +/- ``within`` of the transaction's processed_at.
        """
        if not transaction.has_equipment_link:
            return 0
        window = within if within is not None else self._window
        anchor = transaction.processed_at or transaction.created_at
        removed = await self._store.delete_matching(
            equipment_id=transaction.equipment_id,  # type: ignore[arg-type]
            tool_position=transaction.tool_position,  # type: ignore[arg-type]
            tool_type_id=transaction.tool_type_id,
            start=anchor - window,
            end=anchor + window,
        )
        logger.info(
            "tool_change_unlinked",
            transaction_id=transaction.id,
            removed=removed,
        )
        return removed

    async def list_history(
        self, equipment_id: int | None = None, limit: int = 100
    ) -> list[ToolChangeRecord]:
        return await self._store.list_records(equipment_id=equipment_id, limit=limit)
