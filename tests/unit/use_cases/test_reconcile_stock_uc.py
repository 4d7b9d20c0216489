"""Tests for StockReconciler."""

from unittest.mock import AsyncMock

import pytest

from toolcrib.application.use_cases.reconcile_stock import StockReconciler
from toolcrib.core.entities.stock import StockAggregate
from toolcrib.core.exceptions import AggregateNotFoundError


def _aggregate(aggregate_id: int, stock: int) -> StockAggregate:
    return StockAggregate(id=aggregate_id, tool_type_id=aggregate_id, current_stock=stock)


@pytest.fixture
def mock_aggregates():
    return AsyncMock()


@pytest.fixture
def mock_ledger():
    return AsyncMock()


@pytest.fixture
def reconciler(mock_aggregates, mock_ledger):
    return StockReconciler(mock_aggregates, mock_ledger)


class TestStockReconciler:
    async def test_consistent_stock_untouched(self, reconciler, mock_aggregates, mock_ledger):
        mock_aggregates.list_aggregates.return_value = [_aggregate(1, 10)]
        mock_ledger.signed_sum.return_value = 10

        report = await reconciler.reconcile()

        assert report.checked == 1
        assert report.drifted == []
        mock_aggregates.overwrite_stock.assert_not_called()

    async def test_drift_is_overwritten_from_ledger(
        self, reconciler, mock_aggregates, mock_ledger
    ):
        """The ledger wins."""
        mock_aggregates.list_aggregates.return_value = [_aggregate(1, 10), _aggregate(2, 4)]
        mock_ledger.signed_sum.side_effect = [10, 7]

        report = await reconciler.reconcile()

        assert report.checked == 2
        assert report.corrected == 1
        assert report.drifted[0].aggregate_id == 2
        assert report.drifted[0].previous_stock == 4
        assert report.drifted[0].ledger_stock == 7
        mock_aggregates.overwrite_stock.assert_awaited_once_with(2, 7)

    async def test_dry_run_reports_only(self, reconciler, mock_aggregates, mock_ledger):
        mock_aggregates.list_aggregates.return_value = [_aggregate(1, 10)]
        mock_ledger.signed_sum.return_value = 8

        report = await reconciler.reconcile(dry_run=True)

        assert report.dry_run is True
        assert len(report.drifted) == 1
        assert report.drifted[0].corrected is False
        mock_aggregates.overwrite_stock.assert_not_called()

    async def test_negative_ledger_sum_is_unresolvable(
        self, reconciler, mock_aggregates, mock_ledger
    ):
        mock_aggregates.list_aggregates.return_value = [_aggregate(1, 3)]
        mock_ledger.signed_sum.return_value = -2

        report = await reconciler.reconcile()

        assert report.drifted[0].unresolvable is True
        assert report.corrected == 0
        mock_aggregates.overwrite_stock.assert_not_called()

    async def test_single_aggregate(self, reconciler, mock_aggregates, mock_ledger):
        mock_aggregates.get.return_value = _aggregate(3, 5)
        mock_ledger.signed_sum.return_value = 6

        report = await reconciler.reconcile(aggregate_id=3)

        assert report.checked == 1
        mock_aggregates.list_aggregates.assert_not_called()
        mock_aggregates.overwrite_stock.assert_awaited_once_with(3, 6)

    async def test_single_aggregate_missing(self, reconciler, mock_aggregates):
        mock_aggregates.get.return_value = None

        with pytest.raises(AggregateNotFoundError):
            await reconciler.reconcile(aggregate_id=99)

    async def test_pages_through_every_aggregate(
        self, reconciler, mock_aggregates, mock_ledger
    ):
        full_page = [_aggregate(i, 0) for i in range(1, 501)]
        mock_aggregates.list_aggregates.side_effect = [full_page, [_aggregate(501, 0)]]
        mock_ledger.signed_sum.return_value = 0

        report = await reconciler.reconcile()

        assert report.checked == 501
        offsets = [c.kwargs["offset"] for c in mock_aggregates.list_aggregates.await_args_list]
        assert offsets == [0, 500]

    async def test_response_uses_camel_case(self, reconciler, mock_aggregates, mock_ledger):
        mock_aggregates.list_aggregates.return_value = [_aggregate(1, 10)]
        mock_ledger.signed_sum.return_value = 8

        body = reconciler.to_response(await reconciler.reconcile()).model_dump(by_alias=True)

        assert body["dryRun"] is False
        assert body["drifted"][0]["ledgerStock"] == 8
        assert body["drifted"][0]["corrected"] is True
