"""Unit tests for billing event ledger use cases

Tests cover:
- Event entry per pricing policy and warehouse fallback
- Listing with missing-warehouse alerts
- CSV export layout
- Sample event seeding
"""

import pytest
from datetime import date
from decimal import Decimal
from itertools import count
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.billing.billing_events import (
    CSV_COLUMNS,
    ExportBillingEventsCsv,
    ListBillingEvents,
    RecordBillingEvent,
    SeedSampleEvents,
)
from src.app.use_cases.billing.dtos import (
    BillingEventFiltersDTO,
    RecordBillingEventCommandDTO,
    SeedSampleEventsCommandDTO,
)
from src.domain.billing_event import BillingEvent, BillingEventStatus
from src.domain.client import Client
from src.domain.service_catalog import PricingPolicy


@pytest.fixture
def mock_client_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(
        return_value=Client(id=1, client_code="C1", name="Client One", default_warehouse_id=3)
    )
    repo.get_code_map = AsyncMock(return_value={1: "C1"})
    return repo


@pytest.fixture
def mock_event_repo():
    ids = count(1)

    async def create(event):
        event.id = next(ids)
        return event

    repo = MagicMock()
    repo.create = AsyncMock(side_effect=create)
    return repo


@pytest.mark.asyncio
class TestRecordBillingEvent:
    async def test_thb_event_keeps_thb_amount_only(self, mock_uow, mock_event_repo, mock_client_repo):
        """
        Given: A THB_BASED event with unit price but no amount
        When: It is recorded
        Then: amount_thb is unit price * qty and no KRW amount is stored yet
        """
        # Arrange
        command = RecordBillingEventCommandDTO(
            client_id=1,
            service_code="TH_BOX",
            reference_type="SHIPPING",
            event_date=date(2026, 1, 7),
            qty=Decimal("5"),
            pricing_policy=PricingPolicy.THB_BASED,
            unit_price_thb=Decimal("8"),
        )

        # Act
        result = await RecordBillingEvent(mock_uow, mock_event_repo, mock_client_repo).execute(command)

        # Assert
        assert result.is_ok()
        event = result.value
        assert event.amount_thb == Decimal("40")
        assert event.amount_krw is None
        assert event.status == "PENDING"
        assert event.invoice_id is None
        mock_uow.commit.assert_called_once()

    async def test_krw_event_truncated_at_entry(self, mock_uow, mock_event_repo, mock_client_repo):
        # Arrange
        command = RecordBillingEventCommandDTO(
            client_id=1,
            service_code="OUTBOUND_FEE",
            reference_type="OUTBOUND",
            event_date=date(2026, 1, 7),
            qty=Decimal("3"),
            pricing_policy=PricingPolicy.KRW_FIXED,
            unit_price_krw=Decimal("3550"),
        )

        # Act
        result = await RecordBillingEvent(mock_uow, mock_event_repo, mock_client_repo).execute(command)

        # Assert
        assert result.value.amount_krw == Decimal("10600")
        assert result.value.amount_thb is None

    async def test_warehouse_falls_back_to_client_default(
        self, mock_uow, mock_event_repo, mock_client_repo
    ):
        # Arrange
        command = RecordBillingEventCommandDTO(
            client_id=1,
            service_code="TH_SHIPPING",
            reference_type="SHIPPING",
            event_date=date(2026, 1, 3),
            qty=Decimal("1"),
            pricing_policy=PricingPolicy.THB_BASED,
            amount_thb=Decimal("120"),
        )

        # Act
        result = await RecordBillingEvent(mock_uow, mock_event_repo, mock_client_repo).execute(command)

        # Assert
        assert result.value.warehouse_id == 3

    async def test_unknown_client(self, mock_uow, mock_event_repo, mock_client_repo):
        # Arrange
        mock_client_repo.get_by_id = AsyncMock(return_value=None)
        command = RecordBillingEventCommandDTO(
            client_id=42,
            service_code="TH_SHIPPING",
            reference_type="SHIPPING",
            event_date=date(2026, 1, 3),
            pricing_policy=PricingPolicy.THB_BASED,
        )

        # Act
        result = await RecordBillingEvent(mock_uow, mock_event_repo, mock_client_repo).execute(command)

        # Assert
        assert result.is_err()
        assert result.error.code == "CLIENT_NOT_FOUND"
        mock_event_repo.create.assert_not_called()


def listed_event(warehouse_id=None) -> BillingEvent:
    return BillingEvent(
        id=7,
        client_id=1,
        warehouse_id=warehouse_id,
        service_code="TH_SHIPPING",
        reference_type="SHIPPING",
        reference_id="SHP-001",
        event_date=date(2026, 1, 3),
        qty=Decimal("1"),
        pricing_policy=PricingPolicy.THB_BASED,
        amount_thb=Decimal("120"),
        status=BillingEventStatus.PENDING,
    )


@pytest.mark.asyncio
class TestListBillingEvents:
    async def test_lists_with_missing_warehouse_alert(self, mock_event_repo):
        # Arrange
        mock_event_repo.list = AsyncMock(return_value=[listed_event()])
        mock_event_repo.count_missing_warehouse = AsyncMock(return_value=1)
        filters = BillingEventFiltersDTO(client_id=1, status="pending", invoice_month="2026-01")

        # Act
        result = await ListBillingEvents(mock_event_repo).execute(filters)

        # Assert
        assert result.is_ok()
        assert len(result.value.events) == 1
        assert result.value.alerts.missing_warehouse_id == 1
        mock_event_repo.list.assert_called_once_with(
            client_id=1,
            status=BillingEventStatus.PENDING,
            service_code=None,
            warehouse_id=None,
            invoice_month="2026-01",
        )


@pytest.mark.asyncio
class TestExportBillingEventsCsv:
    async def test_header_then_quoted_rows(self, mock_event_repo, mock_client_repo):
        """
        Given: One pending event without warehouse
        When: Events are exported
        Then: Header line is plain, data values are all quoted, no trailing newline
        """
        # Arrange
        mock_event_repo.list = AsyncMock(return_value=[listed_event()])

        # Act
        result = await ExportBillingEventsCsv(mock_event_repo, mock_client_repo).execute(
            BillingEventFiltersDTO()
        )

        # Assert
        assert result.is_ok()
        lines = result.value.split("\n")
        assert lines[0] == ",".join(CSV_COLUMNS)
        assert lines[1] == (
            '"2026-01-03","C1","TH_SHIPPING","1","120","","","SHIPPING","SHP-001","","PENDING"'
        )
        assert not result.value.endswith("\n")

    async def test_empty_export_is_header_only(self, mock_event_repo, mock_client_repo):
        # Arrange
        mock_event_repo.list = AsyncMock(return_value=[])
        mock_client_repo.get_code_map = AsyncMock(return_value={})

        # Act
        result = await ExportBillingEventsCsv(mock_event_repo, mock_client_repo).execute(
            BillingEventFiltersDTO()
        )

        # Assert
        assert result.value == ",".join(CSV_COLUMNS)


@pytest.mark.asyncio
class TestSeedSampleEvents:
    async def test_seeds_three_events(self, mock_uow, mock_event_repo, mock_client_repo):
        # Act
        result = await SeedSampleEvents(mock_uow, mock_event_repo, mock_client_repo).execute(
            SeedSampleEventsCommandDTO(client_id=1, invoice_month="2026-03")
        )

        # Assert
        assert result.is_ok()
        assert result.value.seeded is True
        assert result.value.event_ids == [1, 2, 3]
        created = [call.args[0] for call in mock_event_repo.create.call_args_list]
        assert [event.event_date for event in created] == [
            date(2026, 3, 3),
            date(2026, 3, 7),
            date(2026, 3, 7),
        ]
        assert all(event.warehouse_id == 3 for event in created)
        mock_uow.commit.assert_called_once()


class TestEventFilters:
    def test_bad_filters_are_ignored(self):
        filters = BillingEventFiltersDTO(status="bogus", invoice_month="2026-13")

        assert filters.status is None
        assert filters.invoice_month is None


class TestSampleEvents:
    def test_scenario_amounts(self):
        """At 39.1234 the samples normalize to 4600, 1500 and 10500 KRW"""
        events = SeedSampleEvents.sample_events(1, None, "2026-01")
        fx = Decimal("39.1234")

        amounts = [event.normalized_amount_krw(fx) for event in events]

        assert amounts == [Decimal("4600"), Decimal("1500"), Decimal("10500")]
