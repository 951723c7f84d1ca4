"""Unit tests for MarkEventsPending use case"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.billing.dtos import MarkEventsPendingCommandDTO
from src.app.use_cases.billing.mark_events_pending import MarkEventsPending
from src.domain.billing_event import BillingEvent, BillingEventStatus
from src.domain.invoice import InvoiceStatus
from src.domain.service_catalog import PricingPolicy


def invoiced_event(event_id: int) -> BillingEvent:
    return BillingEvent(
        id=event_id,
        client_id=1,
        service_code="TH_SHIPPING",
        reference_type="SHIPPING",
        event_date=date(2026, 1, 3),
        qty=Decimal("1"),
        pricing_policy=PricingPolicy.THB_BASED,
        amount_thb=Decimal("120"),
        amount_krw=Decimal("4600"),
        fx_rate_thbkrw=Decimal("39.1234"),
        status=BillingEventStatus.INVOICED,
        invoice_id=5,
    )


@pytest.fixture
def mock_event_repo():
    repo = MagicMock()
    repo.revert_to_pending = AsyncMock(return_value=2)
    return repo


@pytest.mark.asyncio
class TestMarkEventsPending:
    async def test_reverts_draft_events(self, mock_uow, mock_event_repo):
        """
        Given: Two events linked to a draft invoice
        When: They are marked pending
        Then: Both are reverted and the count is returned
        """
        # Arrange
        mock_event_repo.get_with_invoice_status = AsyncMock(
            return_value=[
                (invoiced_event(1), InvoiceStatus.DRAFT),
                (invoiced_event(2), InvoiceStatus.DRAFT),
            ]
        )

        # Act
        result = await MarkEventsPending(mock_uow, mock_event_repo).execute(
            MarkEventsPendingCommandDTO(ids=[1, 2])
        )

        # Assert
        assert result.is_ok()
        assert result.value.updated == 2
        mock_event_repo.revert_to_pending.assert_called_once_with([1, 2])
        mock_uow.commit.assert_called_once()

    @pytest.mark.parametrize("status", [InvoiceStatus.ISSUED, InvoiceStatus.PAID])
    async def test_one_final_invoice_blocks_all(self, mock_uow, mock_event_repo, status):
        """
        Given: One of the events belongs to an issued or paid invoice
        When: The events are marked pending
        Then: EVENTS_LOCKED and none are reverted
        """
        # Arrange
        mock_event_repo.get_with_invoice_status = AsyncMock(
            return_value=[
                (invoiced_event(1), InvoiceStatus.DRAFT),
                (invoiced_event(2), status),
            ]
        )

        # Act
        result = await MarkEventsPending(mock_uow, mock_event_repo).execute(
            MarkEventsPendingCommandDTO(ids=[1, 2])
        )

        # Assert
        assert result.is_err()
        assert result.error.code == "EVENTS_LOCKED"
        assert "2" in result.error.reason
        mock_event_repo.revert_to_pending.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_pending_events_without_invoice(self, mock_uow, mock_event_repo):
        # Arrange
        event = invoiced_event(3)
        event.status = BillingEventStatus.PENDING
        event.invoice_id = None
        mock_event_repo.get_with_invoice_status = AsyncMock(return_value=[(event, None)])

        # Act
        result = await MarkEventsPending(mock_uow, mock_event_repo).execute(
            MarkEventsPendingCommandDTO(ids=[3])
        )

        # Assert
        assert result.is_ok()
        assert result.value.updated == 1

    async def test_unknown_ids(self, mock_uow, mock_event_repo):
        # Arrange
        mock_event_repo.get_with_invoice_status = AsyncMock(return_value=[])

        # Act
        result = await MarkEventsPending(mock_uow, mock_event_repo).execute(
            MarkEventsPendingCommandDTO(ids=[999])
        )

        # Assert
        assert result.is_err()
        assert result.error.code == "EVENTS_NOT_FOUND"


class TestMarkEventsPendingCommand:
    def test_empty_ids_rejected(self):
        with pytest.raises(ValueError):
            MarkEventsPendingCommandDTO(ids=[])

    def test_non_positive_ids_rejected(self):
        with pytest.raises(ValueError):
            MarkEventsPendingCommandDTO(ids=[1, 0])
