"""Unit tests for invoice lifecycle use cases

Tests cover:
- draft -> issued -> paid transitions
- Refused out-of-order transitions
- Admin duplicate of a finalized invoice
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.billing.invoice_lifecycle import (
    DuplicateInvoiceForAdmin,
    IssueInvoice,
    MarkInvoicePaid,
)
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem


def make_invoice(status: InvoiceStatus) -> Invoice:
    return Invoice(
        id=5,
        client_id=1,
        invoice_month="2026-01",
        invoice_no="KRW-1-202601-0001",
        status=status,
        issue_date=date(2026, 2, 1),
        invoice_date=date(2026, 2, 1),
        due_date=date(2026, 2, 1),
        fx_rate_thbkrw=Decimal("39.1234"),
        subtotal_krw=Decimal("15100"),
        vat_krw=Decimal("1000"),
        total_krw=Decimal("16100"),
        created_by=1,
    )


@pytest.fixture
def mock_invoice_repo():
    repo = MagicMock()

    async def update(invoice):
        return invoice

    repo.update = AsyncMock(side_effect=update)
    return repo


@pytest.mark.asyncio
class TestIssueInvoice:
    async def test_issue_draft(self, mock_uow, mock_invoice_repo):
        """
        Given: A draft invoice
        When: It is issued
        Then: Status becomes issued and the change is committed
        """
        # Arrange
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(InvoiceStatus.DRAFT))

        # Act
        result = await IssueInvoice(mock_uow, mock_invoice_repo).execute(5)

        # Assert
        assert result.is_ok()
        assert result.value.status == "issued"
        mock_invoice_repo.get_by_id.assert_called_once_with(5, for_update=True)
        mock_uow.commit.assert_called_once()

    @pytest.mark.parametrize("status", [InvoiceStatus.ISSUED, InvoiceStatus.PAID])
    async def test_issue_refused_unless_draft(self, mock_uow, mock_invoice_repo, status):
        # Arrange
        invoice = make_invoice(status)
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)

        # Act
        result = await IssueInvoice(mock_uow, mock_invoice_repo).execute(5)

        # Assert
        assert result.is_err()
        assert result.error.code == "INVALID_STATUS"
        assert invoice.status == status
        mock_invoice_repo.update.assert_not_called()
        mock_uow.commit.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_issue_missing_invoice(self, mock_uow, mock_invoice_repo):
        # Arrange
        mock_invoice_repo.get_by_id = AsyncMock(return_value=None)

        # Act
        result = await IssueInvoice(mock_uow, mock_invoice_repo).execute(404)

        # Assert
        assert result.is_err()
        assert result.error.code == "INVOICE_NOT_FOUND"


@pytest.mark.asyncio
class TestMarkInvoicePaid:
    async def test_mark_issued_paid(self, mock_uow, mock_invoice_repo):
        # Arrange
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(InvoiceStatus.ISSUED))

        # Act
        result = await MarkInvoicePaid(mock_uow, mock_invoice_repo).execute(5)

        # Assert
        assert result.is_ok()
        assert result.value.status == "paid"
        mock_uow.commit.assert_called_once()

    async def test_draft_cannot_skip_to_paid(self, mock_uow, mock_invoice_repo):
        """
        Given: A draft invoice
        When: It is marked paid
        Then: INVALID_STATUS, transitions never skip a step
        """
        # Arrange
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(InvoiceStatus.DRAFT))

        # Act
        result = await MarkInvoicePaid(mock_uow, mock_invoice_repo).execute(5)

        # Assert
        assert result.is_err()
        assert result.error.code == "INVALID_STATUS"

    async def test_repository_failure(self, mock_uow, mock_invoice_repo):
        # Arrange
        mock_invoice_repo.get_by_id = AsyncMock(side_effect=RuntimeError("connection lost"))

        # Act
        result = await MarkInvoicePaid(mock_uow, mock_invoice_repo).execute(5)

        # Assert
        assert result.is_err()
        assert result.error.code == "MARK_INVOICE_PAID_FAILED"
        mock_uow.rollback.assert_called_once()


@pytest.mark.asyncio
class TestDuplicateInvoiceForAdmin:
    @pytest.fixture
    def use_case(self, mock_uow, mock_invoice_repo):
        async def create_invoice(invoice):
            invoice.id = 6
            return invoice

        async def create_item(item):
            item.id = 20
            return item

        mock_invoice_repo.create = AsyncMock(side_effect=create_invoice)
        item_repo = MagicMock()
        item_repo.create = AsyncMock(side_effect=create_item)
        item_repo.get_by_invoice_id = AsyncMock(
            return_value=[
                InvoiceItem(
                    id=1,
                    invoice_id=5,
                    service_code="VAT_7",
                    description="VAT 7%",
                    qty=Decimal("1"),
                    unit_price_krw=Decimal("1000"),
                    amount_krw=Decimal("1000"),
                )
            ]
        )
        sequence_repo = MagicMock()
        sequence_repo.next_sequence = AsyncMock(return_value=2)
        return DuplicateInvoiceForAdmin(mock_uow, mock_invoice_repo, item_repo, sequence_repo)

    async def test_duplicate_issued_invoice(self, use_case, mock_uow, mock_invoice_repo):
        """
        Given: An issued invoice
        When: An admin duplicates it
        Then: A draft copy with the next number and copied items is created
        """
        # Arrange
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(InvoiceStatus.ISSUED))

        # Act
        result = await use_case.execute(5, created_by=9)

        # Assert
        assert result.is_ok()
        copy = result.value.invoice
        assert copy.id == 6
        assert copy.invoice_no == "KRW-1-202601-0002"
        assert copy.status == "draft"
        assert copy.total_krw == Decimal("16100")
        assert copy.created_by == 9
        assert [item.invoice_id for item in result.value.items] == [6]
        assert result.value.total_trunc100 is True
        mock_uow.commit.assert_called_once()

    async def test_draft_cannot_be_duplicated(self, use_case, mock_uow, mock_invoice_repo):
        # Arrange
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(InvoiceStatus.DRAFT))

        # Act
        result = await use_case.execute(5)

        # Assert
        assert result.is_err()
        assert result.error.code == "INVALID_STATUS"
        mock_invoice_repo.create.assert_not_called()
