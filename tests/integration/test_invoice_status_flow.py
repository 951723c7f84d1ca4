"""Integration tests for invoice status transitions, admin duplicates and event reverts"""

import pytest
from datetime import date
from decimal import Decimal
from sqlmodel import select

from src.adapter.repositories import (
    SqlAlchemyBillingEventRepository,
    SqlAlchemyInvoiceItemRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyInvoiceSequenceRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.billing.dtos import MarkEventsPendingCommandDTO
from src.app.use_cases.billing.invoice_lifecycle import (
    DuplicateInvoiceForAdmin,
    IssueInvoice,
    MarkInvoicePaid,
)
from src.app.use_cases.billing.mark_events_pending import MarkEventsPending
from src.domain.billing_event import BillingEvent, BillingEventStatus
from src.domain.invoice import Invoice, InvoiceStatus


async def generate_draft(generate_january, client_id: int) -> int:
    result = await generate_january(client_id)
    assert result.is_ok()
    return result.value.invoice.id


async def reload_invoice(session, invoice_id: int) -> Invoice:
    return await session.get(Invoice, invoice_id, populate_existing=True)


def issue(session) -> IssueInvoice:
    return IssueInvoice(SqlAlchemyUnitOfWork(session), SqlAlchemyInvoiceRepository(session))


def mark_paid(session) -> MarkInvoicePaid:
    return MarkInvoicePaid(SqlAlchemyUnitOfWork(session), SqlAlchemyInvoiceRepository(session))


def mark_pending(session) -> MarkEventsPending:
    return MarkEventsPending(SqlAlchemyUnitOfWork(session), SqlAlchemyBillingEventRepository(session))


@pytest.mark.asyncio
class TestInvoiceTransitions:
    async def test_draft_issued_paid(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        # Arrange
        invoice_id = await generate_draft(generate_january, billing_client)

        # Act
        issued = await issue(db_session).execute(invoice_id)
        paid = await mark_paid(db_session).execute(invoice_id)

        # Assert
        assert issued.value.status == "issued"
        assert paid.value.status == "paid"
        invoice = await reload_invoice(db_session, invoice_id)
        assert invoice.status == InvoiceStatus.PAID

    async def test_issue_twice_refused(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        """
        Given: An issued invoice
        When: It is issued again
        Then: INVALID_STATUS and the invoice stays issued
        """
        # Arrange
        invoice_id = await generate_draft(generate_january, billing_client)
        await issue(db_session).execute(invoice_id)

        # Act
        result = await issue(db_session).execute(invoice_id)

        # Assert
        assert result.is_err()
        assert result.error.code == "INVALID_STATUS"
        invoice = await reload_invoice(db_session, invoice_id)
        assert invoice.status == InvoiceStatus.ISSUED

    async def test_paid_requires_issued(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        # Arrange
        invoice_id = await generate_draft(generate_january, billing_client)

        # Act
        result = await mark_paid(db_session).execute(invoice_id)

        # Assert
        assert result.error.code == "INVALID_STATUS"
        invoice = await reload_invoice(db_session, invoice_id)
        assert invoice.status == InvoiceStatus.DRAFT

    async def test_issued_month_cannot_be_regenerated(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        # Arrange
        invoice_id = await generate_draft(generate_january, billing_client)
        await issue(db_session).execute(invoice_id)

        # Act
        result = await generate_january(billing_client, regenerate=True)

        # Assert
        assert result.error.code == "INVOICE_ALREADY_ISSUED"
        invoice = await reload_invoice(db_session, invoice_id)
        assert invoice.deleted_at is None


@pytest.mark.asyncio
class TestDuplicateForAdmin:
    async def test_duplicate_gets_next_number(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        # Arrange
        invoice_id = await generate_draft(generate_january, billing_client)
        await issue(db_session).execute(invoice_id)
        use_case = DuplicateInvoiceForAdmin(
            SqlAlchemyUnitOfWork(db_session),
            SqlAlchemyInvoiceRepository(db_session),
            SqlAlchemyInvoiceItemRepository(db_session),
            SqlAlchemyInvoiceSequenceRepository(db_session),
        )

        # Act
        result = await use_case.execute(invoice_id, created_by=2)

        # Assert
        assert result.is_ok()
        copy = result.value.invoice
        assert copy.id != invoice_id
        assert copy.status == "draft"
        assert copy.invoice_no == f"KRW-{billing_client}-202601-0002"
        assert copy.total_krw == Decimal("17700")
        assert len(result.value.items) == 4
        assert all(item.invoice_id == copy.id for item in result.value.items)

        # Events stay with the original
        rows = await db_session.execute(
            select(BillingEvent.invoice_id).where(BillingEvent.client_id == billing_client)
        )
        assert set(rows.scalars().all()) == {invoice_id}

    async def test_draft_cannot_be_duplicated(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        # Arrange
        invoice_id = await generate_draft(generate_january, billing_client)
        use_case = DuplicateInvoiceForAdmin(
            SqlAlchemyUnitOfWork(db_session),
            SqlAlchemyInvoiceRepository(db_session),
            SqlAlchemyInvoiceItemRepository(db_session),
            SqlAlchemyInvoiceSequenceRepository(db_session),
        )

        # Act
        result = await use_case.execute(invoice_id, created_by=2)

        # Assert
        assert result.is_err()
        assert result.error.code == "INVALID_STATUS"
        assert result.error.reason == "status=draft"


@pytest.mark.asyncio
class TestMarkEventsPendingFlow:
    async def test_draft_events_can_be_reverted(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        # Arrange
        await generate_draft(generate_january, billing_client)

        # Act
        result = await mark_pending(db_session).execute(
            MarkEventsPendingCommandDTO(ids=sample_events[:2])
        )

        # Assert
        assert result.is_ok()
        assert result.value.updated == 2
        event = await db_session.get(BillingEvent, sample_events[0], populate_existing=True)
        assert event.status == BillingEventStatus.PENDING
        assert event.invoice_id is None
        assert event.fx_rate_thbkrw is None

    async def test_issued_events_are_locked(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        """
        Given: Events of an issued invoice
        When: They are marked pending
        Then: EVENTS_LOCKED and every event stays invoiced
        """
        # Arrange
        invoice_id = await generate_draft(generate_january, billing_client)
        await issue(db_session).execute(invoice_id)

        # Act
        result = await mark_pending(db_session).execute(MarkEventsPendingCommandDTO(ids=sample_events))

        # Assert
        assert result.is_err()
        assert result.error.code == "EVENTS_LOCKED"
        for event_id in sample_events:
            event = await db_session.get(BillingEvent, event_id, populate_existing=True)
            assert event.status == BillingEventStatus.INVOICED
            assert event.invoice_id == invoice_id

    async def test_reverted_events_invoiced_again(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        # Arrange
        await generate_draft(generate_january, billing_client)
        await mark_pending(db_session).execute(MarkEventsPendingCommandDTO(ids=sample_events))

        # Act
        result = await generate_january(billing_client, regenerate=True)

        # Assert
        assert result.is_ok()
        assert result.value.events_count == 3
        assert result.value.invoice.invoice_date == date(2026, 2, 1)
