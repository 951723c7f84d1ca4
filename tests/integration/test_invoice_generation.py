"""Integration tests for monthly invoice generation against a real database

Tests cover:
- Sample month totals and items
- THB conversion truncation and VAT
- Draft reuse and regeneration
- Refusals leaving no partial writes
- Rate locking and invoice numbering
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from sqlmodel import select

from src.domain.billing_event import BillingEvent, BillingEventStatus
from src.domain.exchange_rate import ExchangeRate, ExchangeRateStatus
from src.domain.invoice import Invoice
from src.domain.invoice_item import InvoiceItem
from src.domain.service_catalog import PricingPolicy


async def live_invoices(session, client_id: int):
    result = await session.execute(
        select(Invoice)
        .where(Invoice.client_id == client_id)
        .where(Invoice.deleted_at.is_(None))
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def events_of(session, client_id: int):
    result = await session.execute(
        select(BillingEvent)
        .where(BillingEvent.client_id == client_id)
        .order_by(BillingEvent.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
class TestGenerateSampleMonth:
    async def test_sample_month_items_and_totals(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        """
        Given: The three sample events and a 39.1234 rate
        When: January is generated
        Then: Items are 4600 / 1500 / 10500 plus VAT 1100, total 17700
        """
        # Act
        result = await generate_january(billing_client)

        # Assert
        assert result.is_ok()
        response = result.value
        assert response.reused is False
        assert response.events_count == 3
        assert response.fx_rate_id == fx_rate

        items = {item.service_code: item for item in response.items}
        assert [item.service_code for item in response.items] == [
            "TH_SHIPPING",
            "TH_BOX",
            "OUTBOUND_FEE",
            "VAT_7",
        ]
        assert items["TH_SHIPPING"].amount_krw == Decimal("4600")
        assert items["TH_SHIPPING"].description == "TH Shipping"
        assert items["TH_BOX"].amount_krw == Decimal("1500")
        assert items["TH_BOX"].unit_price_krw == Decimal("300")
        assert items["OUTBOUND_FEE"].amount_krw == Decimal("10500")
        assert items["OUTBOUND_FEE"].unit_price_krw == Decimal("3500")
        assert items["VAT_7"].amount_krw == Decimal("1100")

        invoice = response.invoice
        assert invoice.invoice_no == f"KRW-{billing_client}-202601-0001"
        assert invoice.subtotal_krw == Decimal("16600")
        assert invoice.vat_krw == Decimal("1100")
        assert invoice.total_krw == Decimal("17700")
        assert invoice.fx_rate_thbkrw == Decimal("39.1234")

    async def test_events_stamped_with_invoice_and_rate(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        # Act
        result = await generate_january(billing_client)

        # Assert
        invoice_id = result.value.invoice.id
        events = await events_of(db_session, billing_client)
        assert all(event.status == BillingEventStatus.INVOICED for event in events)
        assert all(event.invoice_id == invoice_id for event in events)
        assert all(Decimal(str(event.fx_rate_thbkrw)) == Decimal("39.1234") for event in events)
        assert Decimal(str(events[0].amount_krw)) == Decimal("4600")

    async def test_rate_locked_after_generation(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        # Act
        await generate_january(billing_client)

        # Assert
        rate = await db_session.get(ExchangeRate, fx_rate, populate_existing=True)
        assert rate.locked is True


@pytest.mark.asyncio
class TestGenerateTotals:
    async def test_thb_and_krw_events_total_16100(
        self, db_session, generate_january, billing_client, services, fx_rate
    ):
        """
        Given: A 120 THB shipping event and a 10500 KRW outbound event
        When: January is generated
        Then: Subtotal 15100, VAT 1000, total 16100
        """
        # Arrange
        db_session.add(
            BillingEvent(
                client_id=billing_client,
                service_code="TH_SHIPPING",
                reference_type="SHIPPING",
                event_date=date(2026, 1, 3),
                qty=Decimal("1"),
                pricing_policy=PricingPolicy.THB_BASED,
                amount_thb=Decimal("120"),
            )
        )
        db_session.add(
            BillingEvent(
                client_id=billing_client,
                service_code="OUTBOUND_FEE",
                reference_type="OUTBOUND",
                event_date=date(2026, 1, 7),
                qty=Decimal("3"),
                pricing_policy=PricingPolicy.KRW_FIXED,
                unit_price_krw=Decimal("3500"),
                amount_krw=Decimal("10500"),
            )
        )
        await db_session.commit()

        # Act
        result = await generate_january(billing_client)

        # Assert
        invoice = result.value.invoice
        assert invoice.subtotal_krw == Decimal("15100")
        assert invoice.vat_krw == Decimal("1000")
        assert invoice.total_krw == Decimal("16100")
        assert invoice.total_krw == invoice.subtotal_krw + invoice.vat_krw

    async def test_events_outside_month_ignored(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        # Arrange
        db_session.add(
            BillingEvent(
                client_id=billing_client,
                service_code="TH_SHIPPING",
                reference_type="SHIPPING",
                event_date=date(2026, 2, 1),
                qty=Decimal("1"),
                pricing_policy=PricingPolicy.THB_BASED,
                amount_thb=Decimal("120"),
            )
        )
        await db_session.commit()

        # Act
        result = await generate_january(billing_client)

        # Assert
        assert result.value.events_count == 3
        events = await events_of(db_session, billing_client)
        assert events[-1].status == BillingEventStatus.PENDING


@pytest.mark.asyncio
class TestGenerateExistingDraft:
    async def test_second_call_reuses_draft(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        # Arrange
        first = await generate_january(billing_client)

        # Act
        second = await generate_january(billing_client)

        # Assert
        assert second.is_ok()
        assert second.value.reused is True
        assert second.value.invoice.id == first.value.invoice.id
        assert len(second.value.items) == 4
        assert len(await live_invoices(db_session, billing_client)) == 1

    async def test_regenerate_replaces_draft(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        """
        Given: A draft exists for January
        When: Generation runs with regenerate_draft
        Then: The old draft is soft deleted and a new number is allocated
        """
        # Arrange
        first = await generate_january(billing_client)
        first_id = first.value.invoice.id

        # Act
        second = await generate_january(billing_client, regenerate=True)

        # Assert
        assert second.is_ok()
        assert second.value.reused is False
        assert second.value.invoice.id != first_id
        assert second.value.invoice.invoice_no.endswith("-0002")
        assert second.value.invoice.total_krw == Decimal("17700")

        live = await live_invoices(db_session, billing_client)
        assert [invoice.id for invoice in live] == [second.value.invoice.id]
        events = await events_of(db_session, billing_client)
        assert all(event.invoice_id == second.value.invoice.id for event in events)


@pytest.mark.asyncio
class TestGenerateRefused:
    async def test_no_rate(self, db_session, generate_january, billing_client, services, sample_events):
        # Act
        result = await generate_january(billing_client)

        # Assert
        assert result.is_err()
        assert result.error.code == "FX_NOT_FOUND"
        assert await live_invoices(db_session, billing_client) == []

    async def test_rate_dated_after_invoice_date_not_used(
        self, db_session, generate_january, billing_client, services, sample_events
    ):
        # Arrange
        db_session.add(ExchangeRate(rate_date=date(2026, 2, 2), rate=Decimal("40")))
        await db_session.commit()

        # Act
        result = await generate_january(billing_client)

        # Assert
        assert result.error.code == "FX_NOT_FOUND"

    async def test_no_pending_events_leaves_no_invoice(
        self, db_session, generate_january, billing_client, services, fx_rate
    ):
        """
        Given: A rate but no January events
        When: January is generated
        Then: NO_PENDING_EVENTS, no invoice row and the rate stays unlocked
        """
        # Act
        result = await generate_january(billing_client)

        # Assert
        assert result.is_err()
        assert result.error.code == "NO_PENDING_EVENTS"
        assert await live_invoices(db_session, billing_client) == []
        rate = await db_session.get(ExchangeRate, fx_rate, populate_existing=True)
        assert rate.locked is False

    async def test_unknown_client(self, generate_january):
        # Act
        result = await generate_january(999)

        # Assert
        assert result.error.code == "CLIENT_NOT_FOUND"


@pytest.mark.asyncio
class TestGenerateRateSelection:
    async def test_skips_inactive_deleted_and_other_pairs(
        self, db_session, generate_january, billing_client, services, sample_events
    ):
        """
        Given: Newer draft, superseded, soft-deleted and THB/USD rates
        When: January is generated on 2026-02-01
        Then: The older active THB/KRW rate is applied and locked
        """
        # Arrange
        applicable = ExchangeRate(rate_date=date(2026, 1, 28), rate=Decimal("39.1234"))
        db_session.add(applicable)
        db_session.add(
            ExchangeRate(
                rate_date=date(2026, 1, 29), rate=Decimal("41"), status=ExchangeRateStatus.DRAFT
            )
        )
        db_session.add(
            ExchangeRate(
                rate_date=date(2026, 1, 30), rate=Decimal("42"), status=ExchangeRateStatus.SUPERSEDED
            )
        )
        db_session.add(
            ExchangeRate(
                rate_date=date(2026, 1, 31), rate=Decimal("43"), deleted_at=datetime(2026, 1, 31, 12, 0)
            )
        )
        db_session.add(
            ExchangeRate(rate_date=date(2026, 2, 1), quote_currency="USD", rate=Decimal("0.029"))
        )
        await db_session.commit()
        applicable_id = applicable.id

        # Act
        result = await generate_january(billing_client)

        # Assert
        assert result.is_ok()
        assert result.value.fx_rate_id == applicable_id
        assert result.value.invoice.fx_rate_thbkrw == Decimal("39.1234")
        assert result.value.invoice.total_krw == Decimal("17700")
        rates = await db_session.execute(
            select(ExchangeRate.id, ExchangeRate.locked).execution_options(populate_existing=True)
        )
        assert {rate_id for rate_id, locked in rates.all() if locked} == {applicable_id}


@pytest.mark.asyncio
class TestGenerateRegenerateRollback:
    async def test_failed_regeneration_keeps_old_draft(
        self, db_session, generate_january, billing_client, services, fx_rate, sample_events
    ):
        """
        Given: A January draft, then its rate is soft deleted
        When: Regeneration fails with FX_NOT_FOUND after discarding the draft
        Then: The old draft, its items and its INVOICED events are all restored
        """
        # Arrange
        first = await generate_january(billing_client)
        first_id = first.value.invoice.id
        rate = await db_session.get(ExchangeRate, fx_rate, populate_existing=True)
        rate.deleted_at = datetime(2026, 2, 2, 9, 0)
        await db_session.commit()

        # Act
        result = await generate_january(billing_client, regenerate=True)

        # Assert
        assert result.is_err()
        assert result.error.code == "FX_NOT_FOUND"

        live = await live_invoices(db_session, billing_client)
        assert [invoice.id for invoice in live] == [first_id]

        items = await db_session.execute(
            select(InvoiceItem)
            .where(InvoiceItem.invoice_id == first_id)
            .where(InvoiceItem.deleted_at.is_(None))
            .execution_options(populate_existing=True)
        )
        assert len(items.scalars().all()) == 4

        events = await events_of(db_session, billing_client)
        assert all(event.status == BillingEventStatus.INVOICED for event in events)
        assert all(event.invoice_id == first_id for event in events)
        assert all(Decimal(str(event.fx_rate_thbkrw)) == Decimal("39.1234") for event in events)
