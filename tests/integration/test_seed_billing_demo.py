"""Integration tests for BillingDemoSeeder

Runs against a throwaway SQLite file so the seeder manages its own engine.
"""

import pytest
import pytest_asyncio
from datetime import date
from decimal import Decimal

from src.worker.seed_billing_demo import BillingDemoSeeder


@pytest_asyncio.fixture
async def seeder(tmp_path):
    seeder = BillingDemoSeeder(db_uri=f"sqlite+aiosqlite:///{tmp_path / 'demo.db'}")
    yield seeder
    await seeder.shutdown()


@pytest.mark.asyncio
class TestBillingDemoSeeder:
    async def test_seed_and_generate(self, seeder):
        """
        Given: An empty database
        When: The seeder runs with generate for January
        Then: The draft has the sample items and totals 16600 / 1100 / 17700
        """
        # Act
        invoice = await seeder.run_once(
            invoice_month="2026-01", generate=True, today=date(2026, 2, 1)
        )

        # Assert
        assert invoice is not None
        assert invoice.reused is False
        assert invoice.invoice.subtotal_krw == Decimal("16600")
        assert invoice.invoice.vat_krw == Decimal("1100")
        assert invoice.invoice.total_krw == Decimal("17700")
        descriptions = [item.description for item in invoice.items]
        assert descriptions == ["TH Shipping", "TH Box", "Outbound Fee", "VAT 7%"]

    async def test_rerun_is_idempotent(self, seeder):
        # Arrange
        first = await seeder.run_once(invoice_month="2026-01", generate=True, today=date(2026, 2, 1))

        # Act
        second = await seeder.run_once(invoice_month="2026-01", generate=True, today=date(2026, 2, 1))

        # Assert
        assert second.reused is True
        assert second.invoice.id == first.invoice.id
        assert second.invoice.total_krw == Decimal("17700")

    async def test_seed_without_generate(self, seeder):
        # Act
        result = await seeder.run_once(invoice_month="2026-01", today=date(2026, 2, 1))

        # Assert
        assert result is None
