"""Billing Demo Seeder

Loads a demo client, its services, a THB/KRW rate, a contract rate and a
month of sample billing events, optionally generating the draft invoice.
Safe to re-run: existing rows are left alone.
"""

import asyncio
import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyBillingEventRepository,
    SqlAlchemyClientRepository,
    SqlAlchemyContractRateRepository,
    SqlAlchemyExchangeRateRepository,
    SqlAlchemyInvoiceItemRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyInvoiceSequenceRepository,
    SqlAlchemyServiceCatalogRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.billing import (
    ContractRateCommandDTO,
    CreateContractRate,
    CreateExchangeRate,
    CreateService,
    ExchangeRateCommandDTO,
    GenerateInvoice,
    GenerateInvoiceCommandDTO,
    GenerateInvoiceResponseDTO,
    SeedSampleEvents,
    SeedSampleEventsCommandDTO,
    ServiceCatalogCommandDTO,
)
from src.app.use_cases.billing import errors
from src.domain.client import Client
from src.domain.service_catalog import BillingUnit, Currency, PricingPolicy

logger = logging.getLogger(__name__)

DEMO_RATE = Decimal("39.1234")
DEMO_CONTRACT_RATE = Decimal("3200")

DEMO_SERVICES = [
    ServiceCatalogCommandDTO(
        service_code="OUTBOUND_FEE",
        service_name="Outbound Fee",
        billing_unit=BillingUnit.SKU,
        pricing_policy=PricingPolicy.KRW_FIXED,
        default_currency=Currency.KRW,
        default_rate=Decimal("3500"),
    ),
    ServiceCatalogCommandDTO(
        service_code="TH_SHIPPING",
        service_name="TH Shipping",
        billing_unit=BillingUnit.ORDER,
        pricing_policy=PricingPolicy.THB_BASED,
        default_currency=Currency.THB,
        default_rate=Decimal("120"),
    ),
    ServiceCatalogCommandDTO(
        service_code="TH_BOX",
        service_name="TH Box",
        billing_unit=BillingUnit.BOX,
        pricing_policy=PricingPolicy.THB_BASED,
        default_currency=Currency.THB,
        default_rate=Decimal("8"),
    ),
]

_ALREADY_PRESENT = {
    errors.DUPLICATE_SERVICE_CODE,
    errors.DUPLICATE_EXCHANGE_RATE,
    errors.DUPLICATE_CONTRACT_RATE,
}


class BillingDemoSeeder:
    """
    Seeds demo billing data

    Usage:
        seeder = BillingDemoSeeder()
        await seeder.run_once(invoice_month="2026-01", generate=True)
    """

    def __init__(self, db_uri: Optional[str] = None, create_tables: bool = True):
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.create_tables = create_tables

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

    def _check(self, result, what: str) -> None:
        if result.is_ok():
            logger.info(f"Seeded {what}")
        elif result.error.code in _ALREADY_PRESENT:
            logger.info(f"{what} already present, skipping")
        else:
            raise RuntimeError(f"Seeding {what} failed: {result.error.message}")

    async def _ensure_client(self, session: AsyncSession, client_id: int) -> Client:
        client_repo = SqlAlchemyClientRepository(session)
        client = await client_repo.get_by_id(client_id)
        if client:
            return client

        client = await client_repo.create(Client(client_code="DEMO", name="Demo Client"))
        await session.commit()
        logger.info(f"Created demo client {client.id}")
        return client

    async def run_once(
        self,
        invoice_month: Optional[str] = None,
        client_id: int = 1,
        generate: bool = False,
        today: Optional[date] = None,
    ) -> Optional[GenerateInvoiceResponseDTO]:
        """
        Seed everything once

        Args:
            invoice_month: Month of the sample events (default: current month)
            client_id: Client to seed for; created as DEMO when missing
            generate: Also generate the month's draft invoice
            today: Rate and invoice date (default: date.today())

        Returns:
            The generated invoice when generate is set, else None
        """
        today = today or date.today()
        invoice_month = invoice_month or today.strftime("%Y-%m")

        if self.create_tables:
            async with self.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)

        async with self.async_session_factory() as session:
            uow = SqlAlchemyUnitOfWork(session)
            # Plain id: failed inserts below roll back and expire ORM objects
            client_id = (await self._ensure_client(session, client_id)).id

            service_repo = SqlAlchemyServiceCatalogRepository(session)
            for command in DEMO_SERVICES:
                result = await CreateService(uow, service_repo).execute(command)
                self._check(result, f"service {command.service_code}")

            rate_repo = SqlAlchemyExchangeRateRepository(session)
            result = await CreateExchangeRate(
                uow,
                rate_repo,
                base_currency=ApplicationConfig.BILLING_BASE_CURRENCY,
                quote_currency=ApplicationConfig.BILLING_QUOTE_CURRENCY,
            ).execute(
                ExchangeRateCommandDTO(rate_date=today, rate=DEMO_RATE),
                entered_by=ApplicationConfig.DEFAULT_ACTOR_ID,
            )
            self._check(result, f"exchange rate {DEMO_RATE} on {today}")

            result = await CreateContractRate(uow, SqlAlchemyContractRateRepository(session)).execute(
                ContractRateCommandDTO(
                    client_id=client_id,
                    service_code="OUTBOUND_FEE",
                    custom_rate=DEMO_CONTRACT_RATE,
                    currency=Currency.KRW,
                    effective_date=today,
                )
            )
            self._check(result, "OUTBOUND_FEE contract rate")

            event_repo = SqlAlchemyBillingEventRepository(session)
            existing = await event_repo.list(client_id=client_id, invoice_month=invoice_month)
            if any((event.reference_id or "").startswith("SAMPLE-") for event in existing):
                logger.info(f"Sample events for {invoice_month} already present, skipping")
            else:
                result = await SeedSampleEvents(
                    uow, event_repo, SqlAlchemyClientRepository(session)
                ).execute(
                    SeedSampleEventsCommandDTO(client_id=client_id, invoice_month=invoice_month)
                )
                self._check(result, f"sample events for {invoice_month}")

            if not generate:
                return None

            use_case = GenerateInvoice(
                uow,
                client_repo=SqlAlchemyClientRepository(session),
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                item_repo=SqlAlchemyInvoiceItemRepository(session),
                event_repo=event_repo,
                rate_repo=rate_repo,
                sequence_repo=SqlAlchemyInvoiceSequenceRepository(session),
                service_repo=service_repo,
                invoice_number_prefix=ApplicationConfig.INVOICE_NUMBER_PREFIX,
                base_currency=ApplicationConfig.BILLING_BASE_CURRENCY,
                quote_currency=ApplicationConfig.BILLING_QUOTE_CURRENCY,
            )
            result = await use_case.execute(
                GenerateInvoiceCommandDTO(
                    client_id=client_id,
                    invoice_month=invoice_month,
                    invoice_date=today,
                    created_by=ApplicationConfig.DEFAULT_ACTOR_ID,
                )
            )
            if result.is_err():
                raise RuntimeError(f"Invoice generation failed: {result.error.message}")
            return result.value

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()


async def main():
    """
    Entry point for running the seeder as a standalone script

    Usage:
        python -m src.worker.seed_billing_demo
        python -m src.worker.seed_billing_demo --month 2026-01 --generate
    """
    import argparse

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Billing demo data seeder")
    parser.add_argument("--month", default=None, help="Month of the sample events (YYYY-MM)")
    parser.add_argument("--client-id", type=int, default=1, help="Client to seed for")
    parser.add_argument(
        "--generate", action="store_true", help="Generate the month's draft invoice"
    )
    args = parser.parse_args()

    seeder = BillingDemoSeeder()
    try:
        invoice = await seeder.run_once(
            invoice_month=args.month, client_id=args.client_id, generate=args.generate
        )
        if invoice:
            print(f"Draft invoice {invoice.invoice.invoice_no}:")
            for item in invoice.items:
                print(f"  {item.service_code:<14} {item.qty:>8} x {item.unit_price_krw:>10} = {item.amount_krw:>10}")
            print(f"  subtotal={invoice.invoice.subtotal_krw} vat={invoice.invoice.vat_krw} total={invoice.invoice.total_krw}")
        print("SEED_OK")
    finally:
        await seeder.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
