"""Billing event ledger use cases

Entry, listing, CSV export and demo seeding of billing events.
"""

import csv
import io
import logging
from datetime import date
from decimal import Decimal
from typing import List
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.billing_event_repository import BillingEventRepository
from src.app.repositories.client_repository import ClientRepository
from src.domain.billing_event import BillingEvent, BillingEventStatus
from src.domain.money import resolve_amount, truncate_to_hundred
from src.domain.service_catalog import PricingPolicy
from . import errors
from .dtos import (
    BillingEventAlertsDTO,
    BillingEventDTO,
    BillingEventFiltersDTO,
    ListBillingEventsResponseDTO,
    RecordBillingEventCommandDTO,
    SeedSampleEventsCommandDTO,
    SeedSampleEventsResponseDTO,
)
from .mappers import to_event_dto

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "event_date",
    "client",
    "service_code",
    "qty",
    "amount_thb",
    "fx_rate_thbkrw",
    "amount_krw",
    "reference_type",
    "reference_id",
    "warehouse_id",
    "status",
]


class RecordBillingEvent:
    """
    Use Case: Append a PENDING billing event

    Business Rules:
    1. Amount is the explicit amount, else unit price * qty
    2. THB_BASED events store the THB amount only; conversion happens at invoicing
    3. KRW_FIXED amounts are truncated to 100 won at entry
    4. Missing warehouse falls back to the client's default warehouse
    """

    def __init__(
        self,
        uow: UnitOfWork,
        event_repo: BillingEventRepository,
        client_repo: ClientRepository,
    ):
        self.uow = uow
        self.event_repo = event_repo
        self.client_repo = client_repo

    async def execute(self, command: RecordBillingEventCommandDTO) -> Result[BillingEventDTO]:
        try:
            client = await self.client_repo.get_by_id(command.client_id)
            if not client:
                return Return.err(
                    Error(code=errors.CLIENT_NOT_FOUND, message=f"Client {command.client_id} not found")
                )

            if command.pricing_policy == PricingPolicy.THB_BASED:
                amount_thb = resolve_amount(command.amount_thb, command.unit_price_thb, command.qty)
                amount_krw = None
            else:
                amount_thb = None
                amount_krw = truncate_to_hundred(
                    resolve_amount(command.amount_krw, command.unit_price_krw, command.qty)
                )

            warehouse_id = command.warehouse_id or client.default_warehouse_id

            event = await self.event_repo.create(
                BillingEvent(
                    client_id=command.client_id,
                    warehouse_id=warehouse_id,
                    service_code=command.service_code,
                    reference_type=command.reference_type,
                    reference_id=command.reference_id,
                    event_date=command.event_date,
                    qty=command.qty,
                    pricing_policy=command.pricing_policy,
                    unit_price_thb=command.unit_price_thb,
                    amount_thb=amount_thb,
                    unit_price_krw=command.unit_price_krw,
                    amount_krw=amount_krw,
                    status=BillingEventStatus.PENDING,
                )
            )
            response = to_event_dto(event)
            await self.uow.commit()

            if warehouse_id is None:
                logger.warning(f"Billing event {event.id} recorded without warehouse")
            return Return.ok(response)

        except IntegrityError as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=errors.VALIDATION_ERROR,
                    message="Billing event violates a data constraint",
                    reason=str(e.orig),
                )
            )

        except Exception as e:
            logger.error(f"Failed to record billing event for client {command.client_id}: {e}")
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="RECORD_BILLING_EVENT_FAILED",
                    message="Failed to record billing event",
                    reason=str(e),
                )
            )


class ListBillingEvents:
    """
    Use Case: Filtered event listing with data-quality alerts

    alerts.missing_warehouse_id counts events matching the filters
    (warehouse filter aside) that have no warehouse.
    """

    def __init__(self, event_repo: BillingEventRepository):
        self.event_repo = event_repo

    async def execute(self, filters: BillingEventFiltersDTO) -> Result[ListBillingEventsResponseDTO]:
        try:
            events = await self.event_repo.list(
                client_id=filters.client_id,
                status=filters.status,
                service_code=filters.service_code,
                warehouse_id=filters.warehouse_id,
                invoice_month=filters.invoice_month,
            )
            missing = await self.event_repo.count_missing_warehouse(
                client_id=filters.client_id,
                status=filters.status,
                service_code=filters.service_code,
                invoice_month=filters.invoice_month,
            )
            return Return.ok(
                ListBillingEventsResponseDTO(
                    events=[to_event_dto(event) for event in events],
                    alerts=BillingEventAlertsDTO(missing_warehouse_id=missing),
                )
            )

        except Exception as e:
            logger.error(f"Failed to list billing events: {e}")
            return Return.err(
                Error(
                    code="LIST_BILLING_EVENTS_FAILED",
                    message="Failed to list billing events",
                    reason=str(e),
                )
            )


class ExportBillingEventsCsv:
    """Use Case: Billing events as CSV, every value quoted"""

    def __init__(self, event_repo: BillingEventRepository, client_repo: ClientRepository):
        self.event_repo = event_repo
        self.client_repo = client_repo

    async def execute(self, filters: BillingEventFiltersDTO) -> Result[str]:
        try:
            events = await self.event_repo.list(
                client_id=filters.client_id,
                status=filters.status,
                service_code=filters.service_code,
                warehouse_id=filters.warehouse_id,
                invoice_month=filters.invoice_month,
            )
            client_codes = await self.client_repo.get_code_map(event.client_id for event in events)

            buffer = io.StringIO()
            writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
            buffer.write(",".join(CSV_COLUMNS))
            if events:
                buffer.write("\n")
            for event in events:
                writer.writerow(
                    [
                        event.event_date.isoformat(),
                        client_codes.get(event.client_id, ""),
                        event.service_code,
                        event.qty,
                        event.amount_thb,
                        event.fx_rate_thbkrw,
                        event.amount_krw,
                        event.reference_type,
                        event.reference_id,
                        event.warehouse_id,
                        event.status.value,
                    ]
                )

            return Return.ok(buffer.getvalue().rstrip("\n"))

        except Exception as e:
            logger.error(f"Failed to export billing events: {e}")
            return Return.err(
                Error(
                    code="EXPORT_BILLING_EVENTS_FAILED",
                    message="Failed to export billing events",
                    reason=str(e),
                )
            )


class SeedSampleEvents:
    """
    Use Case: Insert the three demo events of a month

    Two THB_BASED shipping charges (120 THB on day 03, 5 boxes at 8 THB on
    day 07) and one KRW_FIXED outbound fee (3 x 3,500 KRW on day 07).
    """

    def __init__(
        self,
        uow: UnitOfWork,
        event_repo: BillingEventRepository,
        client_repo: ClientRepository,
    ):
        self.uow = uow
        self.event_repo = event_repo
        self.client_repo = client_repo

    @staticmethod
    def sample_events(client_id: int, warehouse_id, invoice_month: str) -> List[BillingEvent]:
        year, month = (int(part) for part in invoice_month.split("-"))
        day_3 = date(year, month, 3)
        day_7 = date(year, month, 7)

        return [
            BillingEvent(
                client_id=client_id,
                warehouse_id=warehouse_id,
                service_code="TH_SHIPPING",
                reference_type="SHIPPING",
                reference_id="SAMPLE-SHP-001",
                event_date=day_3,
                qty=Decimal("1"),
                pricing_policy=PricingPolicy.THB_BASED,
                unit_price_thb=Decimal("120"),
                amount_thb=Decimal("120"),
            ),
            BillingEvent(
                client_id=client_id,
                warehouse_id=warehouse_id,
                service_code="TH_BOX",
                reference_type="SHIPPING",
                reference_id="SAMPLE-BOX-001",
                event_date=day_7,
                qty=Decimal("5"),
                pricing_policy=PricingPolicy.THB_BASED,
                unit_price_thb=Decimal("8"),
                amount_thb=Decimal("40"),
            ),
            BillingEvent(
                client_id=client_id,
                warehouse_id=warehouse_id,
                service_code="OUTBOUND_FEE",
                reference_type="OUTBOUND",
                reference_id="SAMPLE-OUT-001",
                event_date=day_7,
                qty=Decimal("3"),
                pricing_policy=PricingPolicy.KRW_FIXED,
                unit_price_krw=Decimal("3500"),
                amount_krw=Decimal("10500"),
            ),
        ]

    async def execute(self, command: SeedSampleEventsCommandDTO) -> Result[SeedSampleEventsResponseDTO]:
        try:
            client = await self.client_repo.get_by_id(command.client_id)
            if not client:
                return Return.err(
                    Error(code=errors.CLIENT_NOT_FOUND, message=f"Client {command.client_id} not found")
                )

            warehouse_id = command.warehouse_id or client.default_warehouse_id
            event_ids = []
            for event in self.sample_events(command.client_id, warehouse_id, command.invoice_month):
                created = await self.event_repo.create(event)
                event_ids.append(created.id)

            await self.uow.commit()

            logger.info(
                f"Seeded {len(event_ids)} sample events for client {command.client_id} "
                f"month {command.invoice_month}"
            )
            return Return.ok(
                SeedSampleEventsResponseDTO(
                    client_id=command.client_id,
                    invoice_month=command.invoice_month,
                    seeded=True,
                    event_ids=event_ids,
                )
            )

        except Exception as e:
            logger.error(f"Failed to seed sample events: {e}")
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SEED_SAMPLE_EVENTS_FAILED",
                    message="Failed to seed sample events",
                    reason=str(e),
                )
            )
