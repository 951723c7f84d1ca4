"""GenerateInvoice Use Case

Builds (or reuses) a client's monthly KRW draft invoice from its pending
billing events, freezing the applicable THB->KRW rate.
"""

import logging
from decimal import Decimal
from typing import List
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.billing_event_repository import BillingEventRepository
from src.app.repositories.client_repository import ClientRepository
from src.app.repositories.exchange_rate_repository import ExchangeRateRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_sequence_repository import InvoiceSequenceRepository
from src.app.repositories.service_catalog_repository import ServiceCatalogRepository
from src.domain.invoice import Invoice, InvoiceStatus, month_range
from src.domain.invoice_builder import aggregate_items, compute_totals
from src.domain.invoice_item import InvoiceItem
from src.domain.invoice_sequence import build_invoice_number, to_yyyymm
from src.domain.money import VAT_DESCRIPTION, VAT_SERVICE_CODE
from . import errors
from .dtos import GenerateInvoiceCommandDTO, GenerateInvoiceResponseDTO
from .mappers import to_invoice_dto, to_item_dto

logger = logging.getLogger(__name__)


class GenerateInvoice:
    """
    Use Case: Generate the monthly invoice of a client

    Business Rules:
    1. One live invoice per (client, month); issued/paid months are final
    2. An existing draft is reused unless regenerate_draft is set
    3. Regeneration reverts the draft's events and soft deletes the draft
    4. The latest active rate dated on or before invoice_date is frozen and locked
    5. Every KRW amount is truncated to 100 won; VAT is 7% of the subtotal
    6. All writes happen in one transaction; any failure leaves no trace

    Flow:
    1. Lock the client row (serializes generation per client)
    2. Resolve the existing invoice for the month
    3. Find and lock the exchange rate
    4. Collect pending events with lock
    5. Allocate the invoice number
    6. Create the draft, stamp events, build items and totals
    7. Commit transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        client_repo: ClientRepository,
        invoice_repo: InvoiceRepository,
        item_repo: InvoiceItemRepository,
        event_repo: BillingEventRepository,
        rate_repo: ExchangeRateRepository,
        sequence_repo: InvoiceSequenceRepository,
        service_repo: ServiceCatalogRepository,
        invoice_number_prefix: str = "KRW",
        base_currency: str = "THB",
        quote_currency: str = "KRW",
    ):
        self.uow = uow
        self.client_repo = client_repo
        self.invoice_repo = invoice_repo
        self.item_repo = item_repo
        self.event_repo = event_repo
        self.rate_repo = rate_repo
        self.sequence_repo = sequence_repo
        self.service_repo = service_repo
        self.invoice_number_prefix = invoice_number_prefix
        self.base_currency = base_currency
        self.quote_currency = quote_currency

    async def execute(self, command: GenerateInvoiceCommandDTO) -> Result[GenerateInvoiceResponseDTO]:
        """
        Execute invoice generation

        Args:
            command: GenerateInvoiceCommandDTO with client, month, invoice date

        Returns:
            Result[GenerateInvoiceResponseDTO]: Draft invoice with items or error
        """
        try:
            # Step 1: Lock the client so concurrent generations queue up
            client = await self.client_repo.get_by_id(command.client_id, for_update=True)
            if not client:
                return await self._fail(
                    Error(
                        code=errors.CLIENT_NOT_FOUND,
                        message=f"Client {command.client_id} not found",
                    )
                )

            # Step 2: Existing invoice for the month decides reuse/regenerate/refuse
            existing = await self.invoice_repo.get_latest_for_month(
                command.client_id, command.invoice_month, for_update=True
            )
            if existing:
                if existing.status != InvoiceStatus.DRAFT:
                    logger.warning(
                        f"Invoice {existing.invoice_no} for client {command.client_id} "
                        f"month {command.invoice_month} is already {existing.status.value}"
                    )
                    return await self._fail(
                        Error(
                            code=errors.INVOICE_ALREADY_ISSUED,
                            message="Invoice already issued for this month",
                            reason=f"invoice_id={existing.id}, status={existing.status.value}",
                        )
                    )

                if not command.regenerate_draft:
                    items = await self.item_repo.get_by_invoice_id(existing.id)
                    response = GenerateInvoiceResponseDTO(
                        invoice=to_invoice_dto(existing),
                        items=[to_item_dto(item) for item in items],
                        reused=True,
                    )
                    # Nothing written; release the row locks
                    await self.uow.rollback()
                    return Return.ok(response)

                reverted = await self.event_repo.revert_by_invoice(existing.id)
                await self.item_repo.soft_delete_by_invoice_id(existing.id)
                await self.invoice_repo.soft_delete(existing)
                logger.info(
                    f"Discarded draft {existing.invoice_no}, {reverted} events back to PENDING"
                )

            # Step 3: Applicable rate, locked for the rest of the transaction
            rate = await self.rate_repo.find_applicable(
                command.invoice_date,
                self.base_currency,
                self.quote_currency,
                for_update=True,
            )
            if not rate:
                return await self._fail(
                    Error(
                        code=errors.FX_NOT_FOUND,
                        message=f"No active {self.base_currency}/{self.quote_currency} rate on or before {command.invoice_date}",
                        reason=f"invoice_date={command.invoice_date}",
                    )
                )
            await self.rate_repo.lock(rate.id)
            fx_rate = Decimal(rate.rate)

            # Step 4: Pending events of the month, in insertion order
            date_from, date_to = month_range(command.invoice_month)
            events = await self.event_repo.list_pending(
                command.client_id, date_from, date_to, for_update=True
            )
            if not events:
                return await self._fail(
                    Error(
                        code=errors.NO_PENDING_EVENTS,
                        message=f"No pending billing events for {command.invoice_month}",
                        reason=f"client_id={command.client_id}",
                    )
                )

            # Step 5: Allocate invoice number
            yyyymm = to_yyyymm(command.invoice_month)
            seq = await self.sequence_repo.next_sequence(command.client_id, yyyymm)
            invoice_no = build_invoice_number(
                self.invoice_number_prefix, command.client_id, yyyymm, seq
            )

            # Step 6: Draft header with zero totals, filled in below
            invoice = await self.invoice_repo.create(
                Invoice(
                    client_id=command.client_id,
                    invoice_month=command.invoice_month,
                    invoice_no=invoice_no,
                    status=InvoiceStatus.DRAFT,
                    issue_date=command.invoice_date,
                    invoice_date=command.invoice_date,
                    due_date=command.invoice_date,
                    currency=self.quote_currency,
                    fx_rate_thbkrw=fx_rate,
                    subtotal_krw=Decimal("0"),
                    vat_krw=Decimal("0"),
                    total_krw=Decimal("0"),
                    created_by=command.created_by,
                )
            )

            # Step 7: Normalize and stamp each event
            lines = []
            for event in events:
                amount_krw = event.normalized_amount_krw(fx_rate)
                lines.append((event.service_code, event.qty, amount_krw))
                await self.event_repo.mark_invoiced(event, invoice.id, amount_krw, fx_rate)

            # Step 8: One item per service, then the VAT item
            names = await self.service_repo.get_name_map()
            drafts = aggregate_items(lines)
            totals = compute_totals(drafts)

            items: List[InvoiceItem] = []
            for draft in drafts:
                items.append(
                    await self.item_repo.create(
                        InvoiceItem(
                            invoice_id=invoice.id,
                            service_code=draft.service_code,
                            description=names.get(draft.service_code, draft.service_code),
                            qty=draft.qty,
                            unit_price_krw=draft.unit_price_krw,
                            amount_krw=draft.amount_krw,
                        )
                    )
                )
            items.append(
                await self.item_repo.create(
                    InvoiceItem(
                        invoice_id=invoice.id,
                        service_code=VAT_SERVICE_CODE,
                        description=VAT_DESCRIPTION,
                        qty=Decimal("1"),
                        unit_price_krw=totals.vat_krw,
                        amount_krw=totals.vat_krw,
                    )
                )
            )

            invoice.subtotal_krw = totals.subtotal_krw
            invoice.vat_krw = totals.vat_krw
            invoice.total_krw = totals.total_krw
            invoice = await self.invoice_repo.update(invoice)

            response = GenerateInvoiceResponseDTO(
                invoice=to_invoice_dto(invoice),
                items=[to_item_dto(item) for item in items],
                reused=False,
                events_count=len(events),
                fx_rate_id=rate.id,
            )

            # Step 9: Commit transaction
            await self.uow.commit()

            logger.info(
                f"Generated invoice {invoice_no} for client {command.client_id}: "
                f"{len(events)} events, total={totals.total_krw} KRW at rate {fx_rate}"
            )
            return Return.ok(response)

        except IntegrityError as e:
            await self.uow.rollback()
            logger.warning(f"Invoice generation conflict for client {command.client_id}: {e}")
            return Return.err(
                errors.integrity_error(
                    e, errors.DUPLICATE_INVOICE_NUMBER, "Invoice number already exists"
                )
            )

        except Exception as e:
            logger.error(f"Failed to generate invoice for client {command.client_id}: {e}")
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="GENERATE_INVOICE_FAILED",
                    message="Failed to generate invoice",
                    reason=str(e),
                )
            )

    async def _fail(self, error: Error) -> Result[GenerateInvoiceResponseDTO]:
        """Undo partial work (e.g., a discarded draft) before reporting"""
        await self.uow.rollback()
        return Return.err(error)
