"""Invoice lifecycle use cases

Forward-only status transitions (draft -> issued -> paid) and the admin
duplicate of a finalized invoice.
"""

import logging
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_sequence_repository import InvoiceSequenceRepository
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem
from src.domain.invoice_sequence import build_invoice_number, to_yyyymm
from . import errors
from .dtos import InvoiceDTO, InvoiceDetailDTO
from .mappers import to_invoice_dto, to_item_dto, is_trunc100

logger = logging.getLogger(__name__)


class _TransitionInvoice:
    """Move an invoice from `source` to `target` status under a row lock"""

    source: InvoiceStatus
    target: InvoiceStatus
    failure_code: str

    def __init__(self, uow: UnitOfWork, invoice_repo: InvoiceRepository):
        self.uow = uow
        self.invoice_repo = invoice_repo

    async def execute(self, invoice_id: int) -> Result[InvoiceDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not invoice:
                return await self._fail(
                    Error(code=errors.INVOICE_NOT_FOUND, message=f"Invoice {invoice_id} not found")
                )

            if invoice.status != self.source or not invoice.status.can_transition_to(self.target):
                logger.warning(
                    f"Refused {self.target.value} transition for invoice {invoice.invoice_no}: "
                    f"status is {invoice.status.value}"
                )
                return await self._fail(
                    Error(
                        code=errors.INVALID_STATUS,
                        message=f"Only {self.source.value} invoices can be {self.target.value}",
                        reason=f"status={invoice.status.value}",
                    )
                )

            invoice.status = self.target
            invoice = await self.invoice_repo.update(invoice)
            response = to_invoice_dto(invoice)
            await self.uow.commit()

            logger.info(f"Invoice {invoice.invoice_no} is now {self.target.value}")
            return Return.ok(response)

        except Exception as e:
            logger.error(f"Failed to move invoice {invoice_id} to {self.target.value}: {e}")
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=self.failure_code,
                    message=f"Failed to update invoice {invoice_id}",
                    reason=str(e),
                )
            )

    async def _fail(self, error: Error) -> Result[InvoiceDTO]:
        await self.uow.rollback()
        return Return.err(error)


class IssueInvoice(_TransitionInvoice):
    """
    Use Case: Issue a draft invoice

    Business Rules:
    1. Only draft invoices can be issued
    2. Issued invoices are final: their events can no longer be reverted
    """

    source = InvoiceStatus.DRAFT
    target = InvoiceStatus.ISSUED
    failure_code = "ISSUE_INVOICE_FAILED"


class MarkInvoicePaid(_TransitionInvoice):
    """
    Use Case: Record payment of an issued invoice

    Business Rules:
    1. Only issued invoices can be marked paid
    """

    source = InvoiceStatus.ISSUED
    target = InvoiceStatus.PAID
    failure_code = "MARK_INVOICE_PAID_FAILED"


class DuplicateInvoiceForAdmin:
    """
    Use Case: Copy a finalized invoice into a new draft

    Business Rules:
    1. Drafts cannot be duplicated (edit or regenerate them instead)
    2. The copy gets the next sequence number of the same client-month
    3. Only live items are copied; events stay linked to the original

    Flow:
    1. Load source invoice with lock
    2. Allocate a new invoice number
    3. Insert the draft copy and its items
    4. Commit transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        item_repo: InvoiceItemRepository,
        sequence_repo: InvoiceSequenceRepository,
        invoice_number_prefix: str = "KRW",
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.item_repo = item_repo
        self.sequence_repo = sequence_repo
        self.invoice_number_prefix = invoice_number_prefix

    async def execute(self, invoice_id: int, created_by: int = None) -> Result[InvoiceDetailDTO]:
        try:
            # Step 1: Load source invoice
            source = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not source:
                await self.uow.rollback()
                return Return.err(
                    Error(code=errors.INVOICE_NOT_FOUND, message=f"Invoice {invoice_id} not found")
                )
            if source.status == InvoiceStatus.DRAFT:
                error = Error(
                    code=errors.INVALID_STATUS,
                    message="Draft invoices cannot be duplicated",
                    reason=f"status={source.status.value}",
                )
                await self.uow.rollback()
                return Return.err(error)

            # Step 2: Fresh number in the same client-month
            yyyymm = to_yyyymm(source.invoice_month)
            seq = await self.sequence_repo.next_sequence(source.client_id, yyyymm)
            invoice_no = build_invoice_number(
                self.invoice_number_prefix, source.client_id, yyyymm, seq
            )

            # Step 3: Copy header and live items
            copy = await self.invoice_repo.create(
                Invoice(
                    client_id=source.client_id,
                    invoice_month=source.invoice_month,
                    invoice_no=invoice_no,
                    status=InvoiceStatus.DRAFT,
                    issue_date=source.issue_date,
                    invoice_date=source.invoice_date,
                    due_date=source.due_date,
                    currency=source.currency,
                    fx_rate_thbkrw=source.fx_rate_thbkrw,
                    subtotal_krw=source.subtotal_krw,
                    vat_krw=source.vat_krw,
                    total_krw=source.total_krw,
                    created_by=created_by if created_by is not None else source.created_by,
                )
            )

            items = []
            for item in await self.item_repo.get_by_invoice_id(source.id):
                items.append(
                    await self.item_repo.create(
                        InvoiceItem(
                            invoice_id=copy.id,
                            service_code=item.service_code,
                            description=item.description,
                            qty=item.qty,
                            unit_price_krw=item.unit_price_krw,
                            amount_krw=item.amount_krw,
                        )
                    )
                )

            response = InvoiceDetailDTO(
                invoice=to_invoice_dto(copy),
                items=[to_item_dto(item) for item in items],
                subtotal_trunc100=is_trunc100(copy.subtotal_krw),
                vat_trunc100=is_trunc100(copy.vat_krw),
                total_trunc100=is_trunc100(copy.total_krw),
            )

            # Step 4: Commit transaction
            await self.uow.commit()

            logger.info(f"Duplicated invoice {source.invoice_no} as draft {invoice_no}")
            return Return.ok(response)

        except IntegrityError as e:
            await self.uow.rollback()
            return Return.err(
                errors.integrity_error(
                    e, errors.DUPLICATE_INVOICE_NUMBER, "Invoice number already exists"
                )
            )

        except Exception as e:
            logger.error(f"Failed to duplicate invoice {invoice_id}: {e}")
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DUPLICATE_INVOICE_FAILED",
                    message="Failed to duplicate invoice",
                    reason=str(e),
                )
            )
