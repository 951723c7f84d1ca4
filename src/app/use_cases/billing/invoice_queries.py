"""Read-side invoice use cases: detail, listing and PDF export"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.pdf_service import PdfService
from src.domain.invoice import InvoiceStatus
from . import errors
from .dtos import InvoiceDetailDTO, InvoicePdfExportDTO, ListInvoicesResponseDTO
from .mappers import is_trunc100, to_invoice_dto, to_item_dto

logger = logging.getLogger(__name__)


def _not_found(invoice_id: int) -> Error:
    return Error(code=errors.INVOICE_NOT_FOUND, message=f"Invoice {invoice_id} not found")


class GetInvoice:
    """
    Use Case: Invoice with its live items

    Every monetary field carries a flag telling whether it is a multiple
    of 100 won, so reviewers can spot hand-edited amounts.
    """

    def __init__(self, invoice_repo: InvoiceRepository, item_repo: InvoiceItemRepository):
        self.invoice_repo = invoice_repo
        self.item_repo = item_repo

    async def execute(self, invoice_id: int) -> Result[InvoiceDetailDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice:
                return Return.err(_not_found(invoice_id))

            items = await self.item_repo.get_by_invoice_id(invoice.id)

            return Return.ok(
                InvoiceDetailDTO(
                    invoice=to_invoice_dto(invoice),
                    items=[to_item_dto(item) for item in items],
                    subtotal_trunc100=is_trunc100(invoice.subtotal_krw),
                    vat_trunc100=is_trunc100(invoice.vat_krw),
                    total_trunc100=is_trunc100(invoice.total_krw),
                )
            )

        except Exception as e:
            logger.error(f"Failed to load invoice {invoice_id}: {e}")
            return Return.err(
                Error(code="GET_INVOICE_FAILED", message="Failed to load invoice", reason=str(e))
            )


class ListInvoices:
    """Use Case: Invoices filtered by client, month and status"""

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(
        self,
        client_id: Optional[int] = None,
        invoice_month: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Result[ListInvoicesResponseDTO]:
        # Unknown status values are ignored, not rejected
        try:
            status_filter = InvoiceStatus(status.lower()) if status else None
        except ValueError:
            status_filter = None

        try:
            invoices = await self.invoice_repo.list(
                client_id=client_id,
                invoice_month=invoice_month,
                status=status_filter,
            )
            return Return.ok(
                ListInvoicesResponseDTO(invoices=[to_invoice_dto(invoice) for invoice in invoices])
            )

        except Exception as e:
            logger.error(f"Failed to list invoices: {e}")
            return Return.err(
                Error(code="LIST_INVOICES_FAILED", message="Failed to list invoices", reason=str(e))
            )


class ExportInvoicePdf:
    """Use Case: Hand an invoice to the PDF renderer"""

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        item_repo: InvoiceItemRepository,
        pdf_service: PdfService,
    ):
        self.invoice_repo = invoice_repo
        self.item_repo = item_repo
        self.pdf_service = pdf_service

    async def execute(self, invoice_id: int) -> Result[InvoicePdfExportDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice:
                return Return.err(_not_found(invoice_id))

            items = await self.item_repo.get_by_invoice_id(invoice.id)
            export = self.pdf_service.export_invoice(invoice, items)

            return Return.ok(
                InvoicePdfExportDTO(
                    invoice_id=invoice.id,
                    invoice_no=invoice.invoice_no,
                    status=export.status,
                    message=export.message,
                    download_url=export.download_url,
                )
            )

        except Exception as e:
            logger.error(f"Failed to export invoice {invoice_id}: {e}")
            return Return.err(
                Error(
                    code="EXPORT_INVOICE_PDF_FAILED",
                    message="Failed to export invoice PDF",
                    reason=str(e),
                )
            )
