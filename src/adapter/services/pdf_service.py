"""Stub Invoice PDF Export Service

Rendering is not wired to a PDF engine yet; the export reports the
invoice it would render and returns no download URL.
"""

import logging
from typing import List

from src.app.services.pdf_service import PdfService, PdfExport
from src.domain.invoice import Invoice
from src.domain.invoice_item import InvoiceItem

logger = logging.getLogger(__name__)


class StubPdfService(PdfService):
    """PdfService that acknowledges the request without rendering"""

    def export_invoice(self, invoice: Invoice, items: List[InvoiceItem]) -> PdfExport:
        logger.info(
            f"PDF export requested for invoice {invoice.invoice_no} ({len(items)} items); "
            f"renderer not configured"
        )
        return PdfExport(
            status="stub",
            message="PDF export endpoint is ready. Implement renderer integration next.",
            download_url=None,
        )
