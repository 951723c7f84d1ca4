"""Invoice PDF Export Service Interface

Defines the contract for rendering invoices to a downloadable document.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from pydantic import BaseModel
from src.domain.invoice import Invoice
from src.domain.invoice_item import InvoiceItem


class PdfExport(BaseModel):
    """Outcome of an export request"""

    status: str
    message: str
    download_url: Optional[str] = None


class PdfService(ABC):
    """
    Service interface for invoice PDF export

    Implementations render the invoice and its live items and return
    where the document can be downloaded.
    """

    @abstractmethod
    def export_invoice(self, invoice: Invoice, items: List[InvoiceItem]) -> PdfExport:
        """
        Export an invoice as PDF

        Args:
            invoice: Invoice to render
            items: Live (non-deleted) items of the invoice

        Returns:
            PdfExport describing the rendered document
        """
        pass
