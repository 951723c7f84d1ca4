"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, List
from src.domain.invoice import Invoice, InvoiceStatus


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Soft-deleted invoices are invisible to every read.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve a live invoice by ID

        Args:
            invoice_id: Invoice ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_latest_for_month(
        self, client_id: int, invoice_month: str, for_update: bool = False
    ) -> Optional[Invoice]:
        """
        Retrieve the newest live invoice of a client-month

        Args:
            client_id: Client ID
            invoice_month: YYYY-MM
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Invoice with the highest id, None if the month has none
        """
        pass

    @abstractmethod
    async def list(
        self,
        client_id: Optional[int] = None,
        invoice_month: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> List[Invoice]:
        """
        List live invoices

        Returns:
            Invoices ordered by invoice_month DESC, id DESC
        """
        pass

    @abstractmethod
    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice
        """
        pass

    @abstractmethod
    async def soft_delete(self, invoice: Invoice) -> None:
        """Hide an invoice, freeing its client-month for regeneration"""
        pass
