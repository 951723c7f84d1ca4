"""Invoice Item Repository Interface

Defines the contract for invoice item persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.invoice_item import InvoiceItem


class InvoiceItemRepository(ABC):
    """
    Repository interface for InvoiceItem persistence

    Provides access to invoice line items for billing operations.
    """

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: int) -> List[InvoiceItem]:
        """
        Retrieve all live items of an invoice

        Args:
            invoice_id: Invoice ID

        Returns:
            List of InvoiceItem ordered by id
        """
        pass

    @abstractmethod
    async def create(self, item: InvoiceItem) -> InvoiceItem:
        """
        Create a new invoice item

        Args:
            item: InvoiceItem entity to persist

        Returns:
            Created InvoiceItem with generated ID
        """
        pass

    @abstractmethod
    async def soft_delete_by_invoice_id(self, invoice_id: int) -> int:
        """
        Soft delete every live item of an invoice

        Returns:
            Number of items deleted
        """
        pass
