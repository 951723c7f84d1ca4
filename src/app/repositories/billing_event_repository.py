"""Billing Event Repository Interface

Defines the contract for the billing event ledger.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple
from src.domain.billing_event import BillingEvent, BillingEventStatus
from src.domain.invoice import InvoiceStatus


class BillingEventRepository(ABC):
    """
    Repository interface for BillingEvent persistence

    Events are read under SELECT FOR UPDATE whenever they are about to
    change status, so two transactions cannot invoice the same event.
    """

    @abstractmethod
    async def create(self, event: BillingEvent) -> BillingEvent:
        """
        Append a new event

        Args:
            event: BillingEvent to persist (PENDING, no invoice link)

        Returns:
            Created BillingEvent with generated ID
        """
        pass

    @abstractmethod
    async def list_pending(
        self,
        client_id: int,
        date_from: date,
        date_to: date,
        for_update: bool = False,
    ) -> List[BillingEvent]:
        """
        List PENDING events of a client in [date_from, date_to)

        Args:
            client_id: Client ID
            date_from: Inclusive start
            date_to: Exclusive end
            for_update: If True, lock the rows with SELECT FOR UPDATE

        Returns:
            Events ordered by id ascending (insertion order)
        """
        pass

    @abstractmethod
    async def mark_invoiced(
        self,
        event: BillingEvent,
        invoice_id: int,
        amount_krw: Decimal,
        fx_rate: Decimal,
    ) -> None:
        """
        Transition an event PENDING -> INVOICED

        Args:
            event: Pending event (already locked)
            invoice_id: Invoice consuming the event
            amount_krw: Normalized KRW amount
            fx_rate: Frozen THB->KRW rate
        """
        pass

    @abstractmethod
    async def revert_by_invoice(self, invoice_id: int) -> int:
        """
        Return every live event of an invoice to PENDING

        Clears invoice_id and fx_rate_thbkrw.

        Returns:
            Number of events reverted
        """
        pass

    @abstractmethod
    async def get_with_invoice_status(
        self, event_ids: List[int], for_update: bool = False
    ) -> List[Tuple[BillingEvent, Optional[InvoiceStatus]]]:
        """
        Load live events together with the status of their live invoice

        Args:
            event_ids: Event IDs
            for_update: If True, lock the event rows with SELECT FOR UPDATE

        Returns:
            (event, invoice status or None) pairs
        """
        pass

    @abstractmethod
    async def revert_to_pending(self, event_ids: List[int]) -> int:
        """
        Return events to PENDING, clearing invoice link and frozen rate

        Returns:
            Number of events updated
        """
        pass

    @abstractmethod
    async def list(
        self,
        client_id: Optional[int] = None,
        status: Optional[BillingEventStatus] = None,
        service_code: Optional[str] = None,
        warehouse_id: Optional[int] = None,
        invoice_month: Optional[str] = None,
    ) -> List[BillingEvent]:
        """
        List live events matching the filters

        Returns:
            Events ordered by event_date DESC, id DESC
        """
        pass

    @abstractmethod
    async def count_missing_warehouse(
        self,
        client_id: Optional[int] = None,
        status: Optional[BillingEventStatus] = None,
        service_code: Optional[str] = None,
        invoice_month: Optional[str] = None,
    ) -> int:
        """Count live events matching the filters that have no warehouse"""
        pass
