"""SQLAlchemy implementation of BillingEventRepository

Provides persistence for the billing event ledger with pessimistic
locking support for status transitions.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import and_, update
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.billing_event_repository import BillingEventRepository
from src.domain.billing_event import BillingEvent, BillingEventStatus
from src.domain.invoice import Invoice, InvoiceStatus, month_range


class SqlAlchemyBillingEventRepository(BillingEventRepository):
    """
    SQLAlchemy implementation of BillingEventRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Bulk status updates for reverts
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, event: BillingEvent) -> BillingEvent:
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event

    async def list_pending(
        self,
        client_id: int,
        date_from: date,
        date_to: date,
        for_update: bool = False,
    ) -> List[BillingEvent]:
        stmt = (
            select(BillingEvent)
            .where(BillingEvent.client_id == client_id)
            .where(BillingEvent.status == BillingEventStatus.PENDING)
            .where(BillingEvent.deleted_at.is_(None))
            .where(BillingEvent.event_date >= date_from)
            .where(BillingEvent.event_date < date_to)
            .order_by(BillingEvent.id.asc())
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_invoiced(
        self,
        event: BillingEvent,
        invoice_id: int,
        amount_krw: Decimal,
        fx_rate: Decimal,
    ) -> None:
        event.amount_krw = amount_krw
        event.fx_rate_thbkrw = fx_rate
        event.status = BillingEventStatus.INVOICED
        event.invoice_id = invoice_id
        event.updated_at = datetime.utcnow()
        self.session.add(event)
        await self.session.flush()

    async def revert_by_invoice(self, invoice_id: int) -> int:
        stmt = (
            update(BillingEvent)
            .where(BillingEvent.invoice_id == invoice_id)
            .where(BillingEvent.deleted_at.is_(None))
            .values(
                status=BillingEventStatus.PENDING,
                invoice_id=None,
                fx_rate_thbkrw=None,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def get_with_invoice_status(
        self, event_ids: List[int], for_update: bool = False
    ) -> List[Tuple[BillingEvent, Optional[InvoiceStatus]]]:
        stmt = (
            select(BillingEvent, Invoice.status)
            .outerjoin(
                Invoice,
                and_(Invoice.id == BillingEvent.invoice_id, Invoice.deleted_at.is_(None)),
            )
            .where(BillingEvent.id.in_(event_ids))
            .where(BillingEvent.deleted_at.is_(None))
            .order_by(BillingEvent.id.asc())
        )

        if for_update:
            # Only the event rows; the invoice side of an outer join cannot be locked
            stmt = stmt.with_for_update(of=BillingEvent)

        result = await self.session.execute(stmt)
        return [(event, invoice_status) for event, invoice_status in result.all()]

    async def revert_to_pending(self, event_ids: List[int]) -> int:
        stmt = (
            update(BillingEvent)
            .where(BillingEvent.id.in_(event_ids))
            .where(BillingEvent.deleted_at.is_(None))
            .values(
                status=BillingEventStatus.PENDING,
                invoice_id=None,
                fx_rate_thbkrw=None,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    def _filtered(
        self,
        stmt,
        client_id: Optional[int] = None,
        status: Optional[BillingEventStatus] = None,
        service_code: Optional[str] = None,
        warehouse_id: Optional[int] = None,
        invoice_month: Optional[str] = None,
    ):
        stmt = stmt.where(BillingEvent.deleted_at.is_(None))

        if client_id:
            stmt = stmt.where(BillingEvent.client_id == client_id)
        if status:
            stmt = stmt.where(BillingEvent.status == status)
        if service_code:
            stmt = stmt.where(BillingEvent.service_code == service_code)
        if warehouse_id:
            stmt = stmt.where(BillingEvent.warehouse_id == warehouse_id)
        if invoice_month:
            start, end = month_range(invoice_month)
            stmt = stmt.where(BillingEvent.event_date >= start).where(BillingEvent.event_date < end)

        return stmt

    async def list(
        self,
        client_id: Optional[int] = None,
        status: Optional[BillingEventStatus] = None,
        service_code: Optional[str] = None,
        warehouse_id: Optional[int] = None,
        invoice_month: Optional[str] = None,
    ) -> List[BillingEvent]:
        stmt = self._filtered(
            select(BillingEvent),
            client_id=client_id,
            status=status,
            service_code=service_code,
            warehouse_id=warehouse_id,
            invoice_month=invoice_month,
        )
        stmt = stmt.order_by(BillingEvent.event_date.desc(), BillingEvent.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_missing_warehouse(
        self,
        client_id: Optional[int] = None,
        status: Optional[BillingEventStatus] = None,
        service_code: Optional[str] = None,
        invoice_month: Optional[str] = None,
    ) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(BillingEvent),
            client_id=client_id,
            status=status,
            service_code=service_code,
            invoice_month=invoice_month,
        )
        stmt = stmt.where(BillingEvent.warehouse_id.is_(None))
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
