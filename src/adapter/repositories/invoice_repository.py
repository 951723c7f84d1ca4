"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from typing import Optional, List
from datetime import datetime
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import Invoice, InvoiceStatus


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        statement = (
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .where(Invoice.deleted_at.is_(None))
        )

        if for_update:
            statement = statement.with_for_update()

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_latest_for_month(
        self, client_id: int, invoice_month: str, for_update: bool = False
    ) -> Optional[Invoice]:
        statement = (
            select(Invoice)
            .where(Invoice.client_id == client_id)
            .where(Invoice.invoice_month == invoice_month)
            .where(Invoice.deleted_at.is_(None))
            .order_by(Invoice.id.desc())
            .limit(1)
        )

        if for_update:
            statement = statement.with_for_update()

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list(
        self,
        client_id: Optional[int] = None,
        invoice_month: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> List[Invoice]:
        statement = select(Invoice).where(Invoice.deleted_at.is_(None))

        if client_id:
            statement = statement.where(Invoice.client_id == client_id)
        if invoice_month:
            statement = statement.where(Invoice.invoice_month == invoice_month)
        if status:
            statement = statement.where(Invoice.status == status)

        statement = statement.order_by(Invoice.invoice_month.desc(), Invoice.id.desc())

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, invoice: Invoice) -> Invoice:
        invoice.updated_at = datetime.utcnow()
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def soft_delete(self, invoice: Invoice) -> None:
        invoice.deleted_at = datetime.utcnow()
        self.session.add(invoice)
        await self.session.flush()
