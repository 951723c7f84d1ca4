"""SQLAlchemy implementation of ExchangeRateRepository

Provides persistence for ExchangeRate entities with pessimistic locking
support so a rate cannot change while invoice generation consumes it.
"""

from datetime import date, datetime
from typing import List, Optional
from sqlalchemy import update
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.exchange_rate_repository import ExchangeRateRepository
from src.domain.exchange_rate import ExchangeRate, ExchangeRateStatus
from src.domain.invoice import Invoice, month_range


class SqlAlchemyExchangeRateRepository(ExchangeRateRepository):
    """
    SQLAlchemy implementation of ExchangeRateRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Soft delete via deleted_at
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_applicable(
        self,
        on_or_before: date,
        base_currency: str,
        quote_currency: str,
        for_update: bool = False,
    ) -> Optional[ExchangeRate]:
        stmt = (
            select(ExchangeRate)
            .where(ExchangeRate.base_currency == base_currency)
            .where(ExchangeRate.quote_currency == quote_currency)
            .where(ExchangeRate.deleted_at.is_(None))
            .where(ExchangeRate.status == ExchangeRateStatus.ACTIVE)
            .where(ExchangeRate.rate_date <= on_or_before)
            .order_by(ExchangeRate.rate_date.desc(), ExchangeRate.id.desc())
            .limit(1)
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, rate_id: int, for_update: bool = False) -> Optional[ExchangeRate]:
        stmt = (
            select(ExchangeRate)
            .where(ExchangeRate.id == rate_id)
            .where(ExchangeRate.deleted_at.is_(None))
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def lock(self, rate_id: int) -> None:
        """
        Set locked = true

        Note:
            Should be called within a transaction with the rate already locked
        """
        stmt = (
            update(ExchangeRate)
            .where(ExchangeRate.id == rate_id)
            .values(locked=True, updated_at=datetime.utcnow())
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)

    async def usage_count(self, rate: ExchangeRate) -> int:
        stmt = (
            select(func.count())
            .select_from(Invoice)
            .where(Invoice.deleted_at.is_(None))
            .where(Invoice.fx_rate_thbkrw == rate.rate)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list(
        self,
        base_currency: str,
        quote_currency: str,
        month: Optional[str] = None,
    ) -> List[ExchangeRate]:
        stmt = (
            select(ExchangeRate)
            .where(ExchangeRate.deleted_at.is_(None))
            .where(ExchangeRate.base_currency == base_currency)
            .where(ExchangeRate.quote_currency == quote_currency)
        )

        if month:
            start, end = month_range(month)
            stmt = stmt.where(ExchangeRate.rate_date >= start).where(ExchangeRate.rate_date < end)

        stmt = stmt.order_by(ExchangeRate.rate_date.desc(), ExchangeRate.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, rate: ExchangeRate) -> ExchangeRate:
        self.session.add(rate)
        await self.session.flush()
        await self.session.refresh(rate)
        return rate

    async def update(self, rate: ExchangeRate) -> ExchangeRate:
        rate.updated_at = datetime.utcnow()
        self.session.add(rate)
        await self.session.flush()
        await self.session.refresh(rate)
        return rate

    async def soft_delete(self, rate: ExchangeRate) -> None:
        rate.deleted_at = datetime.utcnow()
        self.session.add(rate)
        await self.session.flush()
