"""SQLAlchemy implementation of ContractRateRepository"""

from datetime import datetime
from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.contract_rate_repository import ContractRateRepository
from src.domain.contract_rate import ClientContractRate


class SqlAlchemyContractRateRepository(ContractRateRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(
        self,
        client_id: Optional[int] = None,
        service_code: Optional[str] = None,
    ) -> List[ClientContractRate]:
        stmt = select(ClientContractRate).where(ClientContractRate.deleted_at.is_(None))

        if client_id:
            stmt = stmt.where(ClientContractRate.client_id == client_id)
        if service_code:
            stmt = stmt.where(ClientContractRate.service_code == service_code)

        stmt = stmt.order_by(
            ClientContractRate.effective_date.desc(), ClientContractRate.id.desc()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, rate_id: int) -> Optional[ClientContractRate]:
        stmt = (
            select(ClientContractRate)
            .where(ClientContractRate.id == rate_id)
            .where(ClientContractRate.deleted_at.is_(None))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, rate: ClientContractRate) -> ClientContractRate:
        self.session.add(rate)
        await self.session.flush()
        await self.session.refresh(rate)
        return rate

    async def update(self, rate: ClientContractRate) -> ClientContractRate:
        rate.updated_at = datetime.utcnow()
        self.session.add(rate)
        await self.session.flush()
        await self.session.refresh(rate)
        return rate

    async def soft_delete(self, rate: ClientContractRate) -> None:
        rate.deleted_at = datetime.utcnow()
        self.session.add(rate)
        await self.session.flush()
