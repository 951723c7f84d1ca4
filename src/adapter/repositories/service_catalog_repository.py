"""SQLAlchemy implementation of ServiceCatalogRepository"""

from datetime import datetime
from typing import Dict, List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.service_catalog_repository import ServiceCatalogRepository
from src.domain.service_catalog import ServiceCatalog


class SqlAlchemyServiceCatalogRepository(ServiceCatalogRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> List[ServiceCatalog]:
        stmt = (
            select(ServiceCatalog)
            .where(ServiceCatalog.deleted_at.is_(None))
            .order_by(ServiceCatalog.service_code.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_code(self, service_code: str) -> Optional[ServiceCatalog]:
        stmt = (
            select(ServiceCatalog)
            .where(ServiceCatalog.service_code == service_code)
            .where(ServiceCatalog.deleted_at.is_(None))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_name_map(self) -> Dict[str, str]:
        stmt = select(ServiceCatalog.service_code, ServiceCatalog.service_name).where(
            ServiceCatalog.deleted_at.is_(None)
        )
        result = await self.session.execute(stmt)
        return {code: name for code, name in result.all()}

    async def create(self, service: ServiceCatalog) -> ServiceCatalog:
        self.session.add(service)
        await self.session.flush()
        await self.session.refresh(service)
        return service

    async def update(self, service: ServiceCatalog) -> ServiceCatalog:
        service.updated_at = datetime.utcnow()
        self.session.add(service)
        await self.session.flush()
        await self.session.refresh(service)
        return service

    async def soft_delete(self, service: ServiceCatalog) -> None:
        service.deleted_at = datetime.utcnow()
        self.session.add(service)
        await self.session.flush()
