"""SQLAlchemy implementation of ClientRepository"""

from typing import Dict, Iterable, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.client_repository import ClientRepository
from src.domain.client import Client


class SqlAlchemyClientRepository(ClientRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, client_id: int, for_update: bool = False) -> Optional[Client]:
        stmt = select(Client).where(Client.id == client_id).where(Client.deleted_at.is_(None))

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_code_map(self, client_ids: Iterable[int]) -> Dict[int, str]:
        ids = list(set(client_ids))
        if not ids:
            return {}
        stmt = select(Client.id, Client.client_code).where(Client.id.in_(ids))
        result = await self.session.execute(stmt)
        return {client_id: code for client_id, code in result.all()}

    async def create(self, client: Client) -> Client:
        self.session.add(client)
        await self.session.flush()
        await self.session.refresh(client)
        return client
