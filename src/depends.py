from typing import Optional
from fastapi import Header
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_actor_id(x_actor_id: Optional[int] = Header(default=None)) -> Optional[int]:
    """Acting user from the X-Actor-Id header, if the caller sent one"""
    return x_actor_id


def resolve_actor(header_actor: Optional[int], payload_actor: Optional[int] = None) -> int:
    """Header wins, then the payload, then the configured default actor"""
    if header_actor:
        return header_actor
    if payload_actor:
        return payload_actor
    return ApplicationConfig.DEFAULT_ACTOR_ID
