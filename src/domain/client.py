"""Client Domain Entity

Registry of warehouse clients. Owned by the client management module;
billing only reads it (default warehouse, existence, row lock).
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, String
from src.domain.base import BaseModel, IdType


class Client(BaseModel, table=True):
    """
    Client - Warehouse customer that receives monthly invoices

    Domain Rules:
    - client_code is unique
    - default_warehouse_id is used when a billing event carries no warehouse
    """

    __tablename__ = "clients"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique client identifier (auto-increment)"
    )

    client_code: str = Field(
        sa_column=Column(String(40), nullable=False, unique=True),
        description="Short client code (e.g., DEMO)"
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Client display name"
    )

    default_warehouse_id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
        description="Warehouse used when an event has none"
    )

    status: str = Field(
        default="active",
        sa_column=Column(String(20), nullable=False, default="active"),
        description="Client status (active, inactive)"
    )

    deleted_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Client creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )
