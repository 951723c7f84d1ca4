"""Base model and shared column types for domain entities"""

from sqlalchemy import BigInteger, Integer
from sqlmodel import SQLModel

# BIGINT primary keys; SQLite only autoincrements INTEGER PRIMARY KEY columns
IdType = BigInteger().with_variant(Integer(), "sqlite")


class BaseModel(SQLModel):
    """Base class for all table entities"""
    pass


