"""Unit of Work Interface

One unit of work spans one request: every repository write inside it is
committed together or rolled back together.
"""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """Transaction boundary for use cases"""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
