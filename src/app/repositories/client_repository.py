"""Client Repository Interface"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional
from src.domain.client import Client


class ClientRepository(ABC):
    """Read access to the client registry"""

    @abstractmethod
    async def get_by_id(self, client_id: int, for_update: bool = False) -> Optional[Client]:
        """
        Retrieve a live client by ID

        Args:
            client_id: Client ID
            for_update: If True, lock the row with SELECT FOR UPDATE.
                Invoice generation locks the client to serialize
                concurrent runs for the same client.

        Returns:
            Client if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_code_map(self, client_ids: Iterable[int]) -> Dict[int, str]:
        """client_id -> client_code for the given clients (deleted ones included)"""
        pass

    @abstractmethod
    async def create(self, client: Client) -> Client:
        pass
