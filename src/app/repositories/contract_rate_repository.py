"""Client Contract Rate Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.contract_rate import ClientContractRate


class ContractRateRepository(ABC):
    """Repository interface for per-client service rates"""

    @abstractmethod
    async def list(
        self,
        client_id: Optional[int] = None,
        service_code: Optional[str] = None,
    ) -> List[ClientContractRate]:
        """Live rates, newest effective_date first"""
        pass

    @abstractmethod
    async def get_by_id(self, rate_id: int) -> Optional[ClientContractRate]:
        pass

    @abstractmethod
    async def create(self, rate: ClientContractRate) -> ClientContractRate:
        pass

    @abstractmethod
    async def update(self, rate: ClientContractRate) -> ClientContractRate:
        pass

    @abstractmethod
    async def soft_delete(self, rate: ClientContractRate) -> None:
        pass
