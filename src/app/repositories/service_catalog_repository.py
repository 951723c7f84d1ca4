"""Service Catalog Repository Interface"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from src.domain.service_catalog import ServiceCatalog


class ServiceCatalogRepository(ABC):
    """Repository interface for the billable service catalog"""

    @abstractmethod
    async def list_all(self) -> List[ServiceCatalog]:
        """Live services ordered by service_code"""
        pass

    @abstractmethod
    async def get_by_code(self, service_code: str) -> Optional[ServiceCatalog]:
        pass

    @abstractmethod
    async def get_name_map(self) -> Dict[str, str]:
        """
        Map service_code -> service_name for live services

        Used for invoice item descriptions.
        """
        pass

    @abstractmethod
    async def create(self, service: ServiceCatalog) -> ServiceCatalog:
        pass

    @abstractmethod
    async def update(self, service: ServiceCatalog) -> ServiceCatalog:
        pass

    @abstractmethod
    async def soft_delete(self, service: ServiceCatalog) -> None:
        pass
