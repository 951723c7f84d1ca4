"""Per-service billing rate use cases

Service catalog entries (default rates, invoice item names) and
client-specific contract rates.
"""

import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.contract_rate_repository import ContractRateRepository
from src.app.repositories.service_catalog_repository import ServiceCatalogRepository
from src.domain.contract_rate import ClientContractRate
from src.domain.service_catalog import ServiceCatalog
from . import errors
from .dtos import (
    ContractRateCommandDTO,
    ContractRateDTO,
    DeletedResponseDTO,
    ServiceCatalogCommandDTO,
    ServiceCatalogDTO,
)
from .mappers import to_contract_rate_dto, to_service_dto

logger = logging.getLogger(__name__)


def _failed(code: str, message: str, exc: Exception) -> Error:
    logger.error(f"{message}: {exc}")
    return Error(code=code, message=message, reason=str(exc))


class _ServiceCatalogUseCase:
    def __init__(self, uow: UnitOfWork, service_repo: ServiceCatalogRepository):
        self.uow = uow
        self.service_repo = service_repo


class ListServiceCatalog(_ServiceCatalogUseCase):
    async def execute(self) -> Result[List[ServiceCatalogDTO]]:
        try:
            services = await self.service_repo.list_all()
            return Return.ok([to_service_dto(service) for service in services])
        except Exception as e:
            return Return.err(_failed("LIST_SERVICE_CATALOG_FAILED", "Failed to list services", e))


class CreateService(_ServiceCatalogUseCase):
    """Use Case: Register a billable service (service_code is unique)"""

    async def execute(self, command: ServiceCatalogCommandDTO) -> Result[ServiceCatalogDTO]:
        try:
            service = await self.service_repo.create(ServiceCatalog(**command.model_dump()))
            response = to_service_dto(service)
            await self.uow.commit()
            return Return.ok(response)

        except IntegrityError as e:
            await self.uow.rollback()
            return Return.err(
                errors.integrity_error(
                    e, errors.DUPLICATE_SERVICE_CODE, f"Service {command.service_code} already exists"
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(_failed("CREATE_SERVICE_FAILED", "Failed to create service", e))


class UpdateService(_ServiceCatalogUseCase):
    async def execute(self, service_code: str, command: ServiceCatalogCommandDTO) -> Result[ServiceCatalogDTO]:
        try:
            service = await self.service_repo.get_by_code(service_code)
            if not service:
                return Return.err(
                    Error(code=errors.SERVICE_NOT_FOUND, message=f"Service {service_code} not found")
                )

            for field, value in command.model_dump().items():
                setattr(service, field, value)

            service = await self.service_repo.update(service)
            response = to_service_dto(service)
            await self.uow.commit()
            return Return.ok(response)

        except IntegrityError as e:
            await self.uow.rollback()
            return Return.err(
                errors.integrity_error(
                    e, errors.DUPLICATE_SERVICE_CODE, f"Service {command.service_code} already exists"
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(_failed("UPDATE_SERVICE_FAILED", "Failed to update service", e))


class DeleteService(_ServiceCatalogUseCase):
    async def execute(self, service_code: str) -> Result[DeletedResponseDTO]:
        try:
            service = await self.service_repo.get_by_code(service_code)
            if not service:
                return Return.err(
                    Error(code=errors.SERVICE_NOT_FOUND, message=f"Service {service_code} not found")
                )

            await self.service_repo.soft_delete(service)
            await self.uow.commit()
            return Return.ok(DeletedResponseDTO())

        except Exception as e:
            await self.uow.rollback()
            return Return.err(_failed("DELETE_SERVICE_FAILED", "Failed to delete service", e))


class _ContractRateUseCase:
    def __init__(self, uow: UnitOfWork, contract_repo: ContractRateRepository):
        self.uow = uow
        self.contract_repo = contract_repo


def _contract_not_found(rate_id: int) -> Error:
    return Error(code=errors.CONTRACT_RATE_NOT_FOUND, message=f"Contract rate {rate_id} not found")


class ListContractRates(_ContractRateUseCase):
    async def execute(
        self, client_id: Optional[int] = None, service_code: Optional[str] = None
    ) -> Result[List[ContractRateDTO]]:
        try:
            rates = await self.contract_repo.list(client_id=client_id, service_code=service_code)
            return Return.ok([to_contract_rate_dto(rate) for rate in rates])
        except Exception as e:
            return Return.err(
                _failed("LIST_CONTRACT_RATES_FAILED", "Failed to list contract rates", e)
            )


class CreateContractRate(_ContractRateUseCase):
    """
    Use Case: Negotiated rate for a client and service

    Business Rules:
    1. One rate per (client, service, effective_date)
    """

    async def execute(self, command: ContractRateCommandDTO) -> Result[ContractRateDTO]:
        try:
            rate = await self.contract_repo.create(ClientContractRate(**command.model_dump()))
            response = to_contract_rate_dto(rate)
            await self.uow.commit()
            return Return.ok(response)

        except IntegrityError as e:
            await self.uow.rollback()
            return Return.err(
                errors.integrity_error(
                    e, errors.DUPLICATE_CONTRACT_RATE, "Contract rate already exists for this date"
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                _failed("CREATE_CONTRACT_RATE_FAILED", "Failed to create contract rate", e)
            )


class UpdateContractRate(_ContractRateUseCase):
    async def execute(self, rate_id: int, command: ContractRateCommandDTO) -> Result[ContractRateDTO]:
        try:
            rate = await self.contract_repo.get_by_id(rate_id)
            if not rate:
                return Return.err(_contract_not_found(rate_id))

            for field, value in command.model_dump().items():
                setattr(rate, field, value)

            rate = await self.contract_repo.update(rate)
            response = to_contract_rate_dto(rate)
            await self.uow.commit()
            return Return.ok(response)

        except IntegrityError as e:
            await self.uow.rollback()
            return Return.err(
                errors.integrity_error(
                    e, errors.DUPLICATE_CONTRACT_RATE, "Contract rate already exists for this date"
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                _failed("UPDATE_CONTRACT_RATE_FAILED", "Failed to update contract rate", e)
            )


class DeleteContractRate(_ContractRateUseCase):
    async def execute(self, rate_id: int) -> Result[DeletedResponseDTO]:
        try:
            rate = await self.contract_repo.get_by_id(rate_id)
            if not rate:
                return Return.err(_contract_not_found(rate_id))

            await self.contract_repo.soft_delete(rate)
            await self.uow.commit()
            return Return.ok(DeletedResponseDTO())

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                _failed("DELETE_CONTRACT_RATE_FAILED", "Failed to delete contract rate", e)
            )
