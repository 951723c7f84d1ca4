"""Service Rate Settings API Routes

Service catalog and client contract rate maintenance.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import ClientError, error_response
from src.api.schemas.billing_request import ContractRateRequestSchema, ServiceCatalogRequestSchema
from src.app.use_cases.billing.dtos import (
    ContractRateCommandDTO,
    ContractRateDTO,
    DeletedResponseDTO,
    ServiceCatalogCommandDTO,
    ServiceCatalogDTO,
)
from src.app.use_cases.billing.service_rates import (
    CreateContractRate,
    CreateService,
    DeleteContractRate,
    DeleteService,
    ListContractRates,
    ListServiceCatalog,
    UpdateContractRate,
    UpdateService,
)
from src.adapter.repositories import (
    SqlAlchemyContractRateRepository,
    SqlAlchemyServiceCatalogRepository,
)
from src.adapter.services import SqlAlchemyUnitOfWork
from src.depends import get_session

router = APIRouter(prefix="/billing/settings", tags=["Settings"])

SERVICE_NOT_FOUND = error_response("Service not found", "SERVICE_NOT_FOUND", "Service TH_BOX not found")
CONTRACT_NOT_FOUND = error_response(
    "Contract rate not found", "CONTRACT_RATE_NOT_FOUND", "Contract rate 3 not found"
)


def _raise_on_error(result):
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/service-catalog", response_model=List[ServiceCatalogDTO])
async def list_services(session: AsyncSession = Depends(get_session)):
    use_case = ListServiceCatalog(
        SqlAlchemyUnitOfWork(session), SqlAlchemyServiceCatalogRepository(session)
    )
    return _raise_on_error(await use_case.execute())


@router.post(
    "/service-catalog",
    response_model=ServiceCatalogDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: error_response(
            "Service code taken", "DUPLICATE_SERVICE_CODE", "Service TH_BOX already exists"
        )
    },
)
async def create_service(
    request: ServiceCatalogRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """Register a billable service. Its name becomes the invoice item description."""
    use_case = CreateService(
        SqlAlchemyUnitOfWork(session), SqlAlchemyServiceCatalogRepository(session)
    )
    return _raise_on_error(await use_case.execute(ServiceCatalogCommandDTO(**request.model_dump())))


@router.put(
    "/service-catalog/{service_code}",
    response_model=ServiceCatalogDTO,
    responses={404: SERVICE_NOT_FOUND},
)
async def update_service(
    service_code: str,
    request: ServiceCatalogRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    use_case = UpdateService(
        SqlAlchemyUnitOfWork(session), SqlAlchemyServiceCatalogRepository(session)
    )
    return _raise_on_error(
        await use_case.execute(service_code, ServiceCatalogCommandDTO(**request.model_dump()))
    )


@router.delete(
    "/service-catalog/{service_code}",
    response_model=DeletedResponseDTO,
    responses={404: SERVICE_NOT_FOUND},
)
async def delete_service(service_code: str, session: AsyncSession = Depends(get_session)):
    use_case = DeleteService(
        SqlAlchemyUnitOfWork(session), SqlAlchemyServiceCatalogRepository(session)
    )
    return _raise_on_error(await use_case.execute(service_code))


@router.get("/client-contract-rates", response_model=List[ContractRateDTO])
async def list_contract_rates(
    client_id: Optional[int] = Query(default=None),
    service_code: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    use_case = ListContractRates(
        SqlAlchemyUnitOfWork(session), SqlAlchemyContractRateRepository(session)
    )
    return _raise_on_error(await use_case.execute(client_id=client_id, service_code=service_code))


@router.post(
    "/client-contract-rates",
    response_model=ContractRateDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: error_response(
            "Rate already set for the date",
            "DUPLICATE_CONTRACT_RATE",
            "Contract rate already exists for this date",
        )
    },
)
async def create_contract_rate(
    request: ContractRateRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """Negotiated price for one client and service from an effective date."""
    use_case = CreateContractRate(
        SqlAlchemyUnitOfWork(session), SqlAlchemyContractRateRepository(session)
    )
    return _raise_on_error(await use_case.execute(ContractRateCommandDTO(**request.model_dump())))


@router.put(
    "/client-contract-rates/{rate_id}",
    response_model=ContractRateDTO,
    responses={404: CONTRACT_NOT_FOUND},
)
async def update_contract_rate(
    rate_id: int,
    request: ContractRateRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    use_case = UpdateContractRate(
        SqlAlchemyUnitOfWork(session), SqlAlchemyContractRateRepository(session)
    )
    return _raise_on_error(
        await use_case.execute(rate_id, ContractRateCommandDTO(**request.model_dump()))
    )


@router.delete(
    "/client-contract-rates/{rate_id}",
    response_model=DeletedResponseDTO,
    responses={404: CONTRACT_NOT_FOUND},
)
async def delete_contract_rate(rate_id: int, session: AsyncSession = Depends(get_session)):
    use_case = DeleteContractRate(
        SqlAlchemyUnitOfWork(session), SqlAlchemyContractRateRepository(session)
    )
    return _raise_on_error(await use_case.execute(rate_id))
