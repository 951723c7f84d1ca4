"""Exchange Rate Settings API Routes"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.error import ClientError, error_response
from src.api.schemas.billing_request import ExchangeRateRequestSchema
from src.app.use_cases.billing.dtos import DeletedResponseDTO, ExchangeRateCommandDTO, ExchangeRateDTO
from src.app.use_cases.billing.exchange_rates import (
    CreateExchangeRate,
    DeleteExchangeRate,
    ListExchangeRates,
    UpdateExchangeRate,
)
from src.adapter.repositories import SqlAlchemyExchangeRateRepository
from src.adapter.services import SqlAlchemyUnitOfWork
from src.depends import get_actor_id, get_session, resolve_actor

router = APIRouter(prefix="/billing/settings/exchange-rates", tags=["Settings"])

RATE_LOCKED = error_response(
    "Rate is locked or used by invoices",
    "EXCHANGE_RATE_LOCKED",
    "Exchange rate is locked/used by invoices and cannot be edited",
)


def _pair() -> dict:
    return {
        "base_currency": ApplicationConfig.BILLING_BASE_CURRENCY,
        "quote_currency": ApplicationConfig.BILLING_QUOTE_CURRENCY,
    }


@router.get("", response_model=List[ExchangeRateDTO])
async def list_exchange_rates(
    month: Optional[str] = Query(default=None, description="YYYY-MM"),
    session: AsyncSession = Depends(get_session),
):
    """THB/KRW rates, newest first, each with the number of invoices using it."""
    use_case = ListExchangeRates(
        SqlAlchemyUnitOfWork(session), SqlAlchemyExchangeRateRepository(session), **_pair()
    )
    result = await use_case.execute(month)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "",
    response_model=ExchangeRateDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: error_response(
            "Rate already entered for the date",
            "DUPLICATE_EXCHANGE_RATE",
            "Exchange rate for 2026-01-31 already exists",
        )
    },
)
async def create_exchange_rate(
    request: ExchangeRateRequestSchema,
    session: AsyncSession = Depends(get_session),
    actor_id: Optional[int] = Depends(get_actor_id),
):
    """Enter a THB/KRW rate for a date."""
    use_case = CreateExchangeRate(
        SqlAlchemyUnitOfWork(session), SqlAlchemyExchangeRateRepository(session), **_pair()
    )
    result = await use_case.execute(
        ExchangeRateCommandDTO(**request.model_dump()),
        entered_by=resolve_actor(actor_id, request.entered_by),
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.put(
    "/{rate_id}",
    response_model=ExchangeRateDTO,
    responses={
        404: error_response("Rate not found", "EXCHANGE_RATE_NOT_FOUND", "Exchange rate 4 not found"),
        409: RATE_LOCKED,
    },
)
async def update_exchange_rate(
    rate_id: int,
    request: ExchangeRateRequestSchema,
    session: AsyncSession = Depends(get_session),
    actor_id: Optional[int] = Depends(get_actor_id),
):
    """Replace a rate. Refused once the rate is locked or used by an invoice."""
    use_case = UpdateExchangeRate(
        SqlAlchemyUnitOfWork(session), SqlAlchemyExchangeRateRepository(session), **_pair()
    )
    result = await use_case.execute(
        rate_id,
        ExchangeRateCommandDTO(**request.model_dump()),
        entered_by=resolve_actor(actor_id, request.entered_by),
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.delete(
    "/{rate_id}",
    response_model=DeletedResponseDTO,
    responses={
        404: error_response("Rate not found", "EXCHANGE_RATE_NOT_FOUND", "Exchange rate 4 not found"),
        409: RATE_LOCKED,
    },
)
async def delete_exchange_rate(rate_id: int, session: AsyncSession = Depends(get_session)):
    """Soft delete a rate. Refused once the rate is locked or used by an invoice."""
    use_case = DeleteExchangeRate(
        SqlAlchemyUnitOfWork(session), SqlAlchemyExchangeRateRepository(session), **_pair()
    )
    result = await use_case.execute(rate_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
