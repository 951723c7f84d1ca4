"""Exchange rate settings use cases

CRUD over THB/KRW rates. Rates consumed by an invoice are frozen.
"""

import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.exchange_rate_repository import ExchangeRateRepository
from src.domain.exchange_rate import ExchangeRate
from . import errors
from .dtos import DeletedResponseDTO, ExchangeRateCommandDTO, ExchangeRateDTO
from .mappers import to_exchange_rate_dto

logger = logging.getLogger(__name__)


def _not_found(rate_id: int) -> Error:
    return Error(code=errors.EXCHANGE_RATE_NOT_FOUND, message=f"Exchange rate {rate_id} not found")


def _locked(rate: ExchangeRate, usage_count: int, action: str) -> Error:
    return Error(
        code=errors.EXCHANGE_RATE_LOCKED,
        message=f"Exchange rate is locked/used by invoices and cannot be {action}",
        reason=f"locked={rate.locked}, used_invoice_count={usage_count}",
    )


class _ExchangeRateUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        rate_repo: ExchangeRateRepository,
        base_currency: str = "THB",
        quote_currency: str = "KRW",
    ):
        self.uow = uow
        self.rate_repo = rate_repo
        self.base_currency = base_currency
        self.quote_currency = quote_currency


class ListExchangeRates(_ExchangeRateUseCase):
    """Use Case: Rates of the pair, newest first, with invoice usage"""

    async def execute(self, month: Optional[str] = None) -> Result[List[ExchangeRateDTO]]:
        try:
            rates = await self.rate_repo.list(self.base_currency, self.quote_currency, month)
            response = []
            for rate in rates:
                used = await self.rate_repo.usage_count(rate)
                response.append(to_exchange_rate_dto(rate, used))
            return Return.ok(response)

        except Exception as e:
            logger.error(f"Failed to list exchange rates: {e}")
            return Return.err(
                Error(
                    code="LIST_EXCHANGE_RATES_FAILED",
                    message="Failed to list exchange rates",
                    reason=str(e),
                )
            )


class CreateExchangeRate(_ExchangeRateUseCase):
    """
    Use Case: Enter a new rate

    Business Rules:
    1. One rate per pair and date (DUPLICATE_EXCHANGE_RATE otherwise)
    """

    async def execute(self, command: ExchangeRateCommandDTO, entered_by: Optional[int] = None) -> Result[ExchangeRateDTO]:
        try:
            rate = await self.rate_repo.create(
                ExchangeRate(
                    rate_date=command.rate_date,
                    base_currency=self.base_currency,
                    quote_currency=self.quote_currency,
                    rate=command.rate,
                    source=command.source,
                    locked=command.locked,
                    status=command.status,
                    entered_by=entered_by if entered_by is not None else command.entered_by,
                )
            )
            response = to_exchange_rate_dto(rate)
            await self.uow.commit()

            logger.info(f"Exchange rate {command.rate} entered for {command.rate_date}")
            return Return.ok(response)

        except IntegrityError as e:
            await self.uow.rollback()
            return Return.err(
                errors.integrity_error(
                    e,
                    errors.DUPLICATE_EXCHANGE_RATE,
                    f"Exchange rate for {command.rate_date} already exists",
                )
            )

        except Exception as e:
            logger.error(f"Failed to create exchange rate: {e}")
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_EXCHANGE_RATE_FAILED",
                    message="Failed to create exchange rate",
                    reason=str(e),
                )
            )


class UpdateExchangeRate(_ExchangeRateUseCase):
    """
    Use Case: Replace a rate's values

    Business Rules:
    1. Locked rates and rates referenced by a live invoice are immutable
    """

    async def execute(
        self, rate_id: int, command: ExchangeRateCommandDTO, entered_by: Optional[int] = None
    ) -> Result[ExchangeRateDTO]:
        try:
            rate = await self.rate_repo.get_by_id(rate_id, for_update=True)
            if not rate:
                await self.uow.rollback()
                return Return.err(_not_found(rate_id))

            used = await self.rate_repo.usage_count(rate)
            if not rate.is_mutable(used):
                logger.warning(f"Refused update of exchange rate {rate_id}: locked or in use")
                error = _locked(rate, used, "edited")
                await self.uow.rollback()
                return Return.err(error)

            rate.rate_date = command.rate_date
            rate.rate = command.rate
            rate.source = command.source
            rate.locked = command.locked
            rate.status = command.status
            if entered_by is not None or command.entered_by is not None:
                rate.entered_by = entered_by if entered_by is not None else command.entered_by

            rate = await self.rate_repo.update(rate)
            response = to_exchange_rate_dto(rate)
            await self.uow.commit()
            return Return.ok(response)

        except IntegrityError as e:
            await self.uow.rollback()
            return Return.err(
                errors.integrity_error(
                    e,
                    errors.DUPLICATE_EXCHANGE_RATE,
                    f"Exchange rate for {command.rate_date} already exists",
                )
            )

        except Exception as e:
            logger.error(f"Failed to update exchange rate {rate_id}: {e}")
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_EXCHANGE_RATE_FAILED",
                    message="Failed to update exchange rate",
                    reason=str(e),
                )
            )


class DeleteExchangeRate(_ExchangeRateUseCase):
    """Use Case: Soft delete an unused, unlocked rate"""

    async def execute(self, rate_id: int) -> Result[DeletedResponseDTO]:
        try:
            rate = await self.rate_repo.get_by_id(rate_id, for_update=True)
            if not rate:
                await self.uow.rollback()
                return Return.err(_not_found(rate_id))

            used = await self.rate_repo.usage_count(rate)
            if not rate.is_mutable(used):
                logger.warning(f"Refused delete of exchange rate {rate_id}: locked or in use")
                error = _locked(rate, used, "deleted")
                await self.uow.rollback()
                return Return.err(error)

            await self.rate_repo.soft_delete(rate)
            await self.uow.commit()
            return Return.ok(DeletedResponseDTO())

        except Exception as e:
            logger.error(f"Failed to delete exchange rate {rate_id}: {e}")
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_EXCHANGE_RATE_FAILED",
                    message="Failed to delete exchange rate",
                    reason=str(e),
                )
            )
