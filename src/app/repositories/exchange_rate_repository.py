"""Exchange Rate Repository Interface

Defines the contract for exchange rate persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional
from src.domain.exchange_rate import ExchangeRate


class ExchangeRateRepository(ABC):
    """
    Repository interface for ExchangeRate persistence

    Lookups used by invoice generation take a pessimistic lock
    (SELECT FOR UPDATE) so the rate cannot change while it is consumed.
    """

    @abstractmethod
    async def find_applicable(
        self,
        on_or_before: date,
        base_currency: str,
        quote_currency: str,
        for_update: bool = False,
    ) -> Optional[ExchangeRate]:
        """
        Find the rate that applies on a date

        Most recent active, non-deleted rate with rate_date <= on_or_before.
        Ties on rate_date are broken by the highest id.

        Args:
            on_or_before: Invoice date
            base_currency: Base currency (THB)
            quote_currency: Quote currency (KRW)
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            ExchangeRate if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_id(self, rate_id: int, for_update: bool = False) -> Optional[ExchangeRate]:
        """
        Retrieve a live rate by ID

        Args:
            rate_id: Exchange rate ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            ExchangeRate if found, None otherwise
        """
        pass

    @abstractmethod
    async def lock(self, rate_id: int) -> None:
        """
        Mark a rate as locked

        Idempotent. A locked rate is never unlocked.

        Args:
            rate_id: Exchange rate ID
        """
        pass

    @abstractmethod
    async def usage_count(self, rate: ExchangeRate) -> int:
        """
        Count live invoices whose frozen rate equals this rate's value

        Args:
            rate: Exchange rate

        Returns:
            Number of referencing invoices
        """
        pass

    @abstractmethod
    async def list(
        self,
        base_currency: str,
        quote_currency: str,
        month: Optional[str] = None,
    ) -> List[ExchangeRate]:
        """
        List live rates for a currency pair, newest first

        Args:
            base_currency: Base currency
            quote_currency: Quote currency
            month: Optional YYYY-MM filter on rate_date

        Returns:
            List of rates ordered by rate_date DESC, id DESC
        """
        pass

    @abstractmethod
    async def create(self, rate: ExchangeRate) -> ExchangeRate:
        pass

    @abstractmethod
    async def update(self, rate: ExchangeRate) -> ExchangeRate:
        pass

    @abstractmethod
    async def soft_delete(self, rate: ExchangeRate) -> None:
        pass
