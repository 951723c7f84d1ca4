"""Invoice Sequence Repository Interface"""

from abc import ABC, abstractmethod


class InvoiceSequenceRepository(ABC):
    """
    Repository interface for per client-month invoice counters

    Must run inside the transaction that creates the invoice so the
    increment rolls back with it.
    """

    @abstractmethod
    async def next_sequence(self, client_id: int, yyyymm: str) -> int:
        """
        Advance the counter for (client_id, yyyymm) under a row lock

        Creates the counter at 1 when absent.

        Args:
            client_id: Client ID
            yyyymm: Month as YYYYMM

        Returns:
            The new sequence value
        """
        pass
