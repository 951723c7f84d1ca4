"""SQLAlchemy implementation of InvoiceSequenceRepository"""

from datetime import datetime
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_sequence_repository import InvoiceSequenceRepository
from src.domain.invoice_sequence import InvoiceSequence


class SqlAlchemyInvoiceSequenceRepository(InvoiceSequenceRepository):
    """
    SQLAlchemy implementation of InvoiceSequenceRepository

    The counter row is read with SELECT FOR UPDATE, so concurrent
    generations for the same client-month take numbers one at a time.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def next_sequence(self, client_id: int, yyyymm: str) -> int:
        stmt = (
            select(InvoiceSequence)
            .where(InvoiceSequence.client_id == client_id)
            .where(InvoiceSequence.yyyymm == yyyymm)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        counter = result.scalar_one_or_none()

        if counter is None:
            counter = InvoiceSequence(client_id=client_id, yyyymm=yyyymm, last_seq=1)
        else:
            counter.last_seq = counter.last_seq + 1
            counter.updated_at = datetime.utcnow()

        self.session.add(counter)
        await self.session.flush()
        return counter.last_seq
