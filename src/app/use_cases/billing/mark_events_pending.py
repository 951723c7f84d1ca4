"""MarkEventsPending Use Case

Returns invoiced billing events to PENDING so they can be invoiced again.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.billing_event_repository import BillingEventRepository
from src.domain.invoice import InvoiceStatus
from . import errors
from .dtos import MarkEventsPendingCommandDTO, MarkEventsPendingResponseDTO

logger = logging.getLogger(__name__)

_FINAL_STATUSES = (InvoiceStatus.ISSUED, InvoiceStatus.PAID)


class MarkEventsPending:
    """
    Use Case: Revert billing events to PENDING

    Business Rules:
    1. Events of issued or paid invoices are locked
    2. All-or-nothing: one locked event blocks the whole request
    3. Reverted events lose their invoice link and frozen rate

    Flow:
    1. Load targeted events with their invoice status (SELECT FOR UPDATE)
    2. Refuse if any linked invoice is final
    3. Revert and commit
    """

    def __init__(self, uow: UnitOfWork, event_repo: BillingEventRepository):
        self.uow = uow
        self.event_repo = event_repo

    async def execute(self, command: MarkEventsPendingCommandDTO) -> Result[MarkEventsPendingResponseDTO]:
        try:
            # Step 1: Lock the events
            rows = await self.event_repo.get_with_invoice_status(command.ids, for_update=True)
            if not rows:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code=errors.EVENTS_NOT_FOUND,
                        message="No billing events found",
                        reason=f"ids={command.ids}",
                    )
                )

            # Step 2: Final invoices keep their events
            blocked = [event.id for event, status in rows if status in _FINAL_STATUSES]
            if blocked:
                logger.warning(f"Refused to revert events {blocked}: linked invoice is issued/paid")
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code=errors.EVENTS_LOCKED,
                        message="Cannot mark events pending when linked invoice is issued or paid",
                        reason=f"blocked_ids={blocked}",
                    )
                )

            # Step 3: Revert
            await self.event_repo.revert_to_pending([event.id for event, _ in rows])
            await self.uow.commit()

            logger.info(f"Reverted {len(rows)} billing events to PENDING")
            return Return.ok(MarkEventsPendingResponseDTO(updated=len(rows)))

        except Exception as e:
            logger.error(f"Failed to mark events pending: {e}")
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="MARK_EVENTS_PENDING_FAILED",
                    message="Failed to mark events pending",
                    reason=str(e),
                )
            )
