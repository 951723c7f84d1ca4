"""Billing Event API Routes

FastAPI routes for the billing event ledger.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import ClientError, error_response
from src.api.schemas.billing_request import (
    BillingEventRequestSchema,
    MarkPendingRequestSchema,
    SampleEventsRequestSchema,
)
from src.app.use_cases.billing.billing_events import (
    ExportBillingEventsCsv,
    ListBillingEvents,
    RecordBillingEvent,
    SeedSampleEvents,
)
from src.app.use_cases.billing.dtos import (
    BillingEventDTO,
    BillingEventFiltersDTO,
    ListBillingEventsResponseDTO,
    MarkEventsPendingCommandDTO,
    MarkEventsPendingResponseDTO,
    RecordBillingEventCommandDTO,
    SeedSampleEventsCommandDTO,
    SeedSampleEventsResponseDTO,
)
from src.app.use_cases.billing.mark_events_pending import MarkEventsPending
from src.adapter.repositories import SqlAlchemyBillingEventRepository, SqlAlchemyClientRepository
from src.adapter.services import SqlAlchemyUnitOfWork
from src.depends import get_session

router = APIRouter(prefix="/billing/events", tags=["Billing Events"])


def event_filters(
    client_id: Optional[int] = Query(default=None),
    status: Optional[str] = Query(default=None, description="PENDING or INVOICED"),
    service_code: Optional[str] = Query(default=None),
    warehouse_id: Optional[int] = Query(default=None),
    invoice_month: Optional[str] = Query(default=None, description="YYYY-MM"),
) -> BillingEventFiltersDTO:
    return BillingEventFiltersDTO(
        client_id=client_id,
        status=status,
        service_code=service_code,
        warehouse_id=warehouse_id,
        invoice_month=invoice_month,
    )


@router.post(
    "/mark-pending",
    response_model=MarkEventsPendingResponseDTO,
    responses={
        404: error_response("No matching events", "EVENTS_NOT_FOUND", "No billing events found"),
        409: error_response(
            "Invoice is final",
            "EVENTS_LOCKED",
            "Cannot mark events pending when linked invoice is issued or paid",
        ),
    },
)
async def mark_events_pending(
    request: MarkPendingRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Return invoiced events to PENDING.

    Refused as a whole when any event belongs to an issued or paid invoice.

    **Example request:**
    ```json
    {"ids": [11, 12]}
    ```
    """
    use_case = MarkEventsPending(
        SqlAlchemyUnitOfWork(session), SqlAlchemyBillingEventRepository(session)
    )
    result = await use_case.execute(MarkEventsPendingCommandDTO(ids=request.ids))

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "",
    response_model=BillingEventDTO,
    status_code=status.HTTP_201_CREATED,
    responses={404: error_response("Client not found", "CLIENT_NOT_FOUND", "Client 7 not found")},
)
async def record_billing_event(
    request: BillingEventRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Append a PENDING billing event.

    THB_BASED events keep their THB amount until invoicing; KRW_FIXED
    amounts are truncated to 100 won on entry. Without `warehouse_id` the
    client's default warehouse is used.
    """
    use_case = RecordBillingEvent(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyBillingEventRepository(session),
        SqlAlchemyClientRepository(session),
    )
    result = await use_case.execute(RecordBillingEventCommandDTO(**request.model_dump()))

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("", response_model=ListBillingEventsResponseDTO)
async def list_billing_events(
    filters: BillingEventFiltersDTO = Depends(event_filters),
    session: AsyncSession = Depends(get_session),
):
    """List events, newest first, with a count of events missing a warehouse."""
    use_case = ListBillingEvents(SqlAlchemyBillingEventRepository(session))
    result = await use_case.execute(filters)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get(
    "/export.csv",
    responses={200: {"content": {"text/csv": {}}, "description": "CSV document"}},
)
async def export_billing_events_csv(
    filters: BillingEventFiltersDTO = Depends(event_filters),
    session: AsyncSession = Depends(get_session),
):
    """Download the filtered events as CSV."""
    use_case = ExportBillingEventsCsv(
        SqlAlchemyBillingEventRepository(session),
        SqlAlchemyClientRepository(session),
    )
    result = await use_case.execute(filters)

    if result.is_err():
        raise ClientError(result.error)

    return Response(
        content=result.value,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=billing_events.csv"},
    )


@router.post("/sample", response_model=SeedSampleEventsResponseDTO)
async def seed_sample_events(
    request: Optional[SampleEventsRequestSchema] = None,
    session: AsyncSession = Depends(get_session),
):
    """Insert the three demo events for a month (defaults: client 1, 2026-01)."""
    request = request or SampleEventsRequestSchema()
    use_case = SeedSampleEvents(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyBillingEventRepository(session),
        SqlAlchemyClientRepository(session),
    )
    result = await use_case.execute(SeedSampleEventsCommandDTO(**request.model_dump()))

    if result.is_err():
        raise ClientError(result.error)

    return result.value
