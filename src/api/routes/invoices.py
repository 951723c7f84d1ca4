"""Invoice API Routes

FastAPI routes for monthly invoice generation and the invoice lifecycle.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.error import ClientError, error_response
from src.api.schemas.billing_request import GenerateInvoiceRequestSchema
from src.app.use_cases.billing.dtos import (
    GenerateInvoiceCommandDTO,
    GenerateInvoiceResponseDTO,
    InvoiceDTO,
    InvoiceDetailDTO,
    InvoicePdfExportDTO,
    ListInvoicesResponseDTO,
)
from src.app.use_cases.billing.generate_invoice import GenerateInvoice
from src.app.use_cases.billing.invoice_lifecycle import (
    DuplicateInvoiceForAdmin,
    IssueInvoice,
    MarkInvoicePaid,
)
from src.app.use_cases.billing.invoice_queries import ExportInvoicePdf, GetInvoice, ListInvoices
from src.adapter.repositories import (
    SqlAlchemyBillingEventRepository,
    SqlAlchemyClientRepository,
    SqlAlchemyExchangeRateRepository,
    SqlAlchemyInvoiceItemRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyInvoiceSequenceRepository,
    SqlAlchemyServiceCatalogRepository,
)
from src.adapter.services import SqlAlchemyUnitOfWork, StubPdfService
from src.depends import get_actor_id, get_session, resolve_actor

router = APIRouter(prefix="/billing/invoices", tags=["Invoices"])


@router.post(
    "/generate",
    response_model=GenerateInvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        400: error_response("Validation error", "VALIDATION_ERROR", "invoice_month: invoice_month must be YYYY-MM"),
        404: error_response("Client not found", "CLIENT_NOT_FOUND", "Client 7 not found"),
        409: error_response(
            "Month already invoiced",
            "INVOICE_ALREADY_ISSUED",
            "Invoice already issued for this month",
        ),
        422: error_response(
            "No rate or nothing to invoice",
            "NO_PENDING_EVENTS",
            "No pending billing events for 2026-01",
        ),
    }
)
async def generate_invoice(
    request: GenerateInvoiceRequestSchema,
    session: AsyncSession = Depends(get_session),
    actor_id: Optional[int] = Depends(get_actor_id),
):
    """
    Generate the monthly KRW invoice of a client.

    Pending billing events of `invoice_month` are converted with the latest
    active THB/KRW rate dated on or before `invoice_date`, aggregated per
    service and truncated to 100 won. A 7% VAT item is appended.

    **Request body:**
    - `client_id` (required): Client to invoice
    - `invoice_month` (required): YYYY-MM
    - `invoice_date` (required): Selects the exchange rate
    - `regenerate_draft` (optional): Rebuild an existing draft
    - `created_by` (optional): Actor when no X-Actor-Id header is sent

    **Returns:**
    - 200: Draft invoice (`reused: true` when an existing draft was returned)
    - 404: Client not found
    - 409: The month already has an issued or paid invoice
    - 422: No applicable exchange rate, or no pending events
    """
    uow = SqlAlchemyUnitOfWork(session)

    command = GenerateInvoiceCommandDTO(
        client_id=request.client_id,
        invoice_month=request.invoice_month,
        invoice_date=request.invoice_date,
        regenerate_draft=request.regenerate_draft,
        created_by=resolve_actor(actor_id, request.created_by),
    )

    use_case = GenerateInvoice(
        uow,
        client_repo=SqlAlchemyClientRepository(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        item_repo=SqlAlchemyInvoiceItemRepository(session),
        event_repo=SqlAlchemyBillingEventRepository(session),
        rate_repo=SqlAlchemyExchangeRateRepository(session),
        sequence_repo=SqlAlchemyInvoiceSequenceRepository(session),
        service_repo=SqlAlchemyServiceCatalogRepository(session),
        invoice_number_prefix=ApplicationConfig.INVOICE_NUMBER_PREFIX,
        base_currency=ApplicationConfig.BILLING_BASE_CURRENCY,
        quote_currency=ApplicationConfig.BILLING_QUOTE_CURRENCY,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("", response_model=ListInvoicesResponseDTO)
async def list_invoices(
    client_id: Optional[int] = Query(default=None, gt=0),
    invoice_month: Optional[str] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status", description="draft, issued or paid"),
    session: AsyncSession = Depends(get_session),
):
    """List invoices, newest month first. Unknown status values are ignored."""
    use_case = ListInvoices(SqlAlchemyInvoiceRepository(session))
    result = await use_case.execute(client_id=client_id, invoice_month=invoice_month, status=status_filter)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get(
    "/{invoice_id}",
    response_model=InvoiceDetailDTO,
    responses={404: error_response("Invoice not found", "INVOICE_NOT_FOUND", "Invoice 123 not found")},
)
async def get_invoice(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """
    Invoice with its live items.

    Each amount carries a `*_trunc100` flag telling whether it is a
    multiple of 100 won.
    """
    use_case = GetInvoice(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/{invoice_id}/issue",
    response_model=InvoiceDTO,
    responses={
        404: error_response("Invoice not found", "INVOICE_NOT_FOUND", "Invoice 123 not found"),
        422: error_response("Not a draft", "INVALID_STATUS", "Only draft invoices can be issued"),
    },
)
async def issue_invoice(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Issue a draft invoice. Its events can no longer be reverted afterwards."""
    use_case = IssueInvoice(SqlAlchemyUnitOfWork(session), SqlAlchemyInvoiceRepository(session))
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/{invoice_id}/mark-paid",
    response_model=InvoiceDTO,
    responses={
        404: error_response("Invoice not found", "INVOICE_NOT_FOUND", "Invoice 123 not found"),
        422: error_response("Not issued", "INVALID_STATUS", "Only issued invoices can be paid"),
    },
)
async def mark_invoice_paid(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Record payment of an issued invoice."""
    use_case = MarkInvoicePaid(SqlAlchemyUnitOfWork(session), SqlAlchemyInvoiceRepository(session))
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/{invoice_id}/duplicate-admin",
    response_model=InvoiceDetailDTO,
    responses={
        404: error_response("Invoice not found", "INVOICE_NOT_FOUND", "Invoice 123 not found"),
        422: error_response("Draft source", "INVALID_STATUS", "Draft invoices cannot be duplicated"),
    },
)
async def duplicate_invoice(
    invoice_id: int,
    session: AsyncSession = Depends(get_session),
    actor_id: Optional[int] = Depends(get_actor_id),
):
    """Copy an issued or paid invoice into a new draft with the next invoice number."""
    use_case = DuplicateInvoiceForAdmin(
        SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        item_repo=SqlAlchemyInvoiceItemRepository(session),
        sequence_repo=SqlAlchemyInvoiceSequenceRepository(session),
        invoice_number_prefix=ApplicationConfig.INVOICE_NUMBER_PREFIX,
    )
    result = await use_case.execute(invoice_id, created_by=resolve_actor(actor_id))

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get(
    "/{invoice_id}/export-pdf",
    response_model=InvoicePdfExportDTO,
    responses={404: error_response("Invoice not found", "INVOICE_NOT_FOUND", "Invoice 123 not found")},
)
async def export_invoice_pdf(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Request a PDF rendering of the invoice."""
    use_case = ExportInvoicePdf(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
        StubPdfService(),
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
