"""Entity -> DTO conversion shared by billing use cases"""

from decimal import Decimal
from src.domain.billing_event import BillingEvent
from src.domain.contract_rate import ClientContractRate
from src.domain.exchange_rate import ExchangeRate
from src.domain.invoice import Invoice
from src.domain.invoice_item import InvoiceItem
from src.domain.money import HUNDRED
from src.domain.service_catalog import ServiceCatalog
from .dtos import (
    BillingEventDTO,
    ContractRateDTO,
    ExchangeRateDTO,
    InvoiceDTO,
    InvoiceItemDTO,
    ServiceCatalogDTO,
)


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else value


def is_trunc100(amount: Decimal) -> bool:
    return Decimal(amount) % HUNDRED == 0


def to_invoice_dto(invoice: Invoice) -> InvoiceDTO:
    return InvoiceDTO(
        id=invoice.id,
        client_id=invoice.client_id,
        invoice_no=invoice.invoice_no,
        invoice_month=invoice.invoice_month,
        invoice_date=invoice.invoice_date,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        currency=invoice.currency,
        fx_rate_thbkrw=invoice.fx_rate_thbkrw,
        subtotal_krw=invoice.subtotal_krw,
        vat_krw=invoice.vat_krw,
        total_krw=invoice.total_krw,
        status=_enum_value(invoice.status),
        created_by=invoice.created_by,
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
    )


def to_item_dto(item: InvoiceItem) -> InvoiceItemDTO:
    return InvoiceItemDTO(
        id=item.id,
        invoice_id=item.invoice_id,
        service_code=item.service_code,
        description=item.description,
        qty=item.qty,
        unit_price_krw=item.unit_price_krw,
        amount_krw=item.amount_krw,
        unit_price_trunc100=is_trunc100(item.unit_price_krw),
        amount_trunc100=is_trunc100(item.amount_krw),
    )


def to_event_dto(event: BillingEvent) -> BillingEventDTO:
    return BillingEventDTO(
        id=event.id,
        client_id=event.client_id,
        warehouse_id=event.warehouse_id,
        service_code=event.service_code,
        reference_type=event.reference_type,
        reference_id=event.reference_id,
        event_date=event.event_date,
        qty=event.qty,
        pricing_policy=_enum_value(event.pricing_policy),
        unit_price_thb=event.unit_price_thb,
        amount_thb=event.amount_thb,
        unit_price_krw=event.unit_price_krw,
        amount_krw=event.amount_krw,
        fx_rate_thbkrw=event.fx_rate_thbkrw,
        status=_enum_value(event.status),
        invoice_id=event.invoice_id,
        created_at=event.created_at,
        updated_at=event.updated_at,
    )


def to_exchange_rate_dto(rate: ExchangeRate, used_invoice_count: int = 0) -> ExchangeRateDTO:
    return ExchangeRateDTO(
        id=rate.id,
        rate_date=rate.rate_date,
        base_currency=rate.base_currency,
        quote_currency=rate.quote_currency,
        rate=rate.rate,
        source=_enum_value(rate.source),
        locked=rate.locked,
        status=_enum_value(rate.status),
        entered_by=rate.entered_by,
        used_invoice_count=used_invoice_count,
        created_at=rate.created_at,
        updated_at=rate.updated_at,
    )


def to_service_dto(service: ServiceCatalog) -> ServiceCatalogDTO:
    return ServiceCatalogDTO(
        id=service.id,
        service_code=service.service_code,
        service_name=service.service_name,
        billing_unit=_enum_value(service.billing_unit),
        pricing_policy=_enum_value(service.pricing_policy),
        default_currency=_enum_value(service.default_currency),
        default_rate=service.default_rate,
        status=_enum_value(service.status),
        created_at=service.created_at,
        updated_at=service.updated_at,
    )


def to_contract_rate_dto(rate: ClientContractRate) -> ContractRateDTO:
    return ContractRateDTO(
        id=rate.id,
        client_id=rate.client_id,
        service_code=rate.service_code,
        custom_rate=rate.custom_rate,
        currency=_enum_value(rate.currency),
        effective_date=rate.effective_date,
        created_at=rate.created_at,
        updated_at=rate.updated_at,
    )
