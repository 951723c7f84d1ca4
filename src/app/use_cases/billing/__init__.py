"""Billing domain use cases"""
from .generate_invoice import GenerateInvoice
from .invoice_lifecycle import IssueInvoice, MarkInvoicePaid, DuplicateInvoiceForAdmin
from .invoice_queries import GetInvoice, ListInvoices, ExportInvoicePdf
from .mark_events_pending import MarkEventsPending
from .billing_events import (
    RecordBillingEvent,
    ListBillingEvents,
    ExportBillingEventsCsv,
    SeedSampleEvents,
)
from .exchange_rates import (
    ListExchangeRates,
    CreateExchangeRate,
    UpdateExchangeRate,
    DeleteExchangeRate,
)
from .service_rates import (
    ListServiceCatalog,
    CreateService,
    UpdateService,
    DeleteService,
    ListContractRates,
    CreateContractRate,
    UpdateContractRate,
    DeleteContractRate,
)
from .dtos import (
    GenerateInvoiceCommandDTO,
    GenerateInvoiceResponseDTO,
    InvoiceDTO,
    InvoiceItemDTO,
    InvoiceDetailDTO,
    ListInvoicesResponseDTO,
    InvoicePdfExportDTO,
    RecordBillingEventCommandDTO,
    BillingEventFiltersDTO,
    BillingEventDTO,
    ListBillingEventsResponseDTO,
    MarkEventsPendingCommandDTO,
    MarkEventsPendingResponseDTO,
    SeedSampleEventsCommandDTO,
    SeedSampleEventsResponseDTO,
    ExchangeRateCommandDTO,
    ExchangeRateDTO,
    ServiceCatalogCommandDTO,
    ServiceCatalogDTO,
    ContractRateCommandDTO,
    ContractRateDTO,
    DeletedResponseDTO,
)

__all__ = [
    "GenerateInvoice",
    "IssueInvoice",
    "MarkInvoicePaid",
    "DuplicateInvoiceForAdmin",
    "GetInvoice",
    "ListInvoices",
    "ExportInvoicePdf",
    "MarkEventsPending",
    "RecordBillingEvent",
    "ListBillingEvents",
    "ExportBillingEventsCsv",
    "SeedSampleEvents",
    "ListExchangeRates",
    "CreateExchangeRate",
    "UpdateExchangeRate",
    "DeleteExchangeRate",
    "ListServiceCatalog",
    "CreateService",
    "UpdateService",
    "DeleteService",
    "ListContractRates",
    "CreateContractRate",
    "UpdateContractRate",
    "DeleteContractRate",
    "GenerateInvoiceCommandDTO",
    "GenerateInvoiceResponseDTO",
    "InvoiceDTO",
    "InvoiceItemDTO",
    "InvoiceDetailDTO",
    "ListInvoicesResponseDTO",
    "InvoicePdfExportDTO",
    "RecordBillingEventCommandDTO",
    "BillingEventFiltersDTO",
    "BillingEventDTO",
    "ListBillingEventsResponseDTO",
    "MarkEventsPendingCommandDTO",
    "MarkEventsPendingResponseDTO",
    "SeedSampleEventsCommandDTO",
    "SeedSampleEventsResponseDTO",
    "ExchangeRateCommandDTO",
    "ExchangeRateDTO",
    "ServiceCatalogCommandDTO",
    "ServiceCatalogDTO",
    "ContractRateCommandDTO",
    "ContractRateDTO",
    "DeletedResponseDTO",
]
