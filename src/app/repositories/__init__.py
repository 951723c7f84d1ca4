from .client_repository import ClientRepository
from .service_catalog_repository import ServiceCatalogRepository
from .contract_rate_repository import ContractRateRepository
from .exchange_rate_repository import ExchangeRateRepository
from .billing_event_repository import BillingEventRepository
from .invoice_repository import InvoiceRepository
from .invoice_item_repository import InvoiceItemRepository
from .invoice_sequence_repository import InvoiceSequenceRepository

__all__ = [
    "ClientRepository",
    "ServiceCatalogRepository",
    "ContractRateRepository",
    "ExchangeRateRepository",
    "BillingEventRepository",
    "InvoiceRepository",
    "InvoiceItemRepository",
    "InvoiceSequenceRepository",
]
