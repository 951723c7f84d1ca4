from .client_repository import SqlAlchemyClientRepository
from .service_catalog_repository import SqlAlchemyServiceCatalogRepository
from .contract_rate_repository import SqlAlchemyContractRateRepository
from .exchange_rate_repository import SqlAlchemyExchangeRateRepository
from .billing_event_repository import SqlAlchemyBillingEventRepository
from .invoice_repository import SqlAlchemyInvoiceRepository
from .invoice_item_repository import SqlAlchemyInvoiceItemRepository
from .invoice_sequence_repository import SqlAlchemyInvoiceSequenceRepository

__all__ = [
    "SqlAlchemyClientRepository",
    "SqlAlchemyServiceCatalogRepository",
    "SqlAlchemyContractRateRepository",
    "SqlAlchemyExchangeRateRepository",
    "SqlAlchemyBillingEventRepository",
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInvoiceItemRepository",
    "SqlAlchemyInvoiceSequenceRepository",
]
