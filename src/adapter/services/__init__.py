from .unit_of_work import SqlAlchemyUnitOfWork
from .pdf_service import StubPdfService

__all__ = [
    "SqlAlchemyUnitOfWork",
    "StubPdfService",
]
