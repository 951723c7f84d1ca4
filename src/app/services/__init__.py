from .unit_of_work import UnitOfWork
from .pdf_service import PdfService, PdfExport

__all__ = [
    "UnitOfWork",
    "PdfService",
    "PdfExport",
]
