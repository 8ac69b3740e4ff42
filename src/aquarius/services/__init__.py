from .numbering_service import NumberingService
from .projection_service import DocumentProjector
from .proforma_service import ProformaService
from .client_service import ClientService
from .product_service import ProductService
from .reporting_service import ReportingService
from .excel_service import ExcelService

__all__ = [
    "NumberingService",
    "DocumentProjector",
    "ProformaService",
    "ClientService",
    "ProductService",
    "ReportingService",
    "ExcelService",
]
