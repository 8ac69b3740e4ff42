from .models import (
    Client,
    Product,
    Payment,
    ProformaItem,
    Proforma,
    InvoiceData,
    PackingListData,
)
from .errors import ValidationError, NotFoundError, DuplicateNumberError

__all__ = [
    "Client",
    "Product",
    "Payment",
    "ProformaItem",
    "Proforma",
    "InvoiceData",
    "PackingListData",
    "ValidationError",
    "NotFoundError",
    "DuplicateNumberError",
]
