"""Codecs between stored JSON documents and domain dataclasses."""
from __future__ import annotations

import json
from dataclasses import asdict, fields
from typing import Any, Optional

from aquarius.domain.models import (
    Client,
    EditableBillOfLadingFields,
    EditableInvoiceFields,
    EditablePackingListFields,
    EditedContainer,
    Payment,
    Product,
    Proforma,
    ProformaItem,
)


def _pick(cls, doc: dict) -> dict:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in doc.items() if k in names}


def dumps(entity: Any) -> str:
    return json.dumps(asdict(entity), ensure_ascii=False)


def client_from_doc(doc: dict) -> Client:
    data = _pick(Client, doc)
    data["balance"] = float(data.get("balance") or 0.0)
    return Client(**data)


def product_from_doc(doc: dict) -> Product:
    data = _pick(Product, doc)
    data["price"] = float(data["price"])
    return Product(**data)


def _invoice_fields(doc: Optional[dict]) -> Optional[EditableInvoiceFields]:
    if doc is None:
        return None
    return EditableInvoiceFields(**_pick(EditableInvoiceFields, doc))


def _bill_of_lading_fields(doc: Optional[dict]) -> Optional[EditableBillOfLadingFields]:
    if doc is None:
        return None
    return EditableBillOfLadingFields(**_pick(EditableBillOfLadingFields, doc))


def _packing_list_fields(doc: Optional[dict]) -> Optional[EditablePackingListFields]:
    if doc is None:
        return None
    data = _pick(EditablePackingListFields, doc)
    data["edited_containers"] = tuple(
        EditedContainer(**_pick(EditedContainer, c)) for c in (data.get("edited_containers") or [])
    )
    return EditablePackingListFields(**data)


def proforma_from_doc(doc: dict) -> Proforma:
    data = _pick(Proforma, doc)
    data["items"] = tuple(ProformaItem(**_pick(ProformaItem, it)) for it in data.get("items") or [])
    data["payments"] = tuple(Payment(**_pick(Payment, p)) for p in data.get("payments") or [])
    data["editable_invoice_fields"] = _invoice_fields(data.get("editable_invoice_fields"))
    data["editable_bill_of_lading_fields"] = _bill_of_lading_fields(data.get("editable_bill_of_lading_fields"))
    data["editable_packing_list_fields"] = _packing_list_fields(data.get("editable_packing_list_fields"))
    return Proforma(**data)
