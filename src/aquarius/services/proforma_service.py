from __future__ import annotations

import logging
import math
import secrets
import uuid
from dataclasses import fields, replace
from typing import Callable, Iterable, Optional

from aquarius.domain.errors import NotFoundError, ValidationError
from aquarius.domain.models import (
    BOTH_COMPANIES,
    PROFORMA_STATUSES,
    TRADING_COMPANIES,
    EditableBillOfLadingFields,
    EditableInvoiceFields,
    EditablePackingListFields,
    EditedContainer,
    Payment,
    Proforma,
    ProformaItem,
)
from aquarius.domain.overlay import first_present
from aquarius.services.mail_service import build_document_mailto
from aquarius.repositories.unit_of_work import RepositoryUnitOfWork, UnitOfWork
from aquarius.services.numbering_service import NumberingService, parse_issued_date

log = logging.getLogger("aquarius.proformas")
payments_log = logging.getLogger("aquarius.payments")

DEFAULT_CURRENCY = "USD DOLLAR"

DETAIL_FIELDS = frozenset(
    {
        "client_address",
        "client_tax_id",
        "ship_to_name",
        "ship_to_address",
        "ship_to_tax_id",
        "ship_to_client_id",
        "port_at_origin",
        "port_of_arrival",
        "final_destination",
        "reference",
        "payment_terms",
        "delivery",
        "vessel",
        "containers",
        "container_no",
        "notes",
        "expiry_date",
        "customer_signatory_name",
    }
)


def _payment_date(value: str) -> str:
    d = parse_issued_date(value)
    return f"{d.isoformat()}T00:00:00.000Z"


def _patch(current, cls, changes: dict):
    known = {f.name for f in fields(cls)}
    unknown = set(changes) - known
    if unknown:
        raise ValidationError(f"Unknown {cls.__name__} field(s): {', '.join(sorted(unknown))}")
    return replace(current or cls(), **changes)


class ProformaService:
    def __init__(
        self,
        repo,
        numbering: NumberingService,
        uow_factory: Callable[[], UnitOfWork] | None = None,
    ):
        self.repo = repo
        self.numbering = numbering
        self.uow_factory = uow_factory or (lambda: RepositoryUnitOfWork(repo))

    # ---------- Queries ----------
    def list_proformas(self) -> list[Proforma]:
        return self.repo.list_proformas()

    def list_for_client(self, client_id: str) -> list[Proforma]:
        return self.repo.list_proformas_for_client(client_id)

    def get_proforma(self, proforma_id: str) -> Proforma:
        p = self.repo.get_proforma(proforma_id)
        if not p:
            raise NotFoundError("Proforma not found.")
        return p

    def balance_due(self, proforma_id: str) -> float:
        return self.get_proforma(proforma_id).balance_due

    # ---------- Numbering ----------
    def suggest_number(self, company: str, issued_date: str, previous: str = "") -> str:
        """Number for a new proforma; keeps ``previous`` while the date is still being typed."""
        try:
            return self.numbering.generate_proforma_number(company, issued_date, self.repo.list_proformas())
        except ValidationError as e:
            log.debug("proforma_number_suggestion_skipped date=%r error=%s", issued_date, e)
            return previous

    def assign_invoice_number(self, proforma_id: str) -> str:
        proforma = self.get_proforma(proforma_id)
        current = proforma.editable_invoice_fields
        if current is not None and current.invoice_number:
            return current.invoice_number

        number = self.numbering.generate_invoice_number(proforma)
        self._save(replace(proforma, editable_invoice_fields=_patch(current, EditableInvoiceFields, {"invoice_number": number})))
        log.info("invoice_number_assigned proforma=%s invoice=%s", proforma.proforma_number, number)
        return number

    # ---------- Lifecycle ----------
    def _snapshot_items(self, items: Iterable[dict | ProformaItem]) -> list[ProformaItem]:
        out: list[ProformaItem] = []
        for it in items:
            try:
                if isinstance(it, ProformaItem):
                    qty, unit_price = float(it.quantity), float(it.unit_price)
                    snapshot = it
                else:
                    product = self.repo.get_product(str(it["product_id"]))
                    if not product:
                        raise NotFoundError("Product not found.")
                    qty = float(it["quantity"])
                    unit_price = float(it.get("unit_price", product.price))
                    snapshot = ProformaItem(
                        product_id=product.id,
                        product_name=product.name,
                        description=first_present(it.get("description"), product.description),
                        quantity=qty,
                        unit=product.unit,
                        unit_price=unit_price,
                        total_price=0.0,
                    )
            except KeyError as e:
                raise ValidationError(f"Item is missing {e.args[0]!r}.") from e
            except (TypeError, ValueError) as e:
                raise ValidationError("Item quantity and unit price must be numbers.") from e
            if not math.isfinite(qty) or qty <= 0:
                raise ValidationError("Quantity must be greater than 0.")
            if not math.isfinite(unit_price) or unit_price < 0:
                raise ValidationError("Unit price must be non-negative.")
            out.append(replace(snapshot, quantity=qty, unit_price=unit_price, total_price=qty * unit_price))
        return out

    def create_proforma(
        self,
        company: str,
        client_id: str,
        items: Iterable[dict | ProformaItem],
        issued_date: str,
        tax_rate: float = 0.0,
        currency: str = DEFAULT_CURRENCY,
        proforma_number: Optional[str] = None,
        **details,
    ) -> Proforma:
        """
        items: [{product_id, quantity, unit_price?, description?}] or ProformaItem snapshots
        details: optional party/logistics fields (see DETAIL_FIELDS)
        """
        if company not in TRADING_COMPANIES:
            raise ValidationError(f"Unknown company: {company}")
        unknown = set(details) - DETAIL_FIELDS
        if unknown:
            raise ValidationError(f"Unknown proforma field(s): {', '.join(sorted(unknown))}")
        if not 0 <= float(tax_rate) <= 1:
            raise ValidationError("Tax rate must be between 0 and 1.")
        if not (currency or "").strip():
            raise ValidationError("Currency is required.")

        client = self.repo.get_client(client_id)
        if not client:
            raise NotFoundError("Client not found.")
        if client.company not in (company, BOTH_COMPANIES):
            raise ValidationError(f"Client {client.name} does not trade with {company}.")

        lines = self._snapshot_items(items)
        if not lines:
            raise ValidationError("At least one item is required.")

        issued = parse_issued_date(issued_date).isoformat()
        number = (proforma_number or "").strip() or self.numbering.generate_proforma_number(
            company, issued, self.repo.list_proformas()
        )

        ship_client = client
        ship_to_client_id = details.get("ship_to_client_id")
        if ship_to_client_id and ship_to_client_id != client.id:
            ship_client = self.repo.get_client(ship_to_client_id)
            if not ship_client:
                raise NotFoundError("Ship-to client not found.")

        display_name = client.company_name or client.name
        defaults = {
            "client_address": client.address,
            "client_tax_id": client.tax_id,
            "ship_to_client_id": ship_client.id,
            "ship_to_name": ship_client.company_name or ship_client.name,
            "ship_to_address": ship_client.address,
            "ship_to_tax_id": ship_client.tax_id,
            "customer_signatory_name": display_name,
        }
        for key, value in details.items():
            if value is not None:
                defaults[key] = value

        sub_total = sum(it.quantity * it.unit_price for it in lines)
        tax_amount = sub_total * float(tax_rate)

        proforma = Proforma(
            id=uuid.uuid4().hex,
            proforma_number=number,
            client_id=client.id,
            client_name=display_name,
            company=company,
            items=tuple(lines),
            currency=currency.strip(),
            sub_total=sub_total,
            tax_amount=tax_amount,
            grand_total=sub_total + tax_amount,
            issued_date=issued,
            status="DRAFT",
            payments=(),
            **defaults,
        )

        with self.uow_factory() as uow:
            stored = uow.create_proforma(proforma)
        log.info(
            "proforma_created id=%s number=%s company=%s items=%s total=%.2f",
            stored.id, stored.proforma_number, company, len(lines), stored.grand_total,
        )
        return stored

    def _save(self, proforma: Proforma) -> Proforma:
        with self.uow_factory() as uow:
            return uow.save_proforma(proforma)

    def update_proforma(self, proforma: Proforma, tax_rate: Optional[float] = None) -> Proforma:
        """Full overwrite of an edited proforma; line and document totals are recomputed from the items.

        Without ``tax_rate`` the stored record's effective rate is kept.
        """
        if proforma.status not in PROFORMA_STATUSES:
            raise ValidationError(f"Unknown status: {proforma.status}")
        lines = self._snapshot_items(proforma.items)
        if not lines:
            raise ValidationError("At least one item is required.")

        if tax_rate is None:
            current = self.get_proforma(proforma.id)
            tax_rate = current.tax_amount / current.sub_total if current.sub_total else 0.0
        if not 0 <= float(tax_rate) <= 1:
            raise ValidationError("Tax rate must be between 0 and 1.")

        sub_total = sum(it.quantity * it.unit_price for it in lines)
        tax_amount = sub_total * float(tax_rate)
        return self._save(
            replace(
                proforma,
                items=tuple(lines),
                sub_total=sub_total,
                tax_amount=tax_amount,
                grand_total=sub_total + tax_amount,
            )
        )

    def change_status(self, proforma_id: str, status: str) -> Proforma:
        if status not in PROFORMA_STATUSES:
            raise ValidationError(f"Unknown status: {status}")
        proforma = self.get_proforma(proforma_id)
        saved = self._save(replace(proforma, status=status))
        log.info("proforma_status_changed number=%s from=%s to=%s", proforma.proforma_number, proforma.status, status)
        return saved

    def delete_proforma(self, proforma_id: str) -> None:
        proforma = self.get_proforma(proforma_id)
        self.repo.delete_proforma(proforma_id)
        log.warning("proforma_deleted id=%s number=%s", proforma_id, proforma.proforma_number)

    # ---------- Payments ----------
    @staticmethod
    def _validate_payment(amount: float, date: str) -> float:
        try:
            value = float(amount)
        except (TypeError, ValueError) as e:
            raise ValidationError("Please enter a valid amount.") from e
        if not math.isfinite(value) or value <= 0:
            raise ValidationError("Payment amount must be > 0.")
        if not (date or "").strip():
            raise ValidationError("Payment date is required.")
        return value

    def add_payment(self, proforma_id: str, amount: float, date: str, notes: Optional[str] = None) -> Payment:
        value = self._validate_payment(amount, date)
        proforma = self.get_proforma(proforma_id)
        payment = Payment(id=f"pay-{secrets.token_hex(6)}", amount=value, date=_payment_date(date), notes=notes or "")
        saved = self._save(replace(proforma, payments=proforma.payments + (payment,)))
        payments_log.info(
            "payment_added proforma=%s amount=%.2f balance_due=%.2f",
            proforma.proforma_number, value, saved.balance_due,
        )
        return payment

    def update_payment(
        self,
        proforma_id: str,
        payment_id: str,
        amount: float,
        date: str,
        notes: Optional[str] = None,
    ) -> Payment:
        value = self._validate_payment(amount, date)
        proforma = self.get_proforma(proforma_id)
        if not any(p.id == payment_id for p in proforma.payments):
            raise NotFoundError("Payment not found.")

        updated = Payment(id=payment_id, amount=value, date=_payment_date(date), notes=notes or "")
        payments = tuple(updated if p.id == payment_id else p for p in proforma.payments)
        self._save(replace(proforma, payments=payments))
        payments_log.info("payment_updated proforma=%s payment=%s amount=%.2f", proforma.proforma_number, payment_id, value)
        return updated

    def delete_payment(self, proforma_id: str, payment_id: str) -> None:
        proforma = self.get_proforma(proforma_id)
        payments = tuple(p for p in proforma.payments if p.id != payment_id)
        if len(payments) == len(proforma.payments):
            raise NotFoundError("Payment not found.")
        self._save(replace(proforma, payments=payments))
        payments_log.info("payment_deleted proforma=%s payment=%s", proforma.proforma_number, payment_id)

    # ---------- Document overlays ----------
    def update_invoice_fields(self, proforma_id: str, **changes) -> Proforma:
        if "invoice_number" in changes and not (changes["invoice_number"] or "").strip():
            raise ValidationError("Invoice number is required.")
        if changes.get("issued_at_date"):
            changes["issued_at_date"] = parse_issued_date(changes["issued_at_date"]).isoformat()
        proforma = self.get_proforma(proforma_id)
        overlay = _patch(proforma.editable_invoice_fields, EditableInvoiceFields, changes)
        return self._save(replace(proforma, editable_invoice_fields=overlay))

    def update_packing_list_fields(self, proforma_id: str, **changes) -> Proforma:
        if "edited_containers" in changes:
            changes["edited_containers"] = tuple(
                c if isinstance(c, EditedContainer) else EditedContainer(
                    container_number=str(c["container_number"]),
                    net_weight=float(c["net_weight"]),
                    gross_weight=float(c["gross_weight"]),
                    total_volume_m3=float(c.get("total_volume_m3") or 0.0),
                )
                for c in changes["edited_containers"] or ()
            )
        proforma = self.get_proforma(proforma_id)
        overlay = _patch(proforma.editable_packing_list_fields, EditablePackingListFields, changes)
        return self._save(replace(proforma, editable_packing_list_fields=overlay))

    def update_bill_of_lading_fields(self, proforma_id: str, **changes) -> Proforma:
        proforma = self.get_proforma(proforma_id)
        overlay = _patch(proforma.editable_bill_of_lading_fields, EditableBillOfLadingFields, changes)
        return self._save(replace(proforma, editable_bill_of_lading_fields=overlay))

    def attach_bill_of_lading(self, proforma_id: str, file_name: str, url: str, storage_path: str) -> Proforma:
        if not (file_name or "").strip() or not (url or "").strip():
            raise ValidationError("File name and URL are required.")
        proforma = self.get_proforma(proforma_id)
        overlay = _patch(
            proforma.editable_bill_of_lading_fields,
            EditableBillOfLadingFields,
            {"bl_no": file_name, "storage_path": storage_path},
        )
        saved = self._save(replace(proforma, uploaded_bill_of_lading_url=url, editable_bill_of_lading_fields=overlay))
        log.info("bill_of_lading_attached proforma=%s file=%s", proforma.proforma_number, file_name)
        return saved

    def detach_bill_of_lading(self, proforma_id: str) -> Optional[str]:
        """Unlink the uploaded B/L and return its storage path for removal."""
        proforma = self.get_proforma(proforma_id)
        current = proforma.editable_bill_of_lading_fields
        storage_path = current.storage_path if current else None
        overlay = _patch(current, EditableBillOfLadingFields, {"bl_no": None, "storage_path": None})
        self._save(replace(proforma, uploaded_bill_of_lading_url=None, editable_bill_of_lading_fields=overlay))
        log.info("bill_of_lading_detached proforma=%s path=%s", proforma.proforma_number, storage_path)
        return storage_path

    # ---------- Sending ----------
    def document_mailto(self, proforma_id: str, kind: str, link: str) -> str:
        """mailto: link for sending one of the proforma's documents to its client.

        Sending an invoice freezes its number first so the client and the
        dashboard keep seeing the same folio.
        """
        proforma = self.get_proforma(proforma_id)
        client = self.repo.get_client(proforma.client_id)
        if not client:
            raise NotFoundError("Client not found.")

        if kind == "invoice":
            number = self.assign_invoice_number(proforma_id)
        elif kind == "packing_list":
            number = self.numbering.generate_packing_list_name(proforma)
        else:
            number = proforma.proforma_number

        mailto = build_document_mailto(kind, number, proforma.company, client, link)
        log.info("document_mailto_built proforma=%s kind=%s number=%s", proforma.proforma_number, kind, number)
        return mailto
