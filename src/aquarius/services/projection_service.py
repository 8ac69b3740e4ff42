from __future__ import annotations

from typing import Optional

from aquarius.config import DocumentSettings
from aquarius.domain.companies import company_profile
from aquarius.domain.models import (
    SUCCESSFUL_TRADE,
    AddressInfo,
    Client,
    EditableInvoiceFields,
    EditablePackingListFields,
    EditedContainer,
    InvoiceData,
    InvoiceSalesDetail,
    PackingListContainer,
    PackingListContainerItemDetail,
    PackingListData,
    Proforma,
    ProformaItem,
)
from aquarius.domain.overlay import first_present, resolve
from aquarius.services.numbering_service import NumberingService

NOT_AVAILABLE = "N/A"


def _address_lines(*candidates: Optional[str]) -> list[str]:
    return str(first_present(*candidates, default=NOT_AVAILABLE)).split("\n")


def _goods_description(item: ProformaItem) -> str:
    return f"{item.product_name}\n{item.description or ''}"


class DocumentProjector:
    """Builds read-only invoice and packing list views out of a proforma."""

    def __init__(self, numbering: NumberingService, settings: DocumentSettings | None = None):
        self.numbering = numbering
        self.settings = settings or numbering.settings

    def default_issued_at_place(self, company: str) -> str:
        if company == SUCCESSFUL_TRADE:
            return ""
        return self.settings.tre_issued_at_place

    def parties(self, proforma: Proforma, client: Optional[Client] = None) -> tuple[AddressInfo, AddressInfo]:
        """Sold-to/bill-to and ship-to blocks, most specific source first."""
        client_company = client.company_name if client else None
        client_address = client.address if client else None
        client_tax_id = client.tax_id if client else None

        sold_to = AddressInfo(
            name=first_present(client_company, proforma.client_name, default=NOT_AVAILABLE),
            address_lines=_address_lines(proforma.client_address, client_address),
            tax_id=first_present(proforma.client_tax_id, client_tax_id),
        )
        ship_to = AddressInfo(
            name=first_present(proforma.ship_to_name, client_company, proforma.client_name, default=NOT_AVAILABLE),
            address_lines=_address_lines(proforma.ship_to_address, proforma.client_address, client_address),
            tax_id=first_present(proforma.ship_to_tax_id, proforma.client_tax_id, client_tax_id),
        )
        return sold_to, ship_to

    # ---------- Invoice ----------
    def project_invoice_data(self, proforma: Proforma, client: Optional[Client] = None) -> InvoiceData:
        base = EditableInvoiceFields(
            invoice_number=None,
            issued_at_date=proforma.issued_date,
            payment_terms=proforma.payment_terms,
        )
        effective = resolve(base, proforma.editable_invoice_fields)
        sold_to, ship_to = self.parties(proforma, client)

        items = [
            ProformaItem(
                product_id=it.product_id,
                product_name=it.product_name,
                quantity=it.quantity,
                unit=it.unit,
                unit_price=it.unit_price,
                total_price=it.total_price,
                description=first_present(it.description, it.product_name),
            )
            for it in proforma.items
        ]

        return InvoiceData(
            proforma_id=proforma.id,
            invoice_number=self.numbering.generate_invoice_number(proforma),
            issued_at_place=self.default_issued_at_place(proforma.company),
            issued_at_date=effective.issued_at_date or "",
            company=proforma.company,
            sold_to=sold_to,
            ship_to=ship_to,
            currency=proforma.currency,
            items=items,
            sales_detail=InvoiceSalesDetail(
                port_at_origin=proforma.port_at_origin,
                port_of_arrival=proforma.port_of_arrival,
                final_destination=proforma.final_destination,
                reference=proforma.reference,
                payment_terms=effective.payment_terms,
                vessel=proforma.vessel,
                containers=proforma.containers,
                container_no=proforma.container_no,
                proforma_ref_number=proforma.proforma_number,
            ),
            sub_total=proforma.sub_total,
            sales_tax=proforma.tax_amount or 0.0,
            total=proforma.grand_total,
            proforma_number=proforma.proforma_number,
        )

    # ---------- Packing list ----------
    def synthesize_container(self, proforma: Proforma, item: ProformaItem) -> PackingListContainer:
        value = item.unit_price * item.quantity
        return PackingListContainer(
            container_number=first_present(proforma.container_no, default=self.settings.default_container_number),
            net_weight=value * self.settings.net_weight_factor,
            gross_weight=value * self.settings.gross_weight_factor,
            items=[PackingListContainerItemDetail(description_of_goods=_goods_description(item), pieces_x_pack=1)],
            total_packs=item.quantity,
            total_pieces=item.quantity,
            total_volume_m3=round(item.quantity * self.settings.volume_per_unit_m3, 3),
        )

    def item_for_container(self, proforma: Proforma, index: int) -> ProformaItem:
        empty = ProformaItem(product_id="", product_name="", quantity=0, unit="", unit_price=0.0, total_price=0.0)
        if not proforma.items:
            return empty
        if self.settings.container_item_mapping == "by-index" and index < len(proforma.items):
            return proforma.items[index]
        return proforma.items[0]

    def edited_container(self, proforma: Proforma, index: int, edited: EditedContainer) -> PackingListContainer:
        item = self.item_for_container(proforma, index)
        return PackingListContainer(
            container_number=edited.container_number,
            net_weight=edited.net_weight,
            gross_weight=edited.gross_weight,
            items=[PackingListContainerItemDetail(description_of_goods=_goods_description(item), pieces_x_pack=1)],
            total_packs=item.quantity,
            total_pieces=item.quantity,
            total_volume_m3=edited.total_volume_m3,
        )

    def project_packing_list_data(self, proforma: Proforma, client: Optional[Client] = None) -> PackingListData:
        base = EditablePackingListFields(
            issued_at_place=self.default_issued_at_place(proforma.company),
            product_summary="\n".join(it.product_name for it in proforma.items),
        )
        effective = resolve(base, proforma.editable_packing_list_fields)

        if effective.edited_containers:
            containers = [
                self.edited_container(proforma, i, ec) for i, ec in enumerate(effective.edited_containers)
            ]
        else:
            containers = [self.synthesize_container(proforma, it) for it in proforma.items]

        bill_to, ship_to = self.parties(proforma, client)
        profile = company_profile(proforma.company)

        return PackingListData(
            packing_list_name=self.numbering.generate_packing_list_name(proforma),
            proforma_id=proforma.id,
            company=proforma.company,
            issued_at_place=effective.issued_at_place or "",
            issued_at_date=proforma.issued_date,
            bill_to=bill_to,
            ship_to=ship_to,
            invoice_ref=self.numbering.generate_invoice_number(proforma),
            cust_ref=proforma.reference,
            pi_ref=proforma.proforma_number,
            port_at_origin=first_present(proforma.port_at_origin, default=NOT_AVAILABLE),
            port_of_arrival=first_present(proforma.port_of_arrival, default=NOT_AVAILABLE),
            final_destination=first_present(proforma.final_destination, default=NOT_AVAILABLE),
            containers=first_present(proforma.containers, default=NOT_AVAILABLE),
            product_summary=effective.product_summary,
            packing_list_notes=effective.packing_list_notes,
            container_items=containers,
            sales_order_number=proforma.proforma_number,
            company_name=profile.name if profile else None,
            company_tax_id=profile.tax_id if profile else None,
            company_phone=profile.phone if profile else None,
            company_address=profile.address if profile else None,
            company_website=profile.website if profile else None,
        )
