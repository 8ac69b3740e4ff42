from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

TRADE_EVOLUTION = "Trade Evolution"
SUCCESSFUL_TRADE = "Successful Trade"
BOTH_COMPANIES = "Both"

TRADING_COMPANIES = (TRADE_EVOLUTION, SUCCESSFUL_TRADE)
CLIENT_AFFILIATIONS = (TRADE_EVOLUTION, SUCCESSFUL_TRADE, BOTH_COMPANIES)

PROFORMA_STATUSES = ("DRAFT", "SENT", "REVIEWED", "APPROVED", "REJECTED")


@dataclass(frozen=True)
class Payment:
    id: str
    amount: float
    date: str
    notes: Optional[str] = None


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    description: str
    price: float
    unit: str
    category: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class Client:
    id: str
    name: str
    email: str
    company: str
    address: Optional[str] = None
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    balance: float = 0.0
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class ProformaItem:
    product_id: str
    product_name: str
    quantity: float
    unit: str
    unit_price: float
    total_price: float
    description: Optional[str] = None


@dataclass(frozen=True)
class EditableInvoiceFields:
    invoice_number: Optional[str] = None
    issued_at_date: Optional[str] = None
    payment_terms: Optional[str] = None


@dataclass(frozen=True)
class EditableBillOfLadingFields:
    bl_no: Optional[str] = None
    storage_path: Optional[str] = None
    ocean_vessel_voy_no: Optional[str] = None
    laden_on_board_date: Optional[str] = None
    place_and_date_of_issue: Optional[str] = None
    freight_payable_at: Optional[str] = None
    num_original_bl: Optional[str] = None


@dataclass(frozen=True)
class EditedContainer:
    container_number: str
    net_weight: float
    gross_weight: float
    total_volume_m3: float


@dataclass(frozen=True)
class EditablePackingListFields:
    issued_at_place: Optional[str] = None
    product_summary: Optional[str] = None
    packing_list_notes: Optional[str] = None
    edited_containers: tuple[EditedContainer, ...] = ()


@dataclass(frozen=True)
class Proforma:
    id: str
    proforma_number: str
    client_id: str
    client_name: str
    company: str
    items: tuple[ProformaItem, ...]
    currency: str
    sub_total: float
    grand_total: float
    issued_date: str
    status: str = "DRAFT"
    tax_amount: float = 0.0

    client_address: Optional[str] = None
    client_tax_id: Optional[str] = None
    ship_to_name: Optional[str] = None
    ship_to_address: Optional[str] = None
    ship_to_tax_id: Optional[str] = None
    ship_to_client_id: Optional[str] = None

    port_at_origin: Optional[str] = None
    port_of_arrival: Optional[str] = None
    final_destination: Optional[str] = None
    reference: Optional[str] = None
    payment_terms: Optional[str] = None
    delivery: Optional[str] = None
    vessel: Optional[str] = None
    containers: Optional[str] = None
    container_no: Optional[str] = None

    notes: Optional[str] = None
    expiry_date: Optional[str] = None
    customer_signatory_name: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    payments: tuple[Payment, ...] = ()

    uploaded_bill_of_lading_url: Optional[str] = None
    editable_invoice_fields: Optional[EditableInvoiceFields] = None
    editable_bill_of_lading_fields: Optional[EditableBillOfLadingFields] = None
    editable_packing_list_fields: Optional[EditablePackingListFields] = None

    @property
    def amount_paid(self) -> float:
        return sum(float(p.amount) for p in self.payments)

    @property
    def balance_due(self) -> float:
        return float(self.grand_total) - self.amount_paid


# ---------- Document views ----------

@dataclass(frozen=True)
class AddressInfo:
    name: str
    address_lines: list[str]
    tax_id: Optional[str] = None


@dataclass(frozen=True)
class InvoiceSalesDetail:
    port_at_origin: Optional[str] = None
    port_of_arrival: Optional[str] = None
    final_destination: Optional[str] = None
    reference: Optional[str] = None
    payment_terms: Optional[str] = None
    vessel: Optional[str] = None
    containers: Optional[str] = None
    container_no: Optional[str] = None
    proforma_ref_number: Optional[str] = None


@dataclass(frozen=True)
class InvoiceData:
    proforma_id: str
    invoice_number: str
    issued_at_place: str
    issued_at_date: str
    company: str
    sold_to: AddressInfo
    ship_to: AddressInfo
    currency: str
    items: list[ProformaItem]
    sales_detail: InvoiceSalesDetail
    sub_total: float
    sales_tax: float
    total: float
    proforma_number: Optional[str] = None


@dataclass(frozen=True)
class PackingListContainerItemDetail:
    description_of_goods: str
    pieces_x_pack: int


@dataclass(frozen=True)
class PackingListContainer:
    container_number: str
    net_weight: float
    gross_weight: float
    items: list[PackingListContainerItemDetail]
    total_packs: Optional[float] = None
    total_pieces: Optional[float] = None
    total_volume_m3: Optional[float] = None


@dataclass(frozen=True)
class PackingListData:
    packing_list_name: str
    proforma_id: str
    company: str
    issued_at_place: str
    issued_at_date: str
    bill_to: AddressInfo
    ship_to: AddressInfo
    port_at_origin: str
    port_of_arrival: str
    final_destination: str
    container_items: list[PackingListContainer]
    invoice_ref: Optional[str] = None
    cust_ref: Optional[str] = None
    pi_ref: Optional[str] = None
    containers: Optional[str] = None
    product_summary: Optional[str] = None
    packing_list_notes: Optional[str] = None
    sales_order_number: Optional[str] = None
    company_name: Optional[str] = None
    company_tax_id: Optional[str] = None
    company_phone: Optional[str] = None
    company_address: Optional[str] = None
    company_website: Optional[str] = None
