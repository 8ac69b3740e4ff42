from pathlib import Path

import pytest
from conftest import make_container, seed_parties
from openpyxl import Workbook, load_workbook

from aquarius.domain.errors import NotFoundError, ValidationError


def _seed_proformas(c):
    client_id, product_ids = seed_parties(c)
    line = [{"product_id": product_ids[1], "quantity": 1}]
    approved = c.proformas.create_proforma("Trade Evolution", client_id, line, "2025-03-05")
    draft = c.proformas.create_proforma("Trade Evolution", client_id, line + line, "2025-03-06")
    c.proformas.change_status(approved.id, "APPROVED")
    c.proformas.add_payment(approved.id, 40, "2025-03-20", "advance")
    return client_id, approved, draft


def test_billing_stats(tmp_path: Path):
    c = make_container(tmp_path)
    _, approved, draft = _seed_proformas(c)

    stats = c.reporting.billing_stats()

    assert stats.total_proformas == 2
    assert stats.approved_count == 1
    assert stats.draft_count == 1
    assert stats.total_billed == pytest.approx(100.0)
    assert stats.draft_amount == pytest.approx(200.0)
    assert stats.approval_rate == pytest.approx(50.0)
    summary = stats.by_client["Acme Imports SA"]
    assert summary.count == 2
    assert summary.total_value == pytest.approx(300.0)
    assert summary.balance == pytest.approx(260.0)
    assert stats.balance_by_company == {"Trade Evolution": pytest.approx(260.0), "Successful Trade": 0}
    assert {p.id for p in stats.recent} == {approved.id, draft.id}


def test_billing_stats_on_empty_store(tmp_path: Path):
    stats = make_container(tmp_path).reporting.billing_stats()
    assert stats.total_proformas == 0
    assert stats.approval_rate == 0.0
    assert stats.recent == []


def test_export_client_statement(tmp_path: Path):
    c = make_container(tmp_path)
    client_id, approved, _ = _seed_proformas(c)
    out = tmp_path / "statement.xlsx"

    c.reporting.export_client_statement_excel(str(out), client_id)

    wb = load_workbook(out)
    assert wb.sheetnames == ["Summary", "Proformas", "Payments"]
    summary = wb["Summary"]
    assert summary["A8"].value == "Balance due"
    assert summary["B8"].value == pytest.approx(260.0)
    assert wb["Proformas"].max_row == 3
    payments = wb["Payments"]
    assert payments["A2"].value == approved.proforma_number
    assert payments["C2"].value == "2025-03-20"
    assert payments["D2"].value == 40.0


def test_export_statement_for_unknown_client(tmp_path: Path):
    c = make_container(tmp_path)
    with pytest.raises(NotFoundError):
        c.reporting.export_client_statement_excel(str(tmp_path / "x.xlsx"), "missing")


def test_import_catalog_skips_invalid_rows(tmp_path: Path):
    wb = Workbook()
    products = wb.active
    products.title = "Products"
    products.append(["Name", "Description", "Price", "Unit", "Category"])
    products.append(["Frozen Shrimp", "16/20", 50, "KG", "Seafood"])
    products.append(["Tilapia", None, "n/a", "KG", None])
    products.append([None, None, 1, "KG", None])
    clients = wb.create_sheet("clients")
    clients.append(["name", "email", "company", "company_name"])
    clients.append(["Maria", "maria@acme.example", "Trade Evolution", "Acme"])
    clients.append(["Juan", "juan-at-nowhere", "Successful Trade", None])
    path = tmp_path / "catalog.xlsx"
    wb.save(path)

    c = make_container(tmp_path)
    ok, skipped = c.excel.import_catalog_excel(str(path))

    assert (ok, skipped) == (2, 3)
    assert [p.name for p in c.products.list_products()] == ["Frozen Shrimp"]
    assert [x.company_name for x in c.clients.list_clients()] == ["Acme"]


def test_import_catalog_requires_known_sheets(tmp_path: Path):
    wb = Workbook()
    wb.active.title = "Sheet1"
    path = tmp_path / "empty.xlsx"
    wb.save(path)

    c = make_container(tmp_path)
    with pytest.raises(ValidationError):
        c.excel.import_catalog_excel(str(path))


def test_import_catalog_requires_headers(tmp_path: Path):
    wb = Workbook()
    wb.active.title = "products"
    wb.active.append(["name", "price"])
    path = tmp_path / "headers.xlsx"
    wb.save(path)

    c = make_container(tmp_path)
    with pytest.raises(ValidationError, match="unit"):
        c.excel.import_catalog_excel(str(path))


def test_balance_by_company_splits_clients_trading_with_both(tmp_path: Path):
    c = make_container(tmp_path)
    client_id, product_ids = seed_parties(c, company="Both")
    line = [{"product_id": product_ids[1], "quantity": 1}]
    c.proformas.create_proforma("Trade Evolution", client_id, line, "2025-03-05")
    c.proformas.create_proforma("Successful Trade", client_id, line + line, "2025-03-06")

    stats = c.reporting.billing_stats()

    assert stats.balance_by_company == {
        "Trade Evolution": pytest.approx(100.0),
        "Successful Trade": pytest.approx(200.0),
    }
    assert stats.by_client["Acme Imports SA"].balance == pytest.approx(300.0)
