from datetime import date
from pathlib import Path

import pytest
from conftest import proforma

from aquarius.config import DocumentSettings
from aquarius.domain.errors import ValidationError
from aquarius.domain.models import EditableInvoiceFields
from aquarius.repositories.sqlite_repo import SqliteRepository
from aquarius.services.numbering_service import TRE_INVOICE_FOLIO, NumberingService


def test_trade_evolution_first_number_of_the_day():
    numbering = NumberingService()
    assert numbering.generate_proforma_number("Trade Evolution", date(2025, 3, 5), []) == "TRE050325-01"


def test_trade_evolution_counts_same_day_only():
    existing = [
        proforma("TRE050325-01"),
        proforma("TRE050325-02"),
        proforma("TRE040325-01", issued_date="2025-03-04"),
        proforma("STL257573", company="Successful Trade"),
    ]
    numbering = NumberingService()
    assert numbering.generate_proforma_number("Trade Evolution", "2025-03-05", existing) == "TRE050325-03"


def test_trade_evolution_accepts_timestamps_for_issued_date():
    existing = [proforma("TRE050325-01", issued_date="2025-03-05T10:15:00.000Z")]
    numbering = NumberingService()
    assert numbering.generate_proforma_number("Trade Evolution", "2025-03-05T08:00:00Z", existing) == "TRE050325-02"


def test_trade_evolution_skips_past_highest_suffix_after_deletion():
    # -02 was deleted; counting alone would hand out -03 again.
    existing = [proforma("TRE050325-01"), proforma("TRE050325-03")]
    numbering = NumberingService()
    assert numbering.generate_proforma_number("Trade Evolution", "2025-03-05", existing) == "TRE050325-04"


def test_successful_trade_starts_at_base_for_new_year():
    existing = [proforma("STL247600", company="Successful Trade", issued_date="2024-12-30")]
    numbering = NumberingService()
    assert numbering.generate_proforma_number("Successful Trade", "2025-01-02", existing) == "STL257573"


def test_successful_trade_continues_from_highest_suffix():
    existing = [
        proforma("STL257573", company="Successful Trade"),
        proforma("STL257580", company="Successful Trade"),
        proforma("STL257575", company="Successful Trade"),
    ]
    numbering = NumberingService()
    number = numbering.generate_proforma_number("Successful Trade", "2025-06-01", existing)
    assert number == "STL257581"
    assert all(int(number[5:]) > int(p.proforma_number[5:]) for p in existing)


def test_successful_trade_ignores_suffixes_below_base():
    existing = [proforma("STL25100", company="Successful Trade")]
    numbering = NumberingService()
    assert numbering.generate_proforma_number("Successful Trade", "2025-06-01", existing) == "STL257573"


def test_successful_trade_base_is_configurable():
    numbering = NumberingService(DocumentSettings(stl_folio_start=100))
    assert numbering.generate_proforma_number("Successful Trade", "2026-01-10", []) == "STL26100"


def test_unknown_company_gets_placeholder_number():
    numbering = NumberingService()
    assert numbering.generate_proforma_number("Acme Corp", "2025-03-05", []) == "UNKNOWN-050325"


def test_malformed_issued_date_is_rejected():
    numbering = NumberingService()
    with pytest.raises(ValidationError):
        numbering.generate_proforma_number("Trade Evolution", "05/03/2025", [])


def test_trade_evolution_invoice_folio_starts_after_seed():
    numbering = NumberingService()
    p = proforma("TRE050325-01")
    assert numbering.generate_invoice_number(p) == "A178"
    assert numbering.generate_invoice_number(p) == "A179"


def test_invoice_number_override_is_idempotent():
    numbering = NumberingService()
    p = proforma("TRE050325-01", editable_invoice_fields=EditableInvoiceFields(invoice_number="A200"))
    assert numbering.generate_invoice_number(p) == "A200"
    assert numbering.generate_invoice_number(p) == "A200"
    # The override does not consume a folio.
    assert numbering.generate_invoice_number(proforma("TRE050325-02")) == "A178"


def test_successful_trade_invoice_number_is_derived():
    numbering = NumberingService()
    p = proforma("STL257573", company="Successful Trade")
    assert numbering.generate_invoice_number(p) == "ST25-INV7573"
    assert numbering.generate_invoice_number(p) == "ST25-INV7573"


def test_packing_list_names():
    numbering = NumberingService()
    assert numbering.generate_packing_list_name(proforma("TRE250725-01")) == "TRE250725-01_PL"
    assert numbering.generate_packing_list_name(proforma("STL257573", company="Successful Trade")) == "ST-PL257573"


def test_persisted_folio_survives_new_service_instances(tmp_path: Path):
    repo = SqliteRepository(tmp_path / "folio.db")
    repo.init_db()
    p = proforma("TRE050325-01")

    assert NumberingService(folio_counter=repo).generate_invoice_number(p) == "A178"
    # A fresh service (new session) keeps counting from the stored value.
    assert NumberingService(folio_counter=repo).generate_invoice_number(p) == "A179"
    assert repo.get_counter(TRE_INVOICE_FOLIO) == 179
