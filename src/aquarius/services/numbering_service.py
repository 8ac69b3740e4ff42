from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional

from aquarius.config import DocumentSettings
from aquarius.domain.errors import ValidationError
from aquarius.domain.models import SUCCESSFUL_TRADE, TRADE_EVOLUTION, Proforma
from aquarius.repositories.contracts import FolioCounter, InMemoryFolioCounter

log = logging.getLogger("aquarius.numbering")

TRE_INVOICE_FOLIO = "tre_invoice"


def parse_issued_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = (value or "").strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError as e:
        raise ValidationError(f"Invalid issued date: {value!r}") from e


def _trailing_number(text: str) -> Optional[int]:
    digits = text.strip()
    if not digits.isdigit():
        return None
    return int(digits)


class NumberingService:
    """Document numbers for both trading companies.

    Proforma numbers are recomputed from the full set of existing proformas on
    every call; the only stored state is the Trade Evolution invoice folio.
    """

    def __init__(self, settings: DocumentSettings | None = None, folio_counter: FolioCounter | None = None):
        self.settings = settings or DocumentSettings()
        self.folios = folio_counter or InMemoryFolioCounter()

    def generate_proforma_number(
        self,
        company: str,
        issued_date: date | datetime | str,
        all_proformas: Iterable[Proforma],
    ) -> str:
        d = parse_issued_date(issued_date)
        ddmmyy = d.strftime("%d%m%y")

        if company == TRADE_EVOLUTION:
            return self._next_trade_evolution_number(d, ddmmyy, all_proformas)
        if company == SUCCESSFUL_TRADE:
            return self._next_successful_trade_number(d, all_proformas)

        log.warning("proforma_number_unknown_company company=%r", company)
        return f"UNKNOWN-{ddmmyy}"

    def _next_trade_evolution_number(self, d: date, ddmmyy: str, all_proformas: Iterable[Proforma]) -> str:
        prefix = f"TRE{ddmmyy}"
        day = d.isoformat()

        count = 0
        highest = 0
        for p in all_proformas:
            if p.company != TRADE_EVOLUTION or not p.proforma_number.startswith(prefix):
                continue
            if not (p.issued_date or "").startswith(day):
                continue
            count += 1
            _, _, suffix = p.proforma_number.partition("-")
            seq = _trailing_number(suffix)
            if seq is not None and seq > highest:
                highest = seq

        # Counting alone would reuse a surviving number after a deletion.
        next_seq = max(count, highest) + 1
        return f"{prefix}-{next_seq:02d}"

    def _next_successful_trade_number(self, d: date, all_proformas: Iterable[Proforma]) -> str:
        yy = d.strftime("%y")
        prefix = f"STL{yy}"

        highest = 0
        for p in all_proformas:
            if p.company != SUCCESSFUL_TRADE or not p.proforma_number.startswith(prefix):
                continue
            seq = _trailing_number(p.proforma_number[5:])
            if seq is not None and seq > highest:
                highest = seq

        start = int(self.settings.stl_folio_start)
        next_seq = highest + 1 if highest >= start else start
        return f"{prefix}{next_seq}"

    def generate_invoice_number(self, proforma: Proforma) -> str:
        fields = proforma.editable_invoice_fields
        if fields is not None and fields.invoice_number:
            return fields.invoice_number

        if proforma.company == TRADE_EVOLUTION:
            folio = self.folios.next_value(TRE_INVOICE_FOLIO, self.settings.tre_invoice_folio_seed)
            log.info("invoice_folio_issued proforma=%s folio=%s", proforma.proforma_number, folio)
            return f"A{folio:03d}"

        # STL257573 -> ST25-INV7573
        year_part = proforma.proforma_number[3:5]
        consecutive = proforma.proforma_number[5:]
        return f"ST{year_part}-INV{consecutive}"

    def generate_packing_list_name(self, proforma: Proforma) -> str:
        if proforma.company == TRADE_EVOLUTION:
            return f"{proforma.proforma_number}_PL"
        return f"ST-PL{proforma.proforma_number[3:]}"
