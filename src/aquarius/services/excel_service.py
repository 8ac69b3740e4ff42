from __future__ import annotations

import logging

from openpyxl import load_workbook

from aquarius.domain.errors import AppError, ValidationError

log = logging.getLogger(__name__)


def _read_headers(ws, required: list[str]) -> dict[str, int]:
    headers = {}
    for col in range(1, ws.max_column + 1):
        v = ws.cell(row=1, column=col).value
        if isinstance(v, str):
            headers[v.strip().lower()] = col
    for r in required:
        if r not in headers:
            raise ValidationError(f"Missing column header in '{ws.title}': {r}")
    return headers


def _text(ws, row: int, col: int | None) -> str:
    if col is None:
        return ""
    v = ws.cell(row=row, column=col).value
    return "" if v is None else str(v).strip()


class ExcelService:
    def __init__(self, product_service, client_service):
        self.products = product_service
        self.clients = client_service

    def import_catalog_excel(self, path: str) -> tuple[int, int]:
        """
        Seeds the catalog from a workbook. Sheets (either is optional):
          products | name | description | price | unit | category
          clients  | name | email | company | company_name | address | tax_id
        Products are matched by name and updated; clients are always added.
        """
        wb = load_workbook(path)
        sheets = {ws.title.strip().lower(): ws for ws in wb.worksheets}
        if "products" not in sheets and "clients" not in sheets:
            raise ValidationError("Workbook needs a 'products' or 'clients' sheet.")

        ok = 0
        skipped = 0

        if "products" in sheets:
            ws = sheets["products"]
            headers = _read_headers(ws, ["name", "price", "unit"])
            for row in range(2, ws.max_row + 1):
                try:
                    name = _text(ws, row, headers["name"])
                    if not name:
                        skipped += 1
                        continue
                    self.products.upsert_by_name(
                        name=name,
                        description=_text(ws, row, headers.get("description")),
                        price=float(ws.cell(row=row, column=headers["price"]).value),
                        unit=_text(ws, row, headers["unit"]),
                        category=_text(ws, row, headers.get("category")) or None,
                    )
                    ok += 1
                except (AppError, TypeError, ValueError) as e:
                    log.warning("Catalog import skipped products row %s: %s", row, e)
                    skipped += 1

        if "clients" in sheets:
            ws = sheets["clients"]
            headers = _read_headers(ws, ["name", "email", "company"])
            for row in range(2, ws.max_row + 1):
                try:
                    self.clients.add_client(
                        name=_text(ws, row, headers["name"]),
                        email=_text(ws, row, headers["email"]),
                        company=_text(ws, row, headers["company"]),
                        company_name=_text(ws, row, headers.get("company_name")) or None,
                        address=_text(ws, row, headers.get("address")) or None,
                        tax_id=_text(ws, row, headers.get("tax_id")) or None,
                    )
                    ok += 1
                except AppError as e:
                    log.warning("Catalog import skipped clients row %s: %s", row, e)
                    skipped += 1

        log.info("catalog_imported path=%s ok=%s skipped=%s", path, ok, skipped)
        return ok, skipped
