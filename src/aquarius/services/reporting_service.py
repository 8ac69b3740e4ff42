from __future__ import annotations

from dataclasses import dataclass, field

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from aquarius.domain.errors import NotFoundError
from aquarius.domain.models import SUCCESSFUL_TRADE, TRADE_EVOLUTION, Proforma


@dataclass
class ClientSummary:
    company: str
    count: int = 0
    total_value: float = 0.0
    balance: float = 0.0


@dataclass(frozen=True)
class BillingStats:
    total_proformas: int
    approved_count: int
    draft_count: int
    total_billed: float
    draft_amount: float
    approval_rate: float
    by_client: dict[str, ClientSummary] = field(default_factory=dict)
    balance_by_company: dict[str, float] = field(default_factory=dict)
    recent: list[Proforma] = field(default_factory=list)


class ReportingService:
    def __init__(self, repo):
        self.repo = repo

    def billing_stats(self, recent_limit: int = 3) -> BillingStats:
        proformas = self.repo.list_proformas()

        approved = [p for p in proformas if p.status == "APPROVED"]
        drafts = [p for p in proformas if p.status == "DRAFT"]

        by_client: dict[str, ClientSummary] = {}
        for p in proformas:
            summary = by_client.setdefault(p.client_name, ClientSummary(company=p.company))
            summary.count += 1
            summary.total_value += float(p.grand_total)
            summary.balance += p.balance_due

        # Keyed by the issuing company of each proforma; "Both" clients split across companies.
        balance_by_company = {company: 0.0 for company in (TRADE_EVOLUTION, SUCCESSFUL_TRADE)}
        for p in proformas:
            balance_by_company[p.company] = balance_by_company.get(p.company, 0.0) + p.balance_due

        total = len(proformas)
        return BillingStats(
            total_proformas=total,
            approved_count=len(approved),
            draft_count=len(drafts),
            total_billed=sum(float(p.grand_total) for p in approved),
            draft_amount=sum(float(p.grand_total) for p in drafts),
            approval_rate=(len(approved) / total * 100.0) if total else 0.0,
            by_client=by_client,
            balance_by_company=balance_by_company,
            recent=proformas[:recent_limit],
        )

    def client_balance_due(self, client_id: str) -> float:
        return sum(p.balance_due for p in self.repo.list_proformas_for_client(client_id))

    def export_client_statement_excel(self, path: str, client_id: str) -> None:
        client = self.repo.get_client(client_id)
        if not client:
            raise NotFoundError("Client not found.")
        proformas = self.repo.list_proformas_for_client(client_id)

        wb = Workbook()

        def money(cell):
            cell.number_format = "#,##0.00"

        def bold_row(ws, r):
            for c in ws[r]:
                c.font = Font(bold=True)

        def set_widths(ws, widths: dict[str, int]):
            for col, w in widths.items():
                ws.column_dimensions[col].width = w

        def add_table(ws, name: str, start_row: int, start_col: int, end_row: int, end_col: int):
            ref = f"{get_column_letter(start_col)}{start_row}:{get_column_letter(end_col)}{end_row}"
            tab = Table(displayName=name, ref=ref)
            tab.tableStyleInfo = TableStyleInfo(
                name="TableStyleMedium9",
                showRowStripes=True,
                showColumnStripes=False,
            )
            ws.add_table(tab)

        billed = sum(float(p.grand_total) for p in proformas)
        paid = sum(p.amount_paid for p in proformas)

        # -------- 1) Summary --------
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = f"Statement of account: {client.company_name or client.name}"
        ws["A1"].font = Font(bold=True, size=14)

        rows = [
            ("Client", client.name, "text"),
            ("Email", client.email, "text"),
            ("Proformas", len(proformas), "int"),
            ("Total billed", billed, "money"),
            ("Total paid", paid, "money"),
            ("Balance due", billed - paid, "money"),
            ("Manual balance", float(client.balance), "money"),
        ]
        start_row = 3
        for i, (label, val, kind) in enumerate(rows):
            r = start_row + i
            ws[f"A{r}"] = label
            ws[f"B{r}"] = val
            if kind == "money":
                money(ws[f"B{r}"])
        set_widths(ws, {"A": 22, "B": 40})

        # -------- 2) Proformas --------
        ws2 = wb.create_sheet("Proformas")
        ws2.append(["Number", "Company", "Issued", "Status", "Currency", "Grand Total", "Paid", "Balance Due"])
        bold_row(ws2, 1)
        for out_row, p in enumerate(proformas, start=2):
            ws2.append([
                p.proforma_number, p.company, p.issued_date, p.status, p.currency,
                float(p.grand_total), p.amount_paid, p.balance_due,
            ])
            for col in ("F", "G", "H"):
                money(ws2[f"{col}{out_row}"])
        ws2.freeze_panes = "A2"
        set_widths(ws2, {"A": 16, "B": 18, "C": 12, "D": 12, "E": 14, "F": 16, "G": 16, "H": 16})
        if ws2.max_row >= 2:
            add_table(ws2, "Proformas", 1, 1, ws2.max_row, 8)

        # -------- 3) Payments --------
        ws3 = wb.create_sheet("Payments")
        ws3.append(["Proforma", "Payment ID", "Date", "Amount", "Notes"])
        bold_row(ws3, 1)
        out_row = 2
        for p in proformas:
            for pay in p.payments:
                ws3.append([p.proforma_number, pay.id, pay.date[:10], float(pay.amount), pay.notes or ""])
                money(ws3[f"D{out_row}"])
                out_row += 1
        ws3.freeze_panes = "A2"
        set_widths(ws3, {"A": 16, "B": 20, "C": 12, "D": 16, "E": 34})
        if ws3.max_row >= 2:
            add_table(ws3, "Payments", 1, 1, ws3.max_row, 5)

        wb.save(path)
