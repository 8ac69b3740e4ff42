from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from aquarius.application.container import build_container
from aquarius.config import get_app_paths
from aquarius.logging_config import setup_logging
from aquarius.services.mail_service import DOCUMENT_TITLES

log = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aquarius", description="Trade document back office.")
    sub = parser.add_subparsers(dest="command", required=True)

    seed = sub.add_parser("seed", help="Import products and clients from an Excel workbook.")
    seed.add_argument("workbook")

    sub.add_parser("stats", help="Print billing statistics.")

    statement = sub.add_parser("statement", help="Export a client's statement of account to Excel.")
    statement.add_argument("client_id")
    statement.add_argument("--output", default=None)

    mailto = sub.add_parser("mailto", help="Print a mailto: link that sends a proforma document to its client.")
    mailto.add_argument("proforma_id")
    mailto.add_argument("kind", choices=sorted(DOCUMENT_TITLES))
    mailto.add_argument("link")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)

    paths = get_app_paths()
    setup_logging(paths.logs_dir, level=logging.INFO)
    container = build_container(paths.db_path)

    if args.command == "seed":
        ok, skipped = container.excel.import_catalog_excel(args.workbook)
        print(f"Imported {ok} rows, skipped {skipped}.")
    elif args.command == "stats":
        stats = container.reporting.billing_stats()
        print(f"Proformas: {stats.total_proformas} (approved {stats.approved_count}, draft {stats.draft_count})")
        print(f"Total billed: {stats.total_billed:,.2f}  Approval rate: {stats.approval_rate:.1f}%")
        for company, balance in stats.balance_by_company.items():
            print(f"Balance due {company}: {balance:,.2f}")
    elif args.command == "statement":
        target = args.output or str(paths.exports_dir / f"statement_{args.client_id}.xlsx")
        container.reporting.export_client_statement_excel(target, args.client_id)
        log.info("statement_exported client=%s path=%s", args.client_id, target)
        print(target)
    elif args.command == "mailto":
        print(container.proformas.document_mailto(args.proforma_id, args.kind, args.link))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
