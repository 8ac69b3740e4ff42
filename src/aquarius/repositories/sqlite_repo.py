from __future__ import annotations

import json
import shutil
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from aquarius.domain.errors import DuplicateNumberError
from aquarius.domain.models import Client, Product, Proforma
from aquarius.repositories import documents


class SqliteRepository:
    """Document store for clients, products and proformas.

    Every entity is kept as a JSON document next to a few indexed columns used
    for lookups. Writes always replace the whole document.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = str(db_path)

    def _conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def init_db(self) -> None:
        self.run_migrations()

    def run_migrations(self) -> None:
        conn = self._conn()
        backup_path = self._create_pre_migration_backup()
        try:
            cur = conn.cursor()
            cur.execute("BEGIN")
            cur.execute("CREATE TABLE IF NOT EXISTS schema_migrations (version INTEGER PRIMARY KEY, applied_at TEXT NOT NULL)")
            cur.execute("SELECT COALESCE(MAX(version), 0) FROM schema_migrations")
            current_version = int(cur.fetchone()[0])

            migrations = [
                (1, self._migration_v1_documents),
                (2, self._migration_v2_numbering),
            ]

            for version, migration in migrations:
                if version <= current_version:
                    continue
                migration(cur)
                cur.execute(
                    "INSERT INTO schema_migrations (version, applied_at) VALUES (?, datetime('now'))",
                    (version,),
                )
            conn.commit()
        except Exception as exc:
            conn.rollback()
            self._restore_pre_migration_backup(backup_path)
            raise RuntimeError(
                "Database migration failed. Original database restored from automatic backup."
            ) from exc
        finally:
            conn.close()

    def _create_pre_migration_backup(self) -> Path | None:
        db_file = Path(self.db_path)
        if not db_file.exists() or db_file.stat().st_size == 0:
            return None
        backup_file = db_file.with_name(f"{db_file.stem}.pre_migration_{datetime.now().strftime('%Y%m%d%H%M%S')}.bak")
        shutil.copy2(db_file, backup_file)
        return backup_file

    def _restore_pre_migration_backup(self, backup_path: Path | None) -> None:
        if backup_path is None or not backup_path.exists():
            return
        shutil.copy2(backup_path, self.db_path)

    def _migration_v1_documents(self, cur: sqlite3.Cursor) -> None:
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS clients (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                company TEXT NOT NULL CHECK(company IN ('Trade Evolution','Successful Trade','Both')),
                doc TEXT NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS products (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                doc TEXT NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS proformas (
                id TEXT PRIMARY KEY,
                proforma_number TEXT NOT NULL,
                company TEXT NOT NULL,
                client_id TEXT NOT NULL,
                issued_date TEXT NOT NULL,
                status TEXT NOT NULL,
                created_at TEXT NOT NULL,
                doc TEXT NOT NULL
            )
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS ix_proformas_client ON proformas(client_id)")
        cur.execute("CREATE INDEX IF NOT EXISTS ix_proformas_company_date ON proformas(company, issued_date)")

    def _migration_v2_numbering(self, cur: sqlite3.Cursor) -> None:
        cur.execute("CREATE UNIQUE INDEX IF NOT EXISTS ux_proformas_number ON proformas(proforma_number)")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS folio_counters (
                name TEXT PRIMARY KEY,
                value INTEGER NOT NULL CHECK(value >= 0)
            )
            """
        )

    # ---------- Folio counters ----------
    def next_value(self, name: str, seed: int) -> int:
        conn = self._conn()
        cur = conn.cursor()
        try:
            cur.execute("BEGIN IMMEDIATE")
            cur.execute("SELECT value FROM folio_counters WHERE name=?", (name,))
            row = cur.fetchone()
            value = (int(row[0]) if row else int(seed)) + 1
            cur.execute(
                """
                INSERT INTO folio_counters (name, value) VALUES (?, ?)
                ON CONFLICT(name) DO UPDATE SET value=excluded.value
                """,
                (name, value),
            )
            conn.commit()
            return value
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_counter(self, name: str) -> Optional[int]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("SELECT value FROM folio_counters WHERE name=?", (name,))
        row = cur.fetchone()
        conn.close()
        return int(row[0]) if row else None

    # ---------- Clients ----------
    def add_client(self, client: Client) -> None:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO clients (id, name, company, doc) VALUES (?, ?, ?, ?)",
            (client.id, client.name, client.company, documents.dumps(client)),
        )
        conn.commit()
        conn.close()

    def save_client(self, client: Client) -> bool:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute(
            "UPDATE clients SET name=?, company=?, doc=? WHERE id=?",
            (client.name, client.company, documents.dumps(client), client.id),
        )
        updated = cur.rowcount > 0
        conn.commit()
        conn.close()
        return updated

    def get_client(self, client_id: str) -> Optional[Client]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("SELECT doc FROM clients WHERE id=?", (client_id,))
        row = cur.fetchone()
        conn.close()
        if not row:
            return None
        return documents.client_from_doc(json.loads(row[0]))

    def list_clients(self) -> list[Client]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("SELECT doc FROM clients ORDER BY name COLLATE NOCASE")
        rows = cur.fetchall()
        conn.close()
        return [documents.client_from_doc(json.loads(r[0])) for r in rows]

    def delete_client(self, client_id: str) -> bool:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("DELETE FROM clients WHERE id=?", (client_id,))
        removed = cur.rowcount > 0
        conn.commit()
        conn.close()
        return removed

    # ---------- Products ----------
    def add_product(self, product: Product) -> None:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO products (id, name, doc) VALUES (?, ?, ?)",
            (product.id, product.name, documents.dumps(product)),
        )
        conn.commit()
        conn.close()

    def save_product(self, product: Product) -> bool:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute(
            "UPDATE products SET name=?, doc=? WHERE id=?",
            (product.name, documents.dumps(product), product.id),
        )
        updated = cur.rowcount > 0
        conn.commit()
        conn.close()
        return updated

    def get_product(self, product_id: str) -> Optional[Product]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("SELECT doc FROM products WHERE id=?", (product_id,))
        row = cur.fetchone()
        conn.close()
        if not row:
            return None
        return documents.product_from_doc(json.loads(row[0]))

    def get_product_by_name(self, name: str) -> Optional[Product]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("SELECT doc FROM products WHERE name=? COLLATE NOCASE", (name,))
        row = cur.fetchone()
        conn.close()
        if not row:
            return None
        return documents.product_from_doc(json.loads(row[0]))

    def list_products(self) -> list[Product]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("SELECT doc FROM products ORDER BY name COLLATE NOCASE")
        rows = cur.fetchall()
        conn.close()
        return [documents.product_from_doc(json.loads(r[0])) for r in rows]

    def delete_product(self, product_id: str) -> bool:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("DELETE FROM products WHERE id=?", (product_id,))
        removed = cur.rowcount > 0
        conn.commit()
        conn.close()
        return removed

    # ---------- Proformas ----------
    def insert_proforma(self, proforma: Proforma) -> None:
        conn = self._conn()
        cur = conn.cursor()
        try:
            cur.execute(
                """
                INSERT INTO proformas (id, proforma_number, company, client_id, issued_date, status, created_at, doc)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    proforma.id,
                    proforma.proforma_number,
                    proforma.company,
                    proforma.client_id,
                    proforma.issued_date,
                    proforma.status,
                    proforma.created_at,
                    documents.dumps(proforma),
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise DuplicateNumberError(f"Proforma number {proforma.proforma_number} already exists.") from e
        finally:
            conn.close()

    def save_proforma(self, proforma: Proforma) -> bool:
        conn = self._conn()
        cur = conn.cursor()
        try:
            cur.execute(
                """
                UPDATE proformas
                SET proforma_number=?, company=?, client_id=?, issued_date=?, status=?, created_at=?, doc=?
                WHERE id=?
                """,
                (
                    proforma.proforma_number,
                    proforma.company,
                    proforma.client_id,
                    proforma.issued_date,
                    proforma.status,
                    proforma.created_at,
                    documents.dumps(proforma),
                    proforma.id,
                ),
            )
            updated = cur.rowcount > 0
            conn.commit()
            return updated
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise DuplicateNumberError(f"Proforma number {proforma.proforma_number} already exists.") from e
        finally:
            conn.close()

    def get_proforma(self, proforma_id: str) -> Optional[Proforma]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("SELECT doc FROM proformas WHERE id=?", (proforma_id,))
        row = cur.fetchone()
        conn.close()
        if not row:
            return None
        return documents.proforma_from_doc(json.loads(row[0]))

    def list_proformas(self) -> list[Proforma]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("SELECT doc FROM proformas ORDER BY created_at DESC, id")
        rows = cur.fetchall()
        conn.close()
        return [documents.proforma_from_doc(json.loads(r[0])) for r in rows]

    def list_proformas_for_client(self, client_id: str) -> list[Proforma]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("SELECT doc FROM proformas WHERE client_id=? ORDER BY created_at DESC, id", (client_id,))
        rows = cur.fetchall()
        conn.close()
        return [documents.proforma_from_doc(json.loads(r[0])) for r in rows]

    def delete_proforma(self, proforma_id: str) -> bool:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("DELETE FROM proformas WHERE id=?", (proforma_id,))
        removed = cur.rowcount > 0
        conn.commit()
        conn.close()
        return removed

