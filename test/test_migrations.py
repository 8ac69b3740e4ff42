import sqlite3
from pathlib import Path

import pytest
from conftest import make_container, seed_parties

from aquarius.repositories.sqlite_repo import SqliteRepository


def test_migrations_are_recorded_once(tmp_path: Path):
    db = tmp_path / "m.db"
    repo = SqliteRepository(db)
    repo.init_db()
    repo.init_db()

    conn = sqlite3.connect(db)
    versions = [r[0] for r in conn.execute("SELECT version FROM schema_migrations ORDER BY version")]
    tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    conn.close()

    assert versions == [1, 2]
    assert {"clients", "products", "proformas", "folio_counters"} <= tables


def test_client_company_constraint(tmp_path: Path):
    repo = SqliteRepository(tmp_path / "c.db")
    repo.init_db()

    conn = sqlite3.connect(tmp_path / "c.db")
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("INSERT INTO clients (id, name, company, doc) VALUES ('x', 'X', 'Acme', '{}')")
    conn.close()


def test_migration_failure_restores_db(tmp_path: Path):
    class BrokenMigrationRepo(SqliteRepository):
        def _migration_v2_numbering(self, cur):
            raise RuntimeError("forced migration failure")

    db = tmp_path / "broken.db"
    c = make_container(tmp_path, name="broken.db")
    client_id, _ = seed_parties(c)

    conn = sqlite3.connect(db)
    conn.execute("DELETE FROM schema_migrations WHERE version = 2")
    conn.commit()
    conn.close()

    with pytest.raises(RuntimeError, match="Original database restored"):
        BrokenMigrationRepo(db).init_db()

    repo = SqliteRepository(db)
    assert repo.get_client(client_id) is not None
    conn = sqlite3.connect(db)
    versions = [r[0] for r in conn.execute("SELECT version FROM schema_migrations")]
    conn.close()
    assert versions == [1]
    assert list(tmp_path.glob("broken.pre_migration_*.bak"))
