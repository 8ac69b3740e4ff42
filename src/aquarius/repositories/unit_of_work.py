from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Protocol

from aquarius.domain.errors import NotFoundError
from aquarius.domain.models import Proforma


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UnitOfWork(Protocol):
    def __enter__(self) -> "UnitOfWork": ...
    def __exit__(self, exc_type, exc, tb) -> None: ...
    def create_proforma(self, proforma: Proforma) -> Proforma: ...
    def save_proforma(self, proforma: Proforma) -> Proforma: ...


@dataclass
class RepositoryUnitOfWork:
    """Unit of Work adapter for proforma writes.

    The repository methods already encapsulate SQL transactions.
    This class stamps timestamps and centralizes write orchestration so
    services stay persistence-agnostic.
    """

    repo: object

    def __enter__(self) -> "RepositoryUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None

    def create_proforma(self, proforma: Proforma) -> Proforma:
        ts = now_iso()
        stored = replace(proforma, created_at=ts, updated_at=ts)
        self.repo.insert_proforma(stored)
        return stored

    def save_proforma(self, proforma: Proforma) -> Proforma:
        stored = replace(proforma, updated_at=now_iso())
        if not self.repo.save_proforma(stored):
            raise NotFoundError("Proforma not found.")
        return stored
