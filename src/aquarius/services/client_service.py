from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Optional

from aquarius.domain.errors import NotFoundError, ValidationError
from aquarius.domain.models import BOTH_COMPANIES, CLIENT_AFFILIATIONS, Client
from aquarius.repositories.unit_of_work import now_iso


class ClientService:
    def __init__(self, repo):
        self.repo = repo

    def list_clients(self) -> list[Client]:
        return self.repo.list_clients()

    def get_client(self, client_id: str) -> Client:
        c = self.repo.get_client(client_id)
        if not c:
            raise NotFoundError("Client not found.")
        return c

    def find_client(self, client_id: Optional[str]) -> Optional[Client]:
        if not client_id:
            return None
        return self.repo.get_client(client_id)

    def clients_for_company(self, company: str) -> list[Client]:
        return [c for c in self.repo.list_clients() if c.company in (company, BOTH_COMPANIES)]

    def search(self, term: str) -> list[Client]:
        needle = (term or "").strip().lower()
        if not needle:
            return self.repo.list_clients()
        return [
            c
            for c in self.repo.list_clients()
            if needle in c.name.lower() or needle in (c.company_name or "").lower()
        ]

    def add_client(
        self,
        name: str,
        email: str,
        company: str,
        address: Optional[str] = None,
        company_name: Optional[str] = None,
        tax_id: Optional[str] = None,
    ) -> str:
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email:
            raise ValidationError("Name and Email are required.")
        if "@" not in email:
            raise ValidationError(f"Invalid email: {email}")
        if company not in CLIENT_AFFILIATIONS:
            raise ValidationError(f"Unknown company affiliation: {company}")

        ts = now_iso()
        client = Client(
            id=uuid.uuid4().hex,
            name=name,
            email=email,
            company=company,
            address=(address or "").strip() or None,
            company_name=(company_name or "").strip() or None,
            tax_id=(tax_id or "").strip() or None,
            balance=0.0,
            created_at=ts,
            updated_at=ts,
        )
        self.repo.add_client(client)
        return client.id

    def update_client(self, client: Client) -> Client:
        if client.company not in CLIENT_AFFILIATIONS:
            raise ValidationError(f"Unknown company affiliation: {client.company}")
        updated = replace(client, updated_at=now_iso())
        if not self.repo.save_client(updated):
            raise NotFoundError("Client not found.")
        return updated

    def set_manual_balance(self, client_id: str, balance: float) -> Client:
        client = self.get_client(client_id)
        try:
            value = float(balance)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid balance: {balance!r}") from e
        return self.update_client(replace(client, balance=value))

    def delete_client(self, client_id: str) -> None:
        # Proformas keep their snapshotted client name; nothing cascades.
        if not self.repo.delete_client(client_id):
            raise NotFoundError("Client not found.")
