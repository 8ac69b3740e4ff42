from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Optional

from aquarius.domain.errors import NotFoundError, ValidationError
from aquarius.domain.models import Product, ProformaItem
from aquarius.repositories.unit_of_work import now_iso


class ProductService:
    def __init__(self, repo):
        self.repo = repo

    def list_products(self) -> list[Product]:
        return self.repo.list_products()

    def get_product(self, product_id: str) -> Product:
        p = self.repo.get_product(product_id)
        if not p:
            raise NotFoundError("Product not found.")
        return p

    def add_product(
        self,
        name: str,
        description: str,
        price: float,
        unit: str,
        category: Optional[str] = None,
    ) -> str:
        name = (name or "").strip()
        unit = (unit or "").strip()
        if not name or not unit:
            raise ValidationError("Name and Unit are required.")
        if price < 0:
            raise ValidationError("Price must be >= 0.")

        ts = now_iso()
        product = Product(
            id=uuid.uuid4().hex,
            name=name,
            description=(description or "").strip(),
            price=float(price),
            unit=unit,
            category=(category or "").strip() or None,
            created_at=ts,
            updated_at=ts,
        )
        self.repo.add_product(product)
        return product.id

    def update_product(self, product: Product) -> Product:
        if product.price < 0:
            raise ValidationError("Price must be >= 0.")
        updated = replace(product, updated_at=now_iso())
        if not self.repo.save_product(updated):
            raise NotFoundError("Product not found.")
        return updated

    def upsert_by_name(self, name: str, description: str, price: float, unit: str, category: Optional[str] = None) -> str:
        existing = self.repo.get_product_by_name(name.strip())
        if existing:
            if price < 0:
                raise ValidationError("Price must be >= 0.")
            self.update_product(
                replace(existing, description=description, price=float(price), unit=unit, category=category)
            )
            return existing.id
        return self.add_product(name, description, price, unit, category)

    def delete_product(self, product_id: str) -> None:
        # Existing proforma items are snapshots and are left untouched.
        if not self.repo.delete_product(product_id):
            raise NotFoundError("Product not found.")

    def make_item(self, product_id: str, quantity: float = 1, unit_price: Optional[float] = None) -> ProformaItem:
        product = self.get_product(product_id)
        qty = float(quantity)
        price = product.price if unit_price is None else float(unit_price)
        return ProformaItem(
            product_id=product.id,
            product_name=product.name,
            description=product.description or None,
            quantity=qty,
            unit=product.unit,
            unit_price=price,
            total_price=qty * price,
        )
