# marketplace/services/catalog.py
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Protocol

from sqlalchemy.orm import Session

from marketplace.repos.product_repo import ProductRepo


@dataclass(frozen=True)
class ProductSnapshot:
    """Cena i vendor produktu w chwili odczytu."""

    id: int
    vendor_id: int
    name: str
    price: Decimal
    description: str = ""

    def as_dict(self) -> dict:
        return asdict(self)


class CatalogReader(Protocol):
    def get_product(self, product_id: int) -> ProductSnapshot | None:
        ...


class DatabaseCatalog:
    """Katalog czytany z lokalnej tabeli products."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def get_product(self, product_id: int) -> ProductSnapshot | None:
        product = self.repo.get_product(product_id)
        if not product:
            return None
        return ProductSnapshot(
            id=product.id,
            vendor_id=product.vendor_id,
            name=product.name,
            price=Decimal(product.price),
            description=product.description or "",
        )
