# marketplace/services/product_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.domain.actors import Actor, Role
from marketplace.domain.errors import InvalidInput, NotFound
from marketplace.domain.policy import AccessPolicy, Action, Resource
from marketplace.domain.schemas import ProductIn, ProductUpdate
from marketplace.repos.product_repo import ProductRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    """Zapis produktow w lokalnym katalogu, vendor tylko swoje."""

    def __init__(self, db: Session, policy: AccessPolicy):
        self.repo = ProductRepo(db)
        self.policy = policy

    def _describe(self, product: ProductModel) -> Dict[str, Any]:
        return {
            "id": product.id,
            "vendor_id": product.vendor_id,
            "name": product.name,
            "description": product.description,
            "price": product.price,
        }

    def _existing(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Product", product_id)
        return product

    def get_product(self, actor: Actor, product_id: int) -> Dict[str, Any]:
        self.policy.check(actor, Action.BROWSE_CATALOG)
        return self._describe(self._existing(product_id))

    def create_product(self, actor: Actor, payload: ProductIn) -> Dict[str, Any]:
        vendor_id = actor.user_id if actor.role is Role.VENDOR else payload.vendor_id
        self.policy.check(actor, Action.MANAGE_PRODUCT, Resource(owner_id=vendor_id))

        if vendor_id is None:
            raise InvalidInput.field("vendor_id", "required when an admin creates a product")

        product = self.repo.create_product(
            ProductModel(
                vendor_id=vendor_id,
                name=payload.name,
                description=payload.description,
                price=payload.price,
            )
        )
        logger.info(f"Product {product.id} created for vendor {vendor_id}")
        return self._describe(product)

    def update_product(self, actor: Actor, product_id: int, payload: ProductUpdate) -> Dict[str, Any]:
        if not actor.is_authenticated:
            self.policy.check(actor, Action.MANAGE_PRODUCT)

        product = self._existing(product_id)
        self.policy.check(actor, Action.MANAGE_PRODUCT, Resource(owner_id=product.vendor_id))

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        product = self.repo.update_product(product, changes)
        logger.info(f"Product {product.id} updated: {sorted(changes)}")
        return self._describe(product)

    def delete_product(self, actor: Actor, product_id: int) -> None:
        if not actor.is_authenticated:
            self.policy.check(actor, Action.MANAGE_PRODUCT)

        product = self._existing(product_id)
        self.policy.check(actor, Action.MANAGE_PRODUCT, Resource(owner_id=product.vendor_id))

        self.repo.delete_product(product)
        logger.info(f"Product {product_id} deleted")
