from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.models.cart import CartModel
from marketplace.domain.actors import Actor
from marketplace.domain.errors import InvalidInput, NotFound
from marketplace.domain.policy import AccessPolicy, Action
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.catalog import CatalogReader
from marketplace.services.lock_service import LocalCartLock, RedisCartLock
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def validate_quantity(quantity) -> int:
    # bool to tez int w pythonie
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidInput.field("quantity", "must be a positive integer")
    return quantity


class CartService:
    """
    Koszyk zalogowanego usera, zawsze jego wlasny.
    commands (add, update, remove, clear) trzymaja lock koszyka i podbijaja wersje
    query (get) tylko odczyt + sprzatanie koszyka juz kupionego
    """

    def __init__(
        self,
        db: Session,
        catalog: CatalogReader,
        lock_service: RedisCartLock | LocalCartLock,
        policy: AccessPolicy,
    ):
        self.repo = CartRepo(db)
        self.orders = OrderRepo(db)
        self.catalog = catalog
        self.lock_service = lock_service
        self.policy = policy

    def _own_cart(self, actor: Actor) -> CartModel:
        self.policy.check(actor, Action.MANAGE_OWN)
        return self.repo.get_or_create_cart(actor.user_id)

    def _describe(self, cart: CartModel) -> Dict[str, Any]:
        items = self.repo.get_cart_items(cart.id)
        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "items": [self._describe_item(i.product_id, i.quantity) for i in items],
        }

    def _describe_item(self, product_id: int, quantity: int) -> Dict[str, Any]:
        product = self.catalog.get_product(product_id)
        return {
            "product_id": product_id,
            "quantity": quantity,
            "product": product.as_dict() if product else None,
        }

    def reconcile(self, cart: CartModel) -> bool:
        """
        Clears a cart whose current contents were already turned into an order.

        Happens only when the clear after a committed checkout failed: the order
        remembers the cart version it consumed, and the cart has not changed since.
        Caller holds the cart lock.
        """
        if not self.orders.exists_for_cart_version(cart.id, cart.version):
            return False

        logger.warning(f"Cart {cart.id} still holds purchased items (version {cart.version}), clearing")
        self.repo.clear_items(cart.id)
        self.repo.bump_version(cart.id)
        self.repo.commit()
        return True

    #query
    def get_cart(self, actor: Actor) -> Dict[str, Any]:
        cart = self._own_cart(actor)

        if self.orders.exists_for_cart_version(cart.id, cart.version):
            with self.lock_service.hold(cart.id):
                self.reconcile(self.repo.get_cart(cart.id))

        return self._describe(cart)

    #commands
    def add_item(self, actor: Actor, product_id: int, quantity: int) -> Dict[str, Any]:
        cart = self._own_cart(actor)
        validate_quantity(quantity)

        if not self.catalog.get_product(product_id):
            raise NotFound("Product", product_id)

        with self.lock_service.hold(cart.id):
            self.reconcile(self.repo.get_cart(cart.id))
            try:
                if not self.repo.increment_item(cart.id, product_id, quantity):
                    logger.info(f"Adding product {product_id} to cart {cart.id}")
                    self.repo.insert_item(cart.id, product_id, quantity)
                else:
                    logger.info(f"Product {product_id} already in cart {cart.id}, quantity +{quantity}")
                self.repo.bump_version(cart.id)
                self.repo.commit()
            except IntegrityError:
                #inny proces wstawil ta sama pozycje (bez redisa), dodajemy do niej
                self.repo.rollback()
                self.repo.increment_item(cart.id, product_id, quantity)
                self.repo.bump_version(cart.id)
                self.repo.commit()

            item = self.repo.get_cart_item(cart.id, product_id)

        return self._describe_item(item.product_id, item.quantity)

    def update_item_quantity(self, actor: Actor, product_id: int, quantity: int) -> Dict[str, Any]:
        cart = self._own_cart(actor)
        validate_quantity(quantity)

        with self.lock_service.hold(cart.id):
            self.reconcile(self.repo.get_cart(cart.id))
            if not self.repo.set_item_quantity(cart.id, product_id, quantity):
                self.repo.rollback()
                raise NotFound("Cart item", product_id)
            self.repo.bump_version(cart.id)
            self.repo.commit()

        logger.info(f"Cart {cart.id}: product {product_id} quantity set to {quantity}")
        return self._describe_item(product_id, quantity)

    def remove_item(self, actor: Actor, product_id: int) -> None:
        cart = self._own_cart(actor)

        with self.lock_service.hold(cart.id):
            self.reconcile(self.repo.get_cart(cart.id))
            if not self.repo.delete_cart_item(cart.id, product_id):
                self.repo.rollback()
                raise NotFound("Cart item", product_id)
            self.repo.bump_version(cart.id)
            self.repo.commit()

        logger.info(f"Product {product_id} removed from cart {cart.id}")

    def clear(self, actor: Actor) -> None:
        cart = self._own_cart(actor)

        with self.lock_service.hold(cart.id):
            removed = self.repo.clear_items(cart.id)
            self.repo.bump_version(cart.id)
            self.repo.commit()

        logger.info(f"Cart {cart.id} cleared ({removed} items)")

