# marketplace/services/order_service.py
from decimal import Decimal
from typing import Any, Dict, Iterable, List

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain.actors import Actor
from marketplace.domain.errors import (
    EmptyCart,
    InvalidTransition,
    NotFound,
    ProductUnavailable,
    Unauthenticated,
)
from marketplace.domain.order_status import OrderStatus, next_status
from marketplace.domain.policy import AccessPolicy, Action, Resource
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.catalog import CatalogReader, ProductSnapshot
from marketplace.services.lock_service import LocalCartLock, RedisCartLock
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Zamowienia: checkout z koszyka, odczyt wg roli, zmiany statusu.

    Checkout:
    1. koszyk usera nie moze byc pusty
    2. snapshot ceny i vendora kazdego produktu z katalogu
    3. zamowienie + pozycje w jednej transakcji
    4. dopiero po commicie czyszczenie koszyka
    """

    def __init__(
        self,
        db: Session,
        catalog: CatalogReader,
        lock_service: RedisCartLock | LocalCartLock,
        policy: AccessPolicy,
    ):
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.catalog = catalog
        self.lock_service = lock_service
        self.policy = policy

    def _lookup_products(self, product_ids: Iterable[int]) -> Dict[int, ProductSnapshot | None]:
        # tylko do podgladu, zamowienie ma wlasne ceny i vendorow
        found = {}
        for product_id in set(product_ids):
            try:
                found[product_id] = self.catalog.get_product(product_id)
            except requests.RequestException as e:
                logger.warning(f"Catalog lookup of product {product_id} failed: {e}")
                found[product_id] = None
            except SQLAlchemyError as e:
                self.repo.rollback()
                logger.warning(f"Catalog lookup of product {product_id} failed: {e}")
                found[product_id] = None
        return found

    def _describe(
        self,
        order: OrderModel,
        products: Dict[int, ProductSnapshot | None] | None = None,
    ) -> Dict[str, Any]:
        if products is None:
            products = self._lookup_products(i.product_id for i in order.items)

        items = []
        for item in order.items:
            product = products.get(item.product_id)
            items.append(
                {
                    "product_id": item.product_id,
                    "vendor_id": item.vendor_id,
                    "quantity": item.quantity,
                    "price": item.price,
                    "subtotal": item.subtotal,
                    "product": product.as_dict() if product else None,
                }
            )

        return {
            "id": order.id,
            "user_id": order.user_id,
            "status": order.status,
            "total": order.total,
            "details": order.details,
            "created_at": order.created_at,
            "items": items,
        }

    def _resource(self, order: OrderModel) -> Resource:
        return Resource(owner_id=order.user_id, vendor_ids=self.repo.vendor_ids(order.id))

    def _load(self, actor: Actor, order_id: int) -> OrderModel:
        # najpierw istnienie, potem uprawnienia
        if not actor.is_authenticated:
            raise Unauthenticated()

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFound("Order", order_id)
        return order

    def _clear_cart(self, cart_id: int) -> bool:
        try:
            self.carts.clear_items(cart_id)
            self.carts.bump_version(cart_id)
            self.carts.commit()
        except SQLAlchemyError as e:
            # koszyk wyczysci sie przy nastepnym odczycie
            self.carts.rollback()
            logger.warning(f"Cart {cart_id} was not cleared after checkout: {e}")
            return False
        return True

    def checkout(self, actor: Actor, details: Dict[str, Any]) -> Dict[str, Any]:
        self.policy.check(actor, Action.MANAGE_OWN)

        cart = self.carts.get_cart_by_user(actor.user_id)
        if not cart:
            raise EmptyCart()

        with self.lock_service.hold(cart.id):
            cart = self.carts.get_cart(cart.id)

            if self.repo.exists_for_cart_version(cart.id, cart.version):
                # te pozycje juz sa kupione, poprzedni checkout nie zdazyl wyczyscic koszyka
                logger.warning(f"Cart {cart.id} version {cart.version} already ordered")
                self._clear_cart(cart.id)
                raise EmptyCart()

            items = self.carts.get_cart_items(cart.id)
            if not items:
                raise EmptyCart()

            order_items = []
            snapshots = {}
            for item in items:
                product = self.catalog.get_product(item.product_id)
                if not product:
                    logger.info(f"Checkout of cart {cart.id} rejected, product {item.product_id} is gone")
                    raise ProductUnavailable(item.product_id)
                snapshots[item.product_id] = product

                order_items.append(
                    OrderItemModel(
                        product_id=item.product_id,
                        vendor_id=product.vendor_id,
                        quantity=item.quantity,
                        price=product.price,
                        subtotal=product.price * item.quantity,
                    )
                )

            order = OrderModel(
                user_id=actor.user_id,
                cart_id=cart.id,
                cart_version=cart.version,
                status=OrderStatus.PENDING.value,
                total=sum((i.subtotal for i in order_items), Decimal("0.00")),
                details=details,
                items=order_items,
            )

            try:
                self.repo.add_order(order)
                self.repo.commit()
            except SQLAlchemyError:
                self.repo.rollback()
                logger.error(f"Checkout of cart {cart.id} failed, nothing was written")
                raise

            logger.info(f"Order {order.id} created from cart {cart.id} ({len(order_items)} items, total {order.total})")

            # odpowiedz ze snapshotow, bez ponownego pytania katalogu
            result = self._describe(order, snapshots)

            # zamowienie juz jest, blad tutaj nie cofa checkoutu
            self._clear_cart(cart.id)

        return result

    def list_orders(self, actor: Actor) -> List[Dict[str, Any]]:
        scope = self.policy.order_scope(actor)
        orders = self.repo.list_orders(scope, actor.user_id)
        # kazdy produkt raz na cala liste
        products = self._lookup_products(i.product_id for o in orders for i in o.items)
        return [self._describe(o, products) for o in orders]

    def get_order(self, actor: Actor, order_id: int) -> Dict[str, Any]:
        order = self._load(actor, order_id)
        self.policy.check(actor, Action.READ_ORDER, self._resource(order))
        return self._describe(order)

    def update_status(self, actor: Actor, order_id: int, status: str) -> Dict[str, Any]:
        order = self._load(actor, order_id)
        self.policy.check(actor, Action.UPDATE_ORDER_STATUS, self._resource(order))

        current = order.status
        target = next_status(current, status)

        # warunek na stary status, rownolegla zmiana wygrywa
        rowcount = self.repo.update_order_status(order.id, current, target.value)
        if rowcount == 0:
            self.repo.rollback()
            latest = self.repo.get_order(order.id)
            raise InvalidTransition(latest.status, status, "order status changed concurrently")

        self.repo.commit()
        logger.info(f"Order {order.id} status {current} -> {target.value} by {actor.role.value} {actor.user_id}")

        return self._describe(self.repo.get_order(order.id))
