"""Role scoped order listing and reading."""

import pytest

from conftest import (
    ADMIN_ID,
    CUSTOMER_C,
    CUSTOMER_D,
    KEYBOARD,
    MONITOR,
    MOUSE,
    ORDER_DETAILS,
    VENDOR_V,
    VENDOR_W,
    VENDOR_X,
)
from marketplace.domain.actors import Actor
from marketplace.domain.errors import NotFound, Unauthenticated, Unauthorized


@pytest.fixture()
def orders(cart_service, order_service):
    """C buys P (vendor V) and Q (vendor W); D buys only from V."""
    c = Actor.customer(CUSTOMER_C)
    cart_service.add_item(c, KEYBOARD, 1)
    cart_service.add_item(c, MONITOR, 1)
    mixed = order_service.checkout(c, ORDER_DETAILS)

    d = Actor.customer(CUSTOMER_D)
    cart_service.add_item(d, MOUSE, 3)
    v_only = order_service.checkout(d, ORDER_DETAILS)

    return {"mixed": mixed["id"], "v_only": v_only["id"]}


def _ids(listing):
    return [o["id"] for o in listing]


class TestListOrders:
    def test_customer_sees_own_orders(self, order_service, orders):
        assert _ids(order_service.list_orders(Actor.customer(CUSTOMER_C))) == [orders["mixed"]]
        assert _ids(order_service.list_orders(Actor.customer(CUSTOMER_D))) == [orders["v_only"]]

    def test_each_participating_vendor_sees_shared_order(self, order_service, orders):
        assert _ids(order_service.list_orders(Actor.vendor(VENDOR_V))) == [orders["mixed"], orders["v_only"]]
        assert _ids(order_service.list_orders(Actor.vendor(VENDOR_W))) == [orders["mixed"]]

    def test_uninvolved_vendor_sees_nothing(self, order_service, orders):
        assert order_service.list_orders(Actor.vendor(VENDOR_X)) == []

    def test_admin_sees_everything(self, order_service, orders):
        assert _ids(order_service.list_orders(Actor.admin(ADMIN_ID))) == [orders["mixed"], orders["v_only"]]

    def test_anonymous_is_rejected(self, order_service, orders):
        with pytest.raises(Unauthenticated):
            order_service.list_orders(Actor.anonymous())

    def test_vendor_visibility_survives_product_deletion(self, order_service, orders, db, products):
        db.delete(products[MONITOR])
        db.commit()

        assert _ids(order_service.list_orders(Actor.vendor(VENDOR_W))) == [orders["mixed"]]


class TestReadOrder:
    def test_purchaser_reads_own_order(self, order_service, orders):
        order = order_service.get_order(Actor.customer(CUSTOMER_C), orders["mixed"])

        assert order["id"] == orders["mixed"]
        assert len(order["items"]) == 2

    def test_other_customer_is_refused(self, order_service, orders):
        with pytest.raises(Unauthorized):
            order_service.get_order(Actor.customer(CUSTOMER_D), orders["mixed"])

    def test_vendor_with_product_in_order(self, order_service, orders):
        order = order_service.get_order(Actor.vendor(VENDOR_W), orders["mixed"])
        assert order["id"] == orders["mixed"]

    def test_vendor_without_product_in_order(self, order_service, orders):
        with pytest.raises(Unauthorized):
            order_service.get_order(Actor.vendor(VENDOR_W), orders["v_only"])

    def test_admin_reads_any(self, order_service, orders):
        assert order_service.get_order(Actor.admin(ADMIN_ID), orders["v_only"])["user_id"] == CUSTOMER_D

    def test_missing_order_is_not_found_for_everyone(self, order_service, orders):
        for actor in (Actor.customer(CUSTOMER_D), Actor.vendor(VENDOR_X), Actor.admin(ADMIN_ID)):
            with pytest.raises(NotFound):
                order_service.get_order(actor, 999)

    def test_anonymous_is_rejected_before_lookup(self, order_service, orders):
        with pytest.raises(Unauthenticated):
            order_service.get_order(Actor.anonymous(), 999)
