"""Order status transitions: state machine and who may drive it."""

import pytest

from conftest import ADMIN_ID, CUSTOMER_C, KEYBOARD, ORDER_DETAILS, VENDOR_V, VENDOR_W
from marketplace.domain.actors import Actor
from marketplace.domain.errors import InvalidTransition, NotFound, Unauthenticated, Unauthorized
from marketplace.domain.order_status import OrderStatus, is_terminal, next_status

ADMIN = Actor.admin(ADMIN_ID)


@pytest.fixture()
def order_id(cart_service, order_service, customer):
    cart_service.add_item(customer, KEYBOARD, 1)
    return order_service.checkout(customer, ORDER_DETAILS)["id"]


class TestStateMachine:
    @pytest.mark.parametrize(
        "current,requested",
        [
            ("pending", "shipped"),
            ("pending", "cancelled"),
            ("shipped", "delivered"),
            ("shipped", "cancelled"),
        ],
    )
    def test_allowed(self, current, requested):
        assert next_status(current, requested) == OrderStatus(requested)

    @pytest.mark.parametrize(
        "current,requested",
        [
            ("pending", "delivered"),
            ("pending", "pending"),
            ("shipped", "pending"),
            ("delivered", "cancelled"),
            ("delivered", "shipped"),
            ("cancelled", "pending"),
        ],
    )
    def test_rejected(self, current, requested):
        with pytest.raises(InvalidTransition):
            next_status(current, requested)

    def test_unknown_label(self):
        with pytest.raises(InvalidTransition) as exc:
            next_status("pending", "teleported")

        assert exc.value.requested == "teleported"

    def test_terminal_states(self):
        assert is_terminal(OrderStatus.DELIVERED)
        assert is_terminal(OrderStatus.CANCELLED)
        assert not is_terminal(OrderStatus.PENDING)


class TestUpdateStatus:
    def test_owning_vendor_ships(self, order_service, order_id):
        order = order_service.update_status(Actor.vendor(VENDOR_V), order_id, "shipped")
        assert order["status"] == "shipped"

    def test_admin_ships(self, order_service, order_id):
        assert order_service.update_status(ADMIN, order_id, "shipped")["status"] == "shipped"

    def test_purchaser_cannot_change_status(self, order_service, order_id):
        with pytest.raises(Unauthorized):
            order_service.update_status(Actor.customer(CUSTOMER_C), order_id, "cancelled")

        assert order_service.get_order(ADMIN, order_id)["status"] == "pending"

    def test_other_vendor_cannot_change_status(self, order_service, order_id):
        with pytest.raises(Unauthorized):
            order_service.update_status(Actor.vendor(VENDOR_W), order_id, "shipped")

    def test_anonymous(self, order_service, order_id):
        with pytest.raises(Unauthenticated):
            order_service.update_status(Actor.anonymous(), order_id, "shipped")

    def test_delivered_is_final(self, order_service, order_id):
        order_service.update_status(ADMIN, order_id, "shipped")
        order_service.update_status(ADMIN, order_id, "delivered")

        with pytest.raises(InvalidTransition):
            order_service.update_status(ADMIN, order_id, "cancelled")

        assert order_service.get_order(ADMIN, order_id)["status"] == "delivered"

    def test_unknown_status_leaves_order_untouched(self, order_service, order_id):
        with pytest.raises(InvalidTransition):
            order_service.update_status(ADMIN, order_id, "lost in space")

        assert order_service.get_order(ADMIN, order_id)["status"] == "pending"

    def test_missing_order(self, order_service, order_id):
        with pytest.raises(NotFound):
            order_service.update_status(ADMIN, 999, "shipped")

    def test_conditional_update_needs_expected_status(self, order_service, order_id):
        # ktos inny zmienil status miedzy odczytem a zapisem
        assert order_service.repo.update_order_status(order_id, "shipped", "delivered") == 0
        assert order_service.repo.update_order_status(order_id, "pending", "shipped") == 1
