# marketplace/repos/order_repo.py
from typing import FrozenSet, List

from sqlalchemy import exists, select, update
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain.policy import OrderScope


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        # bez commita - zamowienie i pozycje ida w jednej transakcji serwisu
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id, populate_existing=True)

    def list_orders(self, scope: OrderScope, user_id: int | None) -> List[OrderModel]:
        stmt = select(OrderModel).order_by(OrderModel.id)

        if scope is OrderScope.PURCHASER:
            stmt = stmt.where(OrderModel.user_id == user_id)
        elif scope is OrderScope.VENDOR:
            stmt = stmt.where(
                exists().where(
                    OrderItemModel.order_id == OrderModel.id,
                    OrderItemModel.vendor_id == user_id,
                )
            )

        return list(self.db.execute(stmt).scalars())

    def vendor_ids(self, order_id: int) -> FrozenSet[int]:
        rows = self.db.execute(
            select(OrderItemModel.vendor_id)
            .where(OrderItemModel.order_id == order_id)
            .distinct()
        ).scalars()
        return frozenset(rows)

    def exists_for_cart_version(self, cart_id: int, cart_version: int) -> bool:
        return self.db.execute(
            select(
                exists().where(
                    OrderModel.cart_id == cart_id,
                    OrderModel.cart_version == cart_version,
                )
            )
        ).scalar()

    def update_order_status(self, order_id: int, old_status: str, new_status: str) -> int:
        # warunek na stary status, np. update set status shipped where id 1 and status pending
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == old_status)
            .values(status=new_status)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
