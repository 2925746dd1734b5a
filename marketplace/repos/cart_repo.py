# marketplace/repos/cart_repo.py
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.models.cart import CartModel
from marketplace.data.models.cart_item import CartItemModel


class CartRepo:
    """
    Dostep do koszykow i ich pozycji. Repo nie commituje (poza tworzeniem
    koszyka), transakcja nalezy do serwisu.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, cart_id: int) -> CartModel | None:
        return self.db.get(CartModel, cart_id, populate_existing=True)

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def get_or_create_cart(self, user_id: int) -> CartModel:
        existing = self.get_cart_by_user(user_id)
        if existing:
            return existing

        cart = CartModel(user_id=user_id, version=1)
        self.db.add(cart)
        try:
            self.db.commit()
        except IntegrityError:
            #rownolegle zapytanie zalozylo koszyk pierwsze
            self.db.rollback()
            return self.get_cart_by_user(user_id)
        self.db.refresh(cart)
        return cart

    def get_cart_items(self, cart_id: int) -> List[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.id)
                .execution_options(populate_existing=True)
            ).scalars()
        )

    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel)
            .where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def increment_item(self, cart_id: int, product_id: int, quantity: int) -> bool:
        # jedno UPDATE, baza sama liczy quantity + n
        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
            .values(quantity=CartItemModel.quantity + quantity)
        )
        return result.rowcount > 0

    def insert_item(self, cart_id: int, product_id: int, quantity: int) -> None:
        self.db.add(CartItemModel(cart_id=cart_id, product_id=product_id, quantity=quantity))
        self.db.flush()

    def set_item_quantity(self, cart_id: int, product_id: int, quantity: int) -> bool:
        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
            .values(quantity=quantity)
        )
        return result.rowcount > 0

    def delete_cart_item(self, cart_id: int, product_id: int) -> bool:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        )
        return result.rowcount > 0

    def clear_items(self, cart_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(CartItemModel.cart_id == cart_id)
        )
        return result.rowcount

    def bump_version(self, cart_id: int) -> None:
        self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id)
            .values(version=CartModel.version + 1)
        )

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
