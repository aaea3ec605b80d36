# storefront/repos/cart_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def get_cart_item(self, item_id: int, user_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.id == item_id,
                CartItemModel.user_id == user_id,
            )
        ).scalar_one_or_none()

    def get_cart_item_by_product(self, user_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def count_cart_items(self, user_id: int) -> int:
        return self.db.execute(
            select(func.count(CartItemModel.id)).where(CartItemModel.user_id == user_id)
        ).scalar_one()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
