from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import PRODUCT_ACTIVE
from storefront.domain.pricing import ZERO, cart_totals, line_total, to_money
from storefront.exceptions import (
    CartItemNotFoundError,
    DuplicateKeyError,
    InsufficientStockError,
    InvalidAmountError,
    InvalidQuantityError,
    ProductNotFoundError,
    ProductUnavailableError,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.lock_service import LockService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def cart_to_dict(cart: CartModel) -> Dict[str, Any]:
    return {
        "id": cart.id,
        "user_id": cart.user_id,
        "items": [
            {
                "id": line.id,
                "product_id": line.product_id,
                "product_name": line.product.name if line.product else None,
                "quantity": line.quantity,
                "price": to_money(line.price),
                "discount": Decimal(str(line.discount)),
                "line_total": line_total(line.price, line.discount, line.quantity),
            }
            for line in cart.lines
        ],
        "subtotal": to_money(cart.subtotal),
        "shipping": to_money(cart.shipping),
        "total": to_money(cart.total),
        "updated_at": cart.updated_at,
    }


def recalculate_totals(cart: CartModel) -> CartModel:
    """Recompute subtotal/total from the cart's current lines and shipping."""
    subtotal, total = cart_totals(cart.lines, cart.shipping)
    cart.subtotal = subtotal
    cart.total = total
    return cart


def empty_cart(cart: CartModel, reset_shipping: bool = False) -> CartModel:
    """Drop every line and recompute; the caller owns the transaction."""
    cart.lines.clear()
    if reset_shipping:
        cart.shipping = ZERO
    cart.updated_at = datetime.now(timezone.utc)
    return recalculate_totals(cart)


class CartService:
    """
    Use cases for the cart aggregate.
    Commands (add, update, remove, clear, shipping) run under the per-user
    lock, recompute totals explicitly and commit once.
    Queries (get, count) only read.
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.lock_service = lock_service

    # query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        return self.get_or_create_cart(user_id)

    def get_or_create_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self._get_or_create(user_id)
        self.repo.commit()
        return cart_to_dict(cart)

    def item_count(self, user_id: int) -> int:
        # distinct lines, not summed quantity
        if self.repo.get_cart_by_user(user_id) is None:
            return 0
        return self.repo.count_cart_items(user_id)

    # commands
    def add_item(self, user_id: int, product_id: int, quantity: int = 1) -> Dict[str, Any]:
        if quantity is None or quantity < 1:
            raise InvalidQuantityError(quantity)

        with self.lock_service.user_lock(user_id):
            product = self.products.get_product(product_id)
            if not product:
                raise ProductNotFoundError(product_id)

            if product.status != PRODUCT_ACTIVE:
                raise ProductUnavailableError(product_id, product.status)

            cart = self._get_or_create(user_id)
            existing = self.repo.get_cart_item_by_product(user_id, product_id)
            wanted = quantity + (existing.quantity if existing else 0)

            available = self.products.read_available(product_id)
            if available < wanted:
                self.repo.rollback()
                raise InsufficientStockError(
                    product_id=product_id,
                    requested=wanted,
                    available=available,
                )

            if existing:
                logger.info(
                    f"Product {product_id} already in cart of user {user_id}, "
                    f"quantity {existing.quantity} -> {wanted}"
                )
                existing.quantity = wanted
            else:
                logger.info(f"Adding product {product_id} x{quantity} to cart of user {user_id}")
                cart.lines.append(
                    CartItemModel(
                        user_id=user_id,
                        product=product,
                        quantity=quantity,
                        price=product.price,
                        discount=product.discount or 0,
                    )
                )

            self._save(cart)
            return cart_to_dict(cart)

    def update_item_quantity(self, user_id: int, item_id: int, quantity: int) -> Dict[str, Any]:
        if quantity is None or quantity < 1:
            raise InvalidQuantityError(quantity)

        with self.lock_service.user_lock(user_id):
            line = self.repo.get_cart_item(item_id, user_id)
            if not line:
                raise CartItemNotFoundError(item_id)

            available = self.products.read_available(line.product_id)
            if available < quantity:
                raise InsufficientStockError(
                    product_id=line.product_id,
                    requested=quantity,
                    available=available,
                )

            logger.info(f"Cart item {item_id} of user {user_id}: quantity {line.quantity} -> {quantity}")
            line.quantity = quantity

            cart = line.cart
            self._save(cart)
            return cart_to_dict(cart)

    def remove_item(self, user_id: int, item_id: int) -> Dict[str, Any]:
        with self.lock_service.user_lock(user_id):
            line = self.repo.get_cart_item(item_id, user_id)
            if not line:
                raise CartItemNotFoundError(item_id)

            cart = line.cart
            cart.lines.remove(line)
            logger.info(f"Removed cart item {item_id} (product {line.product_id}) for user {user_id}")

            self._save(cart)
            return cart_to_dict(cart)

    def clear(self, user_id: int, reset_shipping: bool = False) -> Dict[str, Any]:
        with self.lock_service.user_lock(user_id):
            cart = self._get_or_create(user_id)
            empty_cart(cart, reset_shipping=reset_shipping)
            self._save(cart)

            logger.info(f"Cart of user {user_id} cleared (reset_shipping={reset_shipping})")
            return cart_to_dict(cart)

    def set_shipping(self, user_id: int, amount) -> Dict[str, Any]:
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidAmountError(amount)
        if not value.is_finite() or value < 0:
            raise InvalidAmountError(amount)

        with self.lock_service.user_lock(user_id):
            cart = self._get_or_create(user_id)
            cart.shipping = to_money(value)
            self._save(cart)

            logger.info(f"Shipping for user {user_id} set to {cart.shipping}")
            return cart_to_dict(cart)

    # helpers
    def _get_or_create(self, user_id: int) -> CartModel:
        existing = self.repo.get_cart_by_user(user_id)
        if existing:
            return existing

        try:
            created = self.repo.create_cart(
                CartModel(user_id=user_id, shipping=ZERO, subtotal=ZERO, total=ZERO)
            )
        except IntegrityError:
            # another request created it first
            self.repo.rollback()
            existing = self.repo.get_cart_by_user(user_id)
            if existing is None:
                raise
            return existing

        logger.info(f"Created cart {created.id} for user {user_id}")
        return created

    def _save(self, cart: CartModel) -> None:
        recalculate_totals(cart)
        cart.updated_at = datetime.now(timezone.utc)
        try:
            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            raise DuplicateKeyError("cart_items(user_id, product_id)") from e
