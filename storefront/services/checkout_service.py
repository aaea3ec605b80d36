# storefront/services/checkout_service.py
import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.order_number import generate_order_number
from storefront.domain.order_status import OrderStatus
from storefront.exceptions import DuplicateKeyError, EmptyCartError, InsufficientStockError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.cart_service import empty_cart
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import order_to_dict
from storefront.utils.logging import get_logger
from storefront.utils.retry import order_number_retry

logger = get_logger(__name__)

# delivery estimate window in minutes
DELIVERY_WINDOW = (30, 60)


def _is_order_number_conflict(error: IntegrityError) -> bool:
    # Postgres names the constraint, SQLite names the column
    message = str(error.orig)
    return "uq_orders_order_number" in message or "orders.order_number" in message


class CheckoutService:
    """
    Converts a user's cart into an order.

    Validation (cart not empty, live stock covers every line) finishes before
    anything is written. Order, order items, stock decrements and the cart
    reset are then applied in one transaction: either all of it is committed
    or none of it is.
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.db = db
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.stock = ProductRepo(db)
        self.lock_service = lock_service
        self.notification_service = NotificationService()

    def create_order_from_cart(
        self,
        user_id: int,
        delivery_address: str,
        customer_phone: str,
        customer_notes: str | None = None,
    ) -> Dict[str, Any]:
        with self.lock_service.user_lock(user_id):
            cart = self.carts.get_cart_by_user(user_id)
            if not cart or not cart.lines:
                raise EmptyCartError(user_id)

            self._validate_stock(cart)

            try:
                order = self.orders.add_order(
                    OrderModel(
                        order_number=self._next_order_number(),
                        user_id=user_id,
                        subtotal=cart.subtotal,
                        shipping=cart.shipping,
                        total=cart.total,
                        delivery_address=delivery_address,
                        customer_phone=customer_phone,
                        customer_notes=customer_notes,
                        status=OrderStatus.PENDING.value,
                        estimated_delivery=self._estimate_delivery(),
                    )
                )

                for line in cart.lines:
                    order.items.append(
                        OrderItemModel(
                            product_id=line.product_id,
                            quantity=line.quantity,
                            price=line.price,
                            discount=line.discount,
                        )
                    )
                    # conditional UPDATE, refuses to go below zero
                    self.stock.decrement(line.product_id, line.quantity)

                self.db.flush()
                empty_cart(cart, reset_shipping=True)
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                logger.error(f"Checkout for user {user_id} rolled back on a constraint violation: {e.orig}")
                if _is_order_number_conflict(e):
                    raise DuplicateKeyError("order_number") from e
                raise
            except Exception:
                self.db.rollback()
                logger.error(f"Checkout for user {user_id} rolled back", exc_info=True)
                raise

        logger.info(
            f"Order {order.order_number} created for user {user_id}: "
            f"{len(order.items)} items, total {order.total}"
        )
        self.notification_service.send_order_notification(user_id, order.order_number, order.status)

        return order_to_dict(order)

    def _validate_stock(self, cart) -> None:
        for line in cart.lines:
            available = self.stock.read_available(line.product_id)
            if available < line.quantity:
                raise InsufficientStockError(
                    product_id=line.product_id,
                    requested=line.quantity,
                    available=available,
                    product_name=line.product.name if line.product else None,
                )

    @order_number_retry()
    def _next_order_number(self) -> str:
        candidate = generate_order_number()
        if self.orders.order_number_exists(candidate):
            logger.warning(f"Order number {candidate} already taken, regenerating")
            raise DuplicateKeyError("order_number", candidate)
        return candidate

    @staticmethod
    def _estimate_delivery() -> datetime:
        minutes = random.randint(*DELIVERY_WINDOW)
        return datetime.now(timezone.utc) + timedelta(minutes=minutes)
