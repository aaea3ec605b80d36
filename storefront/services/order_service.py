# storefront/services/order_service.py
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.order_status import OrderStatus, can_transition
from storefront.domain.pricing import line_total, to_money
from storefront.exceptions import InvalidStatusTransitionError, OrderNotFoundError
from storefront.repos.order_repo import OrderRepo
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger
from storefront.utils.settings import ORDER_STATUS_FORWARD_ONLY

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    user = order.user
    return {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "user_name": user.name if user else None,
        "user_email": user.email if user else None,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product.name if item.product else None,
                "quantity": item.quantity,
                "price": to_money(item.price),
                "discount": Decimal(str(item.discount)),
                "line_total": line_total(item.price, item.discount, item.quantity),
            }
            for item in order.items
        ],
        "subtotal": to_money(order.subtotal),
        "shipping": to_money(order.shipping),
        "total": to_money(order.total),
        "delivery_address": order.delivery_address,
        "customer_phone": order.customer_phone,
        "customer_notes": order.customer_notes,
        "status": order.status,
        "estimated_delivery": order.estimated_delivery,
        "delivered_at": order.delivered_at,
        "created_at": order.created_at,
    }


class OrderService:
    """
    Order queries for customers and admins plus the status lifecycle.
    Orders are created only by CheckoutService.
    """

    def __init__(self, db: Session, forward_only: bool = ORDER_STATUS_FORWARD_ONLY):
        self.repo = OrderRepo(db)
        self.forward_only = forward_only
        self.notification_service = NotificationService()

    def get_customer_orders(self, user_id: int) -> list[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_by_user(user_id)]

    def get_order(self, order_id: int, user_id: int) -> Dict[str, Any]:
        """
        Customer view. Somebody else's order is reported as missing.
        """
        order = self.repo.get_order(order_id)

        if not order or order.user_id != user_id:
            raise OrderNotFoundError(order_id)

        return order_to_dict(order)

    # admin
    def get_order_by_id(self, order_id: int) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFoundError(order_id)
        return order_to_dict(order)

    def list_orders(self, page: int = 1, limit: int = 20, status: str | None = None) -> Dict[str, Any]:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        status_value = OrderStatus.parse(status).value if status else None

        orders, total = self.repo.list_orders(
            offset=(page - 1) * limit,
            limit=limit,
            status=status_value,
        )

        return {
            "orders": [order_to_dict(o) for o in orders],
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit) if total else 0,
        }

    def update_status(self, order_id: int, new_status) -> Dict[str, Any]:
        # validate the value before touching the order
        target = OrderStatus.parse(new_status)

        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFoundError(order_id)

        current = OrderStatus(order.status)
        if current == target:
            return order_to_dict(order)

        if not can_transition(current, target, forward_only=self.forward_only):
            raise InvalidStatusTransitionError(order_id, current.value, target.value)

        order.status = target.value
        if target == OrderStatus.DELIVERED:
            order.delivered_at = datetime.now(timezone.utc)

        self.repo.commit()

        logger.info(f"Order {order.order_number} status {current.value} -> {target.value}")
        self.notification_service.send_order_notification(order.user_id, order.order_number, order.status)

        return order_to_dict(order)
