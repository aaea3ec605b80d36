# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user, get_lock_service, require_admin
from storefront.api.errors import ERROR_RESPONSES
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.schemas import ApiResponse, CheckoutIn, OrderOut, OrderPageOut, StatusIn
from storefront.services.checkout_service import CheckoutService
from storefront.services.lock_service import LockService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"], responses=ERROR_RESPONSES)


def get_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_checkout_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
) -> CheckoutService:
    return CheckoutService(db=db, lock_service=lock_service)


@router.post("/checkout", response_model=ApiResponse[OrderOut], status_code=201)
def create_order(
    payload: CheckoutIn,
    user: UserModel = Depends(get_current_user),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Places a cash-on-delivery order from the caller's cart.
    """
    order = svc.create_order_from_cart(
        user.id,
        delivery_address=payload.delivery_address,
        customer_phone=payload.customer_phone,
        customer_notes=payload.customer_notes,
    )
    return ApiResponse(data=order, message="Order created successfully")


@router.get("/my-orders", response_model=ApiResponse[List[OrderOut]])
def get_my_orders(
    user: UserModel = Depends(get_current_user),
    svc: OrderService = Depends(get_service),
):
    return ApiResponse(data=svc.get_customer_orders(user.id))


# admin

@router.get("/admin/all", response_model=ApiResponse[OrderPageOut])
def get_all_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: str | None = Query(None),
    admin: UserModel = Depends(require_admin),
    svc: OrderService = Depends(get_service),
):
    return ApiResponse(data=svc.list_orders(page=page, limit=limit, status=status))


@router.get("/admin/{order_id}", response_model=ApiResponse[OrderOut])
def get_order_by_id(
    order_id: int,
    admin: UserModel = Depends(require_admin),
    svc: OrderService = Depends(get_service),
):
    return ApiResponse(data=svc.get_order_by_id(order_id))


@router.put("/admin/{order_id}/status", response_model=ApiResponse[OrderOut])
def update_order_status(
    order_id: int,
    payload: StatusIn,
    admin: UserModel = Depends(require_admin),
    svc: OrderService = Depends(get_service),
):
    order = svc.update_status(order_id, payload.status)
    return ApiResponse(data=order, message=f"Order status updated to {order['status']}")


@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
def get_order(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    svc: OrderService = Depends(get_service),
):
    """
    One of the caller's own orders.
    """
    return ApiResponse(data=svc.get_order(order_id, user.id))
