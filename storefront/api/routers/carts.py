#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user, get_lock_service
from storefront.api.errors import ERROR_RESPONSES
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.schemas import (
    AddItemIn,
    ApiResponse,
    CartCountOut,
    CartOut,
    ShippingIn,
    UpdateItemIn,
)
from storefront.services.cart_service import CartService
from storefront.services.lock_service import LockService

router = APIRouter(prefix="/cart", tags=["cart"], responses=ERROR_RESPONSES)


def get_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, lock_service=lock_service)


@router.get("", response_model=ApiResponse[CartOut])
def get_cart(
    user: UserModel = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    return ApiResponse(data=svc.get_cart(user.id))


@router.get("/count", response_model=ApiResponse[CartCountOut])
def get_cart_item_count(
    user: UserModel = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    return ApiResponse(data={"count": svc.item_count(user.id)})


@router.post("/add", response_model=ApiResponse[CartOut])
def add_to_cart(
    payload: AddItemIn,
    user: UserModel = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    cart = svc.add_item(user.id, payload.product_id, payload.quantity)
    return ApiResponse(data=cart, message="Item added to cart")


@router.put("/item/{item_id}", response_model=ApiResponse[CartOut])
def update_cart_item(
    item_id: int,
    payload: UpdateItemIn,
    user: UserModel = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    cart = svc.update_item_quantity(user.id, item_id, payload.quantity)
    return ApiResponse(data=cart, message="Cart item updated")


@router.delete("/item/{item_id}", response_model=ApiResponse[CartOut])
def remove_from_cart(
    item_id: int,
    user: UserModel = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    cart = svc.remove_item(user.id, item_id)
    return ApiResponse(data=cart, message="Item removed from cart")


@router.delete("/clear", response_model=ApiResponse[CartOut])
def clear_cart(
    reset_shipping: bool = Query(False),
    user: UserModel = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    cart = svc.clear(user.id, reset_shipping=reset_shipping)
    return ApiResponse(data=cart, message="Cart cleared successfully")


@router.put("/shipping", response_model=ApiResponse[CartOut])
def update_shipping(
    payload: ShippingIn,
    user: UserModel = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    cart = svc.set_shipping(user.id, payload.shipping)
    return ApiResponse(data=cart, message="Shipping cost updated")
