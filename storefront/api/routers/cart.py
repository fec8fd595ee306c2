#storefront/api/routers/cart.py
from fastapi import APIRouter, Depends, Path, Query

from storefront.api.dependencies import get_cart_service
from storefront.api.errors import ERROR_RESPONSES
from storefront.domain.schemas import (
    CartItemIn,
    CartItemResult,
    CartOut,
    CartSummaryOut,
    Envelope,
    MAX_ID,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"], responses=ERROR_RESPONSES)


@router.post("/items", response_model=Envelope[CartItemResult])
def add_item(
    payload: CartItemIn,
    user_id: int = Query(..., gt=0, le=MAX_ID),
    svc: CartService = Depends(get_cart_service),
):
    result = svc.add_item(
        user_id=user_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )
    if result["line"] is None:
        message = "Product removed from cart."
    elif payload.quantity > 0:
        message = "Product added to cart."
    else:
        message = "Product quantity decreased in cart."
    return {"success": True, "message": message, "data": result}


@router.get("/my-cart", response_model=Envelope[CartOut])
def get_my_cart(
    user_id: int = Query(..., gt=0, le=MAX_ID),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.get_my_cart(user_id)
    if not cart:
        return {"success": True, "message": "User does not have a cart yet.", "data": None}
    return {"success": True, "message": "Cart retrieved successfully", "data": cart}


@router.delete("/items/{product_id}", response_model=Envelope[CartItemResult])
def remove_item(
    product_id: int = Path(..., gt=0, le=MAX_ID),
    user_id: int = Query(..., gt=0, le=MAX_ID),
    decrement: bool = Query(False),
    svc: CartService = Depends(get_cart_service),
):
    result = svc.remove_item(user_id, product_id, decrement=decrement)
    message = (
        "Product quantity decreased in cart."
        if result["line"] is not None
        else "Product removed from cart."
    )
    return {"success": True, "message": message, "data": result}


@router.post("/clear", response_model=Envelope)
def clear_cart(
    user_id: int = Query(..., gt=0, le=MAX_ID),
    svc: CartService = Depends(get_cart_service),
):
    deleted = svc.clear_cart(user_id)
    if not deleted:
        return {"success": True, "message": "Cart is already empty for this user.", "data": None}
    return {"success": True, "message": "Cart cleared successfully.", "data": None}


@router.get("/summary", response_model=Envelope[CartSummaryOut])
def get_summary(
    user_id: int = Query(..., gt=0, le=MAX_ID),
    svc: CartService = Depends(get_cart_service),
):
    return {"success": True, "message": "Cart summary retrieved.", "data": svc.get_summary(user_id)}
