#marketplace/api/routers/carts.py
from fastapi import APIRouter, Depends, Response

from marketplace.api.deps import get_actor, get_cart_service
from marketplace.domain.actors import Actor
from marketplace.domain.schemas import CartItemOut, CartOut, ItemIn, QuantityIn
from marketplace.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(
    actor: Actor = Depends(get_actor),
    svc: CartService = Depends(get_cart_service),
):
    return svc.get_cart(actor)


@router.post("/items", response_model=CartItemOut, status_code=201)
def add_item(
    payload: ItemIn,
    actor: Actor = Depends(get_actor),
    svc: CartService = Depends(get_cart_service),
):
    return svc.add_item(actor, payload.product_id, payload.quantity)


@router.put("/items/{product_id}", response_model=CartItemOut)
def update_item(
    product_id: int,
    payload: QuantityIn,
    actor: Actor = Depends(get_actor),
    svc: CartService = Depends(get_cart_service),
):
    return svc.update_item_quantity(actor, product_id, payload.quantity)


@router.delete("/items/{product_id}", status_code=204)
def remove_item(
    product_id: int,
    actor: Actor = Depends(get_actor),
    svc: CartService = Depends(get_cart_service),
):
    svc.remove_item(actor, product_id)
    return Response(status_code=204)


@router.delete("", status_code=204)
def clear_cart(
    actor: Actor = Depends(get_actor),
    svc: CartService = Depends(get_cart_service),
):
    svc.clear(actor)
    return Response(status_code=204)
