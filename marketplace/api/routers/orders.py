# marketplace/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends

from marketplace.api.deps import get_actor, get_order_service
from marketplace.domain.actors import Actor
from marketplace.domain.schemas import OrderCreate, OrderOut, StatusUpdate
from marketplace.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    """
    Checkout: zamienia koszyk zalogowanego usera w zamowienie.
    """
    return svc.checkout(actor, payload.model_dump(mode="json"))


@router.get("", response_model=List[OrderOut])
def list_orders(
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    """
    customer - swoje, vendor - z jego produktami, admin - wszystkie.
    """
    return svc.list_orders(actor)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    return svc.get_order(actor, order_id)


@router.put("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: StatusUpdate,
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    return svc.update_status(actor, order_id, payload.status)
