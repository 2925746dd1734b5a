# marketplace/api/routers/products.py
from fastapi import APIRouter, Depends, Response

from marketplace.api.deps import get_actor, get_product_service
from marketplace.domain.actors import Actor
from marketplace.domain.schemas import ProductIn, ProductOut, ProductUpdate
from marketplace.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: int,
    actor: Actor = Depends(get_actor),
    svc: ProductService = Depends(get_product_service),
):
    return svc.get_product(actor, product_id)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductIn,
    actor: Actor = Depends(get_actor),
    svc: ProductService = Depends(get_product_service),
):
    return svc.create_product(actor, payload)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    actor: Actor = Depends(get_actor),
    svc: ProductService = Depends(get_product_service),
):
    return svc.update_product(actor, product_id, payload)


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    actor: Actor = Depends(get_actor),
    svc: ProductService = Depends(get_product_service),
):
    svc.delete_product(actor, product_id)
    return Response(status_code=204)
