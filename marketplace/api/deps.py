# marketplace/api/deps.py
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.actors import Actor
from marketplace.domain.policy import AccessPolicy
from marketplace.services.cart_service import CartService
from marketplace.services.catalog import CatalogReader, DatabaseCatalog
from marketplace.services.identity import IdentityResolver
from marketplace.services.lock_service import build_lock_service
from marketplace.services.order_service import OrderService
from marketplace.services.product_client import ProductClient
from marketplace.services.product_service import ProductService
from marketplace.utils.settings import CATALOG_BACKEND


def get_catalog(db: Session = Depends(get_db)) -> CatalogReader:
    if CATALOG_BACKEND == "http":
        return ProductClient()
    return DatabaseCatalog(db)


# locki musza byc wspolne dla wszystkich requestow w procesie
@lru_cache(maxsize=1)
def get_lock_service():
    return build_lock_service()


@lru_cache(maxsize=1)
def get_policy() -> AccessPolicy:
    return AccessPolicy()


@lru_cache(maxsize=1)
def get_identity_resolver() -> IdentityResolver:
    return IdentityResolver()


def get_actor(
    authorization: str | None = Header(None),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Actor:
    return resolver.resolve(authorization)


def get_cart_service(
    db: Session = Depends(get_db),
    catalog: CatalogReader = Depends(get_catalog),
    lock_service=Depends(get_lock_service),
    policy: AccessPolicy = Depends(get_policy),
) -> CartService:
    return CartService(db=db, catalog=catalog, lock_service=lock_service, policy=policy)


def get_order_service(
    db: Session = Depends(get_db),
    catalog: CatalogReader = Depends(get_catalog),
    lock_service=Depends(get_lock_service),
    policy: AccessPolicy = Depends(get_policy),
) -> OrderService:
    return OrderService(db=db, catalog=catalog, lock_service=lock_service, policy=policy)


def get_product_service(
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_policy),
) -> ProductService:
    return ProductService(db=db, policy=policy)
