# marketplace/api/__init__.py
from marketplace.api.routers import carts, health, orders, products
from marketplace.utils.settings import CATALOG_BACKEND

ROUTERS = [health.router, carts.router, orders.router]

# zapis produktow tylko gdy katalog jest lokalny
if CATALOG_BACKEND != "http":
    ROUTERS.append(products.router)
