# marketplace/services/product_client.py
from decimal import Decimal

import requests

from marketplace.services.catalog import ProductSnapshot
from marketplace.utils.retry import http_retry
from marketplace.utils.settings import PRODUCT_SERVICE_URL, PRODUCT_SERVICE_TIMEOUT
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    """Katalog z zewnetrznego product-service (CATALOG_BACKEND=http)."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout or PRODUCT_SERVICE_TIMEOUT

    @http_retry()
    def fetch_product(self, product_id: int) -> dict | None:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        # 404 to odpowiedz, nie blad transportu - bez retry
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    def get_product(self, product_id: int) -> ProductSnapshot | None:
        data = self.fetch_product(product_id)
        if data is None:
            return None

        return ProductSnapshot(
            id=int(data["id"]),
            vendor_id=int(data["vendor_id"]),
            name=data["name"],
            price=Decimal(str(data["price"])),
            description=data.get("description") or "",
        )
