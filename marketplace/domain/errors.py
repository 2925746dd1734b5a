# marketplace/domain/errors.py
"""
Bledy domenowe. Kazdy ma swoj `code` i mapuje sie na jeden status HTTP
w marketplace.api.errors.
"""
from typing import Any, Dict, List


class MarketplaceError(Exception):
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def extra(self) -> Dict[str, Any]:
        return {}


class Unauthenticated(MarketplaceError, PermissionError):
    code = "unauthenticated"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class Unauthorized(MarketplaceError, PermissionError):
    code = "unauthorized"

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class NotFound(MarketplaceError, LookupError):
    code = "not_found"

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} {key} not found")
        self.entity = entity
        self.key = key


class InvalidInput(MarketplaceError, ValueError):
    code = "invalid_input"

    def __init__(self, errors: List[Dict[str, str]], message: str = "Validation error"):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def field(cls, name: str, message: str) -> "InvalidInput":
        return cls([{"field": name, "message": message}])

    def extra(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class EmptyCart(MarketplaceError, ValueError):
    code = "empty_cart"

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class ProductUnavailable(MarketplaceError):
    code = "product_unavailable"

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} is no longer available")
        self.product_id = product_id

    def extra(self) -> Dict[str, Any]:
        return {"product_id": self.product_id}


class InvalidTransition(MarketplaceError, ValueError):
    code = "invalid_transition"

    def __init__(self, current: str, requested: str, reason: str | None = None):
        super().__init__(reason or f"Cannot change order status from {current} to {requested}")
        self.current = current
        self.requested = requested

    def extra(self) -> Dict[str, Any]:
        return {"from": self.current, "to": self.requested}


class CartBusy(MarketplaceError):
    code = "cart_busy"

    def __init__(self, cart_id: int):
        super().__init__(f"Cart {cart_id} is being modified, try again")
        self.cart_id = cart_id
