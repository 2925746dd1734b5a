# marketplace/domain/policy.py
"""
Role based access rules.

The whole table lives in POLICY: every action has exactly one rule per role,
which is checked when the module is imported, so a new Role or Action cannot
ship with a hole in the table. Rules are pure functions of the actor and of
the ids describing the resource (owner and participating vendors); they never
touch storage.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet

from marketplace.domain.actors import Actor, Role
from marketplace.domain.errors import Unauthenticated, Unauthorized


class Action(str, Enum):
    BROWSE_CATALOG = "browse_catalog"
    # koszyk, wishlista, wlasne zamowienie, wlasna recenzja
    MANAGE_OWN = "manage_own"
    MANAGE_PRODUCT = "manage_product"
    LIST_ORDERS = "list_orders"
    READ_ORDER = "read_order"
    UPDATE_ORDER_STATUS = "update_order_status"


@dataclass(frozen=True)
class Resource:
    # order.user_id albo product.vendor_id
    owner_id: int | None = None
    # vendorzy ktorych produkty sa w zamowieniu
    vendor_ids: FrozenSet[int] = field(default_factory=frozenset)


Rule = Callable[[Actor, Resource], bool]


def allow(actor: Actor, resource: Resource) -> bool:
    return True


def deny(actor: Actor, resource: Resource) -> bool:
    return False


def owner(actor: Actor, resource: Resource) -> bool:
    return resource.owner_id is not None and resource.owner_id == actor.user_id


def participating_vendor(actor: Actor, resource: Resource) -> bool:
    return actor.user_id in resource.vendor_ids


POLICY: Dict[Action, Dict[Role, Rule]] = {
    Action.BROWSE_CATALOG: {
        Role.ANONYMOUS: allow,
        Role.CUSTOMER: allow,
        Role.VENDOR: allow,
        Role.ADMIN: allow,
    },
    Action.MANAGE_OWN: {
        Role.ANONYMOUS: deny,
        Role.CUSTOMER: allow,
        Role.VENDOR: allow,
        Role.ADMIN: allow,
    },
    Action.MANAGE_PRODUCT: {
        Role.ANONYMOUS: deny,
        Role.CUSTOMER: deny,
        Role.VENDOR: owner,
        Role.ADMIN: allow,
    },
    # filtrowanie listy robi OrderScope
    Action.LIST_ORDERS: {
        Role.ANONYMOUS: deny,
        Role.CUSTOMER: allow,
        Role.VENDOR: allow,
        Role.ADMIN: allow,
    },
    Action.READ_ORDER: {
        Role.ANONYMOUS: deny,
        Role.CUSTOMER: owner,
        Role.VENDOR: participating_vendor,
        Role.ADMIN: allow,
    },
    Action.UPDATE_ORDER_STATUS: {
        Role.ANONYMOUS: deny,
        Role.CUSTOMER: deny,
        Role.VENDOR: participating_vendor,
        Role.ADMIN: allow,
    },
}


class OrderScope(str, Enum):
    PURCHASER = "purchaser"
    VENDOR = "vendor"
    ALL = "all"


ORDER_SCOPES: Dict[Role, OrderScope | None] = {
    Role.ANONYMOUS: None,
    Role.CUSTOMER: OrderScope.PURCHASER,
    Role.VENDOR: OrderScope.VENDOR,
    Role.ADMIN: OrderScope.ALL,
}


def _assert_exhaustive():
    for action in Action:
        missing = set(Role) - set(POLICY.get(action, {}))
        if missing:
            raise RuntimeError(f"policy for {action.value} has no rule for {sorted(r.value for r in missing)}")
    missing = set(Role) - set(ORDER_SCOPES)
    if missing:
        raise RuntimeError(f"order scope missing for {sorted(r.value for r in missing)}")


_assert_exhaustive()


class AccessPolicy:
    def __init__(self, table: Dict[Action, Dict[Role, Rule]] = POLICY):
        self.table = table

    def is_allowed(self, actor: Actor, action: Action, resource: Resource = Resource()) -> bool:
        return self.table[action][actor.role](actor, resource)

    def check(self, actor: Actor, action: Action, resource: Resource = Resource()) -> None:
        if self.is_allowed(actor, action, resource):
            return
        if not actor.is_authenticated:
            raise Unauthenticated()
        raise Unauthorized(f"Not authorized to {action.value.replace('_', ' ')}")

    def order_scope(self, actor: Actor) -> OrderScope:
        self.check(actor, Action.LIST_ORDERS)
        return ORDER_SCOPES[actor.role]
