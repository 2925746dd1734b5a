from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    ANONYMOUS = "anonymous"
    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """Who is calling: a role tag plus the resolved user id (None only for anonymous)."""

    role: Role
    user_id: int | None = None

    def __post_init__(self):
        if self.role is Role.ANONYMOUS and self.user_id is not None:
            raise ValueError("anonymous actor cannot carry a user id")
        if self.role is not Role.ANONYMOUS and self.user_id is None:
            raise ValueError(f"{self.role.value} actor requires a user id")

    @property
    def is_authenticated(self) -> bool:
        return self.role is not Role.ANONYMOUS

    @classmethod
    def anonymous(cls) -> "Actor":
        return cls(Role.ANONYMOUS)

    @classmethod
    def customer(cls, user_id: int) -> "Actor":
        return cls(Role.CUSTOMER, user_id)

    @classmethod
    def vendor(cls, user_id: int) -> "Actor":
        return cls(Role.VENDOR, user_id)

    @classmethod
    def admin(cls, user_id: int) -> "Actor":
        return cls(Role.ADMIN, user_id)
