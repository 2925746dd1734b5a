# marketplace/services/identity.py
"""
Zamiana naglowka Authorization na Actor. Wydawanie tokenow (logowanie,
rejestracja) jest poza tym serwisem, issue_token sluzy narzedziom i testom.
"""
from datetime import datetime, timedelta, timezone

import jwt

from marketplace.domain.actors import Actor, Role
from marketplace.domain.errors import Unauthenticated
from marketplace.utils.settings import JWT_ALGORITHM, JWT_SECRET


class IdentityResolver:
    def __init__(self, secret: str = JWT_SECRET, algorithm: str = JWT_ALGORITHM):
        self.secret = secret
        self.algorithm = algorithm

    def resolve(self, authorization: str | None) -> Actor:
        if not authorization:
            return Actor.anonymous()

        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise Unauthenticated("Invalid authorization header")

        try:
            payload = jwt.decode(parts[1], self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Token expired")
        except jwt.InvalidTokenError:
            raise Unauthenticated("Invalid token")

        try:
            role = Role(payload["role"])
            user_id = int(payload["sub"])
        except (KeyError, ValueError, TypeError):
            raise Unauthenticated("Token does not carry a valid identity")

        if role is Role.ANONYMOUS:
            raise Unauthenticated("Token does not carry a valid identity")

        return Actor(role, user_id)

    def issue_token(self, user_id: int, role: Role, ttl: timedelta = timedelta(hours=1)) -> str:
        payload = {
            "sub": str(user_id),
            "role": role.value,
            "exp": datetime.now(timezone.utc) + ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)
