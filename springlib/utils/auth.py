from dataclasses import dataclass

from flask_jwt_extended import get_jwt, get_jwt_identity

from springlib.errors import Unauthorized
from springlib.models.user import Role


@dataclass(frozen=True)
class Identity:
    """The authenticated caller. Passed explicitly into every lifecycle call."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_member(self) -> bool:
        return self.role == Role.MEMBER

    @classmethod
    def from_claims(cls, subject, claims: dict) -> "Identity":
        try:
            user_id = int(claims.get("userId", subject))
            role = Role.parse(claims.get("role"))
        except (KeyError, TypeError, ValueError):
            raise Unauthorized("Token does not carry a valid identity")
        return cls(user_id=user_id, role=role)


def current_identity() -> Identity:
    """Identity of the verified JWT on the current request."""
    return Identity.from_claims(get_jwt_identity(), get_jwt() or {})


def optional_identity():
    """Same as ``current_identity`` but None for anonymous requests."""
    if get_jwt_identity() is None:
        return None
    return current_identity()
