"""
The authenticated caller.

A Principal is built once per request from the access token and handed to
every service call that needs to know who is acting and for which tenant.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ticketdesk.models.user import User, UserRole, UserStatus


@dataclass(frozen=True)
class Principal:
    id: int
    email: str
    role: UserRole
    status: UserStatus
    org_id: int

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            email=user.email,
            role=UserRole(user.role),
            status=UserStatus(user.status),
            org_id=user.org_id,
        )

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "Principal":
        """
        Build a principal from decoded JWT claims.

        Raises:
            KeyError / ValueError: If a claim is missing or malformed
        """
        return cls(
            id=int(claims["sub"]),
            email=claims["email"],
            role=UserRole(claims["role"]),
            status=UserStatus(claims["status"]),
            org_id=int(claims["org_id"]),
        )

    def to_claims(self) -> Dict[str, Any]:
        return {
            "sub": str(self.id),
            "email": self.email,
            "role": self.role.value,
            "status": self.status.value,
            "org_id": self.org_id,
        }
