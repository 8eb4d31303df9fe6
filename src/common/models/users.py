from enum import Enum
from dataclasses import dataclass
from typing import Optional


class UserRole(Enum):
    ADMIN = "ADMIN"
    CUSTOMER = "CUSTOMER"


@dataclass
class User:
    user_id: str
    email: str
    name: str
    role: UserRole
    phone_number: Optional[str] = None


@dataclass
class Actor:
    """The resolved identity behind a request. Anonymous callers have no Actor."""

    user_id: str
    role: UserRole = UserRole.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
