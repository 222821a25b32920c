from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from jewelry_storefront.utils.date_utils import DateUtils


class Role(str, Enum):
    CUSTOMER = "customer"
    B2B = "b2b"
    ADMIN = "admin"


@dataclass
class UserProfile:
    """Account record; password_hash never leaves the repository layer's callers"""
    id: int
    email: str
    role: str = Role.CUSTOMER.value
    is_approved: bool = False
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    phone: Optional[str] = None
    password_hash: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "UserProfile":
        return cls(
            id=int(row["id"]),
            email=row["email"],
            role=row.get("role") or Role.CUSTOMER.value,
            is_approved=bool(row.get("is_approved")),
            full_name=row.get("full_name"),
            company_name=row.get("company_name"),
            phone=row.get("phone"),
            password_hash=row.get("password_hash"),
            created_at=DateUtils.coerce(row.get("created_at")),
        )

    @property
    def display_name(self) -> str:
        if self.role == Role.ADMIN.value:
            return "Admin"
        return self.company_name or self.full_name or self.email

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "is_approved": self.is_approved,
            "full_name": self.full_name,
            "company_name": self.company_name,
            "phone": self.phone,
        }


@dataclass(frozen=True)
class SessionIdentity:
    """
    Who is looking at the page.

    Anonymous visitors and plain customers both shop at retail prices.
    """
    profile: Optional[UserProfile] = None

    @classmethod
    def anonymous(cls) -> "SessionIdentity":
        return cls(profile=None)

    @property
    def is_authenticated(self) -> bool:
        return self.profile is not None

    @property
    def user_id(self) -> Optional[int]:
        return self.profile.id if self.profile else None

    @property
    def role(self) -> Optional[str]:
        return self.profile.role if self.profile else None

    @property
    def approved(self) -> bool:
        return bool(self.profile and self.profile.is_approved)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_b2b(self) -> bool:
        """Approved reseller; only these viewers see wholesale prices"""
        return self.role == Role.B2B.value and self.approved

    @property
    def company_name(self) -> Optional[str]:
        return self.profile.company_name if self.profile else None
