from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from jewelry_storefront.utils.date_utils import DateUtils


class ApplicationStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


@dataclass
class ResellerApplication:
    """A request to become a wholesale (B2B) partner"""
    id: int
    company_name: str
    contact_person: str
    email: str
    phone: str
    business_address: str
    business_type: str
    years_in_business: str
    status: str = ApplicationStatus.PENDING.value
    user_id: Optional[int] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    tax_id: Optional[str] = None
    website: Optional[str] = None
    expected_monthly_volume: Optional[str] = None
    business_description: Optional[str] = None
    trade_references: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ResellerApplication":
        return cls(
            id=int(row["id"]),
            user_id=row.get("user_id"),
            company_name=row["company_name"],
            contact_person=row["contact_person"],
            email=row["email"],
            phone=row["phone"],
            business_address=row["business_address"],
            city=row.get("city"),
            state=row.get("state"),
            zip_code=row.get("zip_code"),
            business_type=row["business_type"],
            years_in_business=row["years_in_business"],
            tax_id=row.get("tax_id"),
            website=row.get("website"),
            expected_monthly_volume=row.get("expected_monthly_volume"),
            business_description=row.get("business_description"),
            trade_references=row.get("trade_references"),
            status=row.get("status") or ApplicationStatus.PENDING.value,
            reviewed_by=row.get("reviewed_by"),
            reviewed_at=DateUtils.coerce(row.get("reviewed_at")),
            created_at=DateUtils.coerce(row.get("created_at")),
        )

    @property
    def is_pending(self) -> bool:
        return self.status == ApplicationStatus.PENDING.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "company_name": self.company_name,
            "contact_person": self.contact_person,
            "email": self.email,
            "phone": self.phone,
            "business_type": self.business_type,
            "years_in_business": self.years_in_business,
            "expected_monthly_volume": self.expected_monthly_volume,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
