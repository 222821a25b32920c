from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jewelry_storefront.core.exceptions import NotFoundError
from jewelry_storefront.models.user import Role, UserProfile
from jewelry_storefront.repositories.base import BaseRepository

_PROFILE_COLUMNS = (
    "id, email, password_hash, full_name, role, is_approved, company_name, phone, created_at"
)


class UserRepository(BaseRepository[UserProfile]):
    """Account records; the single identity source for sign-in"""

    UPDATABLE_COLUMNS = ("full_name", "role", "is_approved", "company_name", "phone", "password_hash")

    @property
    def table_name(self) -> str:
        return "user_profiles"

    def get_by_id(self, user_id: int) -> UserProfile:
        profile = self.find_by_id(user_id)
        if profile is None:
            raise NotFoundError("User profile", str(user_id))
        return profile

    def find_by_id(self, user_id: int) -> Optional[UserProfile]:
        row = self.execute_single_query(
            f"SELECT {_PROFILE_COLUMNS} FROM user_profiles WHERE id = :id", {"id": user_id}
        )
        return UserProfile.from_row(row) if row else None

    def find_by_email(self, email: str) -> Optional[UserProfile]:
        row = self.execute_single_query(
            f"SELECT {_PROFILE_COLUMNS} FROM user_profiles WHERE LOWER(email) = LOWER(:email)",
            {"email": email},
        )
        return UserProfile.from_row(row) if row else None

    def create_user(
        self,
        email: str,
        password_hash: str,
        role: str = Role.CUSTOMER.value,
        is_approved: bool = False,
        full_name: Optional[str] = None,
        company_name: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> UserProfile:
        user_id = self.execute_insert_returning_id(
            """
            INSERT INTO user_profiles (
                email, password_hash, full_name, role, is_approved, company_name, phone, created_at
            )
            VALUES (
                :email, :password_hash, :full_name, :role, :is_approved, :company_name, :phone, :created_at
            )
            """,
            {
                "email": email.lower(),
                "password_hash": password_hash,
                "full_name": full_name,
                "role": role,
                "is_approved": is_approved,
                "company_name": company_name,
                "phone": phone,
                "created_at": datetime.now(timezone.utc),
            },
        )
        return self.get_by_id(user_id)

    def update_profile(self, user_id: int, updates: Dict[str, Any]) -> UserProfile:
        updates = {k: v for k, v in updates.items() if k in self.UPDATABLE_COLUMNS}
        if updates:
            assignments = ", ".join(f"{column} = :{column}" for column in updates)
            affected = self.execute_command(
                f"UPDATE user_profiles SET {assignments} WHERE id = :id",
                {**updates, "id": user_id},
            )
            if affected == 0:
                raise NotFoundError("User profile", str(user_id))
        return self.get_by_id(user_id)
