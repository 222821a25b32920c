import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import text

from jewelry_storefront.core.exceptions import ConflictError, NotFoundError
from jewelry_storefront.models.application import ApplicationStatus, ResellerApplication
from jewelry_storefront.models.user import Role
from jewelry_storefront.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_APPLICATION_COLUMNS = """
    id, user_id, company_name, contact_person, email, phone, business_address, city,
    state, zip_code, business_type, years_in_business, tax_id, website,
    expected_monthly_volume, business_description, trade_references, status,
    reviewed_by, reviewed_at, created_at
"""

_INSERT_COLUMNS = (
    "user_id",
    "company_name",
    "contact_person",
    "email",
    "phone",
    "business_address",
    "city",
    "state",
    "zip_code",
    "business_type",
    "years_in_business",
    "tax_id",
    "website",
    "expected_monthly_volume",
    "business_description",
    "trade_references",
)


class ApplicationRepository(BaseRepository[ResellerApplication]):

    @property
    def table_name(self) -> str:
        return "reseller_applications"

    def get_by_id(self, application_id: int) -> ResellerApplication:
        row = self.execute_single_query(
            f"SELECT {_APPLICATION_COLUMNS} FROM reseller_applications WHERE id = :id",
            {"id": application_id},
        )
        if not row:
            raise NotFoundError("Reseller application", str(application_id))
        return ResellerApplication.from_row(row)

    def create_application(self, values: Dict[str, Any]) -> ResellerApplication:
        params = {column: values.get(column) for column in _INSERT_COLUMNS}
        params["status"] = ApplicationStatus.PENDING.value
        params["created_at"] = datetime.now(timezone.utc)

        columns = ", ".join((*_INSERT_COLUMNS, "status", "created_at"))
        placeholders = ", ".join(f":{column}" for column in (*_INSERT_COLUMNS, "status", "created_at"))
        application_id = self.execute_insert_returning_id(
            f"INSERT INTO reseller_applications ({columns}) VALUES ({placeholders})", params
        )
        return self.get_by_id(application_id)

    def list_applications(self, status: Optional[str] = None) -> List[ResellerApplication]:
        sql = f"SELECT {_APPLICATION_COLUMNS} FROM reseller_applications"
        params: Dict[str, Any] = {}
        if status:
            sql += " WHERE status = :status"
            params["status"] = status
        sql += " ORDER BY created_at DESC, id DESC"
        return [ResellerApplication.from_row(row) for row in self.execute_query(sql, params)]

    def count_by_status(self, status: str) -> int:
        return int(
            self.execute_scalar(
                "SELECT COUNT(*) FROM reseller_applications WHERE status = :status", {"status": status}
            ) or 0
        )

    def transition_status(
        self, application_id: int, new_status: str, reviewer_id: Optional[int]
    ) -> ResellerApplication:
        """
        Move a pending application to approved or rejected.

        Approval also upgrades the applicant's profile to an approved b2b
        account. Both writes share one transaction. Only pending
        applications can transition.
        """
        with self.transaction("APPLICATION_STATUS") as conn:
            current = conn.execute(
                text("SELECT id, user_id, company_name, status FROM reseller_applications WHERE id = :id"),
                {"id": application_id},
            ).mappings().first()

            if current is None:
                raise NotFoundError("Reseller application", str(application_id))
            if current["status"] != ApplicationStatus.PENDING.value:
                raise ConflictError(f"Application is already {current['status']}", "status")

            result = conn.execute(
                text(
                    """
                    UPDATE reseller_applications
                    SET status = :status, reviewed_by = :reviewed_by, reviewed_at = :reviewed_at
                    WHERE id = :id AND status = :pending
                    """
                ),
                {
                    "status": new_status,
                    "reviewed_by": reviewer_id,
                    "reviewed_at": datetime.now(timezone.utc),
                    "id": application_id,
                    "pending": ApplicationStatus.PENDING.value,
                },
            )
            if result.rowcount == 0:
                # Another reviewer got there between the read and the update
                raise ConflictError("Application was already reviewed", "status")

            if new_status == ApplicationStatus.APPROVED.value and current["user_id"] is not None:
                conn.execute(
                    text(
                        """
                        UPDATE user_profiles
                        SET role = :role, is_approved = :approved, company_name = :company_name
                        WHERE id = :user_id
                        """
                    ),
                    {
                        "role": Role.B2B.value,
                        "approved": True,
                        "company_name": current["company_name"],
                        "user_id": current["user_id"],
                    },
                )

        logger.info(f"Application {application_id} moved to {new_status} by reviewer {reviewer_id}")
        return self.get_by_id(application_id)
