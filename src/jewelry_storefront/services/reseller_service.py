import logging
from typing import List, Optional

from jewelry_storefront.core.exceptions import (
    DatabaseError,
    ForbiddenError,
    ValidationError,
)
from jewelry_storefront.models.application import ApplicationStatus, ResellerApplication
from jewelry_storefront.models.user import SessionIdentity
from jewelry_storefront.repositories.application_repository import ApplicationRepository
from jewelry_storefront.schemas.reseller_schemas import ResellerApplicationRequest
from jewelry_storefront.services.auth_service import AuthService

logger = logging.getLogger(__name__)

PERMISSION_DENIED_SQLSTATE = "42501"


class ResellerService:
    """
    Reseller intake and review.

    Submitting creates the applicant's account first and the application
    second. If the second step fails the account is left in place; the
    applicant can sign in and the admin can see the orphan account.
    """

    def __init__(self, application_repository: ApplicationRepository, auth_service: AuthService):
        self.application_repo = application_repository
        self.auth_service = auth_service

    def submit_application(self, request: ResellerApplicationRequest) -> ResellerApplication:
        profile = self.auth_service.sign_up(
            email=str(request.email),
            password=request.password,
            full_name=request.contact_person,
            company_name=request.company_name,
            phone=request.phone,
        )

        values = request.application_values()
        values["email"] = str(request.email)
        values["user_id"] = profile.id
        try:
            application = self.application_repo.create_application(values)
        except DatabaseError as e:
            logger.error(
                f"Application insert failed after account {profile.id} was created: {e.internal_message}"
            )
            if _is_permission_denied(e):
                raise ForbiddenError("Unable to submit application due to security policies")
            raise

        logger.info(f"Received reseller application {application.id} from {application.company_name}")
        return application

    def list_applications(self, status: Optional[str] = None) -> List[ResellerApplication]:
        if status and status not in ApplicationStatus.values():
            raise ValidationError(f"Unknown application status: {status}")
        return self.application_repo.list_applications(status)

    def pending_count(self) -> int:
        return self.application_repo.count_by_status(ApplicationStatus.PENDING.value)

    def approve(self, identity: SessionIdentity, application_id: int) -> ResellerApplication:
        return self._review(identity, application_id, ApplicationStatus.APPROVED)

    def reject(self, identity: SessionIdentity, application_id: int) -> ResellerApplication:
        return self._review(identity, application_id, ApplicationStatus.REJECTED)

    def _review(
        self, identity: SessionIdentity, application_id: int, status: ApplicationStatus
    ) -> ResellerApplication:
        if not identity.is_admin:
            raise ForbiddenError("Only administrators can review applications")
        return self.application_repo.transition_status(application_id, status.value, identity.user_id)


def _is_permission_denied(error: DatabaseError) -> bool:
    if error.sqlstate == PERMISSION_DENIED_SQLSTATE:
        return True
    message = error.internal_message.lower()
    return PERMISSION_DENIED_SQLSTATE in message or "row-level security" in message
