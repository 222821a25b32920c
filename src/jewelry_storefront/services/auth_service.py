import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from jewelry_storefront.core.exceptions import (
    ConflictError,
    ExternalServiceError,
    UnauthorizedError,
    ValidationError,
)
from jewelry_storefront.models.user import Role, SessionIdentity, UserProfile
from jewelry_storefront.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """
    Sign-up, sign-in and profile loading.

    Role predicates live on SessionIdentity; this service only decides who
    the identity is. The user_profiles table is the one identity source;
    there is no fallback session path.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        profile_load_timeout: float = 5.0,
        min_password_length: int = 8,
    ):
        self.user_repo = user_repository
        self.profile_load_timeout = profile_load_timeout
        self.min_password_length = min_password_length
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="profile-load")

    def sign_up(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        company_name: Optional[str] = None,
        phone: Optional[str] = None,
        role: str = Role.CUSTOMER.value,
        is_approved: bool = False,
    ) -> UserProfile:
        if len(password) < self.min_password_length:
            raise ValidationError(f"Password must be at least {self.min_password_length} characters")

        if self.user_repo.find_by_email(email) is not None:
            raise ConflictError("An account with this email already exists", "email")

        profile = self.user_repo.create_user(
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            is_approved=is_approved,
            full_name=full_name,
            company_name=company_name,
            phone=phone,
        )
        logger.info(f"Created {role} account {profile.id}")
        return profile

    def sign_in(self, email: str, password: str, expected_role: str) -> SessionIdentity:
        """
        Check credentials for the admin or the B2B login page.

        A customer whose reseller application is still pending gets a
        specific message rather than a generic credentials error.
        """
        profile = self.user_repo.find_by_email(email)
        credentials_ok = (
            profile is not None
            and profile.password_hash is not None
            and check_password_hash(profile.password_hash, password)
        )

        if expected_role == Role.ADMIN.value:
            if not credentials_ok or profile.role != Role.ADMIN.value:
                logger.warning(f"Rejected admin sign-in for {email}")
                raise UnauthorizedError("Invalid admin credentials")
        elif expected_role == Role.B2B.value:
            if not credentials_ok:
                logger.warning(f"Rejected B2B sign-in for {email}")
                raise UnauthorizedError("Invalid email or password")
            if profile.role != Role.B2B.value or not profile.is_approved:
                logger.warning(f"B2B sign-in for unapproved account {profile.id}")
                raise UnauthorizedError("Your reseller account is not approved yet")
        else:
            raise ValidationError(f"Unknown role: {expected_role}")

        logger.info(f"User {profile.id} signed in as {expected_role}")
        return SessionIdentity(profile=profile)

    def load_profile(self, user_id: int) -> Optional[UserProfile]:
        """
        Fetch the profile behind a session, giving up after the configured
        delay. This is the only remote call with a timeout.
        """
        future = self._executor.submit(self.user_repo.find_by_id, user_id)
        try:
            return future.result(timeout=self.profile_load_timeout)
        except FutureTimeoutError:
            future.cancel()
            logger.error(f"Profile load for user {user_id} timed out after {self.profile_load_timeout}s")
            raise ExternalServiceError("identity", "Profile load timed out")

    def identity_for(self, user_id: Optional[int]) -> SessionIdentity:
        """Anonymous when there is no session or the profile no longer exists"""
        if user_id is None:
            return SessionIdentity.anonymous()
        profile = self.load_profile(user_id)
        if profile is None:
            logger.warning(f"Session refers to missing profile {user_id}; treating as anonymous")
            return SessionIdentity.anonymous()
        return SessionIdentity(profile=profile)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)
