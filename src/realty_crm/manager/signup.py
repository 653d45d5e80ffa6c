"""Two-step tenant signup.

Step 1 collects organization details, step 2 the first user's account.
Both are validated locally before anything is sent to the provider. The
writes then run as a saga: auth identity, organization row, profile row.
A failed profile insert deletes the organization again; an auth identity
cannot be removed with the public key, so it is reported for cleanup.
"""

import logging
import re
from collections.abc import Callable
from datetime import date, timedelta
from typing import Any

from realty_crm.db.client import DatabaseClient
from realty_crm.exceptions import SignupTransactionError, SignupValidationError
from realty_crm.models.identity import Role, SubscriptionStatus
from realty_crm.models.signup import AccountDetails, OrganizationDetails, SignupResult

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"[0-9]{10}")
MIN_PASSWORD_LENGTH = 6
TRIAL_DAYS = 14
DEFAULT_SUBSCRIPTION_TIER = "Basic"

GENERIC_FAILURE = "Failed to create account. Please try again."


def validate_organization(details: OrganizationDetails) -> None:
    """Reject step 1 with a user-facing message.

    Raises:
        SignupValidationError: On the first problem found
    """
    if not (
        details.organization_name
        and details.organization_type
        and details.email
        and details.phone
    ):
        raise SignupValidationError("Please fill all required fields", step=1)
    if not EMAIL_PATTERN.fullmatch(details.email):
        raise SignupValidationError("Please enter a valid email address", step=1)
    if not PHONE_PATTERN.fullmatch(details.phone):
        raise SignupValidationError(
            "Please enter a valid 10-digit phone number", step=1
        )


def validate_account(account: AccountDetails) -> None:
    """Reject step 2 with a user-facing message.

    Raises:
        SignupValidationError: On the first problem found
    """
    if not (account.first_name and account.last_name and account.password):
        raise SignupValidationError("Please fill all required fields", step=2)
    if account.password != account.confirm_password:
        raise SignupValidationError("Passwords do not match", step=2)
    if len(account.password) < MIN_PASSWORD_LENGTH:
        raise SignupValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", step=2
        )


def _user_message(error: BaseException) -> str:
    return getattr(error, "message", None) or str(error) or GENERIC_FAILURE


class SignupFlow:
    """State for one signup attempt."""

    def __init__(
        self,
        db: DatabaseClient,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.db = db
        self._today = today
        self.step = 1
        self.organization: OrganizationDetails | None = None

    def submit_organization(self, details: OrganizationDetails) -> int:
        """Validate step 1 and advance. No network calls.

        Returns:
            The new step number
        """
        validate_organization(details)
        self.organization = details
        self.step = 2
        return self.step

    def back(self) -> int:
        """Return to step 1, keeping what was entered."""
        self.step = 1
        return self.step

    async def submit_account(self, account: AccountDetails) -> SignupResult:
        """Validate step 2, then create identity, organization and profile.

        Raises:
            SignupValidationError: If either step is incomplete or invalid
            SignupTransactionError: If any of the writes failed
        """
        if self.step != 2 or self.organization is None:
            raise SignupValidationError(
                "Please complete the organization details first", step=1
            )
        validate_account(account)
        details = self.organization

        try:
            identity = await self.db.sign_up(details.email, account.password)
        except Exception as e:
            logger.error(f"Signup error creating auth identity: {e}")
            raise SignupTransactionError(_user_message(e), stage="identity") from e
        if identity is None:
            raise SignupTransactionError(GENERIC_FAILURE, stage="identity")

        try:
            org_row = await self.db.insert_organization(self._organization_row(details))
        except Exception as e:
            logger.error(
                f"Signup error creating organization; auth user "
                f"{identity.user_id} has no tenant and needs cleanup: {e}"
            )
            raise SignupTransactionError(
                _user_message(e),
                stage="organization",
                orphaned_identity_id=identity.user_id,
            ) from e
        organization_id = str(org_row["organization_id"])

        try:
            user_row = await self.db.insert_profile(
                self._profile_row(details, account, organization_id, identity.user_id)
            )
        except Exception as e:
            logger.error(f"Signup error creating profile: {e}")
            leftover = await self._remove_organization(organization_id)
            raise SignupTransactionError(
                _user_message(e),
                stage="profile",
                orphaned_identity_id=identity.user_id,
                orphaned_organization_id=leftover,
            ) from e

        logger.info(
            f"Created {details.organization_type.value} organization "
            f"{organization_id} for {details.email}"
        )
        return SignupResult(
            identity_id=identity.user_id,
            organization_id=organization_id,
            user_id=user_row.get("user_id"),
        )

    async def _remove_organization(self, organization_id: str) -> str | None:
        """Compensate a failed profile insert.

        Returns:
            The organization id if it could not be deleted, else None
        """
        try:
            await self.db.delete_organization(organization_id)
        except Exception as e:
            logger.error(
                f"Could not roll back organization {organization_id}, "
                f"needs cleanup: {e}"
            )
            return organization_id
        logger.info(f"Rolled back organization {organization_id}")
        return None

    def _organization_row(self, details: OrganizationDetails) -> dict[str, Any]:
        trial_ends = self._today() + timedelta(days=TRIAL_DAYS)
        return {
            "organization_name": details.organization_name,
            "organization_type": details.organization_type.value,
            "email": details.email,
            "phone": details.phone,
            "business_name": details.business_name or details.organization_name,
            "city": details.city or None,
            "state": details.state or None,
            "subscription_tier": DEFAULT_SUBSCRIPTION_TIER,
            "subscription_status": SubscriptionStatus.TRIAL.value,
            "trial_ends_at": trial_ends.isoformat(),
        }

    @staticmethod
    def _profile_row(
        details: OrganizationDetails,
        account: AccountDetails,
        organization_id: str,
        auth_user_id: str,
    ) -> dict[str, Any]:
        return {
            "organization_id": organization_id,
            "auth_user_id": auth_user_id,
            "first_name": account.first_name,
            "last_name": account.last_name,
            "email": details.email,
            "phone": details.phone,
            "role": Role.ADMIN.value,
            "is_active": True,
        }
