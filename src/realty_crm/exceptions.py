"""Custom exceptions for the Realty CRM core."""


class RealtyCRMError(Exception):
    """Base class for all errors raised by this package."""


class IdentityResolutionError(RealtyCRMError):
    """Raised when the auth provider cannot report the current identity."""


class ProfileNotFoundError(RealtyCRMError):
    """Raised when no usable profile row exists for an identity."""

    def __init__(self, auth_user_id: str, reason: str | None = None) -> None:
        self.auth_user_id = auth_user_id
        self.reason = reason
        message = f"No profile for auth user {auth_user_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class OrganizationNotFoundError(RealtyCRMError):
    """Raised when a profile references an organization that cannot be loaded."""

    def __init__(self, organization_id: str, reason: str | None = None) -> None:
        self.organization_id = organization_id
        self.reason = reason
        message = f"No organization {organization_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class QueryFailure(RealtyCRMError):
    """Raised when a single dashboard query fails or times out."""

    def __init__(self, query: str, cause: BaseException) -> None:
        self.query = query
        self.cause = cause
        super().__init__(f"Query '{query}' failed: {cause!r}")


class AggregationError(RealtyCRMError):
    """Raised when dashboard aggregation cannot run at all."""


class SignupValidationError(RealtyCRMError):
    """Raised when a signup form step is rejected before any network call.

    The message is user-facing.
    """

    def __init__(self, message: str, step: int) -> None:
        self.message = message
        self.step = step
        super().__init__(message)


class SignupTransactionError(RealtyCRMError):
    """Raised when one of the signup writes fails.

    Carries whatever was left behind so it can be cleaned up.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: str,
        orphaned_identity_id: str | None = None,
        orphaned_organization_id: str | None = None,
    ) -> None:
        self.message = message
        self.stage = stage
        self.orphaned_identity_id = orphaned_identity_id
        self.orphaned_organization_id = orphaned_organization_id
        super().__init__(message)
