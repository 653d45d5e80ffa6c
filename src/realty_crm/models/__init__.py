"""Pydantic models for the Realty CRM core."""

from realty_crm.models.dashboard import DashboardStats
from realty_crm.models.identity import (
    Identity,
    Organization,
    OrganizationType,
    Profile,
    Role,
    SubscriptionStatus,
)
from realty_crm.models.session import SessionEvent, SessionState
from realty_crm.models.signup import AccountDetails, OrganizationDetails, SignupResult

__all__ = [
    "AccountDetails",
    "DashboardStats",
    "Identity",
    "Organization",
    "OrganizationDetails",
    "OrganizationType",
    "Profile",
    "Role",
    "SessionEvent",
    "SessionState",
    "SignupResult",
    "SubscriptionStatus",
]
