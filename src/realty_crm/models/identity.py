"""Identity models for multi-tenant support."""

from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    """Role of a user within their organization."""

    ADMIN = "Admin"
    MANAGER = "Manager"
    AGENT = "Agent"
    SALES = "Sales"


class OrganizationType(str, Enum):
    """Kind of tenant. Immutable after signup; gates dashboard metrics."""

    AGENT = "Agent"
    DEVELOPER = "Developer"


class SubscriptionStatus(str, Enum):
    """Billing state of an organization."""

    ACTIVE = "Active"
    SUSPENDED = "Suspended"
    CANCELLED = "Cancelled"
    TRIAL = "Trial"


class Identity(BaseModel):
    """Authenticated party as reported by the auth provider."""

    user_id: str
    email: str | None = None


class Profile(BaseModel):
    """Internal user record linked to an identity."""

    user_id: str
    organization_id: str
    first_name: str
    last_name: str
    email: str
    role: Role
    profile_photo: str | None = None


class Organization(BaseModel):
    """Tenant record."""

    organization_id: str
    organization_name: str
    organization_type: OrganizationType
    logo_url: str | None = None
    brand_color: str
    subscription_status: SubscriptionStatus

    @property
    def is_agent(self) -> bool:
        return self.organization_type == OrganizationType.AGENT

    @property
    def is_developer(self) -> bool:
        return self.organization_type == OrganizationType.DEVELOPER
