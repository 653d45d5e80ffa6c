"""Response bodies for the HTTP surface."""

from typing import Any

from pydantic import BaseModel

from realty_crm.models.session import SessionState
from realty_crm.models.signup import AccountDetails, OrganizationDetails
from realty_crm.views import NavItem


class SessionResponse(BaseModel):
    """Current session plus what the shell needs to render around it."""

    state: SessionState
    landing_route: str | None = None
    navigation: list[NavItem] = []
    initials: str | None = None


class RedirectResponse(BaseModel):
    redirect_to: str


class DashboardResponse(BaseModel):
    """Dashboard stats with the display form of the deal value."""

    organization_type: str
    stats: dict[str, Any]
    formatted_deal_value: str
    partial: bool = False


class SignupStepResponse(BaseModel):
    step: int


class SignupRequest(BaseModel):
    """Both signup steps in one request."""

    organization: OrganizationDetails
    account: AccountDetails


class SignupResponse(BaseModel):
    identity_id: str
    organization_id: str
    user_id: str | None = None
    redirect_to: str
