"""View-model helpers derived from the session state."""

from pydantic import BaseModel

from realty_crm.models.identity import Organization, Profile
from realty_crm.models.session import SessionState

DASHBOARD_ROUTE = "/dashboard"
LOGIN_ROUTE = "/login"


class NavItem(BaseModel):
    """One sidebar entry."""

    name: str
    href: str


def landing_route(state: SessionState, login_route: str = LOGIN_ROUTE) -> str | None:
    """Where the entry page should send the user, or None while loading."""
    if state.loading:
        return None
    if state.identity is not None:
        return DASHBOARD_ROUTE
    return login_route


def build_navigation(organization: Organization) -> list[NavItem]:
    """Sidebar entries. Agents manage properties, developers projects and units."""
    if organization.is_agent:
        inventory = [NavItem(name="Properties", href="/dashboard/properties")]
    else:
        inventory = [
            NavItem(name="Projects", href="/dashboard/projects"),
            NavItem(name="Units", href="/dashboard/units"),
        ]
    return [
        NavItem(name="Dashboard", href=DASHBOARD_ROUTE),
        NavItem(name="Leads", href="/dashboard/leads"),
        *inventory,
        NavItem(name="Deals", href="/dashboard/deals"),
        NavItem(name="Tasks", href="/dashboard/tasks"),
        NavItem(name="Calendar", href="/dashboard/calendar"),
        NavItem(name="Documents", href="/dashboard/documents"),
        NavItem(name="Communications", href="/dashboard/communications"),
        NavItem(name="Reports", href="/dashboard/reports"),
        NavItem(name="Settings", href="/dashboard/settings"),
    ]


def user_initials(profile: Profile) -> str:
    """Avatar initials from the profile name, e.g. "AR"."""
    first = profile.first_name[:1]
    last = profile.last_name[:1]
    return f"{first}{last}".upper()
