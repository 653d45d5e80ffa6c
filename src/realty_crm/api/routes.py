"""FastAPI routes for the dashboard shell."""

import logging

from fastapi import APIRouter, HTTPException, status

from realty_crm import __version__
from realty_crm.api.deps import Aggregator, Database, Session
from realty_crm.config import get_settings
from realty_crm.exceptions import (
    AggregationError,
    SignupTransactionError,
    SignupValidationError,
)
from realty_crm.formatting import format_currency
from realty_crm.manager.session_resolver import SessionResolver
from realty_crm.manager.signup import SignupFlow, validate_organization
from realty_crm.models.responses import (
    DashboardResponse,
    RedirectResponse,
    SessionResponse,
    SignupRequest,
    SignupResponse,
    SignupStepResponse,
)
from realty_crm.models.signup import OrganizationDetails
from realty_crm.views import (
    DASHBOARD_ROUTE,
    build_navigation,
    landing_route,
    user_initials,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _session_response(resolver: SessionResolver) -> SessionResponse:
    state = resolver.state
    return SessionResponse(
        state=state,
        landing_route=landing_route(state, resolver.login_route),
        navigation=build_navigation(state.organization) if state.organization else [],
        initials=user_initials(state.profile) if state.profile else None,
    )


@router.get("/health")
async def health(db: Database) -> dict:
    """Report version and database connectivity."""
    db_health = await db.health_check()
    return {"version": __version__, "database": db_health}


# -----------------------------------------------------------------------------
# Session
# -----------------------------------------------------------------------------


@router.get("/session", response_model=SessionResponse)
async def get_session(resolver: Session) -> SessionResponse:
    """Current identity, profile and organization."""
    return _session_response(resolver)


@router.post("/session/refresh", response_model=SessionResponse)
async def refresh_session(resolver: Session) -> SessionResponse:
    """Re-read profile and organization for the signed-in user."""
    await resolver.refresh()
    return _session_response(resolver)


@router.post("/session/sign-out", response_model=RedirectResponse)
async def sign_out(resolver: Session) -> RedirectResponse:
    """End the session and point the client at the login page."""
    route = await resolver.sign_out()
    return RedirectResponse(redirect_to=route)


# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    resolver: Session,
    aggregator: Aggregator,
) -> DashboardResponse:
    """Aggregate stats for the signed-in tenant."""
    organization = resolver.state.organization
    if organization is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Not signed in", "redirect_to": resolver.login_route},
        )

    try:
        stats = await aggregator.compute_stats(organization)
    except AggregationError as e:
        logger.error(f"Error fetching dashboard stats: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )

    return DashboardResponse(
        organization_type=organization.organization_type.value,
        stats=stats.to_payload(),
        formatted_deal_value=format_currency(
            stats.deal_value, symbol=get_settings().currency_symbol
        ),
        partial=stats.is_partial,
    )


# -----------------------------------------------------------------------------
# Signup
# -----------------------------------------------------------------------------


def _validation_failed(error: SignupValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"message": error.message, "step": error.step},
    )


@router.post("/signup/organization", response_model=SignupStepResponse)
async def submit_organization(details: OrganizationDetails) -> SignupStepResponse:
    """Validate step 1 without touching the provider."""
    try:
        validate_organization(details)
    except SignupValidationError as e:
        raise _validation_failed(e)
    return SignupStepResponse(step=2)


@router.post(
    "/signup/account",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_account(
    request: SignupRequest,
    db: Database,
    resolver: Session,
) -> SignupResponse:
    """Validate both steps, then create the tenant and its first Admin."""
    flow = SignupFlow(db)
    try:
        flow.submit_organization(request.organization)
        result = await flow.submit_account(request.account)
    except SignupValidationError as e:
        raise _validation_failed(e)
    except SignupTransactionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": e.message, "stage": e.stage},
        )

    # The sign-in event fired before the profile row existed
    await resolver.resync()

    return SignupResponse(
        identity_id=result.identity_id,
        organization_id=result.organization_id,
        user_id=result.user_id,
        redirect_to=landing_route(resolver.state, resolver.login_route)
        or DASHBOARD_ROUTE,
    )
