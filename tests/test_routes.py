"""Tests for the HTTP surface."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from realty_crm.api import deps
from realty_crm.exceptions import AggregationError
from realty_crm.main import create_app
from realty_crm.manager.session_resolver import SessionResolver
from realty_crm.models.dashboard import DashboardStats
from realty_crm.models.identity import (
    Identity,
    Organization,
    OrganizationType,
    Profile,
    Role,
    SubscriptionStatus,
)
from realty_crm.models.session import SessionState


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def organization() -> Organization:
    return Organization(
        organization_id="org-1",
        organization_name="ABC Realty",
        organization_type=OrganizationType.DEVELOPER,
        brand_color="#4f46e5",
        subscription_status=SubscriptionStatus.TRIAL,
    )


@pytest.fixture
def signed_in(organization) -> SessionState:
    return SessionState(
        identity=Identity(user_id="auth-123"),
        profile=Profile(
            user_id="user-1",
            organization_id="org-1",
            first_name="Asha",
            last_name="Rao",
            email="owner@abcrealty.in",
            role=Role.ADMIN,
        ),
        organization=organization,
        loading=False,
    )


@pytest.fixture
def resolver(signed_in) -> MagicMock:
    resolver = MagicMock(spec=SessionResolver)
    resolver.state = signed_in
    resolver.login_route = "/login"
    resolver.refresh = AsyncMock()
    resolver.resync = AsyncMock()
    resolver.sign_out = AsyncMock(return_value="/login")
    return resolver


@pytest.fixture
def aggregator() -> MagicMock:
    aggregator = MagicMock()
    aggregator.compute_stats = AsyncMock(return_value=DashboardStats(
        total_leads=5,
        total_projects=1,
        total_units=4,
        available_units=2,
        booked_units=2,
        total_deals=3,
        deal_value=200000,
    ))
    return aggregator


@pytest.fixture
def mock_db() -> MagicMock:
    db = MagicMock()
    db.health_check = AsyncMock(
        return_value={"healthy": True, "latency_ms": 1.5, "error": None}
    )
    return db


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module-level singletons between tests."""
    deps._db_client = None
    deps._resolver = None
    yield
    deps._db_client = None
    deps._resolver = None


@pytest.fixture
def client(resolver, aggregator, mock_db) -> TestClient:
    app = create_app()
    app.dependency_overrides[deps.get_session_resolver] = lambda: resolver
    app.dependency_overrides[deps.get_aggregator] = lambda: aggregator
    app.dependency_overrides[deps.get_db_client] = lambda: mock_db
    return TestClient(app)


# ---------------------------------------------------------------------------
# Session routes
# ---------------------------------------------------------------------------

class TestSessionRoutes:
    """Tests for /session endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"]["healthy"] is True

    def test_session_for_signed_in_user(self, client):
        response = client.get("/session")

        body = response.json()
        assert response.status_code == 200
        assert body["landing_route"] == "/dashboard"
        assert body["initials"] == "AR"
        assert body["state"]["organization"]["organization_type"] == "Developer"
        assert [item["name"] for item in body["navigation"]][2:4] == ["Projects", "Units"]

    def test_session_while_signed_out(self, client, resolver):
        resolver.state = SessionState(loading=False)

        body = client.get("/session").json()

        assert body["landing_route"] == "/login"
        assert body["navigation"] == []
        assert body["initials"] is None

    def test_refresh(self, client, resolver):
        response = client.post("/session/refresh")

        assert response.status_code == 200
        resolver.refresh.assert_awaited_once()

    def test_sign_out(self, client, resolver):
        response = client.post("/session/sign-out")

        assert response.json() == {"redirect_to": "/login"}
        resolver.sign_out.assert_awaited_once()


# ---------------------------------------------------------------------------
# Dashboard route
# ---------------------------------------------------------------------------

class TestDashboardRoute:
    """Tests for GET /dashboard."""

    def test_developer_stats(self, client, aggregator, organization):
        response = client.get("/dashboard")

        body = response.json()
        assert response.status_code == 200
        assert body["organization_type"] == "Developer"
        assert body["formatted_deal_value"] == "₹2.00 L"
        assert body["stats"]["totalUnits"] == 4
        assert "totalProperties" not in body["stats"]
        assert body["partial"] is False
        aggregator.compute_stats.assert_awaited_once_with(organization)

    def test_partial_flagged(self, client, aggregator):
        aggregator.compute_stats.return_value = DashboardStats(
            failed_queries=["deals"]
        )

        body = client.get("/dashboard").json()

        assert body["partial"] is True
        assert body["stats"]["failedQueries"] == ["deals"]

    def test_no_organization_redirects_to_login(self, client, resolver, aggregator):
        resolver.state = SessionState(loading=False)

        response = client.get("/dashboard")

        assert response.status_code == 401
        assert response.json()["detail"]["redirect_to"] == "/login"
        aggregator.compute_stats.assert_not_called()

    def test_aggregation_error(self, client, aggregator):
        aggregator.compute_stats.side_effect = AggregationError("deadline")

        response = client.get("/dashboard")

        assert response.status_code == 503


# ---------------------------------------------------------------------------
# Signup routes
# ---------------------------------------------------------------------------

ORGANIZATION = {
    "organization_name": "ABC Realty",
    "organization_type": "Agent",
    "email": "contact@abcrealty.in",
    "phone": "9876543210",
}
ACCOUNT = {
    "first_name": "Asha",
    "last_name": "Rao",
    "password": "s3cret!",
    "confirm_password": "s3cret!",
}


class TestSignupRoutes:
    """Tests for /signup endpoints."""

    def test_organization_step_valid(self, client, mock_db):
        response = client.post("/signup/organization", json=ORGANIZATION)

        assert response.json() == {"step": 2}
        assert mock_db.method_calls == []

    def test_organization_step_eleven_digit_phone(self, client, mock_db):
        response = client.post(
            "/signup/organization", json={**ORGANIZATION, "phone": "98765432101"}
        )

        assert response.status_code == 422
        assert response.json()["detail"] == {
            "message": "Please enter a valid 10-digit phone number",
            "step": 1,
        }
        assert mock_db.method_calls == []

    def test_organization_step_blank_type(self, client):
        response = client.post(
            "/signup/organization", json={**ORGANIZATION, "organization_type": ""}
        )

        assert response.status_code == 422
        assert response.json()["detail"]["message"] == "Please fill all required fields"

    def test_account_step_creates_tenant(self, client, mock_db, resolver):
        mock_db.sign_up = AsyncMock(return_value=Identity(user_id="auth-123"))
        mock_db.insert_organization = AsyncMock(return_value={"organization_id": "org-9"})
        mock_db.insert_profile = AsyncMock(return_value={"user_id": "user-9"})

        response = client.post(
            "/signup/account", json={"organization": ORGANIZATION, "account": ACCOUNT}
        )

        assert response.status_code == 201
        assert response.json() == {
            "identity_id": "auth-123",
            "organization_id": "org-9",
            "user_id": "user-9",
            "redirect_to": "/dashboard",
        }
        resolver.resync.assert_awaited_once()

    def test_account_step_without_session_sends_to_login(
        self, client, mock_db, resolver
    ):
        mock_db.sign_up = AsyncMock(return_value=Identity(user_id="auth-123"))
        mock_db.insert_organization = AsyncMock(return_value={"organization_id": "org-9"})
        mock_db.insert_profile = AsyncMock(return_value={"user_id": "user-9"})
        resolver.state = SessionState(loading=False)

        response = client.post(
            "/signup/account", json={"organization": ORGANIZATION, "account": ACCOUNT}
        )

        assert response.status_code == 201
        assert response.json()["redirect_to"] == "/login"

    def test_account_step_password_mismatch(self, client):
        response = client.post(
            "/signup/account",
            json={
                "organization": ORGANIZATION,
                "account": {**ACCOUNT, "confirm_password": "different"},
            },
        )

        assert response.status_code == 422
        assert response.json()["detail"]["step"] == 2

    def test_account_step_write_failure(self, client, mock_db, resolver):
        mock_db.sign_up = AsyncMock(side_effect=RuntimeError("User already registered"))

        response = client.post(
            "/signup/account", json={"organization": ORGANIZATION, "account": ACCOUNT}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == {
            "message": "User already registered",
            "stage": "identity",
        }
        resolver.resync.assert_not_called()


# ---------------------------------------------------------------------------
# Dependency singletons
# ---------------------------------------------------------------------------

class TestSessionSingleton:
    """Tests for the process-wide resolver."""

    @pytest.mark.asyncio
    async def test_resolver_created_once_and_started(self, mock_db):
        mock_db.on_identity_change = MagicMock()
        mock_db.get_current_identity = AsyncMock(return_value=None)

        first = await deps.get_session_resolver(mock_db)
        second = await deps.get_session_resolver(mock_db)

        assert first is second
        assert first.state.loading is False
        mock_db.get_current_identity.assert_awaited_once()

        await deps.close_session()

        assert deps._resolver is None
        assert isinstance(first, SessionResolver)
