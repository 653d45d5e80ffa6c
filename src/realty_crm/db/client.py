"""Supabase client for tenant-scoped reads and the signup writes.

Tenant isolation is enforced by row-level security on the Supabase side:
every unfiltered read below only ever sees the signed-in tenant's rows.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

from supabase import AsyncClient, acreate_client

from realty_crm.config import Settings, get_settings
from realty_crm.models.identity import Identity, Organization, Profile

logger = logging.getLogger(__name__)

# Column lists requested for the session lookups
PROFILE_COLUMNS = (
    "user_id, organization_id, first_name, last_name, email, role, profile_photo"
)
ORGANIZATION_COLUMNS = (
    "organization_id, organization_name, organization_type, logo_url, "
    "brand_color, subscription_status"
)

IdentityCallback = Callable[[Identity | None], None]


def identity_from_session(session: Any) -> Identity | None:
    """Extract the identity from a provider session, if there is one."""
    user = getattr(session, "user", None) if session is not None else None
    if user is None:
        return None
    return Identity(user_id=str(user.id), email=getattr(user, "email", None))


class DatabaseClient:
    """Client for Supabase auth and table operations."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    @classmethod
    async def connect(cls, settings: Settings | None = None) -> "DatabaseClient":
        """Create the underlying async Supabase client.

        Args:
            settings: Optional settings override

        Returns:
            A connected DatabaseClient
        """
        settings = settings or get_settings()
        client = await acreate_client(settings.supabase_url, settings.supabase_key)
        logger.debug(f"Connected to Supabase at {settings.supabase_url}")
        return cls(client)

    # -------------------------------------------------------------------------
    # Auth methods
    # -------------------------------------------------------------------------

    async def get_current_identity(self) -> Identity | None:
        """Get the identity of the current session.

        Returns:
            Identity if a session exists, None otherwise
        """
        session = await self.client.auth.get_session()
        return identity_from_session(session)

    def on_identity_change(self, callback: IdentityCallback) -> Any:
        """Register for auth state changes (sign in, sign out, token refresh).

        Args:
            callback: Called with the new identity, or None after sign out

        Returns:
            The provider subscription; call ``unsubscribe()`` to stop
        """

        def _listener(event: Any, session: Any) -> None:
            logger.debug(f"Auth state change: {event}")
            callback(identity_from_session(session))

        return self.client.auth.on_auth_state_change(_listener)

    async def sign_out(self) -> None:
        """Invalidate the current session with the provider."""
        await self.client.auth.sign_out()

    async def sign_up(self, email: str, password: str) -> Identity | None:
        """Create a new auth identity.

        Args:
            email: Login email
            password: Plain-text password, sent to the provider only

        Returns:
            The created identity, or None if the provider returned no user
        """
        response = await self.client.auth.sign_up(
            {"email": email, "password": password}
        )
        return identity_from_session(response)

    # -------------------------------------------------------------------------
    # Identity lookups
    # -------------------------------------------------------------------------

    async def get_profile_by_auth_user(self, auth_user_id: str) -> Profile | None:
        """Look up the profile linked to an auth identity.

        Args:
            auth_user_id: The provider's user id

        Returns:
            Profile if found, None otherwise
        """
        result = await (
            self.client.table("users")
            .select(PROFILE_COLUMNS)
            .eq("auth_user_id", auth_user_id)
            .limit(1)
            .execute()
        )
        if result.data:
            return Profile(**result.data[0])
        return None

    async def get_organization(self, organization_id: str) -> Organization | None:
        """Look up an organization by id.

        Args:
            organization_id: The organization id

        Returns:
            Organization if found, None otherwise
        """
        result = await (
            self.client.table("organizations")
            .select(ORGANIZATION_COLUMNS)
            .eq("organization_id", organization_id)
            .limit(1)
            .execute()
        )
        if result.data:
            return Organization(**result.data[0])
        return None

    # -------------------------------------------------------------------------
    # Dashboard record sets
    # -------------------------------------------------------------------------

    async def list_leads(self) -> list[dict[str, Any]]:
        """Get the status of every lead."""
        result = await self.client.table("leads").select("status").execute()
        return result.data

    async def list_properties(self) -> list[dict[str, Any]]:
        """Get the status of every property listing."""
        result = await self.client.table("properties").select("status").execute()
        return result.data

    async def list_projects(self) -> list[dict[str, Any]]:
        """Get every project."""
        result = await self.client.table("projects").select("*").execute()
        return result.data

    async def list_units(self) -> list[dict[str, Any]]:
        """Get the status of every project unit."""
        result = (
            await self.client.table("project_units").select("unit_status").execute()
        )
        return result.data

    async def list_deals(self) -> list[dict[str, Any]]:
        """Get value and stage of every deal."""
        result = (
            await self.client.table("deals")
            .select("deal_value,pipeline_stage")
            .execute()
        )
        return result.data

    async def list_pending_tasks(self) -> list[dict[str, Any]]:
        """Get tasks whose status is Pending."""
        result = await (
            self.client.table("tasks")
            .select("status")
            .eq("status", "Pending")
            .execute()
        )
        return result.data

    async def list_appointments_between(
        self,
        start: datetime,
        end: datetime,
    ) -> list[dict[str, Any]]:
        """Get appointments starting in the half-open window [start, end).

        Args:
            start: Inclusive lower bound on start_datetime
            end: Exclusive upper bound on start_datetime

        Returns:
            List of appointment records
        """
        result = await (
            self.client.table("appointments")
            .select("*")
            .gte("start_datetime", start.isoformat())
            .lt("start_datetime", end.isoformat())
            .execute()
        )
        return result.data

    # -------------------------------------------------------------------------
    # Signup writes
    # -------------------------------------------------------------------------

    async def insert_organization(self, row: dict[str, Any]) -> dict[str, Any]:
        """Insert an organization row and return it as stored."""
        result = await self.client.table("organizations").insert(row).execute()
        logger.debug(f"Created organization {result.data[0]['organization_id']}")
        return result.data[0]

    async def insert_profile(self, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a users row and return it as stored."""
        result = await self.client.table("users").insert(row).execute()
        logger.debug(f"Created profile for auth user {row.get('auth_user_id')}")
        return result.data[0]

    async def delete_organization(self, organization_id: str) -> None:
        """Delete an organization row."""
        await (
            self.client.table("organizations")
            .delete()
            .eq("organization_id", organization_id)
            .execute()
        )
        logger.debug(f"Deleted organization {organization_id}")

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    async def health_check(self) -> dict[str, Any]:
        """Check database connectivity and return health status.

        Returns:
            Dict with:
                - healthy: bool - whether the database is reachable
                - latency_ms: float - query latency in milliseconds
                - error: str | None - error message if unhealthy
        """
        start = time.perf_counter()
        try:
            await (
                self.client.table("organizations")
                .select("organization_id")
                .limit(1)
                .execute()
            )
            latency_ms = (time.perf_counter() - start) * 1000
            return {
                "healthy": True,
                "latency_ms": round(latency_ms, 2),
                "error": None,
            }
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            logger.error(f"Database health check failed: {e}")
            return {
                "healthy": False,
                "latency_ms": round(latency_ms, 2),
                "error": str(e),
            }
