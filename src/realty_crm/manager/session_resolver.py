"""Session resolver - the single source of truth for who is signed in.

Resolves the auth provider's identity to a profile and that profile's
organization, keeps the triple in sync with auth state changes, and
publishes every transition to observers as a fresh SessionState.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from realty_crm.db.client import DatabaseClient
from realty_crm.exceptions import (
    IdentityResolutionError,
    OrganizationNotFoundError,
    ProfileNotFoundError,
)
from realty_crm.models.identity import Identity, Organization, Profile
from realty_crm.models.session import SessionEvent, SessionState

logger = logging.getLogger(__name__)

SessionObserver = Callable[[SessionEvent, SessionState], None]


class SessionResolver:
    """Owns the (identity, profile, organization) triple for the process.

    Lookup failures never escape: they are logged and surface as a state
    with no profile and no organization, which callers treat as "go to the
    login page". Every resolution is tagged with a generation number so a
    lookup overtaken by a newer identity change never publishes.
    """

    def __init__(self, db: DatabaseClient, *, login_route: str = "/login") -> None:
        self.db = db
        self.login_route = login_route
        self._state = SessionState()
        self._observers: list[SessionObserver] = []
        self._subscription: Any = None
        self._generation = 0
        self._pending: set[asyncio.Task] = set()

    @property
    def state(self) -> SessionState:
        return self._state

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, observer: SessionObserver) -> Callable[[], None]:
        """Register an observer for state transitions.

        Returns:
            A callable that removes the observer. Idempotent.
        """
        self._observers.append(observer)

        def _unsubscribe() -> None:
            try:
                self._observers.remove(observer)
            except ValueError:
                pass

        return _unsubscribe

    def _publish(self, event: SessionEvent, **changes: Any) -> None:
        """Replace the state wholesale, then notify observers."""
        self._state = self._state.model_copy(update=changes)
        for observer in list(self._observers):
            try:
                observer(event, self._state)
            except Exception as e:
                logger.error(f"Session observer failed on {event.value}: {e}")

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Subscribe to auth changes and resolve the current session."""
        if self._subscription is None:
            self._subscription = self.db.on_identity_change(self._handle_auth_event)
        await self.initialize()

    async def close(self) -> None:
        """Stop listening for auth changes and drop in-flight resolutions."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        self._pending.clear()

    async def initialize(self) -> None:
        """Resolve the session that exists at process start.

        loading is cleared when this returns, whatever happened.
        """
        generation = self._next_generation()
        identity: Identity | None = None
        profile: Profile | None = None
        organization: Organization | None = None
        try:
            identity = await self._current_identity()
            if identity is not None:
                profile, organization = await self._resolve(identity)
        except IdentityResolutionError as e:
            logger.error(f"Error initializing auth: {e}")
            identity = None
        finally:
            if generation == self._generation:
                self._publish(
                    SessionEvent.INITIALIZED,
                    identity=identity,
                    profile=profile,
                    organization=organization,
                    loading=False,
                )
            else:
                # A newer auth event already published its own triple
                self._publish(SessionEvent.INITIALIZED, loading=False)

    async def on_identity_change(self, identity: Identity | None) -> None:
        """Re-resolve after the provider reports a new auth state."""
        if identity is None:
            self._clear(SessionEvent.IDENTITY_CHANGED)
            return

        generation = self._next_generation()
        profile, organization = await self._resolve(identity)
        if generation != self._generation:
            logger.debug(f"Discarding stale resolution for {identity.user_id}")
            return
        self._publish(
            SessionEvent.IDENTITY_CHANGED,
            identity=identity,
            profile=profile,
            organization=organization,
        )

    async def refresh(self) -> None:
        """Re-resolve profile and organization for the current identity."""
        identity = self._state.identity
        if identity is None:
            return

        generation = self._next_generation()
        profile, organization = await self._resolve(identity)
        if generation != self._generation:
            return
        self._publish(
            SessionEvent.REFRESHED,
            profile=profile,
            organization=organization,
        )

    async def resync(self) -> None:
        """Re-read the provider's identity and resolve it from scratch.

        Call after writes that create the profile or organization rows. A
        resolution scheduled by the provider's sign-in event may already
        have run before those rows existed.
        """
        try:
            identity = await self._current_identity()
        except IdentityResolutionError as e:
            logger.error(f"Error re-reading auth: {e}")
            return
        await self.on_identity_change(identity)

    async def sign_out(self) -> str:
        """Invalidate the session and clear local state regardless of outcome.

        Returns:
            The route the caller should navigate to
        """
        try:
            await self.db.sign_out()
        except Exception as e:
            logger.error(f"Provider sign-out failed, clearing local session anyway: {e}")
        self._clear(SessionEvent.SIGNED_OUT)
        return self.login_route

    def _clear(self, event: SessionEvent) -> None:
        self._next_generation()
        self._publish(event, identity=None, profile=None, organization=None)

    def _handle_auth_event(self, identity: Identity | None) -> None:
        """Provider callback. Runs synchronously inside the provider."""
        if identity is None:
            # No round trip needed to forget a user
            self._clear(SessionEvent.IDENTITY_CHANGED)
            return

        task = asyncio.get_running_loop().create_task(
            self.on_identity_change(identity)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    async def _current_identity(self) -> Identity | None:
        try:
            return await self.db.get_current_identity()
        except Exception as e:
            raise IdentityResolutionError(str(e)) from e

    async def _resolve(
        self, identity: Identity
    ) -> tuple[Profile | None, Organization | None]:
        """Resolve profile, then organization. Fails closed to (None, None)."""
        try:
            profile = await self._lookup_profile(identity.user_id)
            organization = await self._lookup_organization(profile.organization_id)
        except ProfileNotFoundError as e:
            logger.warning(f"Error fetching profile: {e}")
            return None, None
        except OrganizationNotFoundError as e:
            logger.warning(f"Error fetching organization: {e}")
            return None, None
        return profile, organization

    async def _lookup_profile(self, auth_user_id: str) -> Profile:
        try:
            profile = await self.db.get_profile_by_auth_user(auth_user_id)
        except Exception as e:
            raise ProfileNotFoundError(auth_user_id, reason=str(e)) from e
        if profile is None:
            raise ProfileNotFoundError(auth_user_id)
        return profile

    async def _lookup_organization(self, organization_id: str) -> Organization:
        try:
            organization = await self.db.get_organization(organization_id)
        except Exception as e:
            raise OrganizationNotFoundError(organization_id, reason=str(e)) from e
        if organization is None:
            raise OrganizationNotFoundError(organization_id)
        return organization
