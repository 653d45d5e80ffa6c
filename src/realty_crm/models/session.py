"""Session state snapshot published by the session resolver."""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from realty_crm.models.identity import Identity, Organization, Profile


class SessionEvent(str, Enum):
    """Why a new session state was published."""

    INITIALIZED = "initialized"
    IDENTITY_CHANGED = "identity_changed"
    REFRESHED = "refreshed"
    SIGNED_OUT = "signed_out"


class SessionState(BaseModel):
    """Immutable snapshot of the current session.

    A new instance replaces the old one on every transition, so observers
    never see a half-updated triple.
    """

    model_config = ConfigDict(frozen=True)

    identity: Identity | None = None
    profile: Profile | None = None
    organization: Organization | None = None
    loading: bool = True

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def is_ready(self) -> bool:
        """True once the identity is fully resolved to a tenant."""
        return (
            not self.loading
            and self.identity is not None
            and self.profile is not None
            and self.organization is not None
        )
