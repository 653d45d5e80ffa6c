"""Signup form models."""

from pydantic import BaseModel, field_validator

from realty_crm.models.identity import OrganizationType


class OrganizationDetails(BaseModel):
    """Step 1 of signup: the tenant being created.

    Fields default to empty so an incomplete form can still be represented
    and rejected with a user-facing message.
    """

    organization_name: str = ""
    organization_type: OrganizationType | None = None
    email: str = ""
    phone: str = ""
    business_name: str = ""
    city: str = ""
    state: str = ""

    @field_validator("organization_type", mode="before")
    @classmethod
    def _blank_type_is_unset(cls, value: object) -> object:
        # An untouched select box submits an empty string
        return value or None


class AccountDetails(BaseModel):
    """Step 2 of signup: the first Admin user."""

    first_name: str = ""
    last_name: str = ""
    password: str = ""
    confirm_password: str = ""


class SignupResult(BaseModel):
    """Rows created by a successful signup."""

    identity_id: str
    organization_id: str
    user_id: str | None = None
