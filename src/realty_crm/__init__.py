"""Realty CRM - tenant session resolution and dashboard aggregation."""

__version__ = "0.1.0"

from realty_crm.exceptions import (
    AggregationError,
    IdentityResolutionError,
    OrganizationNotFoundError,
    ProfileNotFoundError,
    QueryFailure,
    RealtyCRMError,
    SignupTransactionError,
    SignupValidationError,
)

__all__ = [
    "__version__",
    "AggregationError",
    "IdentityResolutionError",
    "OrganizationNotFoundError",
    "ProfileNotFoundError",
    "QueryFailure",
    "RealtyCRMError",
    "SignupTransactionError",
    "SignupValidationError",
]
