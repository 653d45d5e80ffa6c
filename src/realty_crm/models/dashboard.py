"""Dashboard view-model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DashboardStats(BaseModel):
    """Aggregate counts for one tenant, recomputed on every view.

    Tenant-type specific metrics are None when they do not apply and are
    left out of the payload entirely.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_leads: int = 0
    new_leads: int = 0
    qualified_leads: int = 0
    converted_leads: int = 0

    # Agent only
    total_properties: int | None = None
    active_properties: int | None = None

    # Developer only
    total_projects: int | None = None
    total_units: int | None = None
    available_units: int | None = None
    booked_units: int | None = None

    total_deals: int = 0
    deal_value: float = 0.0
    pending_tasks: int = 0
    today_appointments: int = 0

    # Queries that degraded to an empty result
    failed_queries: list[str] = Field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_queries)

    def to_payload(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting metrics that do not apply."""
        return self.model_dump(by_alias=True, exclude_none=True)
