"""Dashboard aggregation for the signed-in tenant.

Fan-out: seven read queries launched concurrently via asyncio.gather().
Each query is wrapped so that a failure or timeout becomes an empty row set
before the join, so one bad query lowers its own metrics and nothing else.
Fan-in: counts are derived client-side from the returned rows.
"""

import asyncio
import logging
import math
import re
from collections.abc import Awaitable, Callable
from datetime import datetime, time, timedelta, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from realty_crm.config import get_settings
from realty_crm.db.client import DatabaseClient
from realty_crm.exceptions import AggregationError, QueryFailure
from realty_crm.models.dashboard import DashboardStats
from realty_crm.models.identity import Organization, OrganizationType

logger = logging.getLogger(__name__)

Rows = list[dict[str, Any]]
Fetch = Callable[[], Awaitable[Rows]]

# Same prefix a browser's parseFloat accepts
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

BOOKED_UNIT_STATUSES = frozenset({"Booked", "Sold"})


def parse_number_or_zero(value: Any) -> float:
    """Parse a deal value. Missing, non-numeric or non-finite values give 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return 0.0
        number = float(match.group(0))
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def today_window(tz: tzinfo, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return [start of today, start of tomorrow) in the given time zone."""
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    else:
        now = now.astimezone(tz)
    today = now.date()
    start = datetime.combine(today, time.min, tzinfo=tz)
    end = datetime.combine(today + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def _count(rows: Rows, field: str, values: frozenset[str] | str) -> int:
    if isinstance(values, str):
        values = frozenset({values})
    return sum(1 for row in rows if row.get(field) in values)


def build_stats(
    organization_type: OrganizationType,
    *,
    leads: Rows,
    properties: Rows,
    projects: Rows,
    units: Rows,
    deals: Rows,
    pending_tasks: Rows,
    appointments: Rows,
    failed_queries: list[str] | None = None,
) -> DashboardStats:
    """Fold fetched rows into DashboardStats.

    Property metrics exist only for agents, project and unit metrics only
    for developers; the other set stays None rather than zero.
    """
    stats = DashboardStats(
        total_leads=len(leads),
        new_leads=_count(leads, "status", "New"),
        qualified_leads=_count(leads, "status", "Qualified"),
        converted_leads=_count(leads, "status", "Converted"),
        total_deals=len(deals),
        deal_value=sum(parse_number_or_zero(d.get("deal_value")) for d in deals),
        pending_tasks=len(pending_tasks),
        today_appointments=len(appointments),
        failed_queries=list(failed_queries or []),
    )

    if organization_type == OrganizationType.AGENT:
        stats.total_properties = len(properties)
        stats.active_properties = _count(properties, "status", "Active")
    elif organization_type == OrganizationType.DEVELOPER:
        stats.total_projects = len(projects)
        stats.total_units = len(units)
        stats.available_units = _count(units, "unit_status", "Available")
        stats.booked_units = _count(units, "unit_status", BOOKED_UNIT_STATUSES)

    return stats


class DashboardAggregator:
    """Computes DashboardStats for one organization. No caching."""

    def __init__(
        self,
        db: DatabaseClient,
        *,
        query_timeout_seconds: float | None = None,
        deadline_seconds: float | None = None,
        timezone: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        settings = get_settings()
        self.db = db
        self.query_timeout_seconds = (
            query_timeout_seconds
            if query_timeout_seconds is not None
            else settings.query_timeout_seconds
        )
        self.deadline_seconds = (
            deadline_seconds
            if deadline_seconds is not None
            else settings.aggregation_deadline_seconds
        )
        self.tz = ZoneInfo(timezone or settings.tenant_timezone)
        self._clock = clock

    async def compute_stats(self, organization: Organization) -> DashboardStats:
        """Run all dashboard queries for the organization and aggregate them.

        Args:
            organization: The resolved tenant

        Returns:
            DashboardStats; queries that failed are listed in failed_queries

        Raises:
            AggregationError: If the organization is missing or the whole
                join overran its deadline
        """
        if not isinstance(organization, Organization):
            raise AggregationError("Dashboard stats need a resolved organization")

        now = self._clock() if self._clock else None
        start, end = today_window(self.tz, now)

        queries: list[tuple[str, Fetch | None]] = [
            ("leads", self.db.list_leads),
            ("properties", self.db.list_properties if organization.is_agent else None),
            ("projects", self.db.list_projects if organization.is_developer else None),
            ("units", self.db.list_units if organization.is_developer else None),
            ("deals", self.db.list_deals),
            ("pending_tasks", self.db.list_pending_tasks),
            (
                "today_appointments",
                lambda: self.db.list_appointments_between(start, end),
            ),
        ]

        failed: set[str] = set()
        coros = [self._run_query(name, fetch, failed) for name, fetch in queries]
        try:
            results = await asyncio.wait_for(
                asyncio.gather(*coros),
                timeout=self.deadline_seconds,
            )
        except TimeoutError as e:
            raise AggregationError(
                f"Dashboard queries exceeded {self.deadline_seconds}s deadline"
            ) from e

        leads, properties, projects, units, deals, tasks, appointments = results
        stats = build_stats(
            organization.organization_type,
            leads=leads,
            properties=properties,
            projects=projects,
            units=units,
            deals=deals,
            pending_tasks=tasks,
            appointments=appointments,
            failed_queries=[name for name, _ in queries if name in failed],
        )

        if stats.is_partial:
            logger.warning(
                f"Dashboard for {organization.organization_id} is partial, "
                f"failed queries: {stats.failed_queries}"
            )
        logger.debug(
            f"Dashboard for {organization.organization_id}: "
            f"{stats.total_leads} leads, {stats.total_deals} deals"
        )
        return stats

    async def _run_query(self, name: str, fetch: Fetch | None, failed: set[str]) -> Rows:
        """Run one query; any failure turns into an empty row set."""
        if fetch is None:
            return []
        try:
            rows = await asyncio.wait_for(fetch(), timeout=self.query_timeout_seconds)
        except Exception as e:
            logger.warning(str(QueryFailure(name, e)))
            failed.add(name)
            return []
        return rows or []
