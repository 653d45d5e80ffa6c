"""Process-wide collaborators for the HTTP surface."""

import logging
from typing import Annotated

from fastapi import Depends

from realty_crm.config import get_settings
from realty_crm.db.client import DatabaseClient
from realty_crm.manager.dashboard_aggregator import DashboardAggregator
from realty_crm.manager.session_resolver import SessionResolver

logger = logging.getLogger(__name__)

_db_client: DatabaseClient | None = None
_resolver: SessionResolver | None = None


async def get_db_client() -> DatabaseClient:
    """Get or create the database client instance."""
    global _db_client
    if _db_client is None:
        _db_client = await DatabaseClient.connect()
    return _db_client


async def get_session_resolver(
    db: Annotated[DatabaseClient, Depends(get_db_client)],
) -> SessionResolver:
    """Get the single session resolver, starting it on first use."""
    global _resolver
    if _resolver is None:
        _resolver = SessionResolver(db, login_route=get_settings().login_route)
        await _resolver.start()
        logger.info(f"Session resolved: authenticated={_resolver.state.is_authenticated}")
    return _resolver


def get_aggregator(
    db: Annotated[DatabaseClient, Depends(get_db_client)],
) -> DashboardAggregator:
    return DashboardAggregator(db)


async def close_session() -> None:
    """Tear down the resolver and forget the client."""
    global _resolver, _db_client
    if _resolver is not None:
        await _resolver.close()
    _resolver = None
    _db_client = None


# Type aliases for dependency injection
Database = Annotated[DatabaseClient, Depends(get_db_client)]
Session = Annotated[SessionResolver, Depends(get_session_resolver)]
Aggregator = Annotated[DashboardAggregator, Depends(get_aggregator)]
