"""HTTP surface for the dashboard shell."""

from realty_crm.api.deps import Aggregator, Database, Session
from realty_crm.api.routes import router

__all__ = ["Aggregator", "Database", "Session", "router"]
