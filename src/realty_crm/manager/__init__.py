"""Session, dashboard and signup logic."""

from realty_crm.manager.dashboard_aggregator import DashboardAggregator
from realty_crm.manager.session_resolver import SessionResolver
from realty_crm.manager.signup import SignupFlow

__all__ = ["DashboardAggregator", "SessionResolver", "SignupFlow"]
