"""Supabase data access."""

from realty_crm.db.client import DatabaseClient

__all__ = ["DatabaseClient"]
