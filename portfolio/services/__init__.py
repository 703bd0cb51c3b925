"""
Services module - data access and content logic.

The database is preferred; the JSON data file takes over when it is unreachable.
"""

from portfolio.services import store, database_store, json_store, resilient, portfolio, migrate, render

__all__ = ["store", "database_store", "json_store", "resilient", "portfolio", "migrate", "render"]
