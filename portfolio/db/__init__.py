"""
Database module - models and engine utilities.

Uses SQLModel over any SQLAlchemy URL (SQLite locally, PostgreSQL in production).
"""

from portfolio.db import models, engine

__all__ = ["models", "engine"]
