"""
Tasks module - one-off maintenance jobs.

Jobs can be triggered via:
- The admin API (POST /api/migrate)
- The CLI (python cli.py migrate / verify)
- scripts/migrate_json.py
"""

from portfolio.tasks import jobs

__all__ = ["jobs"]
