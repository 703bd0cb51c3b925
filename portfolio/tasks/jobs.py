"""
Maintenance job definitions.

Each job returns a plain result dict with a `status` of success, skipped
or error so the API, CLI and scripts can report it the same way.
"""
from typing import Any, Optional

from portfolio.services.migrate import migrate_json_to_database, verify_migration
from portfolio.services.resilient import ResilientStore
from portfolio.services.store import StoreError


# === Migration Job ===

def job_migrate_json(store: ResilientStore, verify: bool = True) -> dict[str, Any]:
    """
    Copy the JSON data file into the database.

    Args:
        store: Store with a configured database
        verify: Compare counts afterwards

    Returns:
        Job result dict
    """
    if not store.database_configured:
        return {
            "status": "skipped",
            "message": "DATABASE_URL not configured",
        }
    if not store.fallback.path.exists():
        return {
            "status": "skipped",
            "message": f"Data file {store.fallback.path} not found",
        }

    try:
        migrated = migrate_json_to_database(store)
        result: dict[str, Any] = {
            "status": "success",
            "migrated": migrated,
            "total": sum(migrated.values()),
        }
        if verify:
            result["verification"] = verify_migration(store)
        return result
    except StoreError as e:
        return {
            "status": "error",
            "error": str(e),
        }


# === Verification Job ===

def job_verify_migration(store: ResilientStore) -> dict[str, Any]:
    """
    Compare record counts between the data file and the database.

    Returns:
        Job result dict
    """
    if not store.database_configured:
        return {
            "status": "skipped",
            "message": "DATABASE_URL not configured",
        }

    try:
        verification = verify_migration(store)
        return {
            "status": "success" if verification["match"] else "mismatch",
            **verification,
        }
    except StoreError as e:
        return {
            "status": "error",
            "error": str(e),
        }


def job_status_code(result: dict[str, Any]) -> Optional[int]:
    """HTTP status for a failed job result, or None on success."""
    if result["status"] == "error":
        return 503
    if result["status"] == "skipped":
        return 409
    return None
