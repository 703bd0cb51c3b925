"""
One-time copy of the JSON data file into the database.
"""
import logging
from typing import Any

from portfolio.services.resilient import ResilientStore
from portfolio.services.store import BackendUnavailable


logger = logging.getLogger(__name__)


def migrate_json_to_database(store: ResilientStore) -> dict[str, int]:
    """
    Replace the database contents with the data file.

    Requires a reachable database; raises BackendUnavailable otherwise.

    Returns:
        Per-collection counts written
    """
    data = store.fallback.load()
    logger.info("Migrating %s into the database", store.fallback.path)
    store.run_on_database("replace_all", data)
    counts = store.fallback.counts()
    logger.info("Migration complete: %s", counts)
    return counts


def verify_migration(store: ResilientStore) -> dict[str, Any]:
    """
    Compare per-collection counts between the data file and the database.

    Returns:
        Dict with both count sets, mismatched collections and a `match` flag
    """
    file_counts = store.fallback.counts()
    db_counts = store.run_on_database("counts")
    mismatched = [
        name for name in file_counts
        if file_counts[name] != db_counts.get(name, 0)
    ]
    return {
        "match": not mismatched,
        "file": file_counts,
        "database": db_counts,
        "mismatched": mismatched,
    }


def migration_status(store: ResilientStore) -> dict[str, Any]:
    """Whether a migration is possible right now, with current counts."""
    has_file = store.fallback.path.exists()
    healthy = store.is_database_available(refresh=True)
    try:
        current = store.counts()
    except BackendUnavailable as e:
        logger.warning("Cannot count records: %s", e)
        current = None

    return {
        "databaseConfigured": store.database_configured,
        "databaseHealthy": healthy,
        "hasDataFile": has_file,
        "dataFile": str(store.fallback.path),
        "currentDataStats": current,
        "canMigrate": store.database_configured and healthy and has_file,
    }
