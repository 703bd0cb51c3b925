#!/usr/bin/env python3
"""
Portfolio CLI - Command-line interface for common operations.

Usage:
    python cli.py init-db              # Create database tables
    python cli.py reset-db             # Drop and recreate tables (DESTRUCTIVE!)
    python cli.py health               # Check data layer health
    python cli.py stats                # Show record counts
    python cli.py migrate              # Copy the JSON data file into the database
    python cli.py verify               # Compare file and database counts
    python cli.py serve [port]         # Run the web server
"""
import sys
from typing import Any

from portfolio.config import get_settings
from portfolio.db.engine import init_db, check_db_health
from portfolio.deps import get_store
from portfolio.tasks.jobs import job_migrate_json, job_verify_migration


def print_header(text: str):
    """Print formatted header."""
    print(f"\n{'=' * 60}")
    print(f"  {text}")
    print(f"{'=' * 60}\n")


def print_status(key: str, value: Any, indent: int = 0):
    """Print formatted status line."""
    spaces = "  " * indent
    print(f"{spaces}{key:30s}: {value}")


def print_counts(counts: dict[str, int], indent: int = 1):
    print_status("Profiles", counts.get("profiles", 0), indent)
    print_status("Links", counts.get("links", 0), indent)
    print_status("Notes", counts.get("notes", 0), indent)
    print_status("Learning Items", counts.get("learning", 0), indent)


def cmd_init_db(reset: bool = False):
    """Initialize or reset database."""
    print_header("Database Initialization")

    store = get_store()
    if store.primary is None:
        print("✗ DATABASE_URL is not set, nothing to initialize")
        sys.exit(1)

    if reset:
        print("⚠️  WARNING: This will delete all data!")
        confirm = input("Type 'yes' to confirm: ")
        if confirm.lower() != "yes":
            print("Aborted.")
            return

    init_db(store.primary.engine, drop_all=reset)
    print("✓ Database initialized successfully")


def cmd_health():
    """Check data layer health."""
    print_header("System Health Check")

    settings = get_settings()
    store = get_store()

    print("Configuration:")
    print_status("Database URL", "✓ Set" if settings.database_configured else "✗ Not set (JSON only)", 1)
    print_status("Data File", settings.DATA_FILE, 1)
    print_status("Admin Credentials", "✓ Set" if settings.admin_configured else "✗ Not set", 1)
    print_status("Secret Key", "✓ Set" if settings.SECRET_KEY else "✗ Not set (using admin password)", 1)

    print("\nDatabase:")
    if store.primary is None:
        print_status("Status", "✗ Not configured", 1)
    else:
        db_health = check_db_health(store.primary.engine)
        if db_health.get("status") == "healthy":
            print_status("Status", "✓ Healthy", 1)
            print_counts(db_health.get("counts", {}))
        else:
            print_status("Status", f"✗ Unhealthy: {db_health.get('error')}", 1)

    print("\nData File:")
    health = store.check_health(detailed=False)
    if store.fallback.path.exists():
        print_counts(store.fallback.counts())
    else:
        print_status("Status", "✗ Not found", 1)

    print()
    print_status("Serving From", health.backend)
    print_status("Overall", health.status)
    print()


def cmd_stats():
    """Show record counts of the active backend."""
    print_header("Portfolio Statistics")

    store = get_store()
    print_status("Backend", store.mode)
    print()
    print("Content:")
    counts = store.counts()
    print_counts(counts)
    print_status("Total Records", sum(counts.values()), 1)
    print()


def cmd_migrate():
    """Copy the JSON data file into the database."""
    print_header("Migrating JSON Data File")

    store = get_store()
    print(f"Source: {store.fallback.path}\n")

    result = job_migrate_json(store, verify=True)

    if result["status"] == "success":
        print("✓ Migration completed successfully\n")
        print_counts(result["migrated"], indent=0)
        verification = result.get("verification", {})
        if verification.get("match"):
            print("\n✓ Counts verified")
        else:
            print(f"\n⚠️  Count mismatch: {', '.join(verification.get('mismatched', []))}")
    elif result["status"] == "skipped":
        print(f"⚠️  Skipped: {result['message']}")
    else:
        print(f"✗ Migration failed: {result.get('error')}")
        sys.exit(1)

    print()


def cmd_verify():
    """Compare file and database counts."""
    print_header("Verifying Migration")

    result = job_verify_migration(get_store())

    if result["status"] in ("success", "mismatch"):
        print("Data File:")
        print_counts(result["file"])
        print("\nDatabase:")
        print_counts(result["database"])
        print()
        if result["match"]:
            print("✓ All collections match")
        else:
            print(f"✗ Mismatched: {', '.join(result['mismatched'])}")
            sys.exit(1)
    elif result["status"] == "skipped":
        print(f"⚠️  Skipped: {result['message']}")
    else:
        print(f"✗ Verification failed: {result.get('error')}")
        sys.exit(1)

    print()


def cmd_serve(port: int = 8000):
    """Run the web server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("portfolio.main:app", host="0.0.0.0", port=port, log_level=settings.LOG_LEVEL.lower())


def print_help():
    """Print help message."""
    print("""
Portfolio CLI

Usage:
    python cli.py <command> [options]

Commands:
    init-db              Create database tables
    reset-db             Drop and recreate tables (DESTRUCTIVE!)
    health               Check data layer health
    stats                Show record counts
    migrate              Copy the JSON data file into the database
    verify               Compare data file and database counts
    serve [port]         Run the web server (default port 8000)
    help                 Show this help message

Examples:
    python cli.py init-db
    python cli.py health
    python cli.py migrate
    python cli.py serve 8080
""")


def main():
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print_help()
        return

    command = sys.argv[1].lower()

    try:
        if command == "init-db":
            cmd_init_db(reset=False)
        elif command == "reset-db":
            cmd_init_db(reset=True)
        elif command == "health":
            cmd_health()
        elif command == "stats":
            cmd_stats()
        elif command == "migrate":
            cmd_migrate()
        elif command == "verify":
            cmd_verify()
        elif command == "serve":
            port = int(sys.argv[2]) if len(sys.argv) > 2 else 8000
            cmd_serve(port)
        elif command == "help":
            print_help()
        else:
            print(f"Unknown command: {command}")
            print_help()
            sys.exit(1)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        print(f"\n✗ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
