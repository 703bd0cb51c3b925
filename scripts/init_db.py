#!/usr/bin/env python3
"""
Database initialization script.

Usage:
    python scripts/init_db.py              # Create tables
    python scripts/init_db.py --reset      # Drop and recreate all tables (DESTRUCTIVE!)
"""
import argparse
import sys

from portfolio.config import get_settings
from portfolio.db.engine import create_db_engine, init_db


def main():
    parser = argparse.ArgumentParser(description="Initialize database")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop all tables and recreate (DESTRUCTIVE!)"
    )

    args = parser.parse_args()

    settings = get_settings()
    if not settings.database_configured:
        print("✗ DATABASE_URL is not set")
        sys.exit(1)

    engine = create_db_engine(settings.DATABASE_URL, settings.DB_CONNECT_TIMEOUT_SECONDS)

    if args.reset:
        print("⚠️  WARNING: This will delete all data!")
        confirm = input("Type 'yes' to confirm: ")

        if confirm.lower() != "yes":
            print("Aborted.")
            return

        print("Dropping all tables...")
        init_db(engine, drop_all=True)
    else:
        print("Creating database tables...")
        init_db(engine, drop_all=False)

    print("✓ Done!")


if __name__ == "__main__":
    main()
