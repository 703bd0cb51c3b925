#!/usr/bin/env python3
"""
One-time copy of the JSON data file into the database.

Existing database rows are replaced by the file contents.

Usage:
    python scripts/migrate_json.py                   # Migrate DATA_FILE
    python scripts/migrate_json.py --file data.json  # Migrate another file
    python scripts/migrate_json.py --verify          # Only compare counts
"""
import argparse
import json
import sys

from portfolio.config import get_settings
from portfolio.services.json_store import JsonFileStore
from portfolio.services.resilient import ResilientStore
from portfolio.tasks.jobs import job_migrate_json, job_verify_migration


def main():
    parser = argparse.ArgumentParser(description="Migrate the JSON data file into the database")
    parser.add_argument("--file", help="Data file to read (defaults to DATA_FILE)")
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Only compare record counts, do not migrate"
    )
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    args = parser.parse_args()

    store = ResilientStore.from_settings(get_settings())
    if args.file:
        store.fallback = JsonFileStore(args.file)

    if args.verify:
        result = job_verify_migration(store)
    else:
        if not args.yes:
            print(f"⚠️  WARNING: database contents will be replaced by {store.fallback.path}")
            confirm = input("Type 'yes' to confirm: ")
            if confirm.lower() != "yes":
                print("Aborted.")
                return
        result = job_migrate_json(store, verify=True)

    print(json.dumps(result, indent=2))

    if result["status"] != "success":
        sys.exit(1)
    print("✓ Done!")


if __name__ == "__main__":
    main()
