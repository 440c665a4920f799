#!/usr/bin/env python3
"""
Load a directory seed (accounts, memberships, connections) into SQLite.

Usage:
    python scripts/seed_directory.py --json data/directory.json --db data/directory.db
"""

import argparse
import json
from pathlib import Path
import sys

from relatedfeed.database import init_database, get_session
from relatedfeed.errors import CallerContractError, StorageUnavailable
from relatedfeed.schema import validate_seed
from relatedfeed.storage import load_directory


def seed(json_path: Path, db_path: Path, dry_run: bool = False) -> bool:
    """
    Load a seed file into the directory database.

    Args:
        json_path: Path to seed JSON file
        db_path: Path to SQLite database file
        dry_run: If True, only validate and summarise
    """
    print(f"Loading seed from {json_path}...")
    try:
        with open(json_path, encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as e:
        print(f"Seed is not valid JSON: {e}")
        return False

    errors = validate_seed(data)
    if errors:
        print("Invalid seed:")
        for e in errors:
            print(f" - {e}")
        return False

    accounts = data.get("accounts", [])
    print(
        f"Found {len(accounts)} accounts, {len(data.get('memberships', []))} memberships, "
        f"{len(data.get('connections', []))} connections"
    )

    if dry_run:
        print("\n[DRY RUN] Would load the following accounts:")
        for i, account in enumerate(accounts[:5], 1):
            print(f"  {i}. [{account.get('kind', 'user')}] {account['id']}")
        if len(accounts) > 5:
            print(f"  ... and {len(accounts) - 5} more")
        return True

    print(f"\nInitializing database at {db_path}...")
    init_database(db_path)
    session = get_session(db_path)
    try:
        counts = load_directory(json_path, session)
    except (CallerContractError, StorageUnavailable) as e:
        print(f"Failed to load seed: {e}")
        return False
    finally:
        session.close()

    print("\nSeed complete!")
    for table, count in counts.items():
        print(f"   {table}: {count}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Load a directory seed into SQLite")
    parser.add_argument("--json", type=Path, default=Path("data/directory.json"),
                        help="Path to seed JSON file")
    parser.add_argument("--db", type=Path, default=Path("data/directory.db"),
                        help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                        help="Validate and summarise without writing")

    args = parser.parse_args()

    if not args.json.exists():
        print(f"Seed file not found: {args.json}")
        sys.exit(1)

    if not seed(args.json, args.db, dry_run=args.dry_run):
        sys.exit(1)


if __name__ == "__main__":
    main()
