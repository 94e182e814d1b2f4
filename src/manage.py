"""Dine-in database management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    from dinein.domain import dinein
    from dinein.utils.db import setup_db

    print("Initializing dinein domain...")
    dinein.init()
    print("Creating dinein database schema...")
    handled = setup_db(dinein)
    print(f"  Schema ready for providers: {', '.join(handled) or 'none'}.")


def drop_database():
    from dinein.domain import dinein
    from dinein.utils.db import drop_db

    print("Initializing dinein domain...")
    dinein.init()
    print("Dropping dinein database schema...")
    handled = drop_db(dinein)
    print(f"  Schema dropped for providers: {', '.join(handled) or 'none'}.")


def main():
    parser = argparse.ArgumentParser(description="Dine-in database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
