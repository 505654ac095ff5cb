"""Store Reviews management CLI.

Creates and drops the database schema, and repairs store rating fields
that have drifted from the approved reviews they are derived from.

Usage:
    python src/manage.py setup-db                     # Create all tables
    python src/manage.py drop-db                      # Drop all tables
    python src/manage.py reconcile-ratings            # Check every store
    python src/manage.py reconcile-ratings ID [ID...] # Check specific stores
"""

import argparse
import sys


def setup_database():
    """Create the database schema for the reviews domain."""
    from reviews.domain import reviews
    from reviews.utils.db import setup_db

    print("Initializing reviews domain...")
    reviews.init()
    print("Creating reviews database schema...")
    setup_db(reviews)
    print("Done.")


def drop_database():
    """Drop the database schema for the reviews domain."""
    from reviews.domain import reviews
    from reviews.utils.db import drop_db

    print("Initializing reviews domain...")
    reviews.init()
    print("Dropping reviews database schema...")
    drop_db(reviews)
    print("Done.")


def reconcile_ratings(store_ids=None):
    """Verify store ratings and recompute the ones that drifted.

    Runs in the active domain context. Returns the number of repaired stores.
    """
    from reviews.review.aggregation import RatingAggregator

    repaired = RatingAggregator().reconcile(store_ids or None)

    for store_id, stats in repaired.items():
        print(f"  repaired {store_id}: {stats.average} over {stats.total} review(s)")
    print(f"Done. {len(repaired)} store(s) repaired.")
    return len(repaired)


def reconcile_database(store_ids=None):
    """Initialize the reviews domain and reconcile store ratings."""
    from reviews.domain import reviews

    print("Initializing reviews domain...")
    reviews.init()
    with reviews.domain_context():
        return reconcile_ratings(store_ids)


def main():
    parser = argparse.ArgumentParser(description="Store Reviews management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    reconcile_parser = subparsers.add_parser("reconcile-ratings", help="Repair drifted store ratings")
    reconcile_parser.add_argument(
        "store_ids",
        nargs="*",
        help="Store id(s) to check (default: all stores)",
    )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "reconcile-ratings":
        reconcile_database(args.store_ids)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
