#!/usr/bin/env python3
"""
Generate travel times for every pair of active cities that has none.

Conflict validation does not check travel between two cities with no stored
travel time. This script lists those pairs and fills them with a default
travel time so every pair is constrained.

Usage:
    python -m backend.src.scripts.generate_missing_distances [--hours H] [--dry-run] [--yes]

Options:
    --hours     Travel time in hours for generated pairs
                (default: DEFAULT_MISSING_DISTANCE_HOURS, 5.0)
    --dry-run   Only list missing pairs, create nothing
    --yes, -y   Do not ask for confirmation
    --help      Show this help message

Examples:
    # See which pairs are missing
    python -m backend.src.scripts.generate_missing_distances --dry-run

    # Fill them with 6 hours without prompting
    python -m backend.src.scripts.generate_missing_distances --hours 6 --yes
"""

import argparse
import signal
import sys
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional, Tuple

AUTO_GENERATED_NOTE = "Auto-generated with default travel time"


def signal_handler(signum, frame):
    """Handle CTRL+C gracefully."""
    print("\n\nOperation interrupted by user.")
    sys.exit(130)


def _hours(value: str) -> Decimal:
    try:
        hours = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"Invalid number of hours: {value}")
    if hours < 0 or hours > Decimal("999.99"):
        raise argparse.ArgumentTypeError("Hours must be between 0 and 999.99")
    return hours


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Generate default travel times for missing city pairs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --dry-run
  %(prog)s --hours 6 --yes
        """
    )
    parser.add_argument(
        "--hours",
        type=_hours,
        default=None,
        help="Travel time in hours for generated pairs (default from settings)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List missing pairs without creating anything",
    )
    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Do not ask for confirmation",
    )
    return parser.parse_args(argv)


def generate_missing_distances(
    db,
    hours: Decimal,
    dry_run: bool = False,
    confirm: Optional[Callable[[str], bool]] = None,
) -> Tuple[int, int]:
    """
    List missing pairs and create them.

    Args:
        db: SQLAlchemy session
        hours: Travel time for the generated edges
        dry_run: Only list the pairs
        confirm: Called with a prompt before writing; False aborts

    Returns:
        (number of missing pairs, number of edges created)
    """
    from backend.src.services.city_distance_service import CityDistanceService
    from backend.src.services.city_service import CityService
    from backend.src.utils.logging_config import get_logger

    logger = get_logger("scripts")

    pairs = CityService(db).missing_distances()
    if not pairs:
        print("All active city pairs have a travel time.")
        return 0, 0

    print(f"Found {len(pairs)} missing city pair(s):")
    for city_a, city_b in pairs:
        print(f"  {city_a.name} <-> {city_b.name}")

    if dry_run:
        print(f"\n[DRY RUN] Would create {len(pairs)} distance(s) of {hours} hours.")
        print("No changes made.")
        return len(pairs), 0

    if confirm is not None and not confirm(
        f"\nCreate {len(pairs)} distance(s) with {hours} hours? [y/N] "
    ):
        print("Aborted. No changes made.")
        return len(pairs), 0

    created = CityDistanceService(db).fill_missing(
        [(city_a.id, city_b.id) for city_a, city_b in pairs],
        travel_time_hours=hours,
        notes=AUTO_GENERATED_NOTE,
    )
    logger.info(
        f"Generated {len(created)} missing distance(s)",
        extra={"created_count": len(created), "hours": str(hours)},
    )
    print(f"\nCreated {len(created)} distance(s).")
    return len(pairs), len(created)


def _ask(prompt: str) -> bool:
    return input(prompt).strip().lower() in ("y", "yes")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    # Set up signal handler for graceful shutdown
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    args = parse_args(argv)

    # Import here to avoid loading database during argument parsing
    from backend.src.config.settings import get_settings
    from backend.src.db.database import SessionLocal

    hours = args.hours
    if hours is None:
        hours = Decimal(str(get_settings().default_missing_distance_hours))

    print("=" * 50)
    print("Broadcast Scheduler: Missing Distance Generator")
    print("=" * 50)

    db = SessionLocal()
    try:
        generate_missing_distances(
            db,
            hours=hours,
            dry_run=args.dry_run,
            confirm=None if args.yes else _ask,
        )
        return 0
    except Exception as e:
        print(f"\n[ERROR] Unexpected error: {e}")
        db.rollback()
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
