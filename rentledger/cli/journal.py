"""CLI entry point for journal generation and period management.

Usage:
    python -m rentledger.cli.journal init-db
    python -m rentledger.cli.journal add-business --designation REH --name "Rental Estates" --origin 2016-01-01
    python -m rentledger.cli.journal regenerate --business REH --start 2016-02-01 --stop 2016-03-01
    python -m rentledger.cli.journal close --marker 7
    python -m rentledger.cli.journal lock --marker 7
    python -m rentledger.cli.journal markers --business REH

Exit Codes:
    0 - Success
    1 - Failure: error logged; regeneration leaves the database unchanged

Logging:
    LOG_LEVEL (default INFO) to both stdout and LOG_FILE (default logs/journal.log)
"""

import argparse
import logging
import sys
from datetime import date
from typing import Callable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from rentledger.models import Base, Business
from rentledger.services import create_db_engine
from rentledger.services.config import load_config
from rentledger.services.errors import JournalError
from rentledger.services.journal_store import JournalStore
from rentledger.services.logging import setup_logging
from rentledger.services.period_service import JournalPeriodService

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD command line date."""
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date '{value}' (expected YYYY-MM-DD)") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rentledger-journal",
        description="Generate and manage journal records for a rental business.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables")

    add_business = subparsers.add_parser("add-business", help="Register a business and its origin marker")
    add_business.add_argument("--designation", required=True, help="Short business code, e.g. REH")
    add_business.add_argument("--name", default="", help="Display name")
    add_business.add_argument("--origin", type=_parse_date, required=True, help="Origin date YYYY-MM-DD")

    regenerate = subparsers.add_parser("regenerate", help="Rebuild journals for a date range")
    regenerate.add_argument("--business", required=True, help="Business designation")
    regenerate.add_argument("--start", type=_parse_date, required=True, help="First day (inclusive)")
    regenerate.add_argument("--stop", type=_parse_date, required=True, help="End day (exclusive)")
    regenerate.add_argument("--actor", default=None, help="Operator name for the audit log")

    for name, help_text in (("close", "Close an open period marker"), ("lock", "Lock a closed period marker")):
        transition = subparsers.add_parser(name, help=help_text)
        transition.add_argument("--marker", type=int, required=True, help="Journal marker id")
        transition.add_argument("--actor", default=None, help="Operator name for the audit log")

    markers = subparsers.add_parser("markers", help="List period markers of a business")
    markers.add_argument("--business", required=True, help="Business designation")

    return parser


def _require_business(db: Session, designation: str) -> Business:
    business = JournalStore(db).get_business_by_designation(designation)
    if business is None:
        raise JournalError(f"Business with designation {designation} does not exist")
    return business


def run_command(args: argparse.Namespace, db: Session) -> None:
    """Execute one parsed command against an open session."""
    periods = JournalPeriodService(db)

    if args.command == "init-db":
        Base.metadata.create_all(db.get_bind())
        logger.info("Database tables created")

    elif args.command == "add-business":
        business = Business(designation=args.designation, name=args.name)
        db.add(business)
        db.flush()
        # commits the business together with its origin marker
        marker = periods.ensure_origin_marker(business.id, args.origin)
        print(f"business {business.designation} id={business.id} origin_marker={marker.id}")

    elif args.command == "regenerate":
        business = _require_business(db, args.business)
        result = periods.regenerate(business.id, args.start, args.stop, actor=args.actor)
        print(
            f"removed={result.journals_removed} created={result.journals_created} "
            f"skipped={result.skipped} marker={result.marker_id}"
        )

    elif args.command == "close":
        marker = periods.close_marker(args.marker, actor=args.actor)
        print(f"marker {marker.id} {marker.state.value}")

    elif args.command == "lock":
        marker = periods.lock_marker(args.marker, actor=args.actor)
        print(f"marker {marker.id} {marker.state.value}")

    elif args.command == "markers":
        business = _require_business(db, args.business)
        for marker in periods.list_markers(business.id):
            print(f"{marker.id}\t{marker.state.value}\t{marker.start_date}\t{marker.stop_date}")


def main(argv: Sequence[str] | None = None, session_factory: Callable[[], Session] | None = None) -> int:
    """
    Main entry point for the journal CLI.

    Args:
        argv: Command line arguments (default: sys.argv[1:])
        session_factory: Session factory to use instead of one built from DATABASE_URL

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
        setup_logging(config.log_file, config.log_level)

        engine = None
        if session_factory is None:
            engine = create_db_engine(config.database_url)
            session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        db = session_factory()
        try:
            run_command(args, db)
        finally:
            db.close()
            if engine is not None:
                engine.dispose()
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1
    except (JournalError, SQLAlchemyError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
