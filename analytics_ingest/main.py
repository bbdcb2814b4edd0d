"""
Command Line Entry Point

Runs one ingestion job and exits; meant to be invoked by a scheduler.
Usage:
    analytics-ingest pageviews --start-date 2024-05-01 --end-date 2024-05-01
    analytics-ingest demo --date 2024-05-01
    analytics-ingest demo-history --days 30
    analytics-ingest health
"""

import argparse
import sys
from datetime import date, timedelta
from typing import List, Optional

from analytics_ingest.config import get_settings
from analytics_ingest.config.logging import configure_logging, get_logger
from analytics_ingest.database import (
    PageViewStore,
    check_database_health,
    close_database,
    create_tables,
    init_database,
)
from analytics_ingest.ingestion import PageViewIngestor
from analytics_ingest.reporting import AnalyticsReporter

logger = get_logger(__name__)


def positive_int(value: str) -> int:
    days = int(value)
    if days < 1:
        raise argparse.ArgumentTypeError(f"expected at least 1, got {value}")
    return days


def build_parser() -> argparse.ArgumentParser:
    yesterday = date.today() - timedelta(days=1)

    parser = argparse.ArgumentParser(description="Google Analytics page view ingestion")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing database tables before running",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    pageviews = subparsers.add_parser("pageviews", help="Ingest page views from Google Analytics")
    pageviews.add_argument("--start-date", type=date.fromisoformat, default=yesterday)
    pageviews.add_argument("--end-date", type=date.fromisoformat, default=yesterday)

    demo = subparsers.add_parser("demo", help="Ingest one day of synthetic page views")
    demo.add_argument("--date", type=date.fromisoformat, default=date.today())

    history = subparsers.add_parser("demo-history", help="Seed synthetic page views for past days")
    history.add_argument("--days", type=positive_int, default=30)

    subparsers.add_parser("health", help="Check the database connection")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    settings = get_settings()
    init_database()
    try:
        if args.create_tables:
            create_tables()

        if args.command == "health":
            health = check_database_health()
            logger.info("Database health", **health)
            return 0 if health["status"] == "healthy" else 1

        ingestor = PageViewIngestor(AnalyticsReporter(settings.analytics), PageViewStore())

        if args.command == "pageviews":
            ok = ingestor.ingest_page_views(args.start_date, args.end_date)
        elif args.command == "demo":
            ok = ingestor.ingest_demo_page_views(args.date)
        else:
            ok = bool(ingestor.ingest_demo_history(days=args.days))
    finally:
        close_database()

    logger.info("Ingestion finished", command=args.command, success=ok)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
