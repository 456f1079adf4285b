"""
Command-line report runner for the resale ledger.
Prints the analytics report, a monthly platform report, or the tax-year
summary as JSON.

Usage:
    python report.py [--year YEAR|all]
    python report.py --platform YEAR MONTH
    python report.py --tax-year
"""

import argparse
import json
import logging
import sys
from dotenv import load_dotenv

from config import get_settings
from db_engine import init_db, LedgerStoreUnavailable
from services.reporting import ReportingService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

EXIT_STORE_UNAVAILABLE = 2


def configure_logging():
    """Configure root logging from settings."""
    logging.basicConfig(
        level=get_settings().log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resale ledger analytics report")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--year", default=None,
                       help="Reporting year, or 'all' for the whole history (default: current year)")
    group.add_argument("--platform", nargs=2, type=int, metavar=("YEAR", "MONTH"),
                       help="Vinted / eBay attribution for one month of sales")
    group.add_argument("--tax-year", action="store_true",
                       help="Summary of the current tax year")
    args = parser.parse_args(argv)
    if args.platform and not 1 <= args.platform[1] <= 12:
        parser.error("MONTH must be between 1 and 12")
    return args


def main(argv=None) -> int:
    """
    Run the requested report and print it.

    Returns:
        Process exit code (0 on success, 2 if the ledger is unreachable)
    """
    args = parse_args(argv)
    configure_logging()

    service = ReportingService()
    try:
        init_db()
        if args.platform:
            year, month = args.platform
            payload = service.build_platform_report(year, month)
        elif args.tax_year:
            payload = service.build_tax_year_summary()
        else:
            payload = service.build_report(args.year)
    except LedgerStoreUnavailable as e:
        logger.error(f"Ledger store unavailable: {e}")
        return EXIT_STORE_UNAVAILABLE

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
