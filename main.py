"""
FeedbackPulse - Customer Experience Dashboard

CLI entry point for computing branch review statistics.
"""

import argparse
import logging
import sys

from src.orchestrator import build_pipeline
from src.utils.formatting import REVIEW_TABLE_COLUMNS, render_summary_text, review_table
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="FeedbackPulse - Customer Experience Dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Statistics for every review in an export
  python main.py --input data/reviews.json

  # One client, one month
  python main.py --input data/reviews.json \\
                 --client-id 64f1c2 \\
                 --start-date 2024-06-01 \\
                 --end-date 2024-06-30

  # Demo with synthetic reviews
  python main.py --mock --show-table
        """
    )

    parser.add_argument(
        "--input",
        default=str(settings.DEFAULT_REVIEWS_FILE),
        help=f"Reviews JSON export (default: {settings.DEFAULT_REVIEWS_FILE})"
    )

    parser.add_argument(
        "--client-id",
        help="Only include reviews for this client"
    )

    parser.add_argument(
        "--start-date",
        help="Inclusive start date (YYYY-MM-DD)"
    )

    parser.add_argument(
        "--end-date",
        help="Inclusive end date (YYYY-MM-DD)"
    )

    parser.add_argument(
        "--output-dir",
        default=str(settings.OUTPUT_ROOT),
        help=f"Report directory (default: {settings.OUTPUT_ROOT})"
    )

    parser.add_argument(
        "--mock",
        action="store_true",
        default=settings.USE_MOCK_DATA,
        help="Use generated mock reviews instead of --input"
    )

    parser.add_argument(
        "--show-table",
        action="store_true",
        help="Print the review table"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    return parser


def print_review_table(records) -> None:
    rows = review_table(records)
    print(f"All Reviews ({len(rows)})")
    print(" | ".join(REVIEW_TABLE_COLUMNS))
    for row in rows:
        print(" | ".join(row[column] for column in REVIEW_TABLE_COLUMNS))


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    print("=" * 60)
    print("FeedbackPulse - Customer Experience Dashboard")
    print("=" * 60)
    print(f"Source: {'mock data' if args.mock else args.input}")
    print(f"Client: {args.client_id or 'All Clients'}")
    print(f"From: {args.start_date or '-'}  To: {args.end_date or '-'}")
    print("=" * 60)
    print()

    try:
        pipeline = build_pipeline(
            reviews_path=args.input,
            output_dir=args.output_dir,
            use_mock_data=args.mock
        )

        result = pipeline.run(
            client_id=args.client_id,
            start_date=args.start_date,
            end_date=args.end_date
        )

        print(render_summary_text(result.stats))
        print()

        if args.show_table:
            print_review_table(result.records)
            print()

        print("=" * 60)
        if result.error:
            print(f"⚠️  {result.error}")
        print(f"Report: {result.report_path}")
        print("=" * 60)

        logger.info("FeedbackPulse completed successfully")
        return 0

    except KeyboardInterrupt:
        logger.warning("Run interrupted by user")
        print("\n⚠️  Run interrupted")
        return 1

    except Exception as e:
        logger.error(f"Run failed: {e}", exc_info=True)
        print(f"\n❌ Run failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        return 1


if __name__ == "__main__":
    sys.exit(main())
