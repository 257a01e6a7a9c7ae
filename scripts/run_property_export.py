"""
CLI entry point for the tax sale property export.
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to Python path
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from config.settings import settings
from src.taxscout.pipelines.property_export import PriceFilterPolicy, PropertyExportPipeline
from src.taxscout.utils.logger import bind_job_context, get_logger, setup_logging

logger = get_logger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export low-priced vacant land tax sale listings from non-metro Texas counties.")
    parser.add_argument("--output", default=settings.property_export_csv, help="Destination CSV file.")
    parser.add_argument("--test-limit", type=int, default=settings.test_limit, help="Stop after this many records (0 = no limit).")
    parser.add_argument("--include-metro", action="store_true", help="Do not exclude the metro counties.")
    parser.add_argument("--max-min-bid", type=float, default=settings.max_minimum_bid, help="Skip listings whose minimum bid exceeds this amount.")
    parser.add_argument("--inclusive-cutoff", action="store_true", default=settings.min_bid_cutoff_inclusive, help="Also skip listings whose minimum bid equals the cutoff.")
    parser.add_argument("--max-value", type=float, default=settings.max_adjudged_value, help="Skip listings whose adjudged value exceeds this amount.")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    setup_logging()
    bind_job_context("property_export", test_limit=args.test_limit)

    pipeline = PropertyExportPipeline(
        price_policy=PriceFilterPolicy(
            max_minimum_bid=args.max_min_bid,
            inclusive_cutoff=args.inclusive_cutoff,
            max_value=args.max_value,
        ),
        excluded_counties=[] if args.include_metro else None,
        test_limit=args.test_limit,
        output_path=args.output,
    )

    try:
        summary = pipeline.run()
    except Exception as e:
        logger.exception("fatal_error", error=str(e))
        return 1

    print(
        "\nProperty export complete:\n"
        f"  Counties:      {summary.counties}\n"
        f"  Listings seen: {summary.listings_seen}\n"
        f"  Records:       {summary.records}\n"
        f"  Output:        {summary.output_path or '(none written)'}\n"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
