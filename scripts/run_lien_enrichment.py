"""
CLI entry point for enriching the property export with county clerk lien data.
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to Python path
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from config.settings import settings
from src.taxscout.pipelines.lien_enrichment import LienEnrichmentPipeline
from src.taxscout.scrapers.lien_search_scraper import LienSearchScraper
from src.taxscout.utils.logger import bind_job_context, get_logger, setup_logging

logger = get_logger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Append lien summaries from TexasFile searches to the property export.")
    parser.add_argument("--input", default=settings.property_export_csv, help="Property export CSV produced by run_property_export.py.")
    parser.add_argument("--output", default=settings.lien_enrichment_csv, help="Destination CSV file.")
    parser.add_argument("--test-limit", type=int, default=settings.test_limit, help="Process at most this many rows (0 = no limit).")
    parser.add_argument("--dump-json", action="store_true", default=settings.dump_json, help="Write landing pages and search responses to the debug directory.")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    setup_logging()
    bind_job_context("lien_enrichment", test_limit=args.test_limit)

    if not Path(args.input).exists():
        logger.error("input_not_found", path=args.input)
        return 1

    try:
        pipeline = LienEnrichmentPipeline(
            scraper=LienSearchScraper(dump_json=args.dump_json),
            input_path=args.input,
            output_path=args.output,
            test_limit=args.test_limit,
        )
        summary = pipeline.run()
    except Exception as e:
        logger.exception("fatal_error", error=str(e))
        return 1

    print(
        "\nLien enrichment complete:\n"
        f"  Rows read:    {summary.rows_read}\n"
        f"  Rows written: {summary.rows_written}\n"
        f"  With liens:   {summary.with_liens}\n"
        f"  Errors:       {summary.errors}\n"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
