"""
Lien Enrichment Pipeline

Reads the property export CSV, searches the county clerk records for each
row's owner/case name and appends a lien summary to every row.
"""
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import requests

from config.settings import settings
from src.taxscout.classifiers.lien_extractor import extract_liens
from src.taxscout.exceptions import LienSearchError, RateLimitedError, TlsTrustError
from src.taxscout.exporters.csv_sink import read_csv_rows, write_csv
from src.taxscout.models.lien import LIEN_COLUMNS, LienSummary
from src.taxscout.scrapers.lien_search_scraper import LienSearchScraper
from src.taxscout.utils.logger import get_logger
from src.taxscout.utils.retry import retry_call

logger = get_logger(__name__)

RETRYABLE_ERRORS = (requests.RequestException, LienSearchError, RateLimitedError)


def row_search_key(row: Dict[str, str]) -> Tuple[str, str]:
    """County and search name for a CSV row; either may be empty."""
    county = (row.get("County") or row.get("county") or "").strip()
    name = (row.get("Name") or row.get("case_style") or "").strip()
    return county, name


def blank_lien_fields(error: str) -> Dict[str, str]:
    fields = {column: "" for column in LIEN_COLUMNS}
    fields["error"] = error
    return fields


@dataclass
class EnrichmentSummary:
    rows_read: int = 0
    rows_written: int = 0
    skipped_missing: int = 0
    searched: int = 0
    with_liens: int = 0
    errors: int = 0


class LienEnrichmentPipeline:
    """
    Orchestrates one lien enrichment run.

    Rows are searched one at a time with a fixed pause between requests.
    """

    def __init__(
        self,
        scraper: Optional[LienSearchScraper] = None,
        input_path: Optional[str] = None,
        output_path: Optional[str] = None,
        test_limit: Optional[int] = None,
        request_delay: Optional[float] = None,
        max_retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            scraper: Lien search scraper (built from settings if omitted)
            input_path: Property export CSV to read
            output_path: Enriched CSV destination
            test_limit: Process at most this many rows (0 = no limit)
            request_delay: Pause between rows in seconds
            max_retries: Retries per row after the first attempt
            base_delay: Backoff base in seconds
            sleep: Override time.sleep (for testing)
        """
        self.sleep = sleep or time.sleep
        self.scraper = scraper or LienSearchScraper(sleep=self.sleep)
        self.input_path = input_path or settings.property_export_csv
        self.output_path = output_path or settings.lien_enrichment_csv
        self.test_limit = settings.test_limit if test_limit is None else test_limit
        self.request_delay = settings.lien_request_delay if request_delay is None else request_delay
        self.max_retries = settings.lien_max_retries if max_retries is None else max_retries
        self.base_delay = settings.lien_retry_base_delay if base_delay is None else base_delay

        logger.info(
            "lien_enrichment_pipeline_initialized",
            input_path=self.input_path,
            output_path=self.output_path,
            test_limit=self.test_limit or "none"
        )

    def load_rows(self, summary: EnrichmentSummary) -> List[Dict[str, str]]:
        """Input rows that carry both a county and a name, capped at test_limit."""
        rows = read_csv_rows(self.input_path)
        summary.rows_read = len(rows)

        usable = []
        for idx, row in enumerate(rows):
            county, name = row_search_key(row)
            if not county or not name:
                summary.skipped_missing += 1
                logger.warning("row_missing_county_or_name", row_index=idx, uid=row.get("uid", ""))
                continue
            usable.append(row)

        if self.test_limit:
            usable = usable[:self.test_limit]
        return usable

    def enrich_row(self, row: Dict[str, str], summary: EnrichmentSummary) -> Dict[str, str]:
        """
        Search one row and return it with the lien columns appended.

        Raises:
            TlsTrustError: Certificate failure; not recoverable per row
        """
        county, name = row_search_key(row)
        summary.searched += 1

        try:
            payload = retry_call(
                self.scraper.search,
                county,
                name,
                max_retries=self.max_retries,
                base_delay=self.base_delay,
                retry_on=RETRYABLE_ERRORS,
                give_up_on=(TlsTrustError,),
                sleep=self.sleep,
            )
        except RETRYABLE_ERRORS as e:
            summary.errors += 1
            logger.error("lien_search_failed", county=county, name=name, error=str(e))
            return {**row, **blank_lien_fields(str(e))}
        except TlsTrustError:
            raise
        except Exception as e:
            summary.errors += 1
            logger.error(
                "lien_search_unexpected_error",
                county=county,
                name=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return {**row, **blank_lien_fields(str(e))}

        lien_summary: LienSummary = extract_liens(payload, name)
        if lien_summary.lien_present:
            summary.with_liens += 1

        logger.info(
            "row_enriched",
            county=county,
            name=name,
            lien_present=lien_summary.lien_present,
            lien_count=lien_summary.lien_count
        )
        return {**row, **lien_summary.to_row()}

    def run(self) -> EnrichmentSummary:
        """
        Execute the enrichment.

        Returns:
            EnrichmentSummary with row counters

        Raises:
            FileNotFoundError: Input CSV is missing
            TlsTrustError: Lien site certificate cannot be trusted
        """
        summary = EnrichmentSummary()
        rows = self.load_rows(summary)
        logger.info("rows_to_process", total=len(rows), skipped=summary.skipped_missing)

        if not rows:
            logger.warning("no_rows_to_enrich")
            return summary

        input_columns: List[str] = list(rows[0].keys())
        columns = input_columns + [c for c in LIEN_COLUMNS if c not in input_columns]

        enriched = []
        for idx, row in enumerate(rows, 1):
            logger.info("processing_row", row=idx, total=len(rows))
            enriched.append(self.enrich_row(row, summary))
            if idx < len(rows) and self.request_delay:
                self.sleep(self.request_delay)

        summary.rows_written = write_csv(enriched, self.output_path, columns)
        logger.info(
            "lien_enrichment_complete",
            rows=summary.rows_written,
            with_liens=summary.with_liens,
            errors=summary.errors,
            path=self.output_path
        )
        return summary


def main() -> int:
    """Run the lien enrichment with settings from the environment."""
    from src.taxscout.utils.logger import bind_job_context, setup_logging

    setup_logging()
    bind_job_context("lien_enrichment")
    logger.info("starting_lien_enrichment")

    try:
        summary = LienEnrichmentPipeline().run()
    except Exception as e:
        logger.exception("fatal_error", error=str(e))
        return 1

    logger.info("main_execution_complete", rows=summary.rows_written)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
