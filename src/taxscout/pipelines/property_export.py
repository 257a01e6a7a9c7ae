"""
Property Export Pipeline

Collects low-priced vacant-land tax sale listings across non-metro Texas
counties and writes them to CSV, cheapest first.

Steps:
1. Resolve counties (metro counties excluded)
2. Per county: build the UID -> address map, fetch listings
3. Per listing: skip cancelled / over-priced, fetch detail, resolve address,
   keep only vacant land
4. Sort by minimum bid and write the CSV
"""
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

import requests
from pydantic import ValidationError

from config.settings import settings
from src.taxscout.classifiers.vacancy import detect_vacancy
from src.taxscout.exceptions import TaxScoutError
from src.taxscout.exporters.csv_sink import write_csv
from src.taxscout.models.property import (
    PROPERTY_EXPORT_COLUMNS,
    AddressSource,
    OutputRecord,
    PropertyListing,
)
from src.taxscout.scrapers.county_resolver import CountyResolver
from src.taxscout.scrapers.property_sales_scraper import PropertySalesScraper
from src.taxscout.transformers.address_resolver import UidAddressMap, resolve_address
from src.taxscout.transformers.normalizers import format_sale_date, parse_amount
from src.taxscout.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class PriceFilterPolicy:
    """
    Price thresholds a listing must pass.

    Attributes:
        max_minimum_bid: Minimum-bid cutoff (None disables the check)
        inclusive_cutoff: Reject bids equal to the cutoff as well
        max_value: Adjudged value cap (None disables the check)
    """
    max_minimum_bid: Optional[float] = 5000.0
    inclusive_cutoff: bool = False
    max_value: Optional[float] = None

    @classmethod
    def from_settings(cls) -> "PriceFilterPolicy":
        return cls(
            max_minimum_bid=settings.max_minimum_bid,
            inclusive_cutoff=settings.min_bid_cutoff_inclusive,
            max_value=settings.max_adjudged_value,
        )

    def rejection_reason(self, listing: PropertyListing) -> Optional[str]:
        """Why the listing fails the policy, or None when it passes."""
        if self.max_minimum_bid is not None:
            bid = parse_amount(listing.minimum_bid)
            too_high = bid >= self.max_minimum_bid if self.inclusive_cutoff else bid > self.max_minimum_bid
            if too_high:
                return "minimum_bid"

        if self.max_value is not None and parse_amount(listing.value) > self.max_value:
            return "value"

        return None


@dataclass
class ExportSummary:
    """Per-run counters logged at the end of the export."""
    counties: int = 0
    listings_seen: int = 0
    records: int = 0
    skipped_cancelled: int = 0
    skipped_price: int = 0
    skipped_non_vacant: int = 0
    failed_counties: List[str] = field(default_factory=list)
    address_sources: Counter = field(default_factory=Counter)
    output_path: Optional[str] = None


def sort_by_min_bid(records: Iterable[OutputRecord]) -> List[OutputRecord]:
    """Ascending numeric minimum bid; non-numeric or missing bids count as 0."""
    return sorted(records, key=lambda r: parse_amount(r.min_bid))


class PropertyExportPipeline:
    """
    Orchestrates one property export run.

    Strictly sequential: one county, one listing, one request at a time.
    """

    def __init__(
        self,
        scraper: Optional[PropertySalesScraper] = None,
        resolver: Optional[CountyResolver] = None,
        price_policy: Optional[PriceFilterPolicy] = None,
        excluded_counties: Optional[Iterable[str]] = None,
        test_limit: Optional[int] = None,
        output_path: Optional[str] = None,
        item_delay: Optional[float] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            scraper: Listing API scraper
            resolver: County resolver (shares the scraper's client by default)
            price_policy: Price thresholds (defaults from settings)
            excluded_counties: Counties to skip (defaults to metro counties)
            test_limit: Stop after this many records (0 = no limit)
            output_path: CSV destination
            item_delay: Pause after each kept listing
            sleep: Override time.sleep (for testing)
        """
        self.sleep = sleep or time.sleep
        self.scraper = scraper or PropertySalesScraper(sleep=self.sleep)
        self.resolver = resolver or CountyResolver(self.scraper.client, sleep=self.sleep)
        self.price_policy = price_policy or PriceFilterPolicy.from_settings()
        self.excluded_counties = list(
            settings.metro_counties if excluded_counties is None else excluded_counties
        )
        self.test_limit = settings.test_limit if test_limit is None else test_limit
        self.output_path = output_path or settings.property_export_csv
        self.item_delay = settings.item_delay if item_delay is None else item_delay
        self.address_maps: Dict[str, UidAddressMap] = {}

        logger.info(
            "property_export_pipeline_initialized",
            excluded_counties=self.excluded_counties,
            test_limit=self.test_limit or "none",
            price_policy=self.price_policy
        )

    def _limit_reached(self, records: List[OutputRecord]) -> bool:
        return bool(self.test_limit) and len(records) >= self.test_limit

    def run(self) -> ExportSummary:
        """
        Execute the export.

        Returns:
            ExportSummary with counters; output_path is None when nothing
            was written
        """
        summary = ExportSummary()

        latest_sale_date = self.scraper.fetch_latest_sale_date()
        counties = self.resolver.resolve_counties(self.excluded_counties)
        summary.counties = len(counties)

        if not counties:
            logger.warning("no_counties_available_exiting")
            return summary

        logger.info("processing_counties", total=len(counties))
        records: List[OutputRecord] = []

        for county in counties:
            try:
                self.process_county(county, latest_sale_date, records, summary)
            except (requests.RequestException, ValueError, TaxScoutError) as e:
                summary.failed_counties.append(county)
                logger.error(
                    "county_skipped",
                    county=county,
                    error=str(e),
                    error_type=type(e).__name__
                )

            if self._limit_reached(records):
                logger.info("test_limit_reached", limit=self.test_limit)
                break

        summary.records = len(records)
        logger.info(
            "address_source_totals",
            **{source.value: summary.address_sources[source.value] for source in AddressSource}
        )

        if not records:
            logger.warning("no_records_collected")
            return summary

        write_csv((r.to_row() for r in sort_by_min_bid(records)), self.output_path, PROPERTY_EXPORT_COLUMNS)
        summary.output_path = self.output_path
        logger.info(
            "property_export_complete",
            records=len(records),
            path=self.output_path,
            skipped_cancelled=summary.skipped_cancelled,
            skipped_price=summary.skipped_price,
            skipped_non_vacant=summary.skipped_non_vacant,
            failed_counties=len(summary.failed_counties)
        )
        return summary

    def process_county(
        self,
        county: str,
        latest_sale_date: str,
        records: List[OutputRecord],
        summary: ExportSummary,
    ) -> None:
        """
        Append the kept records for one county to `records`.

        Raises:
            requests.RequestException: Listing fetch failed
        """
        if county not in self.address_maps:
            self.address_maps[county] = self.scraper.fetch_uid_address_map(county)
        uid_map = self.address_maps[county]

        listings = self.scraper.fetch_listings(county)
        summary.listings_seen += len(listings)
        county_sources: Counter = Counter()

        for listing in listings:
            record = self.build_record(listing, county, uid_map, latest_sale_date, summary)
            if record is None:
                continue

            records.append(record)
            county_sources[record.address_source.value] += 1

            if self.item_delay:
                self.sleep(self.item_delay)
            if self._limit_reached(records):
                break

        summary.address_sources.update(county_sources)
        logger.info(
            "county_complete",
            county=county,
            listings=len(listings),
            kept=sum(county_sources.values()),
            **{source.value: county_sources[source.value] for source in AddressSource}
        )

    def build_record(
        self,
        listing: PropertyListing,
        county: str,
        uid_map: UidAddressMap,
        latest_sale_date: str,
        summary: ExportSummary,
    ) -> Optional[OutputRecord]:
        """
        Filter, enrich and classify one listing.

        Returns:
            OutputRecord, or None when the listing is skipped
        """
        if listing.is_cancelled():
            summary.skipped_cancelled += 1
            logger.debug("listing_skipped_cancelled", county=county, uid=listing.uid)
            return None

        reason = self.price_policy.rejection_reason(listing)
        if reason:
            summary.skipped_price += 1
            logger.debug(
                "listing_skipped_price",
                county=county,
                uid=listing.uid,
                reason=reason,
                minimum_bid=listing.minimum_bid,
                value=listing.value
            )
            return None

        detail = self.scraper.fetch_detail(listing.uid)
        address, source = resolve_address(listing.uid, uid_map, detail, listing, county)

        match = detect_vacancy(detail.legal_description, listing.sale_notes)
        if match is None:
            summary.skipped_non_vacant += 1
            logger.debug("listing_skipped_non_vacant", county=county, uid=listing.uid)
            return None

        try:
            return OutputRecord(
                uid=listing.uid or "",
                address=address,
                address_source=source,
                county=county,
                sale_date=format_sale_date(listing.sale_date or detail.sale_date or latest_sale_date),
                adjudged_value=listing.value or "",
                min_bid=listing.minimum_bid or "",
                status=listing.status or "",
                sale_type=listing.sale_type or "",
                cause_number=listing.cause_number or "",
                case_style=detail.case_style or "",
                legal_description=detail.legal_description,
                coordinates=detail.coordinates_json(),
                sale_notes=listing.sale_notes or "",
                vacant_keyword=match.keyword,
                vacant_source=match.source,
            )
        except ValidationError as e:
            logger.warning("output_record_invalid", county=county, uid=listing.uid, error=str(e))
            return None


def main() -> int:
    """Run the property export with settings from the environment."""
    from src.taxscout.utils.logger import bind_job_context, setup_logging

    setup_logging()
    bind_job_context("property_export")
    logger.info("starting_property_export")

    try:
        summary = PropertyExportPipeline().run()
    except Exception as e:
        logger.exception("fatal_error", error=str(e))
        return 1

    logger.info("main_execution_complete", records=summary.records, path=summary.output_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
