"""
County Resolver

Determines which counties to scrape, trying three sources in order:
the sale-counties endpoint, the generic counties endpoint, and finally a scan
of every listing in the state.
"""
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Set, Tuple

import requests

from config.settings import settings
from src.taxscout.clients.http_client import HttpClient
from src.taxscout.exceptions import TaxScoutError
from src.taxscout.scrapers.pagination import iter_results
from src.taxscout.transformers.normalizers import normalize_county_name
from src.taxscout.utils.logger import get_logger

logger = get_logger(__name__)

COUNTY_NAME_KEYS = ("county", "county_name", "name", "sale_county")


class CountyPayloadShape(str, Enum):
    """Shapes the sale-counties endpoint has been seen to return."""

    RESULTS = "results"
    LIST = "list"
    SALE_COUNTIES = "sale_counties"
    UNKNOWN = "unknown"


def detect_county_payload(payload: Any) -> Tuple[CountyPayloadShape, List[Any]]:
    """
    Classify a sale-counties response and return its rows.

    Returns:
        (shape, rows); rows is empty for an unknown shape
    """
    if isinstance(payload, dict) and isinstance(payload.get("results"), list):
        return CountyPayloadShape.RESULTS, payload["results"]
    if isinstance(payload, list):
        return CountyPayloadShape.LIST, payload
    if isinstance(payload, dict) and isinstance(payload.get("sale_counties"), list):
        return CountyPayloadShape.SALE_COUNTIES, payload["sale_counties"]
    return CountyPayloadShape.UNKNOWN, []


def county_name_from_row(row: Any) -> Optional[str]:
    """Canonical county name from a string row or an object row."""
    if not row:
        return None
    if isinstance(row, str):
        return normalize_county_name(row) or None
    if isinstance(row, dict):
        for key in COUNTY_NAME_KEYS:
            if row.get(key):
                return normalize_county_name(str(row[key])) or None
    return None


def filter_counties(names: Iterable[Optional[str]], excluded: Iterable[str]) -> List[str]:
    """De-duplicate, drop blanks and excluded counties, sort."""
    excluded_set = {normalize_county_name(c) for c in excluded}
    return sorted({n for n in names if n and n not in excluded_set})


class CountyResolver:
    """
    Resolves the sorted list of canonical county names for one run.

    Each stage's failure (network error, bad JSON, empty result after
    exclusion) falls through to the next stage.
    """

    def __init__(
        self,
        client: HttpClient,
        base_url: Optional[str] = None,
        state: Optional[str] = None,
        sale_counties_path: Optional[str] = None,
        scan_page_size: Optional[int] = None,
        scan_delay: Optional[float] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize the resolver.

        Args:
            client: HTTP client for the listing API
            base_url: Override the API base URL (for testing)
            state: State filter for the generic endpoints
            sale_counties_path: Path (with query) of the sale-counties endpoint
            scan_page_size: Page size for the listing scan fallback
            scan_delay: Pause between listing scan pages
            sleep: Override time.sleep (for testing)
        """
        self.client = client
        self.base_url = (base_url or settings.lgbs_api_base_url).rstrip("/")
        self.state = state or settings.lgbs_state
        self.sale_counties_path = sale_counties_path or settings.lgbs_sale_counties_path
        self.scan_page_size = scan_page_size or settings.county_scan_page_size
        self.scan_delay = settings.county_scan_page_delay if scan_delay is None else scan_delay
        self.sleep = sleep

    def resolve_counties(self, excluded: Optional[Iterable[str]] = None) -> List[str]:
        """
        Return sorted canonical county names, excluding `excluded`.

        Args:
            excluded: Counties to drop (defaults to settings.metro_counties)

        Returns:
            Sorted list; empty when no source produced counties
        """
        excluded_set: Set[str] = set(settings.metro_counties if excluded is None else excluded)

        stages = (
            ("sale_counties", self._from_sale_counties),
            ("counties", self._from_counties),
            ("listing_scan", self._from_listing_scan),
        )

        for stage_name, stage in stages:
            try:
                names = stage()
            except (requests.RequestException, ValueError, TaxScoutError) as e:
                logger.warning(
                    "county_stage_failed",
                    stage=stage_name,
                    error=str(e),
                    error_type=type(e).__name__
                )
                continue

            counties = filter_counties(names, excluded_set)
            logger.info("county_stage_complete", stage=stage_name, counties=len(counties))
            if counties:
                return counties

        logger.warning("no_counties_resolved", excluded=sorted(excluded_set))
        return []

    def _from_sale_counties(self) -> List[Optional[str]]:
        payload = self.client.get_json(f"{self.base_url}{self.sale_counties_path}")
        shape, rows = detect_county_payload(payload)
        logger.debug("sale_counties_shape_detected", shape=shape.value, rows=len(rows))
        return [county_name_from_row(row) for row in rows]

    def _from_counties(self) -> List[Optional[str]]:
        payload = self.client.get_json(
            f"{self.base_url}/counties/",
            params={"state": self.state, "limit": 1000},
        )
        rows = payload.get("results") if isinstance(payload, dict) else None
        return [
            normalize_county_name(row.get("name")) or None
            for row in rows or []
            if isinstance(row, dict)
        ]

    def _from_listing_scan(self) -> List[Optional[str]]:
        return [
            normalize_county_name(item.get("county")) or None
            for item in iter_results(
                self.client,
                f"{self.base_url}/property_sales/",
                params={"state": self.state},
                page_size=self.scan_page_size,
                delay_seconds=self.scan_delay,
                sleep=self.sleep,
            )
        ]
