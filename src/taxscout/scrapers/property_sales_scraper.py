"""
Property Sales Scraper

Fetches Texas tax sale listings and per-property details from the LGBS
property_sales REST API.
"""
import time
from typing import Callable, Dict, List, Optional

import requests
from pydantic import ValidationError

from config.settings import settings
from src.taxscout.classifiers.vacancy import is_vacant
from src.taxscout.clients.http_client import HttpClient
from src.taxscout.exceptions import TaxScoutError
from src.taxscout.models.property import PropertyDetail, PropertyListing
from src.taxscout.scrapers.pagination import iter_results
from src.taxscout.transformers.address_resolver import UidAddressMap, format_listing_address
from src.taxscout.utils.logger import get_logger

logger = get_logger(__name__)

UNKNOWN_SALE_DATE = "unknown"


class PropertySalesScraper:
    """
    Scraper for the LGBS tax sale listing API.

    All requests are sequential and paced with fixed delays from settings.
    """

    def __init__(
        self,
        client: Optional[HttpClient] = None,
        base_url: Optional[str] = None,
        state: Optional[str] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize the property sales scraper.

        Args:
            client: HTTP client (a cookie-less client is created if omitted)
            base_url: Override the default API URL (for testing)
            state: State filter sent with listing queries
            sleep: Override time.sleep (for testing)
        """
        self.client = client or HttpClient(timeout=settings.http_timeout)
        self.base_url = (base_url or settings.lgbs_api_base_url).rstrip("/")
        self.state = state or settings.lgbs_state
        self.sleep = sleep or time.sleep
        logger.info("property_sales_scraper_initialized", base_url=self.base_url)

    @property
    def listings_url(self) -> str:
        return f"{self.base_url}/property_sales/"

    def fetch_latest_sale_date(self) -> str:
        """
        Sale date of the most recent scheduled auction.

        Returns:
            ISO date string, or "unknown" when unavailable
        """
        params = {
            "limit": 100,
            "ordering": "-sale_date",
            "sale_type": "SALE",
            "status": "Scheduled for Auction",
        }
        try:
            data = self.client.get_json(self.listings_url, params=params)
        except (requests.RequestException, ValueError, TaxScoutError) as e:
            logger.warning("latest_sale_date_failed", error=str(e))
            return UNKNOWN_SALE_DATE

        results = data.get("results") if isinstance(data, dict) else None
        for row in results or []:
            if isinstance(row, dict) and row.get("sale_date"):
                logger.info("latest_sale_date_found", sale_date=row["sale_date"])
                return row["sale_date"]
        return UNKNOWN_SALE_DATE

    def fetch_uid_address_map(self, county: str) -> UidAddressMap:
        """
        Build a UID -> address map for one county from the bulk listing feed.

        Errors are logged and whatever was collected so far is returned.
        """
        uid_map: Dict[str, str] = {}
        try:
            for item in iter_results(
                self.client,
                self.listings_url,
                params={"county": county, "state": self.state},
                page_size=settings.address_map_page_size,
                delay_seconds=settings.address_map_page_delay,
                sleep=self.sleep,
            ):
                if item.get("uid") is not None:
                    uid_map[str(item["uid"])] = format_listing_address(item)
        except (requests.RequestException, ValueError, TaxScoutError) as e:
            logger.warning("uid_address_map_failed", county=county, error=str(e))

        logger.info("uid_address_map_built", county=county, entries=len(uid_map))
        return uid_map

    def fetch_listings(self, county: str) -> List[PropertyListing]:
        """
        Fetch every listing for a county.

        Rows that fail validation are skipped with a warning.

        Raises:
            requests.RequestException: Network or HTTP failure
        """
        listings = []
        validation_errors = 0

        for idx, row in enumerate(iter_results(
            self.client,
            self.listings_url,
            params={"county": county, "state": self.state},
            page_size=settings.listing_page_size,
            delay_seconds=settings.listing_page_delay,
            sleep=self.sleep,
        )):
            try:
                listings.append(PropertyListing.from_api(row))
            except ValidationError as e:
                validation_errors += 1
                logger.warning("listing_validation_failed", county=county, row_index=idx, error=str(e))

        logger.info(
            "listings_fetched",
            county=county,
            total=len(listings),
            validation_errors=validation_errors
        )
        return listings

    def fetch_detail(self, uid: str) -> PropertyDetail:
        """
        Fetch the detail record for one listing.

        Returns:
            PropertyDetail with is_vacant derived; empty on any failure
        """
        try:
            data = self.client.get_json(f"{self.listings_url}{uid}/")
        except (requests.RequestException, ValueError, TaxScoutError) as e:
            logger.warning("detail_fetch_failed", uid=uid, error=str(e))
            return PropertyDetail.empty()

        if settings.detail_fetch_delay:
            self.sleep(settings.detail_fetch_delay)

        if not isinstance(data, dict):
            logger.warning("detail_unexpected_shape", uid=uid, type=type(data).__name__)
            return PropertyDetail.empty()

        legal = data.get("legal_desc_l") or data.get("legal_desc_s") or ""
        try:
            return PropertyDetail.from_api(
                data,
                is_vacant=is_vacant(legal, data.get("prop_address_one") or ""),
            )
        except ValidationError as e:
            logger.warning("detail_validation_failed", uid=uid, error=str(e))
            return PropertyDetail.empty()
