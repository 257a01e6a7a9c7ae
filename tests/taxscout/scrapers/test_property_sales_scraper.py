"""
Unit tests for property_sales_scraper module
"""
import pytest
import requests
from unittest.mock import Mock

from src.taxscout.models.property import PropertyDetail, PropertyListing
from src.taxscout.scrapers.property_sales_scraper import PropertySalesScraper

BASE = "https://example.com/api"


def make_scraper(client):
    return PropertySalesScraper(client=client, base_url=BASE, state="TX", sleep=Mock())


class TestPropertySalesScraper:
    """Tests for PropertySalesScraper class"""

    def test_scraper_initialization(self):
        """Test that scraper initializes with its own client"""
        scraper = PropertySalesScraper()
        assert scraper.base_url is not None
        assert scraper.client is not None

    def test_scraper_initialization_with_custom_url(self):
        scraper = make_scraper(Mock())
        assert scraper.listings_url == f"{BASE}/property_sales/"

    def test_fetch_latest_sale_date(self):
        client = Mock()
        client.get_json.return_value = {"results": [{"uid": 1}, {"sale_date": "2024-12-03"}]}

        assert make_scraper(client).fetch_latest_sale_date() == "2024-12-03"
        params = client.get_json.call_args[1]["params"]
        assert params["ordering"] == "-sale_date"
        assert params["status"] == "Scheduled for Auction"

    def test_fetch_latest_sale_date_error(self):
        client = Mock()
        client.get_json.side_effect = requests.ConnectionError("down")

        assert make_scraper(client).fetch_latest_sale_date() == "unknown"

    def test_fetch_uid_address_map(self):
        client = Mock()
        client.get_json.return_value = {
            "results": [
                {"uid": 1, "prop_address_one": "1 OAK", "prop_city": "PARIS", "prop_zipcode": 75460},
                {"uid": "2"},
                {"prop_address_one": "NO UID"},
            ],
            "next": None,
        }

        uid_map = make_scraper(client).fetch_uid_address_map("LAMAR COUNTY")

        assert uid_map == {"1": "1 OAK, PARIS, 75460", "2": ""}
        assert client.get_json.call_args[1]["params"]["county"] == "LAMAR COUNTY"

    def test_fetch_uid_address_map_partial_on_error(self):
        client = Mock()
        client.get_json.side_effect = [
            {"results": [{"uid": 1, "prop_address_one": "1 OAK"}], "next": "more"},
            requests.Timeout("slow"),
        ]

        uid_map = make_scraper(client).fetch_uid_address_map("LAMAR COUNTY")

        assert uid_map == {"1": "1 OAK"}

    def test_fetch_listings(self):
        client = Mock()
        client.get_json.return_value = {
            "results": [
                {"uid": 10, "status": "Scheduled for Auction", "minimum_bid": 1200, "cause_nbr": "C-1"},
                {"uid": 11, "geometry": "not-a-dict"},
            ],
            "next": None,
        }

        listings = make_scraper(client).fetch_listings("LAMAR COUNTY")

        assert len(listings) == 2
        assert isinstance(listings[0], PropertyListing)
        assert listings[0].uid == "10"
        assert listings[0].minimum_bid == "1200"
        assert listings[0].cause_number == "C-1"
        assert listings[1].geometry is None

    def test_fetch_listings_skips_invalid_rows(self):
        client = Mock()
        client.get_json.return_value = {
            "results": [{"uid": 10}, {"uid": 11, "geometry": {"type": "Point"}, "status": ["bad"]}],
            "next": None,
        }

        listings = make_scraper(client).fetch_listings("LAMAR COUNTY")

        assert [l.uid for l in listings] == ["10"]

    def test_fetch_listings_propagates_errors(self):
        client = Mock()
        client.get_json.side_effect = requests.ConnectionError("down")

        with pytest.raises(requests.ConnectionError):
            make_scraper(client).fetch_listings("LAMAR COUNTY")

    def test_fetch_detail(self):
        client = Mock()
        client.get_json.return_value = {
            "uid": 10,
            "case_style": "STATE VS SMITH",
            "legal_desc_s": "short",
            "legal_desc_l": "VACANT LOT 4 BLOCK 2",
            "geometry": {"type": "Point", "coordinates": [-95.5, 33.6]},
        }

        detail = make_scraper(client).fetch_detail("10")

        assert client.get_json.call_args[0][0] == f"{BASE}/property_sales/10/"
        assert detail.legal_description == "VACANT LOT 4 BLOCK 2"
        assert detail.coordinates == [-95.5, 33.6]
        assert detail.is_vacant is True
        assert detail.coordinates_json() == "[-95.5, 33.6]"

    def test_fetch_detail_short_legal_fallback(self):
        client = Mock()
        client.get_json.return_value = {"uid": 10, "legal_desc_s": "HOUSE"}

        detail = make_scraper(client).fetch_detail("10")

        assert detail.legal_description == "HOUSE"
        assert detail.is_vacant is False

    def test_fetch_detail_error_returns_empty(self):
        client = Mock()
        client.get_json.side_effect = requests.HTTPError("404")

        detail = make_scraper(client).fetch_detail("10")

        assert detail == PropertyDetail.empty()
        assert detail.has_address() is False
