"""
Unit tests for county_resolver module
"""
import requests
from unittest.mock import Mock

from src.taxscout.scrapers.county_resolver import (
    CountyPayloadShape,
    CountyResolver,
    county_name_from_row,
    detect_county_payload,
    filter_counties,
)

BASE = "https://example.com/api"
METRO = ["TRAVIS COUNTY", "DALLAS COUNTY", "HARRIS COUNTY", "BEXAR COUNTY"]


def make_resolver(client):
    return CountyResolver(
        client,
        base_url=BASE,
        state="TX",
        sale_counties_path="/sale_counties/?limit=60",
        scan_page_size=1000,
        scan_delay=0,
        sleep=Mock(),
    )


class TestDetectCountyPayload:
    """Tests for detect_county_payload"""

    def test_results_shape(self):
        shape, rows = detect_county_payload({"results": ["A"]})
        assert shape == CountyPayloadShape.RESULTS
        assert rows == ["A"]

    def test_list_shape(self):
        shape, rows = detect_county_payload(["A", "B"])
        assert shape == CountyPayloadShape.LIST
        assert rows == ["A", "B"]

    def test_sale_counties_shape(self):
        shape, rows = detect_county_payload({"sale_counties": [{"county": "A"}]})
        assert shape == CountyPayloadShape.SALE_COUNTIES
        assert rows == [{"county": "A"}]

    def test_unknown_shape(self):
        assert detect_county_payload({"foo": 1}) == (CountyPayloadShape.UNKNOWN, [])
        assert detect_county_payload(None) == (CountyPayloadShape.UNKNOWN, [])


class TestCountyNameFromRow:

    def test_string_row(self):
        assert county_name_from_row("lamar, tx") == "LAMAR COUNTY"

    def test_object_row_key_order(self):
        assert county_name_from_row({"name": "Fannin", "sale_county": "Other"}) == "FANNIN COUNTY"
        assert county_name_from_row({"sale_county": "Hunt"}) == "HUNT COUNTY"

    def test_unusable_row(self):
        assert county_name_from_row({"id": 3}) is None
        assert county_name_from_row(None) is None


class TestFilterCounties:

    def test_dedup_exclude_sort(self):
        names = ["LAMAR COUNTY", None, "FANNIN COUNTY", "LAMAR COUNTY", "TRAVIS COUNTY"]
        assert filter_counties(names, ["travis"]) == ["FANNIN COUNTY", "LAMAR COUNTY"]


class TestCountyResolver:
    """Tests for CountyResolver.resolve_counties"""

    def test_first_stage_short_circuits(self):
        client = Mock()
        client.get_json.return_value = {"results": ["Lamar", "fannin, tx", "Travis"]}

        counties = make_resolver(client).resolve_counties(METRO)

        assert counties == ["FANNIN COUNTY", "LAMAR COUNTY"]
        assert client.get_json.call_count == 1
        assert client.get_json.call_args[0][0] == f"{BASE}/sale_counties/?limit=60"

    def test_falls_back_to_counties_endpoint(self):
        client = Mock()
        client.get_json.side_effect = [
            requests.ConnectionError("down"),
            {"results": [{"name": "Hunt"}, {"name": "Dallas"}]},
        ]

        counties = make_resolver(client).resolve_counties(METRO)

        assert counties == ["HUNT COUNTY"]
        assert client.get_json.call_count == 2
        assert client.get_json.call_args[1]["params"] == {"state": "TX", "limit": 1000}

    def test_metro_only_stage_falls_through(self):
        """Test a stage that yields only excluded counties counts as empty"""
        client = Mock()
        client.get_json.side_effect = [
            ["Travis", "Harris"],
            {"results": [{"name": "Bexar"}]},
            {"results": [{"county": "DALLAS"}, {"county": "Red River"}], "next": None},
        ]

        counties = make_resolver(client).resolve_counties(METRO)

        assert counties == ["RED RIVER COUNTY"]
        assert client.get_json.call_count == 3

    def test_listing_scan_paginates(self):
        client = Mock()
        client.get_json.side_effect = [
            {"unexpected": True},
            ValueError("bad json"),
            {"results": [{"county": "Lamar"}], "next": "more"},
            {"results": [{"county": "Lamar"}, {"county": "Delta"}], "next": None},
        ]

        counties = make_resolver(client).resolve_counties(METRO)

        assert counties == ["DELTA COUNTY", "LAMAR COUNTY"]
        scan_params = client.get_json.call_args_list[3][1]["params"]
        assert scan_params == {"state": "TX", "limit": 1000, "offset": 1000}

    def test_all_stages_empty(self):
        client = Mock()
        client.get_json.side_effect = requests.Timeout("slow")

        assert make_resolver(client).resolve_counties(METRO) == []
        assert client.get_json.call_count == 3

    def test_metro_never_returned(self):
        client = Mock()
        client.get_json.return_value = [m.title() for m in METRO] + ["Lamar"]

        counties = make_resolver(client).resolve_counties(METRO)

        assert not set(counties) & set(METRO)
