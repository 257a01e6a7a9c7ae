"""
Unit tests for pagination module
"""
import pytest
import requests
from unittest.mock import Mock

from src.taxscout.scrapers.pagination import iter_results, paginate

URL = "https://example.com/api/property_sales/"


def rows(start, count):
    return [{"uid": str(i)} for i in range(start, start + count)]


class TestPaginate:
    """Tests for paginate / iter_results"""

    def test_two_pages_aggregate(self):
        """Test a full page with next followed by a last page without next"""
        client = Mock()
        client.get_json.side_effect = [
            {"results": rows(0, 600), "next": "page2"},
            {"results": rows(600, 400), "next": None},
        ]
        sleep = Mock()

        items = list(iter_results(client, URL, params={"county": "LAMAR COUNTY"}, page_size=600,
                                  delay_seconds=0.3, sleep=sleep))

        assert len(items) == 1000
        assert items[-1]["uid"] == "999"
        assert client.get_json.call_count == 2

        first_params = client.get_json.call_args_list[0][1]["params"]
        second_params = client.get_json.call_args_list[1][1]["params"]
        assert first_params == {"county": "LAMAR COUNTY", "limit": 600, "offset": 0}
        assert second_params["offset"] == 600
        sleep.assert_called_once_with(0.3)

    def test_stops_on_empty_page(self):
        client = Mock()
        client.get_json.side_effect = [
            {"results": rows(0, 2), "next": "more"},
            {"results": [], "next": "more"},
        ]

        pages = list(paginate(client, URL, page_size=2, sleep=Mock()))

        assert len(pages) == 1
        assert client.get_json.call_count == 2

    def test_missing_results_key(self):
        client = Mock()
        client.get_json.return_value = {"detail": "not found"}

        assert list(iter_results(client, URL)) == []

    def test_non_dict_payload(self):
        client = Mock()
        client.get_json.return_value = ["unexpected"]

        assert list(iter_results(client, URL)) == []

    def test_errors_propagate(self):
        client = Mock()
        client.get_json.side_effect = requests.ConnectionError("down")

        with pytest.raises(requests.ConnectionError):
            list(iter_results(client, URL))

    def test_lazy(self):
        """Test no request is made until iteration starts"""
        client = Mock()
        iter_results(client, URL)
        client.get_json.assert_not_called()
