"""
Unit tests for property and lien models
"""
from datetime import date

import pytest
from pydantic import ValidationError

from src.taxscout.models.lien import LIEN_COLUMNS, LienSummary
from src.taxscout.models.property import (
    PROPERTY_EXPORT_COLUMNS,
    AddressSource,
    OutputRecord,
    PropertyDetail,
    PropertyListing,
)


class TestPropertyListing:
    """Tests for PropertyListing model"""

    def test_from_api_coerces_numbers(self):
        listing = PropertyListing.from_api({"uid": 5, "minimum_bid": 950.5, "value": 12000, "cause_nbr": 778})

        assert listing.uid == "5"
        assert listing.minimum_bid == "950.5"
        assert listing.value == "12000"
        assert listing.cause_number == "778"

    @pytest.mark.parametrize("status,expected", [
        ("Cancelled", True),
        ("CANCELED - PAID", True),
        ("Scheduled for Auction", False),
        (None, False),
    ])
    def test_is_cancelled(self, status, expected):
        assert PropertyListing(status=status).is_cancelled() is expected


class TestPropertyDetail:
    """Tests for PropertyDetail model"""

    def test_empty_sentinel(self):
        detail = PropertyDetail.empty()

        assert detail.legal_description == ""
        assert detail.coordinates == []
        assert detail.has_address() is False
        assert detail.coordinates_json() == ""

    def test_from_api_without_geometry(self):
        detail = PropertyDetail.from_api({"uid": 1, "geometry": None, "legal_desc_l": ""})

        assert detail.coordinates == []
        assert detail.legal_description == ""


class TestOutputRecord:
    """Tests for OutputRecord model"""

    def test_to_row_column_order(self):
        record = OutputRecord(
            uid="1",
            address=" 1 OAK ",
            address_source=AddressSource.DETAIL,
            county="LAMAR COUNTY",
            min_bid="500",
        )
        row = record.to_row()

        assert list(row) == PROPERTY_EXPORT_COLUMNS
        assert row["address"] == "1 OAK"
        assert row["address_source"] == "detail"
        assert row["sale_date"] == ""

    def test_empty_address_rejected(self):
        with pytest.raises(ValidationError):
            OutputRecord(uid="1", address="  ", address_source=AddressSource.LISTING, county="X")

    def test_is_approximated(self):
        record = OutputRecord(
            uid="1",
            address="X COUNTY (address missing)",
            address_source=AddressSource.APPROXIMATED,
            county="X COUNTY",
        )
        assert record.is_approximated() is True


class TestLienSummary:
    """Tests for LienSummary model"""

    def test_empty(self):
        row = LienSummary.empty().to_row()

        assert list(row) == LIEN_COLUMNS
        assert row["lien_present"] is False
        assert row["lien_count"] == 0
        assert row["last_lien_date"] == ""

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError):
            LienSummary(lien_count=-1)

    def test_date_rendered_iso(self):
        summary = LienSummary(lien_present=True, lien_count=1, last_lien_date=date(2021, 3, 15))
        assert summary.to_row()["last_lien_date"] == "2021-03-15"
