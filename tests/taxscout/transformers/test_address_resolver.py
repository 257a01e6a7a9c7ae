"""
Unit tests for address_resolver module
"""
from src.taxscout.models.property import AddressSource, PropertyDetail, PropertyListing
from src.taxscout.transformers.address_resolver import format_listing_address, resolve_address


def make_listing(**overrides):
    data = {"uid": "42", "county": "LAMAR COUNTY"}
    data.update(overrides)
    return PropertyListing(**data)


class TestFormatListingAddress:
    """Tests for format_listing_address"""

    def test_from_dict(self):
        row = {"prop_address_one": "10 OAK LN", "prop_city": "PARIS", "prop_state": "TX", "prop_zipcode": 75460}
        assert format_listing_address(row) == "10 OAK LN, PARIS, TX, 75460"

    def test_from_model(self):
        detail = PropertyDetail(prop_city="PARIS", prop_zipcode="75460")
        assert format_listing_address(detail) == "PARIS, 75460"


class TestResolveAddress:
    """Tests for resolve_address precedence"""

    def test_bulk_map_wins(self):
        detail = PropertyDetail(prop_address_one="DETAIL ST")
        listing = make_listing(prop_address_one="LISTING ST")

        address, source = resolve_address("42", {"42": "BULK ST, PARIS"}, detail, listing, "LAMAR COUNTY")

        assert address == "BULK ST, PARIS"
        assert source == AddressSource.API_LIST

    def test_detail_when_map_missing_uid(self):
        detail = PropertyDetail(prop_address_one="DETAIL ST", prop_city="PARIS")
        listing = make_listing(prop_address_one="LISTING ST")

        address, source = resolve_address("42", {"7": "OTHER"}, detail, listing, "LAMAR COUNTY")

        assert address == "DETAIL ST, PARIS"
        assert source == AddressSource.DETAIL

    def test_detail_with_only_zip(self):
        detail = PropertyDetail(prop_zipcode="75460")

        address, source = resolve_address("42", {}, detail, make_listing(), "LAMAR COUNTY")

        assert address == "75460"
        assert source == AddressSource.DETAIL

    def test_listing_when_detail_empty(self):
        listing = make_listing(prop_address_one="LISTING ST", prop_city="PARIS")

        address, source = resolve_address("42", {}, PropertyDetail.empty(), listing, "LAMAR COUNTY")

        assert address == "LISTING ST, PARIS"
        assert source == AddressSource.LISTING

    def test_listing_without_street_is_not_used(self):
        listing = make_listing(prop_city="PARIS")

        address, source = resolve_address("42", {}, PropertyDetail.empty(), listing, "LAMAR COUNTY")

        assert source == AddressSource.APPROXIMATED

    def test_approximated_fallback(self):
        address, source = resolve_address("42", None, None, None, "LAMAR COUNTY")

        assert address == "LAMAR COUNTY (address missing)"
        assert source == AddressSource.APPROXIMATED

    def test_integer_uid_matches_string_key(self):
        address, source = resolve_address(42, {"42": "BULK ST"}, None, None, "LAMAR COUNTY")

        assert address == "BULK ST"
        assert source == AddressSource.API_LIST
