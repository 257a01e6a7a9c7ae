"""
Address Resolution

Picks the address for an output record from four ranked sources and tags
where it came from.
"""
from typing import Any, Dict, Mapping, Optional, Tuple

from src.taxscout.models.property import AddressSource, PropertyDetail, PropertyListing
from src.taxscout.transformers.normalizers import join_address_parts

# UID -> formatted address, built once per county from the listing feed
UidAddressMap = Dict[str, str]


def format_listing_address(row: Any) -> str:
    """Address string for a raw listing dict or a listing/detail model, blanks skipped."""
    get = row.get if isinstance(row, Mapping) else lambda k: getattr(row, k, None)
    return join_address_parts(
        get("prop_address_one"),
        get("prop_city"),
        get("prop_state"),
        get("prop_zipcode"),
    )


def resolve_address(
    uid: Optional[str],
    bulk_map: Optional[UidAddressMap],
    detail: Optional[PropertyDetail],
    listing: Optional[PropertyListing],
    county: str,
) -> Tuple[str, AddressSource]:
    """
    Choose the best address for one listing.

    Precedence, first non-empty wins:
      1. bulk_map[uid]      -> api_list (bulk feed is the most complete)
      2. detail fields      -> detail
      3. listing row fields -> listing
      4. "{county} (address missing)" -> approximated

    Args:
        uid: Listing UID
        bulk_map: UID -> address map for the county
        detail: Detail record (may be empty)
        listing: Listing row
        county: Canonical county name used for the fallback

    Returns:
        (address, source) tuple
    """
    key = str(uid) if uid is not None else ""

    if bulk_map and bulk_map.get(key):
        return bulk_map[key], AddressSource.API_LIST

    if detail is not None and detail.has_address():
        address = format_listing_address(detail)
        if address:
            return address, AddressSource.DETAIL

    if listing is not None and listing.prop_address_one:
        address = format_listing_address(listing)
        if address:
            return address, AddressSource.LISTING

    return f"{county} (address missing)", AddressSource.APPROXIMATED
