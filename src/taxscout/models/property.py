"""
Property Data Models

Pydantic models for LGBS tax sale listings, per-UID detail records and the
flattened rows written to the property export CSV.
"""
import json
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class AddressSource(str, Enum):
    """Which source supplied the address on an output record."""

    API_LIST = "api_list"
    DETAIL = "detail"
    LISTING = "listing"
    APPROXIMATED = "approximated"


def _stringify(v: Any) -> Optional[str]:
    if v is None:
        return None
    return str(v)


class PropertyListing(BaseModel):
    """
    One row of the /property_sales/ listing feed.

    Attributes:
        uid: Listing identifier, unique within a county
        county: County name as returned by the API
        status: Sale status (e.g. 'Scheduled for Auction', 'Cancelled')
        sale_type: SALE, RESALE, STRUCK OFF, FUTURE SALE
        sale_date: ISO sale date
        minimum_bid: Minimum bid, free text (may contain '$' and commas)
        value: Adjudged value, free text
        cause_number: Court cause number
        sale_notes: Free-text notes from the sale listing
    """

    uid: Optional[str] = Field(None, description="Listing UID")
    county: Optional[str] = Field(None, description="County name")
    status: Optional[str] = Field(None, description="Sale status")
    sale_type: Optional[str] = Field(None, description="Sale type")
    sale_date: Optional[str] = Field(None, description="Sale date (ISO)")
    minimum_bid: Optional[str] = Field(None, description="Minimum bid")
    value: Optional[str] = Field(None, description="Adjudged value")
    cause_number: Optional[str] = Field(None, description="Cause number")
    sale_notes: Optional[str] = Field(None, description="Sale notes")
    prop_address_one: Optional[str] = Field(None, description="Street address")
    prop_city: Optional[str] = Field(None, description="City")
    prop_state: Optional[str] = Field(None, description="State")
    prop_zipcode: Optional[str] = Field(None, description="ZIP code")
    geometry: Optional[dict] = Field(None, description="GeoJSON geometry")

    @field_validator(
        "uid", "minimum_bid", "value", "cause_number", "prop_zipcode",
        mode="before",
    )
    @classmethod
    def coerce_to_string(cls, v: Any) -> Optional[str]:
        """The API returns some of these as numbers."""
        return _stringify(v)

    @classmethod
    def from_api(cls, row: dict) -> "PropertyListing":
        """Build a listing from a raw API row."""
        return cls(
            uid=row.get("uid"),
            county=row.get("county"),
            status=row.get("status"),
            sale_type=row.get("sale_type"),
            sale_date=row.get("sale_date"),
            minimum_bid=row.get("minimum_bid"),
            value=row.get("value"),
            cause_number=row.get("cause_nbr"),
            sale_notes=row.get("sale_notes"),
            prop_address_one=row.get("prop_address_one"),
            prop_city=row.get("prop_city"),
            prop_state=row.get("prop_state"),
            prop_zipcode=row.get("prop_zipcode"),
            geometry=row.get("geometry") if isinstance(row.get("geometry"), dict) else None,
        )

    def is_cancelled(self) -> bool:
        return bool(self.status) and "cancel" in self.status.lower()


class PropertyDetail(BaseModel):
    """
    Per-UID detail record from /property_sales/{uid}/.

    Fetched once per listing and discarded after it is merged into the
    output row. An empty instance stands in for a failed fetch.
    """

    uid: Optional[str] = None
    sale_date: Optional[str] = None
    case_style: Optional[str] = None
    prop_address_one: Optional[str] = None
    prop_city: Optional[str] = None
    prop_state: Optional[str] = None
    prop_zipcode: Optional[str] = None
    legal_description: str = ""
    coordinates: List[Any] = Field(default_factory=list)
    is_vacant: bool = False

    @field_validator("uid", "prop_zipcode", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> Optional[str]:
        return _stringify(v)

    @classmethod
    def from_api(cls, data: dict, is_vacant: bool = False) -> "PropertyDetail":
        """Build a detail record, preferring the long legal description."""
        geometry = data.get("geometry") or {}
        coordinates = geometry.get("coordinates") if isinstance(geometry, dict) else None
        return cls(
            uid=data.get("uid"),
            sale_date=data.get("sale_date"),
            case_style=data.get("case_style"),
            prop_address_one=data.get("prop_address_one"),
            prop_city=data.get("prop_city"),
            prop_state=data.get("prop_state"),
            prop_zipcode=data.get("prop_zipcode"),
            legal_description=data.get("legal_desc_l") or data.get("legal_desc_s") or "",
            coordinates=coordinates or [],
            is_vacant=is_vacant,
        )

    @classmethod
    def empty(cls) -> "PropertyDetail":
        return cls()

    def has_address(self) -> bool:
        """True when any of street, city or ZIP is present."""
        return bool(self.prop_address_one or self.prop_city or self.prop_zipcode)

    def coordinates_json(self) -> str:
        return json.dumps(self.coordinates) if self.coordinates else ""


PROPERTY_EXPORT_COLUMNS = [
    "uid",
    "address",
    "address_source",
    "county",
    "sale_date",
    "adjudged_value",
    "min_bid",
    "status",
    "sale_type",
    "cause_number",
    "case_style",
    "legal_description",
    "coordinates",
    "sale_notes",
    "vacant_keyword",
    "vacant_source",
]


class OutputRecord(BaseModel):
    """
    Flattened row of the property export.

    Combines listing, detail and classification fields with the provenance
    of the chosen address.
    """

    uid: str
    address: str
    address_source: AddressSource
    county: str
    sale_date: str = ""
    adjudged_value: str = ""
    min_bid: str = ""
    status: str = ""
    sale_type: str = ""
    cause_number: str = ""
    case_style: str = ""
    legal_description: str = ""
    coordinates: str = ""
    sale_notes: str = ""
    vacant_keyword: str = ""
    vacant_source: str = ""

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("address must not be empty")
        return v

    def is_approximated(self) -> bool:
        return self.address_source == AddressSource.APPROXIMATED

    def to_row(self) -> dict:
        """Convert to a CSV row in export column order."""
        row = self.model_dump()
        row["address_source"] = self.address_source.value
        return {column: row[column] for column in PROPERTY_EXPORT_COLUMNS}

    class Config:
        """Pydantic model configuration."""
        str_strip_whitespace = True
