"""
Models Package
"""
from src.taxscout.models.lien import LienSummary
from src.taxscout.models.property import (
    AddressSource,
    OutputRecord,
    PropertyDetail,
    PropertyListing,
)

__all__ = [
    "AddressSource",
    "LienSummary",
    "OutputRecord",
    "PropertyDetail",
    "PropertyListing",
]
