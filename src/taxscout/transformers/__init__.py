"""
Transformers Package

Normalization of API values and address resolution.
"""
from src.taxscout.transformers.address_resolver import resolve_address
from src.taxscout.transformers.normalizers import (
    format_sale_date,
    normalize_county_name,
    parse_amount,
)

__all__ = ["resolve_address", "format_sale_date", "normalize_county_name", "parse_amount"]
