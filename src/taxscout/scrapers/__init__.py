"""
Scrapers Package

Scrapers for the LGBS tax sale listing API and the TexasFile county clerk
records search.
"""

from .county_resolver import CountyResolver
from .lien_search_scraper import LienSearchScraper
from .pagination import iter_results, paginate
from .property_sales_scraper import PropertySalesScraper

__all__ = [
    "CountyResolver",
    "LienSearchScraper",
    "PropertySalesScraper",
    "iter_results",
    "paginate",
]
