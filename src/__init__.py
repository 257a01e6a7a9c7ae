"""
TaxScout - Core Package

Texas tax sale listing export and county clerk lien enrichment.
"""

__version__ = "0.1.0"
