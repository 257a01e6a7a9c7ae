"""
Clients Package

HTTP transport shared by the listing and lien search scrapers.
"""
from src.taxscout.clients.http_client import CookieJar, HttpClient

__all__ = ["CookieJar", "HttpClient"]
