"""
Exception Types

Errors raised by the HTTP client and the lien search flow. Shape problems in
upstream payloads are not errors; they degrade to empty results.
"""


class TaxScoutError(Exception):
    """Base class for all taxscout errors."""


class LienSearchError(TaxScoutError):
    """A step of the TexasFile search flow could not complete."""


class NonJsonResponseError(LienSearchError):
    """The results endpoint answered with something other than JSON."""

    def __init__(self, content_type: str, snippet: str):
        super().__init__(f"expected JSON, got {content_type or 'no content-type'}")
        self.content_type = content_type
        self.snippet = snippet


class RateLimitedError(TaxScoutError):
    """Upstream answered HTTP 429; safe to retry after a backoff."""


class TlsTrustError(TaxScoutError):
    """Certificate verification failed and insecure retries are not allowed."""
