"""
Pagination Walker

Lazy traversal of limit/offset endpoints that report more data through an
opaque `next` field.
"""
import time
from typing import Any, Callable, Dict, Iterator, List, Optional

from src.taxscout.clients.http_client import HttpClient
from src.taxscout.utils.logger import get_logger

logger = get_logger(__name__)


def paginate(
    client: HttpClient,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    page_size: int = 1000,
    delay_seconds: float = 0.0,
    sleep: Optional[Callable[[float], None]] = None,
) -> Iterator[List[dict]]:
    """
    Yield result pages until a page is empty or `next` is missing.

    Args:
        client: HTTP client
        url: Endpoint URL
        params: Query parameters sent with every page
        page_size: `limit` per request; `offset` advances by this amount
        delay_seconds: Fixed pause between page requests
        sleep: Override time.sleep (for testing)

    Yields:
        The `results` list of each non-empty page

    Raises:
        requests.RequestException: Propagated from the client
    """
    sleep = sleep or time.sleep
    offset = 0
    page_number = 0

    while True:
        page_params = {**(params or {}), "limit": page_size, "offset": offset}
        data = client.get_json(url, params=page_params)

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            logger.debug("pagination_empty_page", url=url, offset=offset)
            return

        page_number += 1
        logger.debug("pagination_page_fetched", url=url, page=page_number, results=len(results))
        yield results

        if not data.get("next"):
            return

        offset += page_size
        if delay_seconds:
            sleep(delay_seconds)


def iter_results(
    client: HttpClient,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    page_size: int = 1000,
    delay_seconds: float = 0.0,
    sleep: Optional[Callable[[float], None]] = None,
) -> Iterator[dict]:
    """Flatten `paginate` into individual result items."""
    for page in paginate(client, url, params, page_size, delay_seconds, sleep):
        yield from page
