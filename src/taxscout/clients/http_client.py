"""
HTTP Client Adapter

Thin wrapper around requests.Session with an explicit cookie jar, an optional
extra CA certificate merged into the default trust store, a one-shot insecure
retry for TLS failures, and bounded retries on HTTP 429.
"""
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import certifi
import requests

from src.taxscout.exceptions import RateLimitedError, TlsTrustError
from src.taxscout.utils.logger import get_logger
from src.taxscout.utils.retry import retry_call

logger = get_logger(__name__)

TRUST_STORE_FILENAME = "taxscout-ca-bundle.pem"


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


class CookieJar:
    """
    Name -> value cookie store owned by one run.

    Cookies are read from every response and sent back as a single Cookie
    header. Expiry, path and domain attributes are ignored.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._cookies: Dict[str, str] = dict(initial or {})

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._cookies.get(name, default)

    def set(self, name: str, value: str) -> None:
        self._cookies[name] = value

    def setdefault(self, name: str, value: str) -> str:
        """Set `name` only when it is not already present."""
        if not self._cookies.get(name):
            self._cookies[name] = value
        return self._cookies[name]

    def to_header(self) -> str:
        return "; ".join(f"{k}={v}" for k, v in self._cookies.items())

    def seed_from_header(self, raw: Optional[str]) -> int:
        """
        Load cookies from a raw Cookie header string ("a=1; b=2").

        Returns:
            Number of cookies parsed
        """
        if not raw:
            return 0

        parsed = 0
        for part in raw.split(";"):
            part = part.strip()
            if not part:
                continue
            if "=" not in part:
                logger.debug("cookie_seed_unparseable", fragment=part)
                continue
            name, value = part.split("=", 1)
            self._cookies[name.strip()] = _strip_quotes(value.strip())
            parsed += 1

        logger.info("cookies_seeded", count=parsed)
        return parsed

    def update_from_response(self, response: Any) -> None:
        """Copy any cookies set by `response` into the jar."""
        cookies = getattr(response, "cookies", None)
        if not cookies:
            return
        for name, value in cookies.items():
            if value is None:
                continue
            self._cookies[name] = _strip_quotes(str(value))

    def __contains__(self, name: str) -> bool:
        return name in self._cookies

    def __len__(self) -> int:
        return len(self._cookies)


def build_trust_store(ca_bundle_path: Optional[str], cache_dir: Optional[str] = None) -> Union[str, bool]:
    """
    Resolve the `verify` argument for requests.

    When an extra CA file exists it is appended to certifi's default roots in
    one cached bundle file, so the default trust store is extended, not
    replaced. The cache file is overwritten on every call.

    Args:
        ca_bundle_path: Path to an extra PEM certificate (optional)
        cache_dir: Directory for the combined bundle (defaults to the temp dir)

    Returns:
        Path to a combined bundle, or True for the default trust store
    """
    if not ca_bundle_path:
        return True

    path = Path(ca_bundle_path)
    if not path.is_file():
        logger.debug("ca_bundle_not_found", path=str(path))
        return True

    try:
        combined = Path(certifi.where()).read_text() + "\n" + path.read_text()
    except OSError as e:
        logger.warning("ca_bundle_unreadable", path=str(path), error=str(e))
        return True

    bundle = Path(cache_dir or tempfile.gettempdir()) / TRUST_STORE_FILENAME
    try:
        bundle.parent.mkdir(parents=True, exist_ok=True)
        bundle.write_text(combined)
    except OSError as e:
        logger.warning("ca_bundle_cache_unwritable", bundle=str(bundle), error=str(e))
        return True

    logger.info("ca_bundle_loaded", path=str(path), bundle=str(bundle))
    return str(bundle)


class HttpClient:
    """
    Sequential HTTP client used by every scraper.

    One instance per run; the cookie jar and TLS mode it carries are shared
    by all requests made through it.
    """

    def __init__(
        self,
        cookie_jar: Optional[CookieJar] = None,
        base_headers: Optional[Dict[str, str]] = None,
        ca_bundle_path: Optional[str] = None,
        verify_tls: bool = True,
        allow_insecure: bool = False,
        timeout: int = 30,
        max_rate_limit_retries: int = 3,
        rate_limit_base_delay: float = 1.0,
        session: Optional[requests.Session] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize the client.

        Args:
            cookie_jar: Jar to read/write; None disables cookie handling
            base_headers: Headers sent with every request
            ca_bundle_path: Extra CA certificate merged into the trust store
            verify_tls: False disables certificate checks entirely
            allow_insecure: Permit one relaxed retry after a TLS failure
            timeout: Per-request timeout in seconds
            max_rate_limit_retries: Retries after HTTP 429 in get_json
            rate_limit_base_delay: Backoff base for HTTP 429 retries
            session: Override the requests session (for testing)
            sleep: Override time.sleep (for testing)
        """
        self.cookie_jar = cookie_jar
        self.base_headers = dict(base_headers or {})
        self.verify: Union[str, bool] = build_trust_store(ca_bundle_path) if verify_tls else False
        self.allow_insecure = allow_insecure
        self.timeout = timeout
        self.max_rate_limit_retries = max_rate_limit_retries
        self.rate_limit_base_delay = rate_limit_base_delay
        self.session = session or requests.Session()
        self.sleep = sleep or time.sleep

        if self.verify is False:
            logger.warning("tls_verification_disabled")

    def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """
        Issue a GET, carrying and updating the cookie jar.

        Raises:
            TlsTrustError: Certificate verification failed and no insecure
                retry is allowed (or the insecure retry also failed)
            RateLimitedError: Upstream answered HTTP 429
            requests.RequestException: Any other transport failure
        """
        merged = {**self.base_headers, **(headers or {})}
        if self.cookie_jar is not None and len(self.cookie_jar):
            merged["Cookie"] = self.cookie_jar.to_header()

        try:
            response = self._send(url, params, merged)
        except requests.exceptions.SSLError as e:
            if not self.allow_insecure or self.verify is False:
                logger.error("tls_verification_failed", url=url, error=str(e))
                raise TlsTrustError(str(e)) from e

            logger.warning("tls_verification_failed_retrying_insecure", url=url, error=str(e))
            self.verify = False
            try:
                response = self._send(url, params, merged)
            except requests.exceptions.SSLError as e2:
                raise TlsTrustError(str(e2)) from e2

        if self.cookie_jar is not None:
            self.cookie_jar.update_from_response(response)

        if response.status_code == 429:
            logger.warning("rate_limited", url=url)
            raise RateLimitedError(f"HTTP 429 from {url}")

        return response

    def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        GET and decode JSON, retrying a bounded number of times on HTTP 429.

        Raises:
            requests.RequestException: Non-2xx status or transport failure
            ValueError: Body is not valid JSON
        """
        return retry_call(
            self._get_json_once,
            url,
            params,
            headers,
            max_retries=self.max_rate_limit_retries,
            base_delay=self.rate_limit_base_delay,
            retry_on=(RateLimitedError,),
            sleep=self.sleep,
        )

    def _get_json_once(self, url, params, headers):
        response = self.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json()

    def _send(self, url, params, headers) -> requests.Response:
        return self.session.get(
            url,
            params=params,
            headers=headers,
            timeout=self.timeout,
            verify=self.verify,
        )
