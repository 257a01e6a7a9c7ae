"""
Lien Search Scraper

Looks up recorded documents for a name on the TexasFile county clerk search.

The site only answers the results API inside a warmed-up browser session, so
each search walks a fixed sequence of steps:

    INIT -> TOKEN_EXTRACTED -> SUGGEST_PINGED -> RESULTS_FETCHED
         -> RETRY_IF_NAV_PAYLOAD -> DONE

Cookies are carried between steps by the client's CookieJar. Any step that
cannot complete raises; the caller decides whether to retry.
"""
import json
import re
import time
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import requests
from bs4 import BeautifulSoup

from config.settings import settings
from src.taxscout.clients.http_client import CookieJar, HttpClient
from src.taxscout.exceptions import LienSearchError, NonJsonResponseError, TaxScoutError
from src.taxscout.transformers.normalizers import county_search_name
from src.taxscout.utils.logger import get_logger

logger = get_logger(__name__)

RESULTS_ENDPOINT = "/search-results-single-api/"
SUGGEST_ENDPOINT = "/fetch-name-suggestions"

BASE_HEADERS = {
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
    "DNT": "1",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/142.0.0.0 Safari/537.36"
    ),
    "Referer": "https://www.texasfile.com/",
    "Sec-Fetch-Dest": "empty",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "same-origin",
}

SEARCH_LINK = re.compile(r"search/(?:texas|statewide)/[^/]+/(\d+)")
SEARCH_LINK_RAW = re.compile(r"search/(?:texas|statewide)/[^/]+/(\d{5,10})", re.IGNORECASE)
SLASHED_NUMBER = re.compile(r"/(\d{6,9})/")

COUNTY_CODE_NAME_KEYS = ("county_name", "county__name", "name", "county")
COUNTY_CODE_KEYS = ("id", "county_id", "code", "countyCode", "county_code", "value")

DOC_FIELD_HINT = re.compile(r"date|type|doc|instrument|record|url|filing|case|party", re.IGNORECASE)


class SearchStage(str, Enum):
    """Steps of the search session flow."""

    INIT = "init"
    TOKEN_EXTRACTED = "token_extracted"
    SUGGEST_PINGED = "suggest_pinged"
    RESULTS_FETCHED = "results_fetched"
    RETRY_IF_NAV_PAYLOAD = "retry_if_nav_payload"
    DONE = "done"


@dataclass
class SearchTokens:
    """Values scraped from the landing page that the results call needs."""
    csrf_token: Optional[str] = None
    search_id: Optional[str] = None
    county_code: Optional[str] = None


def parse_next_data(html: str) -> Optional[dict]:
    """Decode the embedded <script id="__NEXT_DATA__"> JSON, if present."""
    soup = BeautifulSoup(html or "", "html.parser")
    script = soup.find("script", id="__NEXT_DATA__")
    if script is None or not script.string:
        return None
    try:
        data = json.loads(script.string)
    except ValueError:
        logger.debug("next_data_unparseable")
        return None
    return data if isinstance(data, dict) else None


def find_county_code(node: Any, county_name: str) -> Optional[str]:
    """
    Depth-first search for an array of county objects and return the code of
    the first one whose name contains `county_name`.
    """
    target = (county_name or "").lower()
    if not target or not isinstance(node, (dict, list)):
        return None

    if isinstance(node, list):
        for element in node:
            if not isinstance(element, dict):
                continue
            name = next((element[k] for k in COUNTY_CODE_NAME_KEYS if element.get(k)), None)
            if name and target in str(name).lower():
                code = next((element[k] for k in COUNTY_CODE_KEYS if element.get(k)), None)
                return str(code) if code is not None else None
        return None

    for value in node.values():
        code = find_county_code(value, county_name)
        if code:
            return code
    return None


def extract_tokens(html: str, county_name: str) -> SearchTokens:
    """
    Pull the CSRF token, search id and county code out of the landing page.

    __NEXT_DATA__ is preferred; anchors are scanned for a search id when it
    is missing there.
    """
    tokens = SearchTokens()
    next_data = parse_next_data(html)

    if next_data:
        props = next_data.get("props")
        if not isinstance(props, dict):
            props = {}
        page_props = props.get("pageProps")
        if not isinstance(page_props, dict):
            page_props = {}
        tokens.csrf_token = (
            page_props.get("csrfToken") or props.get("csrfToken") or next_data.get("csrfToken")
        )
        search_id = page_props.get("search_id") or page_props.get("searchId") or page_props.get("id")
        tokens.search_id = str(search_id) if search_id else None
        tokens.county_code = find_county_code(next_data, county_name)

    if not tokens.search_id:
        soup = BeautifulSoup(html or "", "html.parser")
        for anchor in soup.find_all("a", href=True):
            match = SEARCH_LINK.search(anchor["href"])
            if match:
                tokens.search_id = match.group(1)
                break

    return tokens


def scan_html_for_search_id(html: str) -> Optional[str]:
    """
    Raw regex fallback for a search id in the landing page HTML.

    Tries search links with a 5-10 digit id first, then any 6-9 digit number
    between slashes that does not start with "20".
    """
    raw = str(html or "")
    match = SEARCH_LINK_RAW.search(raw)
    if match:
        return match.group(1)
    for candidate in SLASHED_NUMBER.findall(raw):
        if not candidate.startswith("20"):
            return candidate
    return None


def looks_like_nav_payload(payload: Any) -> bool:
    """True when the response is the site navigation blob instead of results."""
    if not isinstance(payload, dict):
        return False
    data = payload.get("data")
    return isinstance(data, dict) and "cities_list" in data


def summarize_candidates(payload: Any) -> Dict[str, Any]:
    """
    Map of JSON paths to arrays that look like document lists, for debugging
    new response shapes.
    """
    candidates: Dict[str, Any] = {}

    def scan(node: Any, path: str) -> None:
        if isinstance(node, list):
            if node and isinstance(node[0], dict) and DOC_FIELD_HINT.search(" ".join(node[0].keys())):
                candidates[path] = {"length": len(node), "sample": node[:3]}
            for i, element in enumerate(node[:5]):
                scan(element, f"{path}[{i}]")
        elif isinstance(node, dict):
            for key, value in node.items():
                scan(value, f"{path}.{key}" if path else key)

    scan(payload, "root")
    return candidates


def _safe_filename(value: str) -> str:
    return re.sub(r"[^a-z0-9_-]", "_", value or "", flags=re.IGNORECASE)[:50]


class LienSearchScraper:
    """
    Runs TexasFile county clerk searches by owner/case name.

    One instance per run: it owns the HTTP client and therefore the cookie
    jar shared by every search.
    """

    def __init__(
        self,
        client: Optional[HttpClient] = None,
        base_url: Optional[str] = None,
        search_id: Optional[str] = None,
        county_code: Optional[str] = None,
        dump_json: Optional[bool] = None,
        debug_dir: Optional[str] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize the lien search scraper.

        Args:
            client: HTTP client with a cookie jar (built from settings if omitted)
            base_url: Override the site URL (for testing)
            search_id: Fallback search id when the landing page has none
            county_code: County code for the name suggestion call
            dump_json: Write landing pages and responses to debug_dir
            debug_dir: Directory for debug dumps
            sleep: Override time.sleep (for testing)
        """
        if client is None:
            jar = CookieJar()
            jar.seed_from_header(settings.cookies)
            client = HttpClient(
                cookie_jar=jar,
                base_headers=BASE_HEADERS,
                ca_bundle_path=settings.ca_bundle_path,
                verify_tls=settings.node_tls_reject_unauthorized,
                allow_insecure=settings.allow_insecure,
                timeout=settings.http_timeout,
            )
        if client.cookie_jar is None:
            client.cookie_jar = CookieJar()

        self.client = client
        self.base_url = (base_url or settings.texasfile_base_url).rstrip("/")
        self.name_type = settings.texasfile_name_type
        self.start_date = settings.texasfile_start_date
        self.search_id = search_id if search_id is not None else settings.search_id
        self.county_code = county_code if county_code is not None else settings.county_code
        self.dump_json = settings.dump_json if dump_json is None else dump_json
        self.debug_dir = Path(debug_dir or settings.debug_dir)
        self.landing_delay = settings.lien_landing_delay
        self.suggest_delay = settings.lien_suggest_delay
        self.sleep = sleep or time.sleep
        logger.info("lien_search_scraper_initialized", base_url=self.base_url)

    @property
    def cookie_jar(self) -> CookieJar:
        return self.client.cookie_jar

    def init_url(self, county_name: str) -> str:
        slug = county_name.replace(" ", "-")
        return f"{self.base_url}/search/texas/{slug}-county/county-clerk-records/"

    def search(self, county: str, name: str) -> Any:
        """
        Run one name search in one county.

        Args:
            county: County name ("LAMAR COUNTY" or "Lamar")
            name: Owner or case style to search for

        Returns:
            Decoded JSON response (shape not guaranteed)

        Raises:
            TlsTrustError: Certificate failure without insecure override
            LienSearchError: Results endpoint did not return usable JSON
            requests.RequestException: Transport or HTTP failure
        """
        county_name = county_search_name(county)
        search_name = (name or "").strip()
        init_url = self.init_url(county_name)

        self._stage(SearchStage.INIT, url=init_url)
        response = self.client.get(init_url)
        response.raise_for_status()
        html = response.text
        self.sleep(self.landing_delay)

        tokens = extract_tokens(html, county_name)
        if not tokens.search_id:
            tokens.search_id = self.search_id
        if self.dump_json:
            self._dump_text(f"init_{_safe_filename(county_name)}", html, ".html")
            tokens.search_id = tokens.search_id or scan_html_for_search_id(html)
        if not tokens.search_id:
            logger.warning("search_id_not_found", county=county_name)
        self._stage(
            SearchStage.TOKEN_EXTRACTED,
            search_id=tokens.search_id,
            has_csrf=bool(tokens.csrf_token),
            county_code=tokens.county_code
        )

        self._ping_suggestions(search_name, init_url)
        self._stage(SearchStage.SUGGEST_PINGED)

        params = {
            "name1": search_name,
            "name_type1": self.name_type,
            "startDate": self.start_date,
            "endDate": date.today().isoformat(),
            "county": tokens.county_code or county_name,
        }
        self._seed_search_cookies(params, tokens.county_code)
        referer = f"{init_url}{tokens.search_id}/" if tokens.search_id else init_url

        payload = self._fetch_results(params, referer, tokens.csrf_token)
        self._stage(SearchStage.RESULTS_FETCHED, top_keys=_top_keys(payload))

        if self.dump_json:
            self._dump_json(
                f"{_safe_filename(str(params['county']))}_{_safe_filename(search_name)}_summary",
                {"topKeys": _top_keys(payload), "candidates": summarize_candidates(payload)},
            )

        if looks_like_nav_payload(payload):
            self._stage(SearchStage.RETRY_IF_NAV_PAYLOAD)
            try:
                payload = self._fetch_results(params, referer, tokens.csrf_token)
            except (requests.RequestException, TaxScoutError) as e:
                logger.debug("nav_payload_retry_failed", error=str(e))

        if self.dump_json:
            self._dump_json(f"{_safe_filename(county_name)}_{_safe_filename(search_name)}", payload)

        self._stage(SearchStage.DONE)
        return payload

    def _stage(self, stage: SearchStage, **fields: Any) -> None:
        logger.debug("lien_search_stage", stage=stage.value, **fields)

    def _ping_suggestions(self, search_name: str, init_url: str) -> None:
        """Warm the session; failures are ignored."""
        first_word = search_name.split(" ")[0] if search_name else ""
        params = {
            "prefix": first_word[:5],
            "name-type": self.name_type,
            "county": self.county_code or "1",
        }
        headers = {"Referer": init_url, "X-Requested-With": "XMLHttpRequest"}
        try:
            self.client.get(f"{self.base_url}{SUGGEST_ENDPOINT}", params=params, headers=headers)
            self.sleep(self.suggest_delay)
        except (requests.RequestException, TaxScoutError) as e:
            logger.debug("name_suggestions_failed", error=str(e))

    def _seed_search_cookies(self, params: Dict[str, str], county_code: Optional[str]) -> None:
        jar = self.cookie_jar
        jar.setdefault("name1", params["name1"])
        jar.setdefault("name_type1", params["name_type1"])
        jar.setdefault("startDate", params["startDate"])
        jar.setdefault("endDate", params["endDate"])
        if county_code:
            jar.setdefault("county", county_code)

    def _fetch_results(self, params: Dict[str, str], referer: str, csrf_token: Optional[str]) -> Any:
        headers = {"Referer": referer, "X-Requested-With": "XMLHttpRequest"}
        csrf = csrf_token or self.cookie_jar.get("csrftoken")
        if csrf:
            headers["X-CSRFToken"] = csrf

        url = f"{self.base_url}{RESULTS_ENDPOINT}"
        response = self.client.get(url, params=params, headers=headers)
        try:
            response.raise_for_status()
        except requests.HTTPError:
            logger.error(
                "search_results_http_error",
                status_code=response.status_code,
                body_snippet=str(response.text)[:2000]
            )
            raise

        content_type = response.headers.get("content-type", "")
        logger.debug("search_results_response", status_code=response.status_code, content_type=content_type)
        if "application/json" not in content_type:
            snippet = str(response.text)[:1000]
            logger.error("search_results_not_json", content_type=content_type, snippet=snippet)
            raise NonJsonResponseError(content_type, snippet)

        try:
            return response.json()
        except ValueError as e:
            raise LienSearchError(f"invalid JSON from results endpoint: {e}") from e

    def _dump_text(self, stem: str, text: str, suffix: str) -> None:
        path = self.debug_dir / f"{stem}_{int(time.time() * 1000)}{suffix}"
        try:
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(text or "")
            logger.info("debug_dump_written", path=str(path))
        except OSError as e:
            logger.error("debug_dump_failed", path=str(path), error=str(e))

    def _dump_json(self, stem: str, payload: Any) -> None:
        self._dump_text(stem, json.dumps(payload, indent=2, default=str), ".json")


def _top_keys(payload: Any) -> list:
    return list(payload.keys())[:50] if isinstance(payload, dict) else []
