"""
Lien Extractor

Best-effort extraction of lien hits from the TexasFile search response.

The response shape is undocumented and has changed between captures, so the
hit list is located by a ranked list of strategies, tried in order until one
returns a non-empty list:

1. known_paths   - direct lookup along the nested paths seen so far
2. name_match    - any array whose sample mentions the searched name
3. keyword_match - any array whose sample mentions a lien keyword

Each hit is then scanned for a lien keyword, a document type, a date and a
document URL. Unrecognized shapes yield LienSummary.empty().
"""
import json
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from src.taxscout.models.lien import LienSummary
from src.taxscout.utils.logger import get_logger

logger = get_logger(__name__)

LIEN_KEYWORDS = (
    "LIEN", "MECHANICS LIEN", "HOSPITAL LIEN",
    "TAX LIEN FEDERAL", "TAX LIEN STATE",
    "LIS PENDENS", "JUDGEMENT", "UCC",
    "NOTICE OF TRUSTEE SALE", "DEED OF TRUST",
    "RELEASE",
)

KNOWN_HIT_PATHS = (
    ("response", "response", "data", "hits", "hits"),
    ("response", "data", "hits", "hits"),
    ("hits",),
    ("response", "hits"),
)

TYPE_KEYS = ("type", "document_type", "doc_type", "instrument_type", "title", "topic", "name")

# Arrays are judged by their first few items only.
SAMPLE_SIZE = 5

ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")
US_DATE = re.compile(r"\d{1,2}/\d{1,2}/\d{2,4}")
DOC_URL = re.compile(r"(https?://[^\s\"']+|/[^\s\"']+\.(pdf|htm|html))", re.IGNORECASE)

HitList = List[Any]


@dataclass(frozen=True)
class HitStrategy:
    """A named way of locating the hit list in a response."""
    name: str
    find: Callable[[Any, str], Optional[HitList]]


def _dig(payload: Any, path: Sequence[str]) -> Any:
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _sample_text(items: list) -> str:
    return json.dumps(items[:SAMPLE_SIZE], default=str).lower()


def _find_arrays(payload: Any, matches: Callable[[str], bool]) -> List[list]:
    """
    Collect arrays whose serialized sample satisfies `matches`.

    A matching array is not descended into; a non-matching one has its first
    few elements scanned.
    """
    found: List[list] = []

    def scan(node: Any) -> None:
        if isinstance(node, list):
            if matches(_sample_text(node)):
                found.append(node)
                return
            for element in node[:SAMPLE_SIZE]:
                scan(element)
        elif isinstance(node, dict):
            for value in node.values():
                scan(value)

    scan(payload)
    return found


def _longest(arrays: List[list]) -> Optional[HitList]:
    if not arrays:
        return None
    return max(arrays, key=len)


def from_known_paths(payload: Any, search_name: str = "") -> Optional[HitList]:
    for path in KNOWN_HIT_PATHS:
        hits = _dig(payload, path)
        if isinstance(hits, list) and hits:
            return hits
    return None


def from_name_match(payload: Any, search_name: str = "") -> Optional[HitList]:
    token = name_token(search_name)
    if not token:
        return None
    return _longest(_find_arrays(payload, lambda text: token in text))


def from_keyword_match(payload: Any, search_name: str = "") -> Optional[HitList]:
    keywords = [k.lower() for k in LIEN_KEYWORDS]
    return _longest(_find_arrays(payload, lambda text: any(k in text for k in keywords)))


HIT_STRATEGIES: Tuple[HitStrategy, ...] = (
    HitStrategy("known_paths", from_known_paths),
    HitStrategy("name_match", from_name_match),
    HitStrategy("keyword_match", from_keyword_match),
)


def name_token(search_name: Optional[str]) -> str:
    """First word of the searched name, lower-cased ("SMITH, JOHN" -> "smith")."""
    if not search_name:
        return ""
    parts = [p for p in re.split(r"[ ,]+", search_name.strip()) if p]
    return (parts[0] if parts else search_name.strip()).lower()


def first_success(
    strategies: Iterable[HitStrategy],
    payload: Any,
    search_name: str = "",
) -> Tuple[Optional[str], HitList]:
    """
    Run strategies in order and return the first non-empty hit list.

    Returns:
        (strategy name, hits), or (None, []) when every strategy misses
    """
    for strategy in strategies:
        hits = strategy.find(payload, search_name)
        if hits:
            return strategy.name, hits
    return None, []


def parse_lien_date(text: str) -> Optional[date]:
    """Parse YYYY-MM-DD or M/D/YYYY (also M/D/YY); None when invalid."""
    formats = ("%Y-%m-%d",) if "-" in text else ("%m/%d/%Y", "%m/%d/%y")
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _hit_fields(item: Any) -> Dict[str, Any]:
    if not isinstance(item, dict):
        return {}
    source = item.get("_source")
    if isinstance(source, dict):
        return source
    return item


def _string_values(item: Any) -> List[str]:
    if isinstance(item, str):
        return [item]
    return [v for v in _hit_fields(item).values() if isinstance(v, str)]


def has_lien_keyword(item: Any) -> bool:
    text = json.dumps(item if item is not None else "", default=str).upper()
    return any(keyword in text for keyword in LIEN_KEYWORDS)


def hit_type(item: Any) -> Optional[str]:
    """Document type from a known field, else the first value naming a lien keyword."""
    fields = _hit_fields(item)
    if not fields:
        return None

    for key in TYPE_KEYS:
        value = fields.get(key)
        if value:
            return str(value).strip()

    for value in fields.values():
        if isinstance(value, str) and any(k in value.upper() for k in LIEN_KEYWORDS):
            return value.strip()
    return None


def hit_date(item: Any) -> Optional[date]:
    """First valid date found in the hit's string values."""
    for value in _string_values(item):
        for pattern in (ISO_DATE, US_DATE):
            for match in pattern.finditer(value):
                parsed = parse_lien_date(match.group(0))
                if parsed:
                    return parsed
    return None


def hit_urls(item: Any) -> List[str]:
    urls = []
    for value in _string_values(item):
        match = DOC_URL.search(value)
        if match:
            urls.append(match.group(0))
    return urls


def summarize_hits(hits: Iterable[Any]) -> LienSummary:
    """Aggregate the hits that mention a lien keyword into a LienSummary."""
    lien_types: Dict[str, None] = {}
    urls: Dict[str, None] = {}
    last_date: Optional[date] = None
    count = 0

    for item in hits:
        if not has_lien_keyword(item):
            continue
        count += 1

        doc_type = hit_type(item)
        if doc_type:
            lien_types.setdefault(doc_type)

        found = hit_date(item)
        if found and (last_date is None or found > last_date):
            last_date = found

        for url in hit_urls(item):
            urls.setdefault(url)

    if count == 0:
        return LienSummary.empty()

    return LienSummary(
        lien_present=True,
        lien_types=list(lien_types),
        lien_count=count,
        last_lien_date=last_date,
        matching_doc_urls=list(urls),
    )


def extract_liens(payload: Any, search_name: str = "") -> LienSummary:
    """
    Derive a LienSummary from a raw search response.

    Args:
        payload: Decoded JSON response (any shape)
        search_name: Owner/case name that was searched

    Returns:
        LienSummary; empty when no hit list is found or nothing matches
    """
    try:
        strategy, hits = first_success(HIT_STRATEGIES, payload, search_name)
        if not hits:
            logger.debug("lien_hits_not_found", search_name=search_name)
            return LienSummary.empty()

        summary = summarize_hits(hits)
        logger.debug(
            "lien_hits_extracted",
            strategy=strategy,
            candidate_hits=len(hits),
            lien_count=summary.lien_count
        )
        return summary

    except (TypeError, ValueError, AttributeError, RecursionError) as e:
        logger.error("lien_extraction_failed", search_name=search_name, error=str(e))
        return LienSummary.empty()
