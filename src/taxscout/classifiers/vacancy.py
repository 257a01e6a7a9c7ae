"""
Vacant Land Classifier

Keyword test for vacant lots in legal descriptions, sale notes and addresses.
"""
from dataclasses import dataclass
from typing import Optional

# Scan order matters: the first keyword found is the one reported.
VACANCY_KEYWORDS = (
    "VACANT", "LOT", "LOTS", "ACRE", "ACRES", "LAND", "LANDS",
    "TRACT", "TRACTS", "PARCEL", "PARCELS", "UNDEVELOPED", "UNIMPROVED", "RURAL",
)

SOURCE_LEGAL_DESC = "legalDesc"
SOURCE_SALE_NOTES = "saleNotes"


@dataclass(frozen=True)
class VacancyMatch:
    """
    First vacancy keyword found for a property.

    Attributes:
        keyword: Matched keyword, e.g. "VACANT"
        source: Field it was found in ("legalDesc" or "saleNotes")
    """
    keyword: str
    source: str


def is_vacant(legal_description: Optional[str] = "", address: Optional[str] = "") -> bool:
    """Case-insensitive keyword match over legal description and address combined."""
    text = f"{legal_description or ''} {address or ''}".upper()
    return any(term in text for term in VACANCY_KEYWORDS)


def detect_vacancy(
    legal_description: Optional[str] = "",
    sale_notes: Optional[str] = "",
) -> Optional[VacancyMatch]:
    """
    Find the first vacancy keyword, checking the legal description before the
    sale notes for each keyword in turn.

    This is the policy used to filter the property export.

    Returns:
        VacancyMatch, or None when neither field contains a keyword
    """
    legal = (legal_description or "").upper()
    notes = (sale_notes or "").upper()

    for term in VACANCY_KEYWORDS:
        if term in legal:
            return VacancyMatch(keyword=term, source=SOURCE_LEGAL_DESC)
        if term in notes:
            return VacancyMatch(keyword=term, source=SOURCE_SALE_NOTES)
    return None
