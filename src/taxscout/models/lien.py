"""
Lien Data Models

Summary of recorded-document hits found for one owner/case name.
"""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

LIST_SEPARATOR = " | "

LIEN_COLUMNS = [
    "lien_present",
    "lien_types",
    "lien_count",
    "last_lien_date",
    "matching_doc_urls",
    "error",
]


class LienSummary(BaseModel):
    """
    Lien attributes derived from a TexasFile search response.

    Attributes:
        lien_present: True when at least one hit mentions a lien keyword
        lien_types: Distinct document types, in first-seen order
        lien_count: Number of hits that mention a lien keyword
        last_lien_date: Most recent date found among matching hits
        matching_doc_urls: Distinct document URLs, in first-seen order
    """

    lien_present: bool = Field(False, description="Any lien hit found")
    lien_types: List[str] = Field(default_factory=list, description="Document types")
    lien_count: int = Field(0, description="Matching hit count", ge=0)
    last_lien_date: Optional[date] = Field(None, description="Latest lien date")
    matching_doc_urls: List[str] = Field(default_factory=list, description="Document URLs")

    @classmethod
    def empty(cls) -> "LienSummary":
        """The "no liens found" result."""
        return cls()

    def to_row(self) -> dict:
        """CSV fields with lists joined and the date in ISO form."""
        return {
            "lien_present": self.lien_present,
            "lien_types": LIST_SEPARATOR.join(self.lien_types),
            "lien_count": self.lien_count,
            "last_lien_date": self.last_lien_date.isoformat() if self.last_lien_date else "",
            "matching_doc_urls": LIST_SEPARATOR.join(self.matching_doc_urls),
            "error": "",
        }
