"""
Unit tests for vacancy classifier
"""
from src.taxscout.classifiers.vacancy import (
    SOURCE_LEGAL_DESC,
    SOURCE_SALE_NOTES,
    VacancyMatch,
    detect_vacancy,
    is_vacant,
)


class TestDetectVacancy:
    """Tests for detect_vacancy"""

    def test_legal_description_match(self):
        match = detect_vacancy("VACANT LOT 5 BLOCK 2", "")
        assert match == VacancyMatch(keyword="VACANT", source=SOURCE_LEGAL_DESC)

    def test_sale_notes_match(self):
        match = detect_vacancy("", "Unimproved property, sold as is")
        assert match == VacancyMatch(keyword="UNIMPROVED", source=SOURCE_SALE_NOTES)

    def test_case_insensitive(self):
        match = detect_vacancy("5.2 acres out of survey 14", None)
        assert match.keyword == "ACRE"
        assert match.source == SOURCE_LEGAL_DESC

    def test_keyword_order_beats_field_order(self):
        """Test an earlier keyword in notes wins over a later keyword in legal"""
        match = detect_vacancy("TRACT 4", "vacant")
        assert match == VacancyMatch(keyword="VACANT", source=SOURCE_SALE_NOTES)

    def test_legal_checked_before_notes_for_same_keyword(self):
        match = detect_vacancy("LOT 1", "LOT 2")
        assert match.source == SOURCE_LEGAL_DESC

    def test_no_match(self):
        assert detect_vacancy("SINGLE FAMILY RESIDENCE", "HOUSE") is None
        assert detect_vacancy(None, None) is None


class TestIsVacant:
    """Tests for is_vacant"""

    def test_match_in_address(self):
        assert is_vacant("", "RURAL ROUTE 2") is True

    def test_match_in_legal(self):
        assert is_vacant("parcel 3", "") is True

    def test_no_match(self):
        assert is_vacant("HOUSE", "1 MAIN ST") is False
