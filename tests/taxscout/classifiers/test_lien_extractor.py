"""
Unit tests for lien_extractor module
"""
from datetime import date

import pytest

from src.taxscout.classifiers.lien_extractor import (
    HIT_STRATEGIES,
    extract_liens,
    first_success,
    hit_date,
    hit_type,
    name_token,
    parse_lien_date,
)
from src.taxscout.models.lien import LienSummary


class TestExtractLiensEmptyShapes:
    """Unrecognized payloads yield the empty summary"""

    @pytest.mark.parametrize("payload", [None, {}, [], "text", 42, {"data": {"cities_list": []}}])
    def test_empty_sentinel(self, payload):
        assert extract_liens(payload) == LienSummary.empty()

    def test_hits_without_keywords(self):
        payload = {"hits": [{"doc_type": "WARRANTY DEED", "recorded": "2020-01-02"}]}
        summary = extract_liens(payload)

        assert summary.lien_present is False
        assert summary.lien_count == 0


class TestExtractLiensKnownPaths:
    """Tests for hit lists found at known paths"""

    def test_single_ucc_hit(self):
        payload = {"hits": [{"doc_type": "UCC", "recorded": "2023-05-01"}]}
        summary = extract_liens(payload)

        assert summary.lien_present is True
        assert summary.lien_count == 1
        assert summary.lien_types == ["UCC"]
        assert summary.last_lien_date == date(2023, 5, 1)

    def test_nested_elasticsearch_hits(self):
        payload = {
            "response": {
                "data": {
                    "hits": {
                        "hits": [
                            {"_source": {"doc_type": "LIS PENDENS", "filed": "03/15/2021"}},
                            {"_source": {"doc_type": "HOSPITAL LIEN", "filed": "2022-07-09"}},
                            {"_source": {"doc_type": "LIS PENDENS", "filed": "2019-01-01"}},
                        ]
                    }
                }
            }
        }
        summary = extract_liens(payload)

        assert summary.lien_count == 3
        assert summary.lien_types == ["LIS PENDENS", "HOSPITAL LIEN"]
        assert summary.last_lien_date == date(2022, 7, 9)

    def test_document_urls_deduplicated(self):
        payload = {"hits": [
            {"doc_type": "UCC", "pdf": "https://example.com/docs/1.pdf"},
            {"doc_type": "UCC", "pdf": "https://example.com/docs/1.pdf"},
            {"doc_type": "UCC", "image": "/images/2.pdf"},
        ]}
        summary = extract_liens(payload)

        assert summary.matching_doc_urls == ["https://example.com/docs/1.pdf", "/images/2.pdf"]

    def test_to_row_joins_lists(self):
        payload = {"hits": [
            {"doc_type": "UCC", "recorded": "2023-05-01"},
            {"doc_type": "LIS PENDENS", "recorded": "2022-01-01"},
        ]}
        row = extract_liens(payload).to_row()

        assert row["lien_types"] == "UCC | LIS PENDENS"
        assert row["last_lien_date"] == "2023-05-01"
        assert row["error"] == ""


class TestExtractLiensFallbackStrategies:
    """Tests for name and keyword array discovery"""

    def test_name_match(self):
        payload = {"payload": {"rows": [
            {"party": "SMITH JOHN", "kind": "JUDGEMENT", "when": "2018-02-03"},
        ]}}
        strategy, hits = first_success(HIT_STRATEGIES, payload, "SMITH, JOHN")

        assert strategy == "name_match"
        assert len(hits) == 1
        assert extract_liens(payload, "SMITH, JOHN").lien_types == ["JUDGEMENT"]

    def test_keyword_match_picks_longest_array(self):
        payload = {
            "a": [{"kind": "MECHANICS LIEN"}],
            "b": [{"kind": "MECHANICS LIEN"}, {"kind": "RELEASE"}],
        }
        strategy, hits = first_success(HIT_STRATEGIES, payload, "")

        assert strategy == "keyword_match"
        assert len(hits) == 2
        assert extract_liens(payload).lien_count == 2


class TestHelpers:
    """Tests for helper functions"""

    def test_name_token(self):
        assert name_token("SMITH, JOHN") == "smith"
        assert name_token("  ") == ""
        assert name_token(None) == ""

    @pytest.mark.parametrize("text,expected", [
        ("2023-05-01", date(2023, 5, 1)),
        ("5/1/2023", date(2023, 5, 1)),
        ("5/1/23", date(2023, 5, 1)),
        ("2023-13-45", None),
    ])
    def test_parse_lien_date(self, text, expected):
        assert parse_lien_date(text) == expected

    def test_hit_type_falls_back_to_keyword_value(self):
        assert hit_type({"description": "Federal tax lien filed"}) == "Federal tax lien filed"

    def test_hit_type_none_for_non_dict(self):
        assert hit_type("LIEN") is None

    def test_hit_date_skips_invalid_date_like_values(self):
        hit = {"doc_number": "2021-00-12345", "recorded": "2021-05-03"}

        assert hit_date(hit) == date(2021, 5, 3)

    def test_hit_date_falls_back_to_us_format_in_same_value(self):
        assert hit_date({"note": "ref 2019-99-01 filed 4/2/2020"}) == date(2020, 4, 2)

    def test_hit_date_none_without_valid_date(self):
        assert hit_date({"doc_number": "2021-00-12345"}) is None
