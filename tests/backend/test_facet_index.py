"""
Facet Index Tests
=================

Values in first-seen order with total counts.
"""

import pytest

from backend.contracts.records import FacetName
from backend.core.merger import merge
from backend.query.facets import FacetIndex, FacetOption, counts_by_source, index, index_all

from conftest import make_record


class TestFacetIndex:

    def test_source_values_first_seen(self, enriched):
        options = index(enriched, FacetName.SOURCE)

        assert options == [
            FacetOption("Twitter", 3),
            FacetOption("Support Email", 1),
            FacetOption("GitHub", 1),
            FacetOption("Discord", 1),
        ]

    def test_values_not_sorted(self):
        records = [make_record(1, "b"), make_record(2, "a"), make_record(3, "b")]

        assert [o.value for o in index(merge(records, []), FacetName.SOURCE)] == ["b", "a"]

    def test_counts_sum_to_total(self, enriched):
        facets = FacetIndex(enriched)

        for facet in FacetName:
            assert sum(o.count for o in facets.options(facet)) == facets.total == len(enriched)

    def test_unannotated_records_count_under_defaults(self, enriched):
        themes = dict(index(enriched, FacetName.THEME))

        assert themes["Unknown"] == 1

    def test_sentiment_values_are_plain_strings(self, enriched):
        assert FacetIndex(enriched).values(FacetName.SENTIMENT) == ("Negative", "Neutral", "Positive")

    def test_accepts_facet_name_strings(self, enriched):
        assert FacetIndex(enriched).values("urgency") == ("Medium", "High", "Low")

    def test_unknown_facet_rejected(self, enriched):
        with pytest.raises(ValueError):
            FacetIndex(enriched).options("colour")

    def test_empty_set(self):
        facets = FacetIndex([])

        assert facets.total == 0
        assert facets.options(FacetName.SOURCE) == ()

    def test_index_all_matches_per_facet_index(self, enriched):
        facets = index_all(enriched)

        for facet in FacetName:
            assert list(facets.options(facet)) == index(enriched, facet)

    def test_to_dict(self, enriched):
        payload = FacetIndex(enriched).to_dict()

        assert list(payload) == ["source", "theme", "sentiment", "urgency"]
        assert payload["source"][0] == {"value": "Twitter", "count": 3}


class TestCountsBySource:

    def test_counts_by_source(self, records):
        assert counts_by_source(records) == {
            "Twitter": 3,
            "Support Email": 1,
            "GitHub": 1,
            "Discord": 1,
        }

    def test_empty(self):
        assert counts_by_source([]) == {}
