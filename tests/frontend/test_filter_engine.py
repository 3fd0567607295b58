"""
Filter Engine Tests
===================

INVARIANTS TESTED:
1. OR within a facet, AND across facets, empty == no constraint
2. The "All" toggle clears only when every value is already selected
3. Model facets impose nothing before annotations arrive
4. Tri-state summaries
"""

import pytest

from backend.contracts.records import FacetName
from backend.query.facets import FacetIndex
from frontend.interaction.facets import ActionType, InteractionRequest
from frontend.state.filters import FilterEngine, SelectionState


SOURCES = ("Twitter", "Support Email", "GitHub", "Discord")


@pytest.fixture
def engine():
    return FilterEngine()


class TestToggle:

    def test_toggle_adds_then_removes(self, engine):
        engine.toggle(FacetName.SOURCE, "Twitter")
        assert engine.selection(FacetName.SOURCE) == {"Twitter"}

        engine.toggle(FacetName.SOURCE, "Twitter")
        assert engine.selection(FacetName.SOURCE) == frozenset()

    def test_toggle_leaves_other_facets(self, engine):
        engine.toggle(FacetName.THEME, "Billing")
        engine.toggle(FacetName.SOURCE, "GitHub")

        assert engine.selection(FacetName.THEME) == {"Billing"}


class TestToggleAll:

    def test_untouched_facet_selects_everything(self, engine):
        engine.select_all(FacetName.SOURCE, SOURCES)

        assert engine.selection(FacetName.SOURCE) == set(SOURCES)

    def test_twice_returns_to_empty(self, engine):
        engine.select_all(FacetName.SOURCE, SOURCES)
        engine.select_all(FacetName.SOURCE, SOURCES)

        assert engine.selection(FacetName.SOURCE) == frozenset()

    def test_partial_selection_fills_up_not_clears(self, engine):
        engine.toggle(FacetName.SOURCE, "GitHub")

        engine.select_all(FacetName.SOURCE, SOURCES)

        assert engine.selection(FacetName.SOURCE) == set(SOURCES)

    def test_all_selected_by_hand_then_clears(self, engine):
        for value in SOURCES:
            engine.toggle(FacetName.SOURCE, value)

        engine.select_all(FacetName.SOURCE, SOURCES)

        assert engine.selection(FacetName.SOURCE) == frozenset()

    def test_clear_all(self, engine):
        engine.toggle(FacetName.SOURCE, "Twitter")
        engine.toggle(FacetName.URGENCY, "High")

        engine.clear_all()

        assert engine.state.is_empty()


class TestApply:

    def test_no_selection_returns_everything_in_order(self, engine, enriched):
        assert engine.apply(enriched) == enriched

    def test_single_source(self, engine, enriched):
        engine.toggle(FacetName.SOURCE, "Twitter")

        result = engine.apply(enriched)

        assert [r.id for r in result] == [1, 4, 6]
        assert all(r.source == "Twitter" for r in result)

    def test_or_within_facet(self, engine, enriched):
        engine.toggle(FacetName.SOURCE, "GitHub")
        engine.toggle(FacetName.SOURCE, "Discord")

        assert [r.id for r in engine.apply(enriched)] == [3, 5]

    def test_widening_a_facet_keeps_earlier_matches(self, engine, enriched):
        engine.toggle(FacetName.SOURCE, "Twitter")
        before = engine.apply(enriched)

        engine.toggle(FacetName.SOURCE, "GitHub")

        assert [r.id for r in before] == [1, 4, 6]
        assert [r.id for r in engine.apply(enriched)] == [1, 3, 4, 6]

    def test_and_across_facets(self, engine, enriched):
        engine.toggle(FacetName.SOURCE, "Twitter")
        engine.toggle(FacetName.SENTIMENT, "Negative")

        assert [r.id for r in engine.apply(enriched)] == [1]

    def test_no_matches(self, engine, enriched):
        engine.toggle(FacetName.SOURCE, "Twitter")
        engine.toggle(FacetName.THEME, "Billing")

        assert engine.apply(enriched) == []

    def test_model_facets_ignored_before_annotations(self, engine, enriched):
        engine.toggle(FacetName.SOURCE, "Twitter")
        engine.toggle(FacetName.THEME, "Nonexistent")

        result = engine.apply(enriched, annotated=False)

        assert [r.id for r in result] == [1, 4, 6]

    def test_input_not_mutated(self, engine, enriched):
        before = list(enriched)
        engine.toggle(FacetName.SOURCE, "Discord")

        engine.apply(enriched)

        assert enriched == before


class TestSummarize:

    def test_none_partial_all(self, engine):
        assert engine.summarize(FacetName.SOURCE, SOURCES) is SelectionState.NONE

        engine.toggle(FacetName.SOURCE, "Twitter")
        assert engine.summarize(FacetName.SOURCE, SOURCES) is SelectionState.PARTIAL

        engine.select_all(FacetName.SOURCE, SOURCES)
        assert engine.summarize(FacetName.SOURCE, SOURCES) is SelectionState.ALL

    def test_summaries_for_every_facet(self, engine, enriched):
        engine.toggle(FacetName.SOURCE, "Twitter")

        summaries = engine.summaries(FacetIndex(enriched))

        assert list(summaries) == list(FacetName)
        source = summaries[FacetName.SOURCE]
        assert source.state is SelectionState.PARTIAL
        assert source.is_selected("Twitter")
        assert source.to_dict()["options"][0] == {"value": "Twitter", "count": 3, "selected": True}
        assert summaries[FacetName.THEME].state is SelectionState.NONE


class TestDispatch:

    def test_events_apply_in_order(self, engine):
        engine.dispatch(InteractionRequest.toggle(FacetName.SOURCE, "Twitter"))
        engine.dispatch(InteractionRequest.toggle_all(FacetName.URGENCY, ["High", "Low"]))

        assert engine.selection(FacetName.SOURCE) == {"Twitter"}
        assert engine.selection(FacetName.URGENCY) == {"High", "Low"}

        engine.dispatch(InteractionRequest.clear_all())
        assert engine.state.is_empty()

    def test_requests_validate_their_fields(self):
        with pytest.raises(ValueError):
            InteractionRequest(action=ActionType.TOGGLE_VALUE, facet=FacetName.SOURCE)
        with pytest.raises(ValueError):
            InteractionRequest(action=ActionType.TOGGLE_ALL)

    def test_from_selections(self):
        engine = FilterEngine.from_selections({"source": ["Twitter"], "theme": []})

        assert engine.selection(FacetName.SOURCE) == {"Twitter"}
        assert engine.state.snapshot()["theme"] == []

    def test_from_selections_rejects_unknown_facet(self):
        with pytest.raises(ValueError):
            FilterEngine.from_selections({"colour": ["red"]})
