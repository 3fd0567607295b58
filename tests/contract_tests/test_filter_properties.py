"""
Property Tests for Merge, Facet and Filter Contracts
Verifies join length, first-wins determinism, filter monotonicity and the
tri-state summary over generated record sets.
"""

from datetime import datetime, timedelta, timezone

from hypothesis import given, settings, strategies as st
from hypothesis.strategies import composite

from adapter.contracts import Annotation, Sentiment, Urgency
from adapter.extractor import AnnotationExtractor
from backend.contracts.records import FACET_ORDER, FacetName, FeedbackRecord
from backend.core.merger import merge
from backend.query.facets import FacetIndex
from frontend.state.filters import FilterEngine, SelectionState

# =============================================================================
# STRATEGIES (Generators)
# =============================================================================

SOURCES = st.sampled_from(["Twitter", "Support Email", "GitHub", "Discord", "Community Forum"])
THEMES = st.sampled_from(["Billing", "Performance", "Docs", "UI"])


@composite
def record_sets(draw):
    """Records with unique ids, in arbitrary store order."""
    ids = draw(st.lists(st.integers(min_value=1, max_value=500), unique=True, max_size=30))
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return [
        FeedbackRecord(
            id=record_id,
            source=draw(SOURCES),
            message=draw(st.text(max_size=40)),
            timestamp=base + timedelta(minutes=draw(st.integers(min_value=0, max_value=10_000))),
        )
        for record_id in ids
    ]


@composite
def annotation_lists(draw, max_id=500):
    """Annotations that may omit, duplicate or invent ids."""
    return draw(st.lists(
        st.builds(
            Annotation,
            id=st.integers(min_value=1, max_value=max_id),
            theme=THEMES,
            sentiment=st.sampled_from(Sentiment),
            urgency=st.sampled_from(Urgency),
        ),
        max_size=40,
    ))


@composite
def selections(draw):
    """Arbitrary (facet, value) toggles."""
    values = st.sampled_from([
        "Twitter", "GitHub", "Discord", "Billing", "Docs",
        "Positive", "Negative", "Neutral", "High", "Low", "Unknown",
    ])
    return draw(st.lists(st.tuples(st.sampled_from(FACET_ORDER), values), max_size=8))


# =============================================================================
# MERGE PROPERTIES
# =============================================================================

@settings(deadline=None)
@given(record_sets(), annotation_lists())
def test_merge_preserves_length_and_order(records, annotations):
    enriched = merge(records, annotations)

    assert [e.id for e in enriched] == [r.id for r in records]


@settings(deadline=None)
@given(record_sets(), annotation_lists())
def test_merge_first_annotation_wins(records, annotations):
    enriched = merge(records, annotations)

    for record in enriched:
        matches = [a for a in annotations if a.key == str(record.id)]
        if matches:
            assert record.annotated
            assert record.annotation == matches[0]
        else:
            assert record.annotation == Annotation.default_for(record.id)


@settings(deadline=None)
@given(record_sets(), annotation_lists())
def test_merge_is_deterministic(records, annotations):
    assert merge(records, annotations) == merge(records, annotations)


# =============================================================================
# FACET PROPERTIES
# =============================================================================

@settings(deadline=None)
@given(record_sets(), annotation_lists())
def test_facet_counts_cover_every_record(records, annotations):
    facets = FacetIndex(merge(records, annotations))

    for facet in FACET_ORDER:
        values = facets.values(facet)
        assert len(values) == len(set(values))
        assert sum(o.count for o in facets.options(facet)) == len(records)


# =============================================================================
# FILTER PROPERTIES
# =============================================================================

@settings(deadline=None)
@given(record_sets(), annotation_lists(), selections())
def test_filter_output_is_ordered_subset(records, annotations, toggles):
    enriched = merge(records, annotations)
    engine = FilterEngine()
    for facet, value in toggles:
        engine.toggle(facet, value)

    result = engine.apply(enriched)

    positions = [enriched.index(r) for r in result]
    assert positions == sorted(positions)


@settings(deadline=None)
@given(record_sets(), annotation_lists(), selections(), st.sampled_from(FACET_ORDER), st.text(max_size=10))
def test_adding_a_constraint_never_grows_output(records, annotations, toggles, facet, value):
    """A facet going from unconstrained to constrained can only shrink the result."""
    enriched = merge(records, annotations)
    engine = FilterEngine()
    for toggled_facet, toggled_value in toggles:
        engine.toggle(toggled_facet, toggled_value)

    if engine.selection(facet):
        return
    before = engine.apply(enriched)
    engine.toggle(facet, value)

    assert len(engine.apply(enriched)) <= len(before)


@settings(deadline=None)
@given(
    record_sets(), annotation_lists(), selections(),
    st.sampled_from(FACET_ORDER), st.text(max_size=10), st.text(max_size=10),
)
def test_widening_a_facet_never_shrinks_output(records, annotations, toggles, facet, seed, extra):
    """Adding a value to an already-constrained facet keeps or grows the result."""
    enriched = merge(records, annotations)
    engine = FilterEngine()
    for toggled_facet, toggled_value in toggles:
        engine.toggle(toggled_facet, toggled_value)
    if seed not in engine.selection(facet):
        engine.toggle(facet, seed)
    if extra in engine.selection(facet):
        return

    before = engine.apply(enriched)
    engine.toggle(facet, extra)
    after = engine.apply(enriched)

    assert [r for r in after if r in before] == before
    positions = [enriched.index(r) for r in after]
    assert positions == sorted(positions)


@settings(deadline=None)
@given(record_sets(), annotation_lists(), selections())
def test_double_toggle_is_identity(records, annotations, toggles):
    enriched = merge(records, annotations)
    engine = FilterEngine()
    before = engine.apply(enriched)

    for facet, value in toggles:
        engine.toggle(facet, value)
    for facet, value in reversed(toggles):
        engine.toggle(facet, value)

    assert engine.apply(enriched) == before


@settings(deadline=None)
@given(record_sets(), annotation_lists(), selections())
def test_model_facets_ignored_until_annotated(records, annotations, toggles):
    enriched = merge(records, annotations)
    engine = FilterEngine()
    source_only = FilterEngine()
    for facet, value in toggles:
        engine.toggle(facet, value)
        if facet is FacetName.SOURCE:
            source_only.toggle(facet, value)

    assert engine.apply(enriched, annotated=False) == source_only.apply(enriched)


@given(st.lists(st.text(min_size=1, max_size=5), unique=True, min_size=1, max_size=6), st.data())
def test_summarize_tri_state(all_values, data):
    engine = FilterEngine()
    chosen = data.draw(st.lists(st.sampled_from(all_values), unique=True))
    for value in chosen:
        engine.toggle(FacetName.THEME, value)

    state = engine.summarize(FacetName.THEME, all_values)

    if not chosen:
        assert state is SelectionState.NONE
    elif len(chosen) == len(all_values):
        assert state is SelectionState.ALL
    else:
        assert state is SelectionState.PARTIAL


@given(st.lists(st.text(min_size=1, max_size=5), unique=True, min_size=1, max_size=6))
def test_toggle_all_twice_returns_to_empty(all_values):
    engine = FilterEngine()

    engine.select_all(FacetName.SOURCE, all_values)
    engine.select_all(FacetName.SOURCE, all_values)

    assert engine.selection(FacetName.SOURCE) == frozenset()


# =============================================================================
# EXTRACTOR PROPERTIES
# =============================================================================

@given(st.text(max_size=200))
def test_extractor_never_raises(raw):
    result = AnnotationExtractor().extract(raw, [1, 2, 3])

    assert isinstance(result.diagnostic, str)
    for annotation in result.annotations:
        assert isinstance(annotation.sentiment, Sentiment)
        assert isinstance(annotation.urgency, Urgency)
