"""
Query Layer

RESPONSIBILITY: Read-only facet derivations over enriched records
ALLOWED INPUTS: EnrichedRecord, FeedbackRecord
OUTPUTS: Ordered (value, count) facet options

WHAT THIS LAYER MUST NOT DO:
============================
- Mutate any state
- Sort or rank facet values (first-seen order only)
- Depend on the current filter selection
"""

from .facets import FacetIndex, FacetOption, index, index_all, counts_by_source

__all__ = ['FacetIndex', 'FacetOption', 'index', 'index_all', 'counts_by_source']
