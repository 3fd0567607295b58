"""
Contracts Module

Data types shared between backend layers. All inter-layer communication
uses these contracts.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. Derived types are rebuilt, never mutated
3. All timestamps are timezone-aware
"""

from .records import (
    FeedbackRecord,
    EnrichedRecord,
    FacetName,
    FACET_ORDER,
    FACET_PROJECTIONS,
    facet_value,
    parse_timestamp,
)

__all__ = [
    'FeedbackRecord', 'EnrichedRecord', 'FacetName', 'FACET_ORDER',
    'FACET_PROJECTIONS', 'facet_value', 'parse_timestamp',
]
