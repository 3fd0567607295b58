"""
State Access Layer

Responsibility:
Facet selection state for one view and the filtered subset it yields.

PRINCIPLES:
1. State is owned by a FilterEngine instance, never module-level
2. Derived summaries are read-only and recomputed on every change
3. No Rendering Logic
"""

from .filters import (
    FilterEngine, FacetState, FacetSummary, SelectionState
)

__all__ = [
    'FilterEngine', 'FacetState', 'FacetSummary', 'SelectionState',
]
