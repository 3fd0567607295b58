"""
Facet Index
===========

Distinct values and occurrence counts per facet dimension.

ORDERING CONTRACT:
==================
Values appear in FIRST-SEEN input order, never sorted. Ties are not
resolved; order is purely by first occurrence.

COUNTS ARE TOTALS:
==================
The index is derived from the full enriched set and is NOT recomputed on
selection changes. Counts answer "how many in total", not "how many after
the current filters".
"""

from __future__ import annotations
from typing import Dict, Iterable, List, NamedTuple, Sequence, Tuple

from ..contracts.records import (
    EnrichedRecord,
    FacetName,
    FeedbackRecord,
    FACET_ORDER,
    facet_value,
)


class FacetOption(NamedTuple):
    """One selectable facet value with its total count. Unpacks as (value, count)."""
    value: str
    count: int


def _count_first_seen(values: Iterable[str]) -> List[FacetOption]:
    # dicts keep insertion order, which is exactly first-seen order
    counts: Dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return [FacetOption(value=v, count=c) for v, c in counts.items()]


class FacetIndex:
    """
    Per-facet option lists over one enriched record set.

    Build once per merger output; query as often as needed.
    """

    def __init__(self, enriched: Sequence[EnrichedRecord]):
        self._total = len(enriched)
        self._options: Dict[FacetName, Tuple[FacetOption, ...]] = {
            facet: tuple(index(enriched, facet)) for facet in FACET_ORDER
        }

    @property
    def total(self) -> int:
        return self._total

    def options(self, facet: FacetName) -> Tuple[FacetOption, ...]:
        return self._options[FacetName(facet)]

    def values(self, facet: FacetName) -> Tuple[str, ...]:
        """Distinct values for a facet, first-seen order."""
        return tuple(o.value for o in self.options(facet))

    def to_dict(self) -> Dict[str, List[dict]]:
        return {
            facet.value: [{"value": o.value, "count": o.count} for o in options]
            for facet, options in self._options.items()
        }


def index(enriched: Sequence[EnrichedRecord], facet: FacetName) -> List[FacetOption]:
    """Ordered (value, count) options for one facet."""
    facet = FacetName(facet)
    return _count_first_seen(facet_value(r, facet) for r in enriched)


def index_all(enriched: Sequence[EnrichedRecord]) -> FacetIndex:
    return FacetIndex(enriched)


def counts_by_source(records: Sequence[FeedbackRecord]) -> Dict[str, int]:
    """Record count per source over raw records, first-seen order."""
    return {o.value: o.count for o in _count_first_seen(r.source for r in records)}
