"""
Backend to ViewModel Mapper

Converts enriched records and facet summaries into read-only view models.

MAPPING BOUNDARY:
=================
This is the ONLY place where backend records become view models.

MAPPING RULES:
==============
1. Preserve backend ordering (records and facet options)
2. Default annotations are flagged MISSING or PENDING, never PRESENT
3. Model facets are disabled until annotations arrive
"""

from __future__ import annotations
from dataclasses import asdict
from enum import Enum
from typing import Dict, Optional, Sequence

from backend.contracts.records import EnrichedRecord, FacetName, FACET_ORDER
from frontend.dtos import AvailabilityState, DTOVersion, OrderingBasis
from frontend.presentation.viewmodels import (
    FeedbackCardViewModel,
    FacetOptionViewModel,
    FacetControlViewModel,
    FeedbackViewModel,
)
from frontend.state.filters import FacetSummary


FACET_LABELS = {
    FacetName.SOURCE: "Source",
    FacetName.THEME: "Theme",
    FacetName.SENTIMENT: "Sentiment",
    FacetName.URGENCY: "Urgency",
}


class ViewModelMapper:
    """
    Maps backend records to view models.

    SINGLE POINT OF CONVERSION:
    ===========================
    All backend -> renderer conversion goes through this class.
    """

    def map_card(self, record: EnrichedRecord, annotated_view: bool) -> FeedbackCardViewModel:
        if record.annotated:
            availability = AvailabilityState.PRESENT
        elif annotated_view:
            availability = AvailabilityState.MISSING
        else:
            availability = AvailabilityState.PENDING

        return FeedbackCardViewModel(
            record_id=str(record.id),
            source=record.source,
            message=record.message,
            timestamp=record.timestamp.isoformat().replace("+00:00", "Z"),
            theme=record.theme,
            sentiment=record.sentiment.value,
            urgency=record.urgency.value,
            annotation=availability,
            sentiment_tone=record.sentiment.value.lower(),
            urgency_tone=record.urgency.value.lower(),
        )

    def map_facet(self, summary: FacetSummary, annotated_view: bool) -> FacetControlViewModel:
        return FacetControlViewModel(
            facet=summary.facet.value,
            label=FACET_LABELS[summary.facet],
            options=tuple(
                FacetOptionViewModel(
                    value=o.value,
                    count=o.count,
                    is_selected=summary.is_selected(o.value),
                )
                for o in summary.options
            ),
            all_state=summary.state.value,
            is_enabled=annotated_view or not summary.facet.needs_annotations,
            ordering_basis=OrderingBasis.FIRST_SEEN,
        )

    def map_view(
        self,
        enriched: Sequence[EnrichedRecord],
        filtered: Sequence[EnrichedRecord],
        summaries: Dict[FacetName, FacetSummary],
        annotated_view: bool,
        diagnostic: Optional[str] = None,
    ) -> FeedbackViewModel:
        return FeedbackViewModel(
            dto_version=DTOVersion.current(),
            cards=tuple(self.map_card(r, annotated_view) for r in filtered),
            facets=tuple(self.map_facet(summaries[f], annotated_view) for f in FACET_ORDER),
            total_count=len(enriched),
            shown_count=len(filtered),
            diagnostic=diagnostic,
        )


def to_payload(view: FeedbackViewModel) -> dict:
    """JSON-safe dict for a view model (enums flattened to their values)."""
    return asdict(view, dict_factory=_enum_safe_dict)


def _enum_safe_dict(items) -> dict:
    return {key: value.value if isinstance(value, Enum) else value for key, value in items}
