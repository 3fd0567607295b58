"""
Presentation Contracts

Responsibility:
Define ViewModel contracts for the external renderer.
Strictly decoupled from filtering logic: every flag here is precomputed.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from frontend.dtos import AvailabilityState, DTOVersion, OrderingBasis


@dataclass(frozen=True)
class FeedbackCardViewModel:
    """ViewModel for one feedback card."""
    record_id: str
    source: str
    message: str
    timestamp: str
    theme: str
    sentiment: str
    urgency: str
    annotation: AvailabilityState
    sentiment_tone: str    # e.g., "negative" -> renderer colour key
    urgency_tone: str


@dataclass(frozen=True)
class FacetOptionViewModel:
    """One checkbox in a facet menu."""
    value: str
    count: int
    is_selected: bool


@dataclass(frozen=True)
class FacetControlViewModel:
    """ViewModel for one facet menu, including its "All" toggle."""
    facet: str
    label: str
    options: Tuple[FacetOptionViewModel, ...]
    all_state: str         # "none" | "partial" | "all"
    is_enabled: bool       # False for model facets before annotations arrive
    ordering_basis: OrderingBasis


@dataclass(frozen=True)
class FeedbackViewModel:
    """Everything the renderer needs for one frame."""
    dto_version: DTOVersion
    cards: Tuple[FeedbackCardViewModel, ...]
    facets: Tuple[FacetControlViewModel, ...]
    total_count: int
    shown_count: int
    diagnostic: Optional[str]

    def __post_init__(self):
        if self.dto_version != DTOVersion.current():
            raise ValueError(f"Unknown DTO version: {self.dto_version}")
