"""
Filter Engine

Facet selection state and the filtered view it produces.

SEMANTICS:
==========
- OR within a facet: a record passes a facet if its value is selected
- AND across facets: a record must pass every facet with a selection
- Empty selection == no constraint ("show all")
- Annotation-derived facets impose no constraint until annotations arrive

OWNERSHIP:
==========
State lives on a FilterEngine instance, never at module level. One engine per
view; the presentation layer is its only mutator.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from backend.contracts.records import (
    EnrichedRecord,
    FacetName,
    FACET_ORDER,
    facet_value,
)
from backend.query.facets import FacetIndex, FacetOption
from frontend.interaction.facets import ActionType, InteractionRequest


class SelectionState(Enum):
    """Tri-state facet selection summary."""
    NONE = "none"
    PARTIAL = "partial"
    ALL = "all"


@dataclass(frozen=True)
class FacetSummary:
    """Options for one facet with their selection flags. Read-only, derived."""
    facet: FacetName
    options: Tuple[FacetOption, ...]
    selected: FrozenSet[str]
    state: SelectionState

    def is_selected(self, value: str) -> bool:
        return value in self.selected

    def to_dict(self) -> dict:
        return {
            "facet": self.facet.value,
            "state": self.state.value,
            "options": [
                {"value": o.value, "count": o.count, "selected": o.value in self.selected}
                for o in self.options
            ],
        }


class FacetState:
    """Mapping facet -> set of selected values. Starts empty for every facet."""

    def __init__(self):
        self._selected: Dict[FacetName, Set[str]] = {facet: set() for facet in FACET_ORDER}

    def __getitem__(self, facet: FacetName) -> Set[str]:
        return self._selected[FacetName(facet)]

    def __setitem__(self, facet: FacetName, values: Iterable[str]):
        self._selected[FacetName(facet)] = set(values)

    def items(self):
        return self._selected.items()

    def is_empty(self) -> bool:
        return not any(self._selected.values())

    def clear(self):
        for values in self._selected.values():
            values.clear()

    def snapshot(self) -> Dict[str, List[str]]:
        return {facet.value: sorted(values) for facet, values in self._selected.items()}


class FilterEngine:
    """
    Owns one FacetState and computes the filtered record subset.

    GUARANTEES:
    ===========
    1. apply() never mutates or reorders its input
    2. Adding a value to a facet's selection never grows the AND-composed output
    3. Double toggle is a no-op
    """

    def __init__(self, state: Optional[FacetState] = None):
        self._state = state or FacetState()

    @classmethod
    def from_selections(cls, selections: Mapping[str, Iterable[str]]) -> FilterEngine:
        """Seed an engine from a {facet: values} mapping, e.g. off the wire."""
        engine = cls()
        for facet, values in selections.items():
            engine._state[FacetName(facet)] = values
        return engine

    @property
    def state(self) -> FacetState:
        return self._state

    def selection(self, facet: FacetName) -> FrozenSet[str]:
        return frozenset(self._state[facet])

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def toggle(self, facet: FacetName, value: str):
        selected = self._state[facet]
        if value in selected:
            selected.remove(value)
        else:
            selected.add(value)

    def select_all(self, facet: FacetName, all_values: Iterable[str]):
        """
        The "All" button: a toggle, not a plain select-all.

        Every value already selected -> clear the facet.
        Otherwise -> select exactly `all_values`.
        """
        all_values = set(all_values)
        selected = self._state[facet]
        if all_values <= selected:
            self._state[facet] = ()
        else:
            self._state[facet] = all_values

    def clear_all(self):
        self._state.clear()

    def dispatch(self, request: InteractionRequest):
        """Apply one presentation event."""
        if request.action is ActionType.TOGGLE_VALUE:
            self.toggle(request.facet, request.value)
        elif request.action is ActionType.TOGGLE_ALL:
            self.select_all(request.facet, request.all_values)
        elif request.action is ActionType.CLEAR_ALL:
            self.clear_all()
        else:
            raise ValueError(f"Unknown action: {request.action}")

    # =========================================================================
    # DERIVATIONS
    # =========================================================================

    def apply(
        self,
        enriched: Sequence[EnrichedRecord],
        annotated: bool = True
    ) -> List[EnrichedRecord]:
        """
        Records passing every active facet, in input order.

        With annotated=False, theme/sentiment/urgency selections are ignored.
        """
        active = [
            (facet, frozenset(values))
            for facet, values in self._state.items()
            if values and (annotated or not facet.needs_annotations)
        ]
        if not active:
            return list(enriched)

        return [
            record for record in enriched
            if all(facet_value(record, facet) in values for facet, values in active)
        ]

    def summarize(self, facet: FacetName, all_values: Sequence[str]) -> SelectionState:
        selected = self._state[facet]
        if not selected:
            return SelectionState.NONE
        if len(selected) == len(all_values):
            return SelectionState.ALL
        return SelectionState.PARTIAL

    def summaries(self, facet_index: FacetIndex) -> Dict[FacetName, FacetSummary]:
        """FacetSummary for every facet, recomputed from current state."""
        result = {}
        for facet in FACET_ORDER:
            values = facet_index.values(facet)
            result[facet] = FacetSummary(
                facet=facet,
                options=facet_index.options(facet),
                selected=self.selection(facet),
                state=self.summarize(facet, values),
            )
        return result
