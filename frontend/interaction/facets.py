"""
Facet Interaction Contracts

Responsibility:
Define the selection-change events the presentation layer raises.
No execution logic - FilterEngine.dispatch() applies them one at a time.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from backend.contracts.records import FacetName


class ActionType(Enum):
    """Types of facet interaction."""
    TOGGLE_VALUE = "toggle_value"
    TOGGLE_ALL = "toggle_all"
    CLEAR_ALL = "clear_all"


@dataclass(frozen=True)
class InteractionRequest:
    """A specific user intent against the filter state."""
    action: ActionType
    facet: Optional[FacetName] = None
    value: Optional[str] = None
    all_values: Tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source_component: str = "facet_panel"

    def __post_init__(self):
        if self.action is not ActionType.CLEAR_ALL and self.facet is None:
            raise ValueError(f"{self.action.value} requires a facet")
        if self.action is ActionType.TOGGLE_VALUE and self.value is None:
            raise ValueError("toggle_value requires a value")

    @staticmethod
    def toggle(facet: FacetName, value: str) -> InteractionRequest:
        return InteractionRequest(action=ActionType.TOGGLE_VALUE, facet=FacetName(facet), value=value)

    @staticmethod
    def toggle_all(facet: FacetName, all_values) -> InteractionRequest:
        return InteractionRequest(
            action=ActionType.TOGGLE_ALL,
            facet=FacetName(facet),
            all_values=tuple(all_values),
        )

    @staticmethod
    def clear_all() -> InteractionRequest:
        return InteractionRequest(action=ActionType.CLEAR_ALL)
