"""
Record Contracts

Feedback records as the store provides them, and the enriched records the
rest of the backend works with.

BOUNDARY ENFORCEMENT:
=====================
- FeedbackRecord is owned by the record store; the backend never mutates it
- EnrichedRecord is DERIVED: always rebuilt from (record, annotation)
- Facet projections are the only way to read a facet value off a record
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict

from adapter.contracts import (
    Annotation,
    RecordId,
    Sentiment,
    Urgency,
    id_key,
)


# =============================================================================
# RAW RECORD
# =============================================================================

@dataclass(frozen=True)
class FeedbackRecord:
    """
    One piece of free-text feedback.

    `id` is unique within a batch. `timestamp` is timezone-aware (UTC when
    the source gave no offset).
    """
    id: RecordId
    source: str
    message: str
    timestamp: datetime

    @property
    def key(self) -> str:
        return id_key(self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "source": self.source,
            "message": self.message,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
        }

    @staticmethod
    def from_row(row: dict) -> FeedbackRecord:
        """
        Build a record from a store row.

        Raises KeyError/ValueError on malformed rows; stores translate those
        into RecordStoreError.
        """
        return FeedbackRecord(
            id=row["id"],
            source=str(row["source"]),
            message=str(row["message"]),
            timestamp=parse_timestamp(row["timestamp"]),
        )


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 string (trailing 'Z' allowed) or pass a datetime through."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# ENRICHED RECORD
# =============================================================================

@dataclass(frozen=True)
class EnrichedRecord:
    """
    FeedbackRecord combined with its annotation (real or default).

    `annotated` is False when the annotation is the default substitute.
    """
    record: FeedbackRecord
    annotation: Annotation
    annotated: bool

    @property
    def id(self) -> RecordId:
        return self.record.id

    @property
    def source(self) -> str:
        return self.record.source

    @property
    def message(self) -> str:
        return self.record.message

    @property
    def timestamp(self) -> datetime:
        return self.record.timestamp

    @property
    def theme(self) -> str:
        return self.annotation.theme

    @property
    def sentiment(self) -> Sentiment:
        return self.annotation.sentiment

    @property
    def urgency(self) -> Urgency:
        return self.annotation.urgency

    def to_dict(self) -> dict:
        payload = self.record.to_dict()
        payload.update({
            "theme": self.theme,
            "sentiment": self.sentiment.value,
            "urgency": self.urgency.value,
            "annotated": self.annotated,
        })
        return payload


# =============================================================================
# FACETS
# =============================================================================

class FacetName(str, Enum):
    """Dimensions a view can be filtered along."""
    SOURCE = "source"
    THEME = "theme"
    SENTIMENT = "sentiment"
    URGENCY = "urgency"

    @property
    def needs_annotations(self) -> bool:
        """Facets whose values come from the model rather than the store."""
        return self is not FacetName.SOURCE


FACET_ORDER = (
    FacetName.SOURCE,
    FacetName.THEME,
    FacetName.SENTIMENT,
    FacetName.URGENCY,
)


# Projections return plain strings so selections can come straight off the wire
FACET_PROJECTIONS: Dict[FacetName, Callable[[EnrichedRecord], str]] = {
    FacetName.SOURCE: lambda r: r.source,
    FacetName.THEME: lambda r: r.theme,
    FacetName.SENTIMENT: lambda r: r.sentiment.value,
    FacetName.URGENCY: lambda r: r.urgency.value,
}


def facet_value(record: EnrichedRecord, facet: FacetName) -> str:
    """Project one facet value off an enriched record."""
    return FACET_PROJECTIONS[FacetName(facet)](record)
