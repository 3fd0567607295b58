"""
Adapter Contracts

Typed schemas for the boundary between the feedback backend and the
language model.

BOUNDARY ENFORCEMENT:
=====================
- All types are FROZEN (immutable)
- Model output is ADVISORY: annotations label records, never replace them
- Unusable model output degrades to DEFAULT_ANNOTATION, never to an exception

WHY SEPARATE CONTRACTS:
=======================
Backend contracts (backend/contracts/) describe records as the store sees them.
These adapter contracts describe what the model is asked for and what comes
back. The model shape never reaches the store.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union
from enum import Enum
from datetime import datetime


RecordId = Union[int, str]


def id_key(value: RecordId) -> str:
    """
    Canonical join key for record identifiers.

    Models routinely echo numeric ids back as strings ("1" for 1).
    """
    return str(value).strip()


# =============================================================================
# LABEL ENUMS
# =============================================================================

class Sentiment(str, Enum):
    """Sentiment label. Unknown values coerce to NEUTRAL."""
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"

    @classmethod
    def coerce(cls, raw: object) -> Sentiment:
        return _coerce_enum(cls, raw, cls.NEUTRAL)


class Urgency(str, Enum):
    """Urgency label. Unknown values coerce to MEDIUM."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def coerce(cls, raw: object) -> Urgency:
        return _coerce_enum(cls, raw, cls.MEDIUM)


def _coerce_enum(enum_cls, raw: object, default):
    if isinstance(raw, enum_cls):
        return raw
    if not isinstance(raw, str):
        return default
    wanted = raw.strip().lower()
    for member in enum_cls:
        if member.value.lower() == wanted:
            return member
    return default


DEFAULT_THEME = "Unknown"


# =============================================================================
# ANNOTATION
# =============================================================================

@dataclass(frozen=True)
class Annotation:
    """
    Model-produced labels for a single feedback record.

    Referential integrity is NOT guaranteed: the model may hallucinate,
    omit or duplicate ids. Consumers join by id_key() and tolerate
    zero or one match.
    """
    id: RecordId
    theme: str
    sentiment: Sentiment
    urgency: Urgency

    @property
    def key(self) -> str:
        return id_key(self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "theme": self.theme,
            "sentiment": self.sentiment.value,
            "urgency": self.urgency.value,
        }

    @staticmethod
    def default_for(record_id: RecordId) -> Annotation:
        """DEFAULT_ANNOTATION bound to a record; used when the model said nothing usable."""
        return replace(DEFAULT_ANNOTATION, id=record_id)


# Id-less template; Annotation.default_for() binds it to a record
DEFAULT_ANNOTATION = Annotation(
    id="",
    theme=DEFAULT_THEME,
    sentiment=Sentiment.NEUTRAL,
    urgency=Urgency.MEDIUM,
)


# =============================================================================
# ERROR TYPES
# =============================================================================

class ModelErrorCode(Enum):
    """
    Explicit codes for model-call failures.

    Every failure mode is queryable on the batch result even though the
    caller always receives a usable (default) annotation list.
    """
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    INVALID_OUTPUT = "invalid_output"
    EMPTY_OUTPUT = "empty_output"
    PROVIDER_ERROR = "provider_error"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class ModelError:
    """Model-call failure with enough context to debug it."""
    error_code: ModelErrorCode
    message: str
    invocation_id: str
    occurred_at: datetime


# =============================================================================
# INPUT CONTRACTS (Backend -> Model)
# =============================================================================

@dataclass(frozen=True)
class RecordBatchInput:
    """
    Batch of serialized records sent to the model in one prompt.

    WHY A BATCH:
    The model labels records in one call; batch size is capped by the caller
    to bound prompt size and latency.
    """
    batch_id: str
    record_ids: Tuple[RecordId, ...]
    serialized_records: Tuple[str, ...]  # One JSON object per record
    truncated_count: int = 0             # Records left out by the cap

    def __len__(self) -> int:
        return len(self.record_ids)


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

@dataclass(frozen=True)
class ExtractionResult:
    """
    Output of AnnotationExtractor.extract().

    An empty annotation tuple with a diagnostic is a terminal soft-failure,
    not an error.
    """
    annotations: Tuple[Annotation, ...]
    diagnostic: str

    @property
    def succeeded(self) -> bool:
        return len(self.annotations) > 0


@dataclass(frozen=True)
class AnnotationBatchResult:
    """
    Result of one annotation pipeline run.

    INVARIANT: `annotations` is always usable. When the model call or the
    parse failed, it holds a default annotation for every input record and
    `error` says why.
    """
    invocation_id: str
    annotations: Tuple[Annotation, ...]
    diagnostic: str
    fallback: bool = False
    error: Optional[ModelError] = None
    record_ids: Tuple[RecordId, ...] = field(default_factory=tuple)
    processing_time_ms: float = 0.0

    def to_payload(self) -> dict:
        """Wire shape for the analyze endpoint."""
        return {
            "annotations": [a.to_dict() for a in self.annotations],
            "diagnostic": self.diagnostic,
        }
