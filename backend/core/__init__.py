"""
Core Layer

RESPONSIBILITY: Record/annotation join and annotation lifecycle
ALLOWED INPUTS: FeedbackRecord, Annotation
OUTPUTS: EnrichedRecord, LifecycleState

WHAT THIS LAYER MUST NOT DO:
============================
- Fail on data-quality anomalies (missing, duplicate, unknown ids)
- Mutate records or annotations
- Call the model or the store
"""

from .merger import AnnotationMerger, merge, index_annotations
from .lifecycle import AnnotationLifecycle, LifecycleState, LifecycleError

__all__ = [
    'AnnotationMerger', 'merge', 'index_annotations',
    'AnnotationLifecycle', 'LifecycleState', 'LifecycleError',
]
