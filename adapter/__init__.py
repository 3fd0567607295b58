"""
Model Adapter Package

ARCHITECTURAL BOUNDARY:
=======================
This package is the ONLY interface between the feedback backend and the
language model. All model traffic flows through AnnotationPipeline.

DIRECTION OF DEPENDENCY:
========================
backend -> adapter -> model provider

DESIGN PRINCIPLES:
==================
1. Typed request/response schemas only
2. Model outputs are ADVISORY labels, never record data
3. Unreliable model output degrades to default annotations, never to errors
"""

# Core contracts (always available)
from .contracts import (
    Annotation,
    Sentiment,
    Urgency,
    DEFAULT_ANNOTATION,
    ExtractionResult,
    AnnotationBatchResult,
    RecordBatchInput,
    ModelError,
    ModelErrorCode,
    id_key,
)

from .extractor import AnnotationExtractor, extract, locate_json_array

__all__ = [
    # Contracts
    'Annotation', 'Sentiment', 'Urgency', 'DEFAULT_ANNOTATION',
    'ExtractionResult', 'AnnotationBatchResult', 'RecordBatchInput',
    'ModelError', 'ModelErrorCode', 'id_key',
    # Extraction
    'AnnotationExtractor', 'extract', 'locate_json_array',
]
