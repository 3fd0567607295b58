"""
Annotation Merger
=================

Joins feedback records with model annotations by identifier.

JOIN POLICY:
============
- Zero or one annotation per record, never "exactly one"
- Duplicate ids: the FIRST annotation in list order wins, later ones are ignored
- No match: the record gets the default annotation
- Annotations for ids that are not in the batch are ignored

This function never fails. Mismatches are data-quality issues resolved by
substitution, not errors.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Sequence

from adapter.contracts import Annotation
from ..contracts.records import EnrichedRecord, FeedbackRecord


def index_annotations(annotations: Iterable[Annotation]) -> Dict[str, Annotation]:
    """Build an id -> annotation index keeping the first occurrence of each id."""
    index: Dict[str, Annotation] = {}
    for annotation in annotations:
        index.setdefault(annotation.key, annotation)
    return index


class AnnotationMerger:
    """
    Deterministic record/annotation join.

    GUARANTEES:
    ===========
    1. len(output) == len(records), same order
    2. Same input order -> same output
    3. Output records are new objects; inputs are untouched
    """

    def merge(
        self,
        records: Sequence[FeedbackRecord],
        annotations: Sequence[Annotation]
    ) -> List[EnrichedRecord]:
        index = index_annotations(annotations)

        enriched = []
        for record in records:
            match = index.get(record.key)
            if match is None:
                enriched.append(EnrichedRecord(
                    record=record,
                    annotation=Annotation.default_for(record.id),
                    annotated=False,
                ))
            else:
                enriched.append(EnrichedRecord(
                    record=record,
                    annotation=match,
                    annotated=True,
                ))
        return enriched


def merge(
    records: Sequence[FeedbackRecord],
    annotations: Sequence[Annotation]
) -> List[EnrichedRecord]:
    """Functional form of AnnotationMerger.merge()."""
    return AnnotationMerger().merge(records, annotations)
