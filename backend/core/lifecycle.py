"""
Annotation Lifecycle
====================

Two-state machine tracking whether annotations have arrived for a view.

    UNANNOTATED --complete(non-empty)--> ANNOTATED

The transition fires at most once. An empty annotation list keeps the view
UNANNOTATED, which is a valid terminal state. There is no way back.
"""

from __future__ import annotations
from enum import Enum
from typing import Sequence, Tuple

from adapter.contracts import Annotation


class LifecycleState(Enum):
    UNANNOTATED = "unannotated"
    ANNOTATED = "annotated"


class LifecycleError(Exception):
    """Raised when the annotation fetch is completed twice for one view."""


class AnnotationLifecycle:
    """
    Per-view annotation state.

    `annotations` is empty until the transition fires.
    """

    def __init__(self):
        self._state = LifecycleState.UNANNOTATED
        self._completed = False
        self._annotations: Tuple[Annotation, ...] = ()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_annotated(self) -> bool:
        return self._state is LifecycleState.ANNOTATED

    @property
    def completed(self) -> bool:
        """True once an annotation fetch has finished, whatever its outcome."""
        return self._completed

    @property
    def annotations(self) -> Tuple[Annotation, ...]:
        return self._annotations

    def complete(self, annotations: Sequence[Annotation]) -> LifecycleState:
        """
        Record the outcome of the (single) annotation fetch.

        Raises LifecycleError if called twice: at most one annotation call
        may be in flight per view.
        """
        if self._completed:
            raise LifecycleError("Annotation fetch already completed for this view")
        self._completed = True

        if annotations:
            self._annotations = tuple(annotations)
            self._state = LifecycleState.ANNOTATED
        return self._state
