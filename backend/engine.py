"""
Engine Orchestration Module

Unified interface coordinating the record store, the annotation pipeline,
the merger and the facet index for one feedback view.

DATA FLOW:
==========
RecordStore -> AnnotationPipeline (model call) -> AnnotationMerger
            -> FacetIndex -> (FilterEngine, owned by the caller)

DESIGN PRINCIPLES:
==================
1. Record fetch is synchronous and must succeed before anything is produced
2. Annotation is a separate, later step; at most one per view
3. Merger output and facet index are rebuilt only when annotations arrive
4. Only store failures propagate; model trouble degrades to defaults
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence
import logging
import os

from adapter.contracts import Annotation, AnnotationBatchResult
from adapter.pipeline import AnnotationPipeline, InvocationConfig, default_annotations
from adapter.providers import LLMProvider, MockProvider, WorkersAIProvider
from adapter.providers.workers_ai import DEFAULT_MODEL_ID

from .contracts.records import EnrichedRecord, FeedbackRecord
from .core.lifecycle import AnnotationLifecycle, LifecycleState
from .core.merger import AnnotationMerger
from .query.facets import FacetIndex, counts_by_source, index_all
from .storage import RecordStore, create_store


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class BackendConfig:
    """Unified configuration for the feedback backend."""
    store_kind: str = "memory"            # "memory" | "json" | "sqlite"
    data_path: Optional[Path] = None
    provider_kind: str = "mock"           # "mock" | "workers_ai"
    account_id: Optional[str] = None
    api_token: Optional[str] = None
    model_id: str = DEFAULT_MODEL_ID
    invocation: Optional[InvocationConfig] = None

    def __post_init__(self):
        self.invocation = self.invocation or InvocationConfig()
        if self.data_path is not None:
            self.data_path = Path(self.data_path)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> BackendConfig:
        """
        Read configuration from environment variables.

        FEEDBACK_STORE, FEEDBACK_DATA_PATH, FEEDBACK_PROVIDER, CF_ACCOUNT_ID,
        CF_API_TOKEN, FEEDBACK_MODEL_ID, FEEDBACK_BATCH_LIMIT,
        FEEDBACK_MODEL_TIMEOUT
        """
        env = os.environ if environ is None else environ
        data_path = env.get("FEEDBACK_DATA_PATH")

        return cls(
            store_kind=env.get("FEEDBACK_STORE", "memory"),
            data_path=Path(data_path) if data_path else None,
            provider_kind=env.get("FEEDBACK_PROVIDER", "mock"),
            account_id=env.get("CF_ACCOUNT_ID"),
            api_token=env.get("CF_API_TOKEN"),
            model_id=env.get("FEEDBACK_MODEL_ID", DEFAULT_MODEL_ID),
            invocation=InvocationConfig(
                timeout_seconds=float(env.get("FEEDBACK_MODEL_TIMEOUT", "30")),
                max_batch_size=int(env.get("FEEDBACK_BATCH_LIMIT", "20")),
            ),
        )

    def build_store(self) -> RecordStore:
        return create_store(self.store_kind, self.data_path)

    def build_provider(self) -> LLMProvider:
        if self.provider_kind == "mock":
            return MockProvider()
        if self.provider_kind == "workers_ai":
            return WorkersAIProvider(
                account_id=self.account_id,
                api_token=self.api_token,
                model_id=self.model_id,
            )
        raise ValueError(f"Unknown model provider: {self.provider_kind}")


# =============================================================================
# VIEW
# =============================================================================

class FeedbackView:
    """
    One page view: fetched records plus the annotation state for them.

    `enriched` and `facets` start from default annotations and are rebuilt
    exactly once, when annotations arrive.
    """

    def __init__(self, records: Sequence[FeedbackRecord], merger: Optional[AnnotationMerger] = None):
        self._records = tuple(records)
        self._merger = merger or AnnotationMerger()
        self._lifecycle = AnnotationLifecycle()
        self._diagnostic: Optional[str] = None
        self._rebuild(())

    @property
    def records(self) -> tuple:
        return self._records

    @property
    def enriched(self) -> List[EnrichedRecord]:
        return list(self._enriched)

    @property
    def facets(self) -> FacetIndex:
        return self._facets

    @property
    def lifecycle(self) -> AnnotationLifecycle:
        return self._lifecycle

    @property
    def annotated(self) -> bool:
        return self._lifecycle.is_annotated

    @property
    def diagnostic(self) -> Optional[str]:
        return self._diagnostic

    def summary(self) -> dict:
        return {
            "totalFeedback": len(self._records),
            "countsBySource": counts_by_source(self._records),
        }

    def default_annotations(self) -> List[Annotation]:
        return list(default_annotations([r.id for r in self._records]))

    def apply_annotations(self, annotations: Sequence[Annotation], diagnostic: str = "") -> LifecycleState:
        """Complete the annotation step and rebuild derived state once."""
        state = self._lifecycle.complete(annotations)
        self._diagnostic = diagnostic
        if state is LifecycleState.ANNOTATED:
            self._rebuild(self._lifecycle.annotations)
        return state

    def annotate(self, pipeline: AnnotationPipeline) -> AnnotationBatchResult:
        result = pipeline.annotate(self._records)
        self.apply_annotations(result.annotations, result.diagnostic)
        return result

    def _rebuild(self, annotations: Sequence[Annotation]):
        self._enriched = tuple(self._merger.merge(self._records, annotations))
        self._facets = index_all(self._enriched)


# =============================================================================
# ENGINE
# =============================================================================

class FeedbackViewEngine:
    """
    Orchestrates store and pipeline for the query surface.

    Stateless across requests: each call builds its own view.
    """

    def __init__(
        self,
        config: Optional[BackendConfig] = None,
        store: Optional[RecordStore] = None,
        provider: Optional[LLMProvider] = None,
    ):
        self._config = config or BackendConfig()
        self._store = store or self._config.build_store()
        self._pipeline = AnnotationPipeline(
            provider=provider or self._config.build_provider(),
            config=self._config.invocation,
        )

    @property
    def pipeline(self) -> AnnotationPipeline:
        return self._pipeline

    def fetch_records(self) -> List[FeedbackRecord]:
        """Raises RecordStoreError; never hides a store failure."""
        return self._store.fetch_records()

    def open_view(self) -> FeedbackView:
        records = self.fetch_records()
        logger.info("Opened feedback view with %d records", len(records))
        return FeedbackView(records)

    def analyze(self, records: Optional[Sequence[FeedbackRecord]] = None) -> AnnotationBatchResult:
        """Run the annotation pipeline over the store's records (or the given ones)."""
        if records is None:
            records = self.fetch_records()
        result = self._pipeline.annotate(records)
        logger.info(
            "Annotation %s: %d annotations%s",
            result.invocation_id, len(result.annotations),
            " (fallback)" if result.fallback else ""
        )
        return result
