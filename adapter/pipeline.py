"""
Annotation Pipeline

The one call path from backend -> adapter -> model and back.

BOUNDARY ENFORCEMENT:
=====================
- No side effects on backend state
- Every invocation is traced
- Nothing raises across this boundary: provider failures, exceptions and
  unparseable output all become a default annotation per record plus a
  diagnostic (terminal soft-failure)
- No retries
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple
import logging
import time

from backend.contracts.records import FeedbackRecord

from .contracts import (
    Annotation,
    AnnotationBatchResult,
    ModelError,
    ModelErrorCode,
    RecordBatchInput,
)
from .converter import RecordConverter, extract_output_text, DEFAULT_BATCH_LIMIT
from .extractor import AnnotationExtractor
from .prompts import CanonicalPrompt
from .providers.base import (
    LLMProvider,
    ProviderErrorCode,
    ProviderVersion,
    InvocationParams,
)


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class InvocationConfig:
    """
    Configuration for model invocation.

    WHY FROZEN:
    Config should not change during invocation.
    """
    timeout_seconds: float = 30.0
    max_batch_size: int = DEFAULT_BATCH_LIMIT
    temperature: float = 0.0
    max_tokens: int = 2048
    enable_tracing: bool = True


# =============================================================================
# INVOCATION TRACE
# =============================================================================

@dataclass(frozen=True)
class InvocationTrace:
    """Complete trace of one annotation invocation."""
    trace_id: str
    invocation_id: str
    prompt_hash: str
    started_at: datetime
    completed_at: datetime
    provider_version: ProviderVersion
    record_count: int
    annotation_count: int
    success: bool
    error_code: Optional[ModelErrorCode] = None

    def duration_ms(self) -> float:
        return (self.completed_at - self.started_at).total_seconds() * 1000


_PROVIDER_ERROR_MAP = {
    ProviderErrorCode.TIMEOUT: ModelErrorCode.TIMEOUT,
    ProviderErrorCode.RATE_LIMITED: ModelErrorCode.RATE_LIMITED,
    ProviderErrorCode.INVALID_RESPONSE: ModelErrorCode.INVALID_OUTPUT,
    ProviderErrorCode.API_ERROR: ModelErrorCode.PROVIDER_ERROR,
    ProviderErrorCode.NETWORK_ERROR: ModelErrorCode.PROVIDER_ERROR,
}


def default_annotations(record_ids: Sequence) -> Tuple[Annotation, ...]:
    """One default annotation per record id, in order."""
    return tuple(Annotation.default_for(i) for i in record_ids)


# =============================================================================
# PIPELINE
# =============================================================================

class AnnotationPipeline:
    """
    Batch -> prompt -> provider -> text -> extractor.

    GUARANTEES:
    ===========
    1. annotate() never raises for provider or parse failures
    2. On failure, every sent record gets a default annotation
    3. At most `max_batch_size` records are sent to the model
    """

    def __init__(
        self,
        provider: LLMProvider,
        config: Optional[InvocationConfig] = None,
        extractor: Optional[AnnotationExtractor] = None,
    ):
        self._provider = provider
        self._config = config or InvocationConfig()
        self._converter = RecordConverter(self._config.max_batch_size)
        self._extractor = extractor or AnnotationExtractor()
        self._traces: List[InvocationTrace] = []

    @property
    def config(self) -> InvocationConfig:
        return self._config

    def annotate(self, records: Sequence[FeedbackRecord]) -> AnnotationBatchResult:
        started_at = datetime.now(timezone.utc)
        start = time.time()

        batch = self._converter.to_batch(records)
        if batch.truncated_count:
            logger.info(
                "Annotating first %d of %d records (%d left unannotated)",
                len(batch), len(records), batch.truncated_count
            )

        prompt = CanonicalPrompt.create(batch)
        invocation_id = self._invocation_id(prompt, started_at)

        if not len(batch):
            return self._finish(
                batch, prompt, invocation_id, started_at, start,
                annotations=(), diagnostic="No records to annotate",
            )

        params = InvocationParams(
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
            timeout_seconds=self._config.timeout_seconds,
        )

        try:
            response = self._provider.invoke(prompt.prompt_text, params)
        except TimeoutError as e:
            return self._fallback(
                batch, prompt, invocation_id, started_at, start,
                ModelErrorCode.TIMEOUT, f"Model call timed out: {e}",
            )
        except Exception as e:
            logger.exception("Model call raised")
            return self._fallback(
                batch, prompt, invocation_id, started_at, start,
                ModelErrorCode.INTERNAL_ERROR, f"Model call failed: {type(e).__name__}: {e}",
            )

        if not response.success:
            return self._fallback(
                batch, prompt, invocation_id, started_at, start,
                _PROVIDER_ERROR_MAP.get(response.error_code, ModelErrorCode.PROVIDER_ERROR),
                response.error_message or "Provider error",
            )

        text = extract_output_text(response.content)
        extraction = self._extractor.extract(text, batch.record_ids)
        if not extraction.succeeded:
            code = ModelErrorCode.EMPTY_OUTPUT if not text.strip() else ModelErrorCode.INVALID_OUTPUT
            return self._fallback(
                batch, prompt, invocation_id, started_at, start,
                code, extraction.diagnostic,
            )

        return self._finish(
            batch, prompt, invocation_id, started_at, start,
            annotations=extraction.annotations, diagnostic=extraction.diagnostic,
        )

    # =========================================================================
    # RESULT CONSTRUCTION
    # =========================================================================

    def _fallback(
        self,
        batch: RecordBatchInput,
        prompt: CanonicalPrompt,
        invocation_id: str,
        started_at: datetime,
        start: float,
        code: ModelErrorCode,
        diagnostic: str,
    ) -> AnnotationBatchResult:
        logger.warning("Annotation fallback (%s) for %d records", code.value, len(batch))
        error = ModelError(
            error_code=code,
            message=diagnostic,
            invocation_id=invocation_id,
            occurred_at=datetime.now(timezone.utc),
        )
        return self._finish(
            batch, prompt, invocation_id, started_at, start,
            annotations=default_annotations(batch.record_ids),
            diagnostic=diagnostic,
            error=error,
        )

    def _finish(
        self,
        batch: RecordBatchInput,
        prompt: CanonicalPrompt,
        invocation_id: str,
        started_at: datetime,
        start: float,
        annotations: Tuple[Annotation, ...],
        diagnostic: str,
        error: Optional[ModelError] = None,
    ) -> AnnotationBatchResult:
        self._record_trace(InvocationTrace(
            trace_id=f"trace_{invocation_id[4:]}",
            invocation_id=invocation_id,
            prompt_hash=prompt.prompt_hash,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            provider_version=self._provider.get_version(),
            record_count=len(batch),
            annotation_count=len(annotations),
            success=error is None,
            error_code=error.error_code if error else None,
        ))

        return AnnotationBatchResult(
            invocation_id=invocation_id,
            annotations=annotations,
            diagnostic=diagnostic,
            fallback=error is not None,
            error=error,
            record_ids=batch.record_ids,
            processing_time_ms=(time.time() - start) * 1000,
        )

    def _invocation_id(self, prompt: CanonicalPrompt, started_at: datetime) -> str:
        return f"inv_{prompt.prompt_hash[:12]}_{int(started_at.timestamp())}"

    def _record_trace(self, trace: InvocationTrace):
        if self._config.enable_tracing:
            self._traces.append(trace)

    def get_traces(self) -> List[InvocationTrace]:
        """All recorded traces (read-only copy)."""
        return list(self._traces)
