"""
Mock LLM Provider
=================

Deterministic provider for tests and offline runs.

GUARANTEES:
- Same prompt -> identical response
- Explicit failure modes can be triggered
- No network access
"""

from __future__ import annotations
import hashlib
import json
import re
import time
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .base import (
    LLMProvider,
    ProviderVersion,
    ProviderResponse,
    ProviderErrorCode,
    ProviderContent,
    InvocationParams,
)


_THEMES = ("Billing", "Performance", "Documentation", "Onboarding", "Reliability", "Pricing")
_SENTIMENTS = ("Positive", "Neutral", "Negative")
_URGENCIES = ("High", "Medium", "Low")

# Record lines as rendered by PromptTemplates: {"id": ..., "source": ...}
_RECORD_ID_RE = re.compile(r'^\{"id": ("(?:[^"\\]|\\.)*"|-?\d+)', re.MULTILINE)


class MockProvider(LLMProvider):
    """
    Deterministic mock provider.

    By default it reads the record ids out of the prompt and labels each one
    from a hash of the id, wrapping the array in chatty prose the way real
    models do. `responses` replaces that with canned content, returned in
    order (the last one repeats).
    """

    def __init__(
        self,
        latency_ms: float = 0.0,
        failure_mode: Optional[ProviderErrorCode] = None,
        responses: Optional[Sequence[ProviderContent]] = None,
        raise_error: Optional[Exception] = None,
    ):
        """
        Args:
            latency_ms: Simulated latency
            failure_mode: If set, all invocations fail with this error
            responses: Canned content to return instead of generated output
            raise_error: If set, invoke() raises it (exercises boundary catch)
        """
        self._latency_ms = latency_ms
        self._failure_mode = failure_mode
        self._responses: List[ProviderContent] = list(responses or [])
        self._raise_error = raise_error
        self._calls = 0
        self.prompts: List[str] = []
        self._version = ProviderVersion(
            provider_id="mock",
            model_id="mock-deterministic-v1",
            api_version="1.0.0",
        )

    @property
    def provider_id(self) -> str:
        return "mock"

    @property
    def call_count(self) -> int:
        return self._calls

    def get_version(self) -> ProviderVersion:
        return self._version

    def invoke(
        self,
        prompt: str,
        params: InvocationParams
    ) -> ProviderResponse:
        invoked_at = datetime.now(timezone.utc)
        self._calls += 1
        self.prompts.append(prompt)

        if self._latency_ms:
            time.sleep(self._latency_ms / 1000.0)

        if self._raise_error is not None:
            raise self._raise_error

        if self._failure_mode is not None:
            return ProviderResponse(
                success=False,
                error_code=self._failure_mode,
                error_message=f"Mock provider configured to fail: {self._failure_mode.value}",
                provider_version=self._version,
                invoked_at=invoked_at,
                latency_ms=self._latency_ms,
            )

        if self._responses:
            content = self._responses[min(self._calls, len(self._responses)) - 1]
        else:
            content = self._generate_deterministic_response(prompt)

        return ProviderResponse(
            success=True,
            content=content,
            provider_version=self._version,
            invoked_at=invoked_at,
            latency_ms=self._latency_ms,
        )

    def _generate_deterministic_response(self, prompt: str) -> str:
        """Label every record id found in the prompt. Same prompt -> same text."""
        annotations = []
        for raw_id in _RECORD_ID_RE.findall(prompt):
            record_id = json.loads(raw_id)
            digest = hashlib.sha256(str(record_id).encode()).digest()
            annotations.append({
                "id": record_id,
                "theme": _THEMES[digest[0] % len(_THEMES)],
                "sentiment": _SENTIMENTS[digest[1] % len(_SENTIMENTS)],
                "urgency": _URGENCIES[digest[2] % len(_URGENCIES)],
            })

        return (
            "Here is the analysis you asked for:\n"
            + json.dumps(annotations)
            + "\nLet me know if you need anything else."
        )
