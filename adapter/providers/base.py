"""
LLM Provider Abstraction Layer
==============================

Abstract interface for language-model providers (Workers AI, mock, ...).

BOUNDARY ENFORCEMENT:
- Providers are stateless invocation handlers
- Failures are explicit ProviderResponse objects, never silent
- Response content may be a string OR a structured object; the converter
  turns it into plain text
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union
from enum import Enum


class ProviderErrorCode(Enum):
    """Explicit failure codes for LLM invocations."""
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    INVALID_RESPONSE = "invalid_response"
    API_ERROR = "api_error"
    NETWORK_ERROR = "network_error"


@dataclass(frozen=True)
class ProviderVersion:
    """Immutable provider version info, recorded on every trace."""
    provider_id: str       # "workers_ai" | "mock"
    model_id: str          # "@cf/meta/llama-3.1-8b-instruct"
    api_version: str


ProviderContent = Union[str, dict, Any]


@dataclass(frozen=True)
class ProviderResponse:
    """
    Immutable response from an LLM provider.

    INVARIANT: Either (success=True, content set) or (success=False, error set)
    """
    success: bool
    content: Optional[ProviderContent] = None

    # Failure info (only set if success=False)
    error_code: Optional[ProviderErrorCode] = None
    error_message: Optional[str] = None

    provider_version: Optional[ProviderVersion] = None
    invoked_at: Optional[datetime] = None
    latency_ms: float = 0.0

    def __post_init__(self):
        if self.success and self.content is None:
            raise ValueError("Successful response must have content")
        if not self.success and self.error_code is None:
            raise ValueError("Failed response must have error_code")


@dataclass(frozen=True)
class InvocationParams:
    """Frozen invocation parameters."""
    temperature: float = 0.0
    max_tokens: int = 2048
    timeout_seconds: float = 30.0


class LLMProvider(ABC):
    """
    Abstract LLM provider interface.

    EXPLICIT FAILURE STATES:
    - TIMEOUT: Invocation exceeded timeout_seconds
    - RATE_LIMITED: Provider rejected due to rate limits
    - INVALID_RESPONSE: Response body couldn't be decoded
    - API_ERROR: Provider returned error status
    - NETWORK_ERROR: Connection failed

    Implementations SHOULD return failures rather than raise; the pipeline
    still catches anything that escapes.
    """

    @abstractmethod
    def invoke(
        self,
        prompt: str,
        params: InvocationParams
    ) -> ProviderResponse:
        """Invoke the model with the given prompt and parameters."""
        pass

    @abstractmethod
    def get_version(self) -> ProviderVersion:
        pass

    @property
    @abstractmethod
    def provider_id(self) -> str:
        pass
