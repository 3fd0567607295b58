"""
LLM Providers Package
=====================

Provider implementations for model invocation.

Available providers:
- MockProvider: Deterministic mock for testing and offline runs
- WorkersAIProvider: Cloudflare Workers AI over HTTPS (httpx)
"""

from .base import (
    LLMProvider,
    ProviderVersion,
    ProviderResponse,
    ProviderErrorCode,
    InvocationParams,
)
from .mock import MockProvider
from .workers_ai import WorkersAIProvider

__all__ = [
    'LLMProvider',
    'ProviderVersion',
    'ProviderResponse',
    'ProviderErrorCode',
    'InvocationParams',
    'MockProvider',
    'WorkersAIProvider',
]
