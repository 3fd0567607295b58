"""
Workers AI Provider
===================

Calls a Cloudflare Workers AI text model over its REST API.

    POST {base_url}/accounts/{account_id}/ai/run/{model_id}
    {"prompt": ..., "max_tokens": ..., "temperature": ...}

The structured `result` object is returned as-is; the converter pulls the
text out of it. Transport failures become explicit error responses.
"""

from __future__ import annotations
import logging
import time
from datetime import datetime, timezone
from typing import Optional

import httpx

from .base import (
    LLMProvider,
    ProviderVersion,
    ProviderResponse,
    ProviderErrorCode,
    InvocationParams,
)


logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "@cf/meta/llama-3.1-8b-instruct"
DEFAULT_BASE_URL = "https://api.cloudflare.com/client/v4"


class WorkersAIProvider(LLMProvider):
    """
    Workers AI REST provider.

    A caller-supplied httpx.Client is used as-is (and not closed), which is
    how tests plug in an httpx.MockTransport.
    """

    def __init__(
        self,
        account_id: str,
        api_token: str,
        model_id: str = DEFAULT_MODEL_ID,
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.Client] = None,
    ):
        if not account_id or not api_token:
            raise ValueError("Workers AI provider needs an account id and an API token")
        self._account_id = account_id
        self._api_token = api_token
        self._model_id = model_id
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._version = ProviderVersion(
            provider_id="workers_ai",
            model_id=model_id,
            api_version="v4",
        )

    @property
    def provider_id(self) -> str:
        return "workers_ai"

    def get_version(self) -> ProviderVersion:
        return self._version

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/accounts/{self._account_id}/ai/run/{self._model_id}"

    def invoke(
        self,
        prompt: str,
        params: InvocationParams
    ) -> ProviderResponse:
        invoked_at = datetime.now(timezone.utc)
        start = time.time()

        payload = {
            "prompt": prompt,
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
        }
        headers = {"Authorization": f"Bearer {self._api_token}"}

        try:
            if self._client is not None:
                response = self._client.post(
                    self.endpoint, json=payload, headers=headers, timeout=params.timeout_seconds
                )
            else:
                with httpx.Client(timeout=params.timeout_seconds) as client:
                    response = client.post(self.endpoint, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            return self._failure(ProviderErrorCode.TIMEOUT, f"Workers AI timed out: {e}", invoked_at, start)
        except httpx.HTTPError as e:
            return self._failure(ProviderErrorCode.NETWORK_ERROR, f"Workers AI unreachable: {e}", invoked_at, start)

        if response.status_code == 429:
            return self._failure(ProviderErrorCode.RATE_LIMITED, "Workers AI rate limit hit", invoked_at, start)
        if response.status_code != 200:
            return self._failure(
                ProviderErrorCode.API_ERROR,
                f"Workers AI returned HTTP {response.status_code}: {response.text[:200]}",
                invoked_at,
                start,
            )

        try:
            body = response.json()
        except ValueError as e:
            return self._failure(ProviderErrorCode.INVALID_RESPONSE, f"Response is not JSON: {e}", invoked_at, start)

        if isinstance(body, dict) and body.get("success") is False:
            return self._failure(
                ProviderErrorCode.API_ERROR,
                f"Workers AI reported errors: {body.get('errors')}",
                invoked_at,
                start,
            )

        content = body.get("result", body) if isinstance(body, dict) else body
        latency_ms = (time.time() - start) * 1000
        logger.info("Workers AI %s answered in %.0f ms", self._model_id, latency_ms)

        return ProviderResponse(
            success=True,
            content=content,
            provider_version=self._version,
            invoked_at=invoked_at,
            latency_ms=latency_ms,
        )

    def _failure(
        self,
        code: ProviderErrorCode,
        message: str,
        invoked_at: datetime,
        start: float
    ) -> ProviderResponse:
        logger.warning("Workers AI invocation failed (%s): %s", code.value, message)
        return ProviderResponse(
            success=False,
            error_code=code,
            error_message=message,
            provider_version=self._version,
            invoked_at=invoked_at,
            latency_ms=(time.time() - start) * 1000,
        )
