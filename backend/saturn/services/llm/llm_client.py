"""
Generic async HTTP client shared by every provider adapter.

Design constraints:
- No provider SDKs: plain httpx against each provider's JSON API
- One outbound request per call, no retries at this layer
- Credentials arrive through ProviderConfig, never from the environment
- Failures are mapped onto TransportError / AuthError / ProtocolError
"""
import time
from typing import Any, Dict, Optional

import httpx

from saturn.core.config import ProviderConfig
from saturn.core.logging import get_logger
from saturn.core.metrics import record_llm_error, record_llm_request, record_llm_tokens
from saturn.services.llm.errors import AuthError, ProtocolError, TransportError

logger = get_logger(__name__)


class ProviderClient:
    """Async HTTP client bound to a single provider configuration."""

    def __init__(
        self,
        config: ProviderConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.provider = config.name
        self.model = config.model
        self.api_base = config.base_url.rstrip("/")
        self.timeout_seconds = config.timeout_seconds
        # Test doubles inject an httpx.MockTransport here.
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json; charset=utf-8"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def _send(
        self,
        path: str,
        json_payload: Dict[str, Any],
        params: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Low-level POST helper."""
        url = f"{self.api_base}{path}"
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            transport=self._transport,
        ) as client:
            return await client.post(
                url,
                headers=self._headers(),
                json=json_payload,
                params=params,
            )

    async def post_json(
        self,
        path: str,
        json_payload: Dict[str, Any],
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        POST a JSON payload and return the decoded JSON body.

        Raises:
            AuthError: no API key configured, or the provider answered 401/403.
            TransportError: network failure or any other non-200 status.
            ProtocolError: the body is not a JSON object.
        """
        if not self.config.api_key:
            record_llm_error(self.provider, "missing_api_key")
            raise AuthError(self.provider, f"{self.provider} API key not configured")

        start = time.time()
        try:
            response = await self._send(path, json_payload, params=params)
        except httpx.TimeoutException as exc:
            record_llm_error(self.provider, "timeout")
            logger.warning(
                "llm_timeout",
                provider=self.provider,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise TransportError(self.provider, f"Request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            record_llm_error(self.provider, "http_error")
            logger.warning(
                "llm_http_error",
                provider=self.provider,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise TransportError(self.provider, f"Request failed: {exc}") from exc
        finally:
            record_llm_request(self.provider, self.model, time.time() - start)

        if response.status_code in (401, 403):
            record_llm_error(self.provider, "auth")
            logger.warning(
                "llm_auth_rejected",
                provider=self.provider,
                status_code=response.status_code,
            )
            raise AuthError(
                self.provider,
                f"Credential rejected: {response.status_code}",
                status_code=response.status_code,
            )

        if response.status_code != 200:
            record_llm_error(self.provider, "bad_status")
            logger.warning(
                "llm_bad_status",
                provider=self.provider,
                status_code=response.status_code,
            )
            raise TransportError(
                self.provider,
                f"Failed to fetch response: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            record_llm_error(self.provider, "invalid_json")
            raise ProtocolError(self.provider, f"Response is not JSON: {exc}") from exc

        if not isinstance(data, dict):
            record_llm_error(self.provider, "invalid_json")
            raise ProtocolError(self.provider, "Response body is not a JSON object")

        self._record_usage(data)
        return data

    def _record_usage(self, data: Dict[str, Any]) -> None:
        # OpenAI-style usage block; Gemini reports usageMetadata instead.
        usage = data.get("usage") or {}
        if not isinstance(usage, dict):
            return
        try:
            input_tokens = int(usage.get("prompt_tokens") or 0)
            output_tokens = int(usage.get("completion_tokens") or 0)
        except (TypeError, ValueError):
            logger.debug("llm_usage_unparseable", provider=self.provider, usage=usage)
            return
        record_llm_tokens(
            provider=self.provider,
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    def first_choice_message(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        ``choices[0].message`` of an OpenAI-compatible chat completion.

        Raises:
            ProtocolError: missing or empty choice list, or malformed message.
        """
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            record_llm_error(self.provider, "no_choices")
            raise ProtocolError(self.provider, "No choices found in the response.")
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            record_llm_error(self.provider, "malformed_choice")
            raise ProtocolError(self.provider, "First choice has no message.")
        return message

    def choice_content(self, data: Dict[str, Any]) -> str:
        """Text content of the first choice; must be a string."""
        content = self.first_choice_message(data).get("content")
        if not isinstance(content, str):
            record_llm_error(self.provider, "malformed_choice")
            raise ProtocolError(self.provider, "First choice has no text content.")
        return content
