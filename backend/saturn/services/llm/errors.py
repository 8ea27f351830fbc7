"""
Error taxonomy for provider calls, structured extraction and orchestration.

- TransportError / AuthError: fatal, never retried.
- ProtocolError: malformed response shape; retried only by the structured
  extraction engine.
- ExtractionExhausted: the engine's retry budget ran out.
- OrchestrationCancelled: the caller's deadline expired mid-answer.
"""
from typing import Any, Dict, Optional


class ProviderError(Exception):
    """Base class for failures of a single provider call."""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class TransportError(ProviderError):
    """Network failure or unexpected HTTP status."""


class AuthError(ProviderError):
    """Missing or rejected credential."""


class ProtocolError(ProviderError):
    """Response body did not have the expected shape."""


class ExtractionExhausted(Exception):
    """No schema-conforming result was produced within the retry budget."""

    def __init__(
        self,
        schema_name: str,
        attempts: int,
        last_result: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            f"Failed to retrieve a response with all required keys for "
            f"'{schema_name}' after {attempts} attempts"
        )
        self.schema_name = schema_name
        self.attempts = attempts
        self.last_result = last_result


class OrchestrationCancelled(Exception):
    """The overall answer deadline expired before a result was produced."""

    def __init__(self, timeout_seconds: float):
        super().__init__(f"Answer deadline of {timeout_seconds}s exceeded")
        self.timeout_seconds = timeout_seconds
