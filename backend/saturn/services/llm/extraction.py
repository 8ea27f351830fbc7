"""
Structured extraction engine.

Asks a structured generation backend for a value conforming to an
ExtractionSchema and hides transient generation noise (missing keys, wrong
types, unparseable payloads) behind a bounded retry loop. Credential and
connectivity failures are not noise and propagate on the first occurrence.
"""
import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

from saturn.core.config import EXTRACTION_RETRY_POLICY, RetryPolicy
from saturn.core.logging import get_logger
from saturn.core.metrics import record_extraction
from saturn.services.llm.errors import ExtractionExhausted, ProtocolError
from saturn.services.llm.providers import StructuredBackend
from saturn.services.llm.schema import ExtractionSchema, missing_required_fields

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class StructuredExtractionEngine:
    """Bounded-retry wrapper around a structured generation backend."""

    def __init__(
        self,
        backend: StructuredBackend,
        policy: RetryPolicy = EXTRACTION_RETRY_POLICY,
        sleep: Sleep = asyncio.sleep,
    ):
        self._backend = backend
        self.policy = policy
        self._sleep = sleep

    async def extract(
        self,
        query: str,
        schema: ExtractionSchema,
        context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Return the first backend result that satisfies ``schema``.

        Args:
            query: Task prompt for the structured backend
            schema: Fields the result must contain
            context: Values interpolated into the extraction request

        Raises:
            ExtractionExhausted: no conforming result within the attempt budget.
            TransportError / AuthError: propagated from the backend unchanged.
        """
        context = context or {}
        last_result: Optional[Dict[str, Any]] = None

        for attempt in range(1, self.policy.max_attempts + 1):
            try:
                result = await self._backend.generate_structured(query, schema, context)
            except ProtocolError as exc:
                logger.warning(
                    "extraction_attempt_rejected",
                    schema=schema.name,
                    attempt=attempt,
                    max_attempts=self.policy.max_attempts,
                    reason="protocol_error",
                    error=str(exc),
                )
            else:
                missing = missing_required_fields(result, schema)
                if not missing:
                    logger.debug(
                        "extraction_accepted",
                        schema=schema.name,
                        attempt=attempt,
                    )
                    record_extraction(schema.name, attempt, succeeded=True)
                    return result

                last_result = result if isinstance(result, dict) else None
                logger.warning(
                    "extraction_attempt_rejected",
                    schema=schema.name,
                    attempt=attempt,
                    max_attempts=self.policy.max_attempts,
                    reason="missing_required_fields",
                    missing=missing,
                )

            if attempt < self.policy.max_attempts:
                await self._sleep(self.policy.delay_seconds)

        record_extraction(schema.name, self.policy.max_attempts, succeeded=False)
        logger.error(
            "extraction_exhausted",
            schema=schema.name,
            attempts=self.policy.max_attempts,
            last_result=last_result,
        )
        raise ExtractionExhausted(
            schema_name=schema.name,
            attempts=self.policy.max_attempts,
            last_result=last_result,
        )
