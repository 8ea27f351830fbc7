"""
Saturn orchestration layer.

Per outer attempt:
1. Draft an answer with the primary backend, falling back to the secondary
   backend and finally to an empty draft.
2. Ask the needs-internet classifier whether the draft lacks live data; if so,
   replace it with the live-search (tertiary) backend's answer.
3. Ask the satisfaction classifier whether the candidate answers the query;
   accept it, or start the next outer attempt.

After the outer budget is spent a fixed apology is returned instead of an
error. Live-search failures and classifier credential/connectivity failures
are not masked.

The outer retry budget is independent of the extraction engine's budget: the
inner loop absorbs transient generation noise for one decision, the outer
loop retries when the content itself is judged unsatisfactory.
"""
import asyncio
from typing import Any, Dict, Optional

from saturn.core.config import (
    ORCHESTRATION_RETRY_POLICY,
    RetryPolicy,
    Settings,
    get_settings,
)
from saturn.core.logging import get_logger
from saturn.core.metrics import record_answer, record_provider_fallback
from saturn.services.llm.agents.classifier import BooleanClassifier
from saturn.services.llm.agents.needs_internet import NeedsInternetClassifier
from saturn.services.llm.agents.satisfaction import SatisfactionClassifier
from saturn.services.llm.errors import OrchestrationCancelled, ProviderError
from saturn.services.llm.extraction import StructuredExtractionEngine
from saturn.services.llm.providers import (
    CompletionBackend,
    GeminiClient,
    OpenAIChatClient,
    OpenAIStructuredClient,
    PerplexityClient,
)

logger = get_logger(__name__)

APOLOGY_MESSAGE = (
    "I'm sorry, but I'm unable to provide a satisfactory response at this time. "
    "Please try again later."
)


class SaturnOrchestrator:
    """Provider fallback chain wrapped in a satisfaction retry loop."""

    def __init__(
        self,
        primary: CompletionBackend,
        secondary: CompletionBackend,
        tertiary: CompletionBackend,
        needs_internet: BooleanClassifier,
        satisfaction: BooleanClassifier,
        policy: RetryPolicy = ORCHESTRATION_RETRY_POLICY,
        timeout_seconds: Optional[float] = None,
    ):
        self._primary = primary
        self._secondary = secondary
        self._tertiary = tertiary
        self._needs_internet = needs_internet
        self._satisfaction = satisfaction
        self.policy = policy
        self.timeout_seconds = timeout_seconds

    async def answer(self, query: str, timeout_seconds: Optional[float] = None) -> str:
        """
        Answer a query.

        Returns a satisfactory answer, or APOLOGY_MESSAGE once every outer
        attempt has been rejected.

        Args:
            query: User query, passed unchanged to every stage
            timeout_seconds: Overall deadline; defaults to the orchestrator's

        Raises:
            ProviderError: the live-search backend failed, or a classifier's
                structured backend failed with a transport/auth error.
            OrchestrationCancelled: the deadline expired.
        """
        deadline = timeout_seconds if timeout_seconds is not None else self.timeout_seconds
        progress: Dict[str, Any] = {"attempts": 0}

        if deadline is None:
            return await self._run(query, progress)

        try:
            return await asyncio.wait_for(self._run(query, progress), timeout=deadline)
        except asyncio.TimeoutError as exc:
            record_answer("cancelled", progress["attempts"])
            logger.warning(
                "orchestrator_cancelled",
                timeout_seconds=deadline,
                attempts=progress["attempts"],
            )
            raise OrchestrationCancelled(deadline) from exc

    async def _run(self, query: str, progress: Dict[str, Any]) -> str:
        for attempt in range(1, self.policy.max_attempts + 1):
            progress["attempts"] = attempt
            try:
                candidate = await self._draft(query)

                if await self._needs_internet.classify(query, candidate):
                    logger.info("orchestrator_live_search", attempt=attempt)
                    candidate = await self._tertiary.generate_completion(query)

                satisfactory = await self._satisfaction.classify(query, candidate)
            except ProviderError as exc:
                record_answer("failed", attempt)
                logger.error(
                    "orchestrator_failed",
                    attempt=attempt,
                    provider=exc.provider,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                raise

            if satisfactory:
                record_answer("accepted", attempt)
                logger.info("orchestrator_accepted", attempt=attempt)
                return candidate

            logger.info(
                "orchestrator_attempt_rejected",
                attempt=attempt,
                max_attempts=self.policy.max_attempts,
            )
            if self.policy.delay_seconds and attempt < self.policy.max_attempts:
                await asyncio.sleep(self.policy.delay_seconds)

        record_answer("exhausted", self.policy.max_attempts)
        logger.warning("orchestrator_exhausted", attempts=self.policy.max_attempts)
        return APOLOGY_MESSAGE

    async def _draft(self, query: str) -> str:
        """Primary backend, then secondary, then the empty-string sentinel."""
        try:
            return await self._primary.generate_completion(query)
        except ProviderError as exc:
            record_provider_fallback("primary")
            logger.warning(
                "orchestrator_primary_failed",
                provider=exc.provider,
                error=str(exc),
                error_type=type(exc).__name__,
            )

        try:
            return await self._secondary.generate_completion(query)
        except ProviderError as exc:
            record_provider_fallback("secondary")
            logger.warning(
                "orchestrator_secondary_failed",
                provider=exc.provider,
                error=str(exc),
                error_type=type(exc).__name__,
            )
        return ""


def build_orchestrator(settings: Settings) -> SaturnOrchestrator:
    """Wire adapters, extraction engine and classifiers from settings."""
    primary = OpenAIChatClient(settings.openai)
    engine = StructuredExtractionEngine(
        OpenAIStructuredClient(settings.openai_structured),
        policy=settings.extraction_retry,
    )
    return SaturnOrchestrator(
        primary=primary,
        secondary=GeminiClient(settings.gemini),
        tertiary=PerplexityClient(settings.perplexity),
        needs_internet=NeedsInternetClassifier(engine, drafter=primary),
        satisfaction=SatisfactionClassifier(engine),
        policy=settings.orchestration_retry,
        timeout_seconds=settings.answer_timeout_seconds,
    )


_orchestrator: Optional[SaturnOrchestrator] = None


def get_orchestrator() -> SaturnOrchestrator:
    """Global singleton accessor; built from the environment on first use."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator(get_settings())
    return _orchestrator
