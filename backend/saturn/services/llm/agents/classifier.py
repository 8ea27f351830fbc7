"""
Boolean classifier built on the structured extraction engine.

A classifier owns a fixed single-field boolean schema and a fixed task
prompt; it sends ``{query, response}`` as the extraction context and reads
the boolean back out.
"""
from saturn.core.logging import get_logger
from saturn.core.metrics import record_classifier_result
from saturn.services.llm.errors import ExtractionExhausted
from saturn.services.llm.extraction import StructuredExtractionEngine
from saturn.services.llm.schema import ExtractionSchema

logger = get_logger(__name__)


class BooleanClassifier:
    """Single-boolean specialization of structured extraction."""

    name: str = "classifier"
    task: str = ""
    field: str = ""
    schema: ExtractionSchema

    def __init__(self, engine: StructuredExtractionEngine):
        self._engine = engine

    async def classify(self, query: str, response: str) -> bool:
        """
        Judge ``response`` as an answer to ``query``.

        An exhausted extraction yields False, the same value as a genuine
        "no"; the distinction only survives in logs and metrics.

        Raises:
            TransportError / AuthError from the structured backend.
        """
        try:
            result = await self._engine.extract(
                self.task,
                self.schema,
                {"query": query, "response": response},
            )
        except ExtractionExhausted as exc:
            record_classifier_result(self.name, "exhausted")
            logger.warning(
                "classifier_extraction_exhausted",
                classifier=self.name,
                attempts=exc.attempts,
                last_result=exc.last_result,
            )
            return False

        verdict = result[self.field]
        record_classifier_result(self.name, "true" if verdict else "false")
        logger.info("classifier_result", classifier=self.name, result=verdict)
        return verdict
