"""
Needs-internet classifier.

Decides whether a draft answer to a query is lacking live data, in which case
the orchestrator asks the live-search backend instead.
"""
from typing import Optional

from saturn.services.llm.agents.classifier import BooleanClassifier
from saturn.services.llm.extraction import StructuredExtractionEngine
from saturn.services.llm.providers import CompletionBackend
from saturn.services.llm.schema import boolean_schema

NEEDS_INTERNET_SCHEMA = boolean_schema(
    name="check_internet_access",
    description="Determines if the query's response requires internet access",
    field="needs_internet",
    field_description="Indicates whether the query requires internet access",
)


class NeedsInternetClassifier(BooleanClassifier):
    name = "needs_internet"
    task = "Does this query need internet access"
    field = "needs_internet"
    schema = NEEDS_INTERNET_SCHEMA

    def __init__(
        self,
        engine: StructuredExtractionEngine,
        drafter: Optional[CompletionBackend] = None,
    ):
        super().__init__(engine)
        self._drafter = drafter

    async def classify_query(self, query: str) -> bool:
        """
        Classify a bare query by drafting a response with the primary backend
        first and then judging that draft.

        Raises:
            RuntimeError: no drafting backend was configured.
            ProviderError: the drafting call failed.
        """
        if self._drafter is None:
            raise RuntimeError("classify_query needs a drafting completion backend")
        response = await self._drafter.generate_completion(query)
        return await self.classify(query, response)
