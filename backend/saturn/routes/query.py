"""
Query endpoint.

POST /query  {"query": "..."}
"""
from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from saturn.core.logging import get_logger
from saturn.services.llm.errors import OrchestrationCancelled, ProviderError
from saturn.services.llm.orchestration import get_orchestrator

logger = get_logger(__name__)

router = APIRouter()


class QueryRequest(BaseModel):
    query: str = Field(..., description="Natural-language query")


class QueryResponse(BaseModel):
    query: str
    response: str


@router.post("", response_model=QueryResponse)
async def answer_query(body: QueryRequest):
    """
    Answer a query through the provider fallback chain and quality gate.

    Returns 502 when a provider failure is surfaced by the orchestrator and
    504 when the answer deadline expires.
    """
    query = body.query.strip()
    if not query:
        logger.warning("query_empty")
        raise HTTPException(status_code=400, detail="Field 'query' must not be blank")

    orchestrator = get_orchestrator()
    try:
        response = await orchestrator.answer(query)
    except OrchestrationCancelled as exc:
        return JSONResponse(
            status_code=504,
            content={"query": query, "error": str(exc)},
        )
    except ProviderError as exc:
        logger.error(
            "query_provider_error",
            provider=exc.provider,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=502,
            content={"query": query, "error": str(exc)},
        )

    return QueryResponse(query=query, response=response)
