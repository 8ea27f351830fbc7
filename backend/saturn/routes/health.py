"""
Health check endpoint.
"""
from fastapi import APIRouter

from saturn.core.config import get_settings

router = APIRouter()


@router.get("/")
async def health_check():
    """
    Basic health check; also reports which providers have credentials.
    """
    settings = get_settings()
    providers = {
        "primary": settings.openai.is_configured,
        "secondary": settings.gemini.is_configured,
        "tertiary": settings.perplexity.is_configured,
        "structured": settings.openai_structured.is_configured,
    }
    return {
        "status": "ok",
        "message": "Saturn is running",
        "providers": providers,
    }
