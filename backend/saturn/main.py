from fastapi import FastAPI

from .core.config import get_settings
from .core.logging import configure_logging, get_logger
from .core.middleware import TraceIDMiddleware
from .routes import health, metrics, query

# JSON output in production (containerized), console output in development
settings = get_settings()
configure_logging(log_level=settings.log_level, json_output=settings.log_json)

logger = get_logger(__name__)

app = FastAPI(
    title="Saturn Query API",
    description="Routes queries across text-generation providers behind a quality gate",
    version="1.0.0",
)

app.add_middleware(TraceIDMiddleware)

app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(query.router, prefix="/query", tags=["Query"])
app.include_router(metrics.router, prefix="/metrics", tags=["Metrics"])

logger.info("app_routes_registered")
