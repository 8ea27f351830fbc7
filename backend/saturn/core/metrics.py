"""
Prometheus metrics collection module.

Metrics Categories:
- RED Metrics for the HTTP front end: Rate, Errors, Duration
- LLM provider metrics: requests, latency, errors, token usage
- Orchestration metrics: extraction attempts, classifier outcomes,
  provider fallbacks, answer outcomes and outer attempts

All metrics follow Prometheus naming conventions:
- Counters: _total suffix
- Histograms: _seconds suffix for duration
"""
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)

from saturn.core.logging import get_logger

logger = get_logger(__name__)

registry = REGISTRY

# ============================================================================
# RED METRICS - Rate, Errors, Duration
# ============================================================================

http_requests_total = Counter(
    "saturn_http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status"],
    registry=registry,
)

http_errors_total = Counter(
    "saturn_http_errors_total",
    "Total number of HTTP errors",
    ["method", "endpoint", "status_code"],
    registry=registry,
)

http_request_duration_seconds = Histogram(
    "saturn_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=registry,
)

# ============================================================================
# LLM PROVIDER METRICS
# ============================================================================

llm_requests_total = Counter(
    "saturn_llm_requests_total",
    "Total number of outbound LLM provider requests",
    ["provider", "model"],
    registry=registry,
)

llm_request_duration_seconds = Histogram(
    "saturn_llm_request_duration_seconds",
    "Outbound LLM provider request latency in seconds",
    ["provider", "model"],
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    registry=registry,
)

llm_errors_total = Counter(
    "saturn_llm_errors_total",
    "Total number of LLM provider errors",
    ["provider", "error_type"],
    registry=registry,
)

llm_tokens_total = Counter(
    "saturn_llm_tokens_total",
    "Total number of tokens reported by LLM providers",
    ["provider", "model", "direction"],
    registry=registry,
)

# ============================================================================
# ORCHESTRATION METRICS
# ============================================================================

extraction_attempts = Histogram(
    "saturn_extraction_attempts",
    "Structured extraction attempts per extraction call",
    ["schema", "outcome"],
    buckets=[1, 2, 3, 5, 8, 10],
    registry=registry,
)

classifier_results_total = Counter(
    "saturn_classifier_results_total",
    "Classifier outcomes",
    ["classifier", "result"],
    registry=registry,
)

provider_fallbacks_total = Counter(
    "saturn_provider_fallbacks_total",
    "Generation stages that failed and fell through to the next provider",
    ["stage"],
    registry=registry,
)

answers_total = Counter(
    "saturn_answers_total",
    "Orchestrator answers by outcome",
    ["outcome"],
    registry=registry,
)

answer_attempts = Histogram(
    "saturn_answer_attempts",
    "Outer generate/classify attempts per answer",
    buckets=[1, 2, 3, 5, 8, 10],
    registry=registry,
)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def normalize_endpoint(path: str) -> str:
    """
    Normalize endpoint path for metrics (drops query parameters and
    trailing slashes to keep label cardinality low).
    """
    if "?" in path:
        path = path.split("?")[0]
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def record_http_request(
    method: str,
    endpoint: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """
    Record HTTP request metrics (RED metrics).

    Args:
        method: HTTP method (GET, POST, etc.)
        endpoint: Request path
        status_code: HTTP status code
        duration_seconds: Request duration in seconds
    """
    normalized_endpoint = normalize_endpoint(endpoint)

    http_requests_total.labels(
        method=method,
        endpoint=normalized_endpoint,
        status=str(status_code),
    ).inc()

    if status_code >= 400:
        http_errors_total.labels(
            method=method,
            endpoint=normalized_endpoint,
            status_code=str(status_code),
        ).inc()

    http_request_duration_seconds.labels(
        method=method,
        endpoint=normalized_endpoint,
    ).observe(duration_seconds)


def record_llm_request(provider: str, model: str, duration_seconds: float) -> None:
    llm_requests_total.labels(provider=provider, model=model).inc()
    llm_request_duration_seconds.labels(provider=provider, model=model).observe(
        duration_seconds
    )


def record_llm_error(provider: str, error_type: str) -> None:
    llm_errors_total.labels(provider=provider, error_type=error_type).inc()


def record_llm_tokens(
    provider: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
) -> None:
    """Record token usage when the provider reports an OpenAI-style usage block."""
    if input_tokens:
        llm_tokens_total.labels(provider=provider, model=model, direction="input").inc(
            input_tokens
        )
    if output_tokens:
        llm_tokens_total.labels(provider=provider, model=model, direction="output").inc(
            output_tokens
        )


def record_extraction(schema: str, attempts: int, succeeded: bool) -> None:
    outcome = "accepted" if succeeded else "exhausted"
    extraction_attempts.labels(schema=schema, outcome=outcome).observe(attempts)


def record_classifier_result(classifier: str, result: str) -> None:
    """
    Args:
        classifier: Classifier name ("needs_internet", "satisfactory")
        result: "true", "false" or "exhausted"
    """
    classifier_results_total.labels(classifier=classifier, result=result).inc()


def record_provider_fallback(stage: str) -> None:
    provider_fallbacks_total.labels(stage=stage).inc()


def record_answer(outcome: str, attempts: int) -> None:
    """
    Record the outcome of one orchestrator answer.

    Args:
        outcome: "accepted", "exhausted", "failed" or "cancelled"
        attempts: Outer attempts consumed
    """
    answers_total.labels(outcome=outcome).inc()
    answer_attempts.observe(attempts)


def get_metrics() -> bytes:
    """Get Prometheus metrics in text format."""
    return generate_latest(registry)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
