"""
Observability setup: Prometheus metrics for the exchange rate subsystem
and exception recording hooks.
"""

from fastapi import FastAPI, Request
from prometheus_client import Counter, Gauge, make_asgi_app
import logging

from worklio.core.config import settings

logger = logging.getLogger(__name__)

METRICS_PATH = "/metrics"


EXCHANGE_RATE_FALLBACK_TOTAL = Counter(
    "exchange_rate_fallback_total",
    "Aggregation passes that fell back to a 1:1 rate for a currency",
    labelnames=("currency", "reporting_currency", "reason"),
)

EXCHANGE_RATE_REFRESH_TOTAL = Counter(
    "exchange_rate_refresh_total",
    "Exchange rate refresh cycles by outcome",
    labelnames=("outcome",),
)

EXCHANGE_RATE_CURRENCIES_UPDATED = Gauge(
    "exchange_rate_currencies_updated",
    "Number of currencies written by the last successful refresh cycle",
)

EXCHANGE_RATE_LAST_SUCCESS_TIMESTAMP = Gauge(
    "exchange_rate_last_success_timestamp_seconds",
    "Unix time of the last successful refresh cycle",
)


def setup_observability(app: FastAPI) -> None:
    """
    Initialize observability and expose Prometheus metrics at /metrics.
    """
    app.mount(METRICS_PATH, make_asgi_app())
    logger.info(
        "Prometheus metrics exposed",
        extra={"path": METRICS_PATH, "environment": settings.ENVIRONMENT},
    )


def record_exception(exc: Exception, request: Request) -> None:
    """
    Record an exception in the observability backend.

    Args:
        exc: The exception that occurred
        request: The FastAPI request object
    """
    logger.error(
        f"Exception recorded: {type(exc).__name__}",
        extra={
            "exception_message": str(exc),
            "path": request.url.path,
        },
    )
