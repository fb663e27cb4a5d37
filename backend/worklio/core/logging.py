"""
Logging setup.
Context passed through ``extra={...}`` is appended to each line as ``key=value``
so fallbacks and refresh outcomes can be grepped without a JSON pipeline.
"""

import logging
import sys

from worklio.core.config import settings

# Attributes every LogRecord carries; anything else came from ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class ContextFormatter(logging.Formatter):
    """Standard line format followed by the record's ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not context:
            return line
        fields = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{line} | {fields}"


def setup_logging() -> None:
    """Configure the root logger to write context-enriched lines to stdout."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ContextFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        handlers=[handler],
        force=True,
    )

    # Quiet chatty libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured", extra={"environment": settings.ENVIRONMENT})


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
