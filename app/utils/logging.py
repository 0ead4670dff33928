"""서비스 로깅 설정 — structlog 구성.

Service logging configuration built on structlog.
Request/response logs go to Axiom through the middleware; this module
configures the structured logger used by services and batch jobs.

Usage:
    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("reminder_sent", reminder_id=str(reminder.id))
"""

import logging

import structlog

from app.config import settings


def configure_logging() -> None:
    """structlog 프로세서 체인을 구성합니다.

    Configure structlog processors. Console rendering in DEBUG,
    JSON rendering when LOG_JSON is set or DEBUG is off.
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    )

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.LOG_JSON or not settings.DEBUG:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
