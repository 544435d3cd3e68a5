"""
Logging configuration.

Everything goes through loguru. Standard-library loggers used by uvicorn,
FastAPI and SQLAlchemy are routed into it by ``InterceptHandler``.
"""

import json
import logging
import sys
from typing import Any, Dict, cast

from loguru import logger

from storefront.core.config import settings

INTERCEPTED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
)

HUMAN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | {extra[request_id]} | <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """
    Forward standard logging records to loguru, keeping the caller's location.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Any = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging-module frames so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _exception_info(exception: Any) -> Dict[str, Any]:
    exc_type, exc_value = exception.type, exception.value
    return {
        "type": exc_type.__name__ if exc_type is not None else None,
        "value": str(exc_value) if exc_value is not None else None,
    }


def serialize_record(record: Dict[str, Any]) -> str:
    """
    Render one loguru record as a single JSON line.

    ``request_id`` and other bound extras are emitted at the top level;
    keys starting with an underscore stay private.
    """
    try:
        payload: Dict[str, Any] = {
            "timestamp": record["time"].isoformat(),
            "level": record["level"].name,
            "service": settings.PROJECT_NAME,
            "environment": settings.ENVIRONMENT,
        }
        for source, target in (("name", "module"), ("function", "function"), ("line", "line")):
            if source in record:
                payload[target] = record[source]

        extra = record.get("extra")
        if isinstance(extra, dict):
            payload.update({key: value for key, value in extra.items() if not key.startswith("_")})

        payload["message"] = record["message"]
        if record.get("exception"):
            payload["exception"] = _exception_info(record["exception"])

        return json.dumps(payload)
    except Exception as e:
        when = record.get("time")
        return json.dumps(
            {
                "timestamp": when.isoformat() if hasattr(when, "isoformat") else str(when),
                "level": "ERROR",
                "service": settings.PROJECT_NAME,
                "message": f"Error serializing log: {e}",
                "original_message": str(record.get("message", "")),
            }
        )


def configure_logging() -> None:
    """
    Install the loguru sink and route standard logging into it.
    """
    logger.remove()
    logger.configure(extra={"request_id": "-"})

    if settings.JSON_LOGS:
        logger.add(
            lambda message: print(serialize_record(cast(Dict[str, Any], message.record)), file=sys.stderr),
            level=settings.LOG_LEVEL,
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stderr,
            level=settings.LOG_LEVEL,
            format=HUMAN_FORMAT,
            backtrace=True,
            diagnose=settings.DEBUG,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.info(f"Logging configured (level={settings.LOG_LEVEL}, json={settings.JSON_LOGS})")
