"""
Request correlation middleware.
"""

import contextvars
import time
import uuid
from typing import Optional

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var = contextvars.ContextVar[Optional[str]]("request_id", default=None)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Give every request an ID, bind it to log records and echo it back.

    A caller-supplied ``X-Request-ID`` is reused so one ID can follow a
    request across services.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()

        try:
            with logger.contextualize(request_id=request_id):
                response = await call_next(request)
                elapsed_ms = (time.perf_counter() - started) * 1000
                logger.bind(client_host=request.client.host if request.client else None).info(
                    f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
                )
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def get_request_id() -> str:
    """Current request ID, or an empty string outside a request."""
    return request_id_var.get() or ""
