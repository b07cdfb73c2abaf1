"""
HTTP middleware and the domain error handler.
"""
from __future__ import annotations

import time
import uuid
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from hostel_allocation.config.logging import get_logger
from hostel_allocation.core.exceptions import BaseAppException

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
ACTOR_HEADER = "X-Actor-Id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id, echoes it in X-Request-ID and logs one
    line per request with method, path, status, actor and duration.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "actor_id": request.headers.get(ACTOR_HEADER),
        }

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Unhandled error on {request.method} {request.url.path}: {exc}",
                extra={**context, "error_type": type(exc).__name__},
                exc_info=True,
            )
            raise
        elapsed = time.perf_counter() - started

        response.headers[self.header_name] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        level = logger.warning if response.status_code >= 400 else logger.info
        level(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={**context, "status_code": response.status_code, "process_time": f"{elapsed:.4f}s"},
        )
        return response


def get_request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    """Render a domain error as {"error": {...}} tagged with the request id."""
    if exc.status_code >= 500:
        logger.error(str(exc), extra={"request_id": get_request_id(request), "details": exc.details})
    content = exc.to_dict()
    content["error"]["request_id"] = get_request_id(request)
    return JSONResponse(status_code=exc.status_code, content=content)


def register_middlewares(app: FastAPI) -> None:
    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(BaseAppException, app_exception_handler)
