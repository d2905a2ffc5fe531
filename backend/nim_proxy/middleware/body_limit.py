"""
Body Size Limit Middleware Module

Rejects requests whose declared body size exceeds the configured limit.
"""

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from nim_proxy.common.errors import PayloadTooLargeError, ValidationError
from nim_proxy.config import get_settings

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Body Size Limit Middleware

    Checks the Content-Length header before the body is read. Bodies sent
    without a length are checked again by the chat route once read.
    """

    def __init__(self, app: ASGIApp, max_body_size: Optional[int] = None) -> None:
        super().__init__(app)
        self.max_body_size = (
            max_body_size if max_body_size is not None else get_settings().MAX_BODY_SIZE
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length is None:
            return await call_next(request)

        try:
            declared = int(content_length)
        except ValueError:
            error = ValidationError("Invalid Content-Length header")
            return JSONResponse(status_code=error.status_code, content=error.to_dict())

        if declared > self.max_body_size:
            logger.warning(
                "Request body too large: path=%s size=%s limit=%s",
                request.url.path,
                declared,
                self.max_body_size,
            )
            error = PayloadTooLargeError(self.max_body_size)
            return JSONResponse(status_code=error.status_code, content=error.to_dict())

        return await call_next(request)
