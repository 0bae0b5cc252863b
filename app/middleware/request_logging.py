"""
Request logging middleware: request IDs, timing headers and slow-request warnings.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import re
import time
import uuid

from app.services.error_handler import ErrorHandlerService

logger = logging.getLogger(__name__)

_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that tags every request with an ID and logs its outcome.
    An inbound `X-Request-ID` is reused when it looks sane.
    """

    def __init__(self, app: ASGIApp, slow_request_threshold: float = 2.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request through the logging middleware.

        Args:
            request: FastAPI request object
            call_next: Next middleware/handler in chain

        Returns:
            Response object with request ID and timing headers
        """
        request_id = self._get_request_id(request)
        request.state.request_id = request_id

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Unhandled error [{request_id}]: {request.method} {request.url.path} - {type(exc).__name__}",
                extra={"request_id": request_id, "path": request.url.path, "method": request.method},
                exc_info=True
            )
            response = ErrorHandlerService.handle_unexpected_error(exc, request)

        processing_time = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{processing_time:.3f}"

        self._log_response(request, response, request_id, processing_time)
        return response

    def _get_request_id(self, request: Request) -> str:
        inbound = request.headers.get("X-Request-ID")
        if inbound and _REQUEST_ID_PATTERN.match(inbound):
            return inbound
        return str(uuid.uuid4())[:8]

    def _log_response(
        self,
        request: Request,
        response: Response,
        request_id: str,
        processing_time: float
    ) -> None:
        extra = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "processing_time": processing_time
        }

        if processing_time > self.slow_request_threshold:
            logger.warning(
                f"Slow request [{request_id}]: {request.method} {request.url.path} "
                f"took {processing_time:.3f}s (threshold {self.slow_request_threshold}s)",
                extra=extra
            )
        else:
            logger.info(
                f"Request [{request_id}]: {request.method} {request.url.path} "
                f"-> {response.status_code} ({processing_time:.3f}s)",
                extra=extra
            )
