"""
Request logging middleware.
Logs every request with its timing and tags responses with a request ID.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs `METHOD path status duration` for each request.
    Adds X-Request-ID and X-Processing-Time headers and warns on slow requests.
    """

    def __init__(
        self,
        app: ASGIApp,
        slow_request_threshold: float = 1.0,  # seconds
        excluded_paths: tuple = ("/health",)
    ):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold
        self.excluded_paths = excluded_paths

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request through the logging middleware.

        Args:
            request: FastAPI request object
            call_next: Next middleware/handler in chain

        Returns:
            Response object with request ID and timing headers
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            processing_time = time.perf_counter() - start_time
            logger.error(
                f"Request error [{request_id}]: {request.method} {request.url.path} "
                f"{type(exc).__name__} ({processing_time:.3f}s)",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method,
                    "processing_time": processing_time
                }
            )
            raise

        processing_time = time.perf_counter() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"

        if request.url.path not in self.excluded_paths:
            self._log_request(request, response, request_id, processing_time)

        return response

    def _log_request(
        self,
        request: Request,
        response: Response,
        request_id: str,
        processing_time: float
    ) -> None:
        message = (
            f"[{request_id}] {request.method} {request.url.path} "
            f"{response.status_code} {processing_time:.3f}s"
        )
        extra = {
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
            "processing_time": processing_time
        }

        if processing_time > self.slow_request_threshold:
            logger.warning(f"Slow request {message}", extra=extra)
        elif response.status_code >= 500:
            logger.error(message, extra=extra)
        else:
            logger.info(message, extra=extra)
