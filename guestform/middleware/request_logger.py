import logging
import time
import uuid
from typing import Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from guestform.core.config import settings

logger = logging.getLogger(__name__)


def booking_id_of(request: Request) -> Optional[str]:
    """Booking a request is about: /get-form/{booking_id} or ?bookingId=..."""
    return request.path_params.get("booking_id") or request.query_params.get("bookingId")


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """
    Tags every response with X-Request-ID and logs requests slower than
    LOG_SLOW_REQUEST_THRESHOLD_MS, with the booking id when the URL carries one.
    Form bodies hold guest PII and are never logged.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            if duration_ms > settings.log_slow_request_threshold_ms:
                booking_id = booking_id_of(request)
                suffix = f" (booking {booking_id})" if booking_id else ""
                logger.info(
                    f"🐢 Slow request: {request.method} {request.url.path} -> {status_code} "
                    f"in {duration_ms:.0f}ms{suffix}",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": status_code,
                        "duration_ms": round(duration_ms, 2),
                        "request_id": request_id,
                        "booking_id": booking_id,
                    },
                )
