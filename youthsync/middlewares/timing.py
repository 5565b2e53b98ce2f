import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from youthsync.utils.logging import get_logger

logger = get_logger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """Stamps every response with X-Latency-Ms."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Latency-Ms"] = str(latency_ms)
        logger.debug(
            "%s %s -> %s in %sms",
            request.method,
            request.url.path,
            response.status_code,
            latency_ms,
        )
        return response
