"""Request logging middleware.

Logs every HTTP request with method, path, format, status code, latency
and a short request ID. The ID is also returned to the caller in the
X-Request-ID header so aggregator reports can be matched to log lines.

Log format:
    INFO [GET] /circulating-supply?format=json → 200 (3ms) req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("cs.request")


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        logger.info(
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        response.headers["X-Request-ID"] = request.state.request_id
        return response
