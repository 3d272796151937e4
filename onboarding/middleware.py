"""FastAPI middleware for Prometheus metrics instrumentation."""
import re
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from onboarding.metrics import (
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_IN_PROGRESS,
    HTTP_REQUEST_SIZE_BYTES,
    HTTP_RESPONSE_SIZE_BYTES,
)

# Submission ids and wizard session ids are uuid4 (dashed or hex)
_ID_SEGMENT = re.compile(r"^[0-9a-f]{8}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{12}$")


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics for Prometheus."""

    # Endpoints to exclude from metrics (like /metrics itself)
    EXCLUDE_PATHS = {"/metrics", "/health", "/ping"}

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and collect metrics."""
        path = request.url.path
        method = request.method

        if path in self.EXCLUDE_PATHS:
            return await call_next(request)

        endpoint = self._normalize_endpoint(path)

        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            HTTP_REQUEST_SIZE_BYTES.labels(method=method, endpoint=endpoint).observe(
                int(content_length)
            )

        HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception:
            status_code = 500
            raise
        finally:
            duration = time.perf_counter() - start_time
            HTTP_REQUEST_DURATION_SECONDS.labels(
                method=method, endpoint=endpoint
            ).observe(duration)
            HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()
            HTTP_REQUESTS_TOTAL.labels(
                method=method, endpoint=endpoint, status_code=str(status_code)
            ).inc()

        response_size = response.headers.get("content-length")
        if response_size and response_size.isdigit():
            HTTP_RESPONSE_SIZE_BYTES.labels(method=method, endpoint=endpoint).observe(
                int(response_size)
            )

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize URL path to avoid high cardinality from path parameters.

        Converts /v1/admin/submissions/<uuid>/export to
        /v1/admin/submissions/{id}/export and step indexes in
        /v1/wizard/sessions/<sid>/goto/3 to {n}.
        """
        segments = path.strip("/").split("/")

        normalized = []
        for segment in segments:
            if _ID_SEGMENT.match(segment.lower()):
                normalized.append("{id}")
            elif segment.isdigit():
                normalized.append("{n}")
            else:
                normalized.append(segment)

        return "/" + "/".join(normalized) if normalized else "/"
