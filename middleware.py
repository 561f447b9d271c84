import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from context import set_request_context
from logger import logger

REQUEST_ID_HEADER = "X-Request-Id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns a request id, logs one line per request, echoes the id back.

    The request context is left set when dispatch returns: the server error
    handler runs outside this middleware and logs with it. Each request runs
    in its own task, so the values never reach another request.
    """

    _QUIET_PATHS = {"/health"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
        request_id = incoming if 0 < len(incoming) <= 128 else str(uuid.uuid4())

        set_request_context(request_id=request_id, method=request.method, path=request.url.path)
        request.state.request_id = request_id

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            if request.url.path not in self._QUIET_PATHS:
                logger.info(
                    "request completed",
                    extra={
                        "status_code": status_code,
                        "latency_ms": round((time.perf_counter() - start) * 1000, 2),
                    },
                )
