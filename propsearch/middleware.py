import logging
import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .logging_config import request_id_ctx

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
ELAPSED_HEADER = "X-Elapsed-Ms"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags every log line of a request with its id and reports the elapsed time."""

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get(REQUEST_ID_HEADER.lower()) or uuid4().hex
        token = request_id_ctx.set(rid)
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
            dur_ms = int((time.perf_counter() - start) * 1000)
            query = f"?{request.url.query}" if request.url.query else ""
            logger.info("%s %s%s -> %s (%d ms)", request.method, request.url.path, query, response.status_code, dur_ms)
        except Exception:
            logger.exception("Unhandled exception")
            raise
        finally:
            request_id_ctx.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        response.headers[ELAPSED_HEADER] = str(dur_ms)
        return response
