"""
Per-request id propagation for logs and the X-Request-ID header.
"""
import json
import logging
import re
import time
import uuid
from contextvars import ContextVar

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

BODY_LOG_LIMIT = 4000
REPEATED_SLASHES = re.compile(r"/{2,}")


class RequestIdFilter(logging.Filter):
    """Inject the current request id into every log record"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def current_request_id() -> str:
    return request_id_var.get()


def truncate(text: str, limit: int = BODY_LOG_LIMIT) -> str:
    if len(text) > limit:
        return text[:limit] + "…"
    return text


def safe_body_preview(raw: bytes) -> str:
    if not raw:
        return "{}"
    try:
        return truncate(json.dumps(json.loads(raw)))
    except (ValueError, UnicodeDecodeError):
        return "[unserializable]"


def install_request_logging(app: FastAPI) -> None:
    """Register the request id / timing middleware on the app"""

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        # "/api//agent//hello" routes like "/api/agent/hello"
        request.scope["path"] = REPEATED_SLASHES.sub("/", request.scope["path"])
        request_id = str(uuid.uuid4())
        token = request_id_var.set(request_id)
        request.state.request_id = request_id
        start = time.perf_counter()

        try:
            logger.info(f"--> {request.method} {request.url.path}")
            if request.method not in ("GET", "HEAD"):
                body = await request.body()
                logger.info(f"body: {safe_body_preview(body)}")

            response = await call_next(request)

            elapsed_ms = int((time.perf_counter() - start) * 1000)
            response.headers["X-Request-ID"] = request_id
            logger.info(f"<-- {response.status_code} {elapsed_ms}ms")
            return response
        finally:
            request_id_var.reset(token)
