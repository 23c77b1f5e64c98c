from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ..logging_setup import LogHandles

MAX_BODY_LOG_SIZE = 4096


def build_request_entry(request: Request, body: bytes, status_code: int) -> dict:
    """Describe one inbound request as a flat JSON-serializable dict."""
    text = body.decode("utf-8", errors="replace")
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"

    entry = {
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "source_ip": request.client.host if request.client else None,
        "source_port": request.client.port if request.client else None,
        "method": request.method,
        "url": url,
        "headers": dict(request.headers),
        "body": text,
        "response_status": status_code,
    }
    if "user-agent" in request.headers:
        entry["user_agent"] = request.headers["user-agent"]
    if len(text) > MAX_BODY_LOG_SIZE:
        entry["body"] = text[:MAX_BODY_LOG_SIZE]
        entry["body_truncated"] = True
    return entry


class RequestLogMiddleware(BaseHTTPMiddleware):
    """
    Middleware that records every inbound request to the request log.

    The body is read up front so it is captured even when the handler
    rejects it. Writing the entry can never change the response.
    """

    def __init__(self, app: ASGIApp, logs: LogHandles):
        super().__init__(app)
        self.logs = logs

    async def dispatch(self, request: Request, call_next):
        body = await request.body()

        try:
            response: Response = await call_next(request)
        except Exception:
            self._record(request, body, 500)
            raise

        self._record(request, body, response.status_code)
        return response

    def _record(self, request: Request, body: bytes, status_code: int) -> None:
        if self.logs.requests is None:
            return

        try:
            self.logs.requests.info("http_request", **build_request_entry(request, body, status_code))
        except Exception as e:  # noqa: BLE001 - a lost log line must not fail the request
            self.logs.ops.error("request_log_write_failed", error=str(e))
