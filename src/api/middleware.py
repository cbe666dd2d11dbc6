"""HTTP access log middleware.

Pure ASGI middleware so it wraps static file responses and redirects the
same way it wraps the webhook endpoint.
"""

import time

import structlog
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = structlog.get_logger()

_SKIP_PATHS = frozenset({"/health", "/favicon.ico"})


class AccessLogMiddleware:
    """Logs method, host, path, status and duration for every HTTP request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") in _SKIP_PATHS:
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        host = headers.get(b"host", b"-").decode("latin-1")
        t0 = time.perf_counter()
        status_code = 0

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            if status_code == 0:
                status_code = 500
            raise
        finally:
            if status_code >= 500:
                log = logger.error
            elif status_code >= 400:
                log = logger.warning
            else:
                log = logger.info
            log(
                "HTTP request",
                method=scope.get("method", "?"),
                host=host,
                path=scope.get("path", ""),
                status=status_code,
                wall_ms=round((time.perf_counter() - t0) * 1000),
            )
