# cleanweb/adapters/web/middleware/request_context.py
import time
import uuid

import structlog
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = structlog.get_logger()


class RequestContextMiddleware:
    """
    Binds ambient request fields into structlog's contextvars so every log
    entry written while serving the request carries them.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(self.header_name) or uuid.uuid4().hex
        scope.setdefault("state", {})["request_id"] = request_id

        status_code = None
        started = time.perf_counter()

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message)[self.header_name] = request_id
            await send(message)

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            method=scope.get("method", "WEBSOCKET"),
            path=scope["path"],
        ):
            try:
                await self.app(scope, receive, send_wrapper)
            finally:
                if scope["type"] == "http":
                    logger.info(
                        "request_finished",
                        status_code=status_code,
                        duration_ms=round((time.perf_counter() - started) * 1000, 2),
                    )
