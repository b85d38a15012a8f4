# cleanweb/adapters/web/middleware/errors.py
from dataclasses import dataclass

import structlog
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = structlog.get_logger()

# Keys carried over into the scope used to render the error page;
# routing and framework keys are rebuilt by the downstream pipeline.
_ERROR_SCOPE_KEYS = (
    "type", "asgi", "http_version", "scheme", "server", "client",
    "root_path", "headers", "app", "extensions",
)


@dataclass(frozen=True)
class ExceptionHandlerFeature:
    """Exposed to the error page as ``request.state.exception_handler``."""

    path: str
    error: BaseException


class ExceptionHandlerMiddleware:
    """
    Global handler for unhandled request failures.

    The failed request is logged, then the downstream pipeline is executed
    again for ``GET error_path`` with a fresh scope. The response keeps a 500
    status and is never cached. When the response had already started, or
    the error page fails too, the original exception propagates.
    """

    def __init__(self, app: ASGIApp, error_path: str = "/Error"):
        self.app = app
        self.error_path = error_path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                logger.error("unhandled_exception_after_response_started", exc_info=exc)
                raise

            logger.error("unhandled_exception", error_path=self.error_path, exc_info=exc)
            await self._execute_error_path(scope, receive, send, exc)

    async def _execute_error_path(self, scope: Scope, receive: Receive, send: Send, exc: Exception) -> None:
        error_scope = {key: scope[key] for key in _ERROR_SCOPE_KEYS if key in scope}
        error_scope.update(
            method="GET",
            path=self.error_path,
            raw_path=self.error_path.encode("latin-1"),
            query_string=b"",
        )
        error_scope["state"] = {
            **scope.get("state", {}),
            "exception_handler": ExceptionHandlerFeature(path=scope["path"], error=exc),
        }

        body_sent = False

        async def empty_receive() -> Message:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": b"", "more_body": False}
            return await receive()

        async def error_send(message: Message) -> None:
            if message["type"] == "http.response.start":
                message["status"] = 500
                headers = MutableHeaders(scope=message)
                headers["Cache-Control"] = "no-cache, no-store"
                headers["Pragma"] = "no-cache"
                headers["Expires"] = "-1"
            await send(message)

        try:
            await self.app(error_scope, empty_receive, error_send)
        except Exception:
            logger.error("error_path_failed", error_path=self.error_path, exc_info=True)
            raise exc
