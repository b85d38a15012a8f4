# cleanweb/adapters/web/middleware/antiforgery.py
from typing import Optional

import structlog
from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from cleanweb.adapters.web.antiforgery import Antiforgery
from cleanweb.adapters.web.errors import AntiforgeryValidationError

logger = structlog.get_logger()

UNSAFE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_body(receive: Receive) -> bytes:
    chunks = []
    while True:
        message = await receive()
        if message["type"] != "http.request":
            break
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


def _replay(body: bytes, receive: Receive) -> Receive:
    """A receive callable that yields ``body`` once, then defers to ``receive``."""
    sent = False

    async def replay_receive() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay_receive


class AntiforgeryMiddleware:
    """
    Issues the antiforgery cookie and validates request tokens on
    state-mutating requests before they reach any endpoint.

    The tokens for the current request are published as
    ``request.state.antiforgery`` so pages can embed them in forms.
    """

    def __init__(self, app: ASGIApp, antiforgery: Antiforgery):
        self.app = app
        self.antiforgery = antiforgery

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        presented_cookie = request.cookies.get(self.antiforgery.cookie_name)
        issue_cookie = not self.antiforgery.is_well_formed(presented_cookie)
        cookie_token = self.antiforgery.new_cookie_token() if issue_cookie else presented_cookie

        scope.setdefault("state", {})["antiforgery"] = self.antiforgery.tokens_for(cookie_token)

        if scope["method"] in UNSAFE_METHODS:
            body = await _read_body(receive)
            request_token = await self._request_token(scope, body, receive)
            try:
                self.antiforgery.validate(None if issue_cookie else presented_cookie, request_token)
            except AntiforgeryValidationError as exc:
                logger.warning("antiforgery_validation_failed", reason=exc.message)
                response = PlainTextResponse(
                    "The antiforgery token could not be validated.", status_code=400
                )
                await response(scope, receive, send)
                return
            receive = _replay(body, receive)

        if not issue_cookie:
            await self.app(scope, receive, send)
            return

        cookie_header = self._cookie_header(cookie_token, secure=scope.get("scheme") == "https")

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message).append("set-cookie", cookie_header)
            await send(message)

        await self.app(scope, receive, send_wrapper)

    async def _request_token(self, scope: Scope, body: bytes, receive: Receive) -> Optional[str]:
        request = Request(scope, _replay(body, receive))

        header_token = request.headers.get(self.antiforgery.header_name)
        if header_token:
            return header_token

        content_type = request.headers.get("content-type", "")
        if not content_type.startswith(FORM_CONTENT_TYPES):
            return None

        async with request.form() as form:
            value = form.get(self.antiforgery.form_field)
        return value if isinstance(value, str) else None

    def _cookie_header(self, cookie_token: str, secure: bool) -> str:
        carrier = Response()
        carrier.set_cookie(
            self.antiforgery.cookie_name,
            cookie_token,
            path="/",
            secure=secure,
            httponly=True,
            samesite="strict",
        )
        return carrier.headers["set-cookie"]
