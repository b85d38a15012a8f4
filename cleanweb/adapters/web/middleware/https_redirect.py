# cleanweb/adapters/web/middleware/https_redirect.py
from typing import Optional

import structlog
from starlette.datastructures import URL
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Receive, Scope, Send

logger = structlog.get_logger()

_SECURE_SCHEMES = {"http": "https", "ws": "wss"}


class HTTPSRedirectionMiddleware:
    """
    Redirects plaintext requests to the HTTPS equivalent URL.

    Path and query string are preserved. ``https_port`` of None or 443 yields
    a URL without an explicit port.
    """

    def __init__(self, app: ASGIApp, https_port: Optional[int] = None, status_code: int = 307):
        self.app = app
        self.https_port = https_port
        self.status_code = status_code

    def _secure_url(self, url: URL) -> URL:
        hostname = url.hostname or ""
        if ":" in hostname:
            hostname = f"[{hostname}]"
        netloc = hostname if self.https_port in (None, 443) else f"{hostname}:{self.https_port}"
        return url.replace(scheme=_SECURE_SCHEMES[url.scheme], netloc=netloc)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] in ("http", "websocket") and scope.get("scheme") in _SECURE_SCHEMES:
            url = self._secure_url(URL(scope=scope))
            logger.debug("https_redirect", location=str(url))
            response = RedirectResponse(str(url), status_code=self.status_code)
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
