# cleanweb/adapters/web/middleware/hsts.py
from typing import Iterable

from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

HSTS_HEADER = "Strict-Transport-Security"
DEFAULT_EXCLUDED_HOSTS = ("localhost", "127.0.0.1", "[::1]")


def _normalize_host(host: str) -> str:
    return host.strip().strip("[]").lower()


class HSTSMiddleware:
    """
    Tells browsers to only use HTTPS for this host for ``max_age`` seconds.

    The header is only meaningful over a secure connection, so plain HTTP
    responses are left untouched. Loopback hosts are excluded by default so
    local development is not pinned to HTTPS.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_age: int = 30 * 24 * 60 * 60,
        include_subdomains: bool = False,
        preload: bool = False,
        excluded_hosts: Iterable[str] = DEFAULT_EXCLUDED_HOSTS,
    ):
        self.app = app
        self.excluded_hosts = {_normalize_host(host) for host in excluded_hosts}

        directives = [f"max-age={max_age}"]
        if include_subdomains:
            directives.append("includeSubDomains")
        if preload:
            directives.append("preload")
        self.header_value = "; ".join(directives)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("scheme") != "https":
            await self.app(scope, receive, send)
            return

        hostname = HTTPConnection(scope).url.hostname or ""
        if _normalize_host(hostname) in self.excluded_hosts:
            await self.app(scope, receive, send)
            return

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[HSTS_HEADER] = self.header_value
            await send(message)

        await self.app(scope, receive, send_wrapper)
