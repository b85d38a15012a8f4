# cleanweb/adapters/web/middleware/__init__.py
"""
Pure ASGI middleware that make up the request pipeline.

Each class wraps the next application; ``cleanweb.adapters.web.pipeline``
decides which of them run, and in which order.
"""

from cleanweb.adapters.web.middleware.antiforgery import AntiforgeryMiddleware
from cleanweb.adapters.web.middleware.errors import (
    ExceptionHandlerFeature,
    ExceptionHandlerMiddleware,
)
from cleanweb.adapters.web.middleware.hsts import HSTSMiddleware
from cleanweb.adapters.web.middleware.https_redirect import HTTPSRedirectionMiddleware
from cleanweb.adapters.web.middleware.request_context import RequestContextMiddleware
from cleanweb.adapters.web.middleware.static_files import StaticFilesMiddleware

__all__ = [
    "AntiforgeryMiddleware",
    "ExceptionHandlerFeature",
    "ExceptionHandlerMiddleware",
    "HSTSMiddleware",
    "HTTPSRedirectionMiddleware",
    "RequestContextMiddleware",
    "StaticFilesMiddleware",
]
