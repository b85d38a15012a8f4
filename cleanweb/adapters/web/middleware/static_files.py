# cleanweb/adapters/web/middleware/static_files.py
import stat
from os import PathLike
from typing import Union

import anyio
from starlette.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send


class StaticFilesMiddleware:
    """
    Serves files under ``directory`` for GET/HEAD requests whose path names
    an existing regular file. A match short-circuits the rest of the
    pipeline; anything else is passed on unchanged.

    Content type, ETag and conditional (304) handling come from Starlette's
    ``StaticFiles``. Raises RuntimeError when ``directory`` does not exist.
    """

    def __init__(self, app: ASGIApp, directory: Union[str, "PathLike[str]"]):
        self.app = app
        self.files = StaticFiles(directory=directory)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in ("GET", "HEAD"):
            await self.app(scope, receive, send)
            return

        path = self.files.get_path(scope)
        try:
            full_path, stat_result = await anyio.to_thread.run_sync(self.files.lookup_path, path)
        except OSError:
            # Unreadable or over-long names cannot be files we serve
            stat_result = None

        if stat_result is None or not stat.S_ISREG(stat_result.st_mode):
            await self.app(scope, receive, send)
            return

        response = self.files.file_response(full_path, stat_result, scope)
        await response(scope, receive, send)
