# cleanweb/adapters/web/pipeline.py
"""
The HTTP request pipeline.

The pipeline is declared as an ordered table of stages. Each stage names a
factory that turns ``Settings`` into a Starlette ``Middleware`` and an
optional condition; ``build_pipeline`` evaluates the table once at startup
and returns an immutable ``Pipeline``. The first stage is the outermost
wrapper, so a request meets the stages in table order:

    request_context
    developer_exception_page          (development)
    exception_handler, hsts           (every other environment)
    https_redirection
    static_files
    antiforgery
    -> router (API routes, then the component endpoints)

The order is load-bearing: HSTS must decorate the error page, static files
must short-circuit before antiforgery and rendering, and antiforgery must
reject a forged post before any endpoint runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Sequence, Tuple

import structlog
from starlette.middleware import Middleware
from starlette.middleware.errors import ServerErrorMiddleware

from cleanweb.adapters.web.antiforgery import Antiforgery
from cleanweb.adapters.web.errors import PipelineConfigurationError
from cleanweb.adapters.web.middleware import (
    AntiforgeryMiddleware,
    ExceptionHandlerMiddleware,
    HSTSMiddleware,
    HTTPSRedirectionMiddleware,
    RequestContextMiddleware,
    StaticFilesMiddleware,
)
from cleanweb.shared.config import Settings

logger = structlog.get_logger()


def _always(settings: Settings) -> bool:
    return True


def _is_development(settings: Settings) -> bool:
    return settings.is_development


def _is_not_development(settings: Settings) -> bool:
    return not settings.is_development


@dataclass(frozen=True)
class StageSpec:
    """Declarative description of one pipeline stage."""

    name: str
    factory: Callable[[Settings], Middleware]
    when: Callable[[Settings], bool] = _always


@dataclass(frozen=True)
class PipelineStage:
    name: str
    middleware: Middleware


@dataclass(frozen=True)
class Pipeline:
    """Ordered, immutable sequence of built stages (outermost first)."""

    stages: Tuple[PipelineStage, ...]

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(stage.name for stage in self.stages)

    @property
    def middleware(self) -> List[Middleware]:
        return [stage.middleware for stage in self.stages]

    def __iter__(self) -> Iterator[PipelineStage]:
        return iter(self.stages)

    def __len__(self) -> int:
        return len(self.stages)


# --- Stage factories ---

def _request_context(settings: Settings) -> Middleware:
    return Middleware(RequestContextMiddleware)


def _developer_exception_page(settings: Settings) -> Middleware:
    return Middleware(ServerErrorMiddleware, debug=True)


def _exception_handler(settings: Settings) -> Middleware:
    if not settings.ERROR_PATH.startswith("/"):
        raise ValueError(f"ERROR_PATH must be an absolute path, got '{settings.ERROR_PATH}'")
    return Middleware(ExceptionHandlerMiddleware, error_path=settings.ERROR_PATH)


def _hsts(settings: Settings) -> Middleware:
    if settings.HSTS_MAX_AGE_SECONDS < 0:
        raise ValueError("HSTS_MAX_AGE_SECONDS must not be negative")
    return Middleware(
        HSTSMiddleware,
        max_age=settings.HSTS_MAX_AGE_SECONDS,
        include_subdomains=settings.HSTS_INCLUDE_SUBDOMAINS,
        preload=settings.HSTS_PRELOAD,
        excluded_hosts=tuple(settings.HSTS_EXCLUDED_HOSTS),
    )


def _https_redirection(settings: Settings) -> Middleware:
    if settings.HTTPS_REDIRECT_STATUS_CODE not in (301, 302, 303, 307, 308):
        raise ValueError(f"{settings.HTTPS_REDIRECT_STATUS_CODE} is not a redirect status code")
    return Middleware(
        HTTPSRedirectionMiddleware,
        https_port=settings.HTTPS_PORT,
        status_code=settings.HTTPS_REDIRECT_STATUS_CODE,
    )


def _static_files(settings: Settings) -> Middleware:
    # Building the handler eagerly surfaces a missing directory at startup
    StaticFilesMiddleware(app=None, directory=settings.STATIC_ROOT)
    return Middleware(StaticFilesMiddleware, directory=settings.STATIC_ROOT)


def _antiforgery(settings: Settings) -> Middleware:
    return Middleware(AntiforgeryMiddleware, antiforgery=Antiforgery.from_settings(settings))


PIPELINE: Tuple[StageSpec, ...] = (
    StageSpec("request_context", _request_context),
    StageSpec("developer_exception_page", _developer_exception_page, when=_is_development),
    StageSpec("exception_handler", _exception_handler, when=_is_not_development),
    StageSpec("hsts", _hsts, when=_is_not_development),
    StageSpec("https_redirection", _https_redirection),
    StageSpec("static_files", _static_files),
    StageSpec("antiforgery", _antiforgery),
)


def build_pipeline(settings: Settings, specs: Sequence[StageSpec] = PIPELINE) -> Pipeline:
    """
    Evaluates the stage table for ``settings``.

    Raises:
        PipelineConfigurationError: a stage factory failed. Startup must abort.
    """
    stages = []
    for spec in specs:
        if not spec.when(settings):
            continue
        try:
            middleware = spec.factory(settings)
        except Exception as exc:
            raise PipelineConfigurationError(spec.name, str(exc)) from exc
        stages.append(PipelineStage(name=spec.name, middleware=middleware))

    pipeline = Pipeline(stages=tuple(stages))
    logger.info("pipeline_built", env=settings.APP_ENV.value, stages=list(pipeline.names))
    return pipeline
