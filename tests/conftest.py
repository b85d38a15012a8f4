# tests/conftest.py
import logging
import re
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog
from fastapi.testclient import TestClient

from cleanweb.adapters.web.components import Component
from cleanweb.adapters.web.components.pages import DEFAULT_PAGES
from cleanweb.adapters.web.main import create_app
from cleanweb.core.domain.models import Product
from cleanweb.core.ports.product_repository import IProductRepository
from cleanweb.shared.config import AppEnv, Settings
from cleanweb.shared.container import Container

HTTPS_BASE = "https://testserver"
HTTP_BASE = "http://testserver"


class Boom(Component):
    """A page that always fails, used to exercise the error handling stages."""
    route = "/boom"
    title = "Boom"

    async def on_initialized(self) -> None:
        raise RuntimeError("kaboom from the component")

    def render(self) -> str:
        return ""


def make_settings(**overrides) -> Settings:
    values = dict(APP_ENV=AppEnv.PRODUCTION, SECRET_KEY="test-secret", LOG_LEVEL="DEBUG")
    values.update(overrides)
    return Settings(**values)


def build_app(**overrides):
    return create_app(make_settings(**overrides), pages=DEFAULT_PAGES + (Boom,))


@pytest.fixture(scope="function")
def production_app():
    return build_app(APP_ENV=AppEnv.PRODUCTION)


@pytest.fixture(scope="function")
def development_app():
    return build_app(APP_ENV=AppEnv.DEVELOPMENT)


@pytest.fixture(scope="function")
def client(production_app):
    """HTTPS client against the production pipeline."""
    with TestClient(production_app, base_url=HTTPS_BASE, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture(scope="function")
def dev_client(development_app):
    with TestClient(development_app, base_url=HTTPS_BASE, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture(scope="function")
def mock_repo():
    """Returns a mock Product Repository."""
    repo = MagicMock(spec=IProductRepository)
    repo.list_all = AsyncMock(return_value=[Product(id=1, name="Keyboard")])
    repo.get = AsyncMock(return_value=None)
    repo.find_by_name = AsyncMock(return_value=None)
    repo.add = AsyncMock(side_effect=lambda name: Product(id=2, name=name))
    repo.health_check = AsyncMock(return_value=True)
    return repo


@pytest.fixture(scope="function")
def container(mock_repo):
    """
    Sets up the Dependency Injection Container for testing.
    It overrides the real repository with the mock defined above.
    """
    container = Container()
    container.settings.override(make_settings())
    container.product_repository.override(mock_repo)

    yield container

    container.reset_override()


def extract_antiforgery_token(html: str) -> str:
    match = re.search(r'name="__RequestVerificationToken" value="([^"]+)"', html)
    assert match, "page does not embed an antiforgery token"
    return match.group(1)


def extract_descriptor(html: str) -> str:
    match = re.search(r'data-descriptor="([^"]+)"', html)
    assert match, "page is not rendered in server-interactive mode"
    return match.group(1)


@pytest.fixture(scope="function")
def restore_logging():
    """Undoes configure_logging() so later tests see the default setup."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
