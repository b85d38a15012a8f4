# cleanweb/adapters/web/dependencies.py
from fastapi import Request

from cleanweb.core.ports.product_repository import IProductRepository
from cleanweb.core.use_cases.product_service import ProductService
from cleanweb.shared.container import Container


def get_container(request: Request) -> Container:
    """The container owned by the application serving this request."""
    return request.app.state.container


def get_product_service(request: Request) -> ProductService:
    """Dependency to construct the ProductService interactor."""
    return get_container(request).product_service()


def get_product_repository(request: Request) -> IProductRepository:
    return get_container(request).product_repository()
