# cleanweb/core/ports/__init__.py
from cleanweb.core.ports.product_repository import IProductRepository

__all__ = ["IProductRepository"]
