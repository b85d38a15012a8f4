# cleanweb/core/domain/__init__.py
from cleanweb.core.domain.models import Product, ProductDraft
from cleanweb.core.domain.exceptions import (
    DomainError,
    DuplicateProductError,
    InvalidProductError,
    ProductNotFoundError,
)

__all__ = [
    "Product",
    "ProductDraft",
    "DomainError",
    "DuplicateProductError",
    "InvalidProductError",
    "ProductNotFoundError",
]
