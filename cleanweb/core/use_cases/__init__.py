# cleanweb/core/use_cases/__init__.py
from cleanweb.core.use_cases.product_service import ProductService

__all__ = ["ProductService"]
