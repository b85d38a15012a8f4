# cleanweb/adapters/persistence/__init__.py
from cleanweb.adapters.persistence.memory_product_repo import InMemoryProductRepository

__all__ = ["InMemoryProductRepository"]
