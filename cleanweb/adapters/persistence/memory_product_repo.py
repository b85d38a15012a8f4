# cleanweb/adapters/persistence/memory_product_repo.py
import asyncio
from typing import Dict, Iterable, List, Optional

import structlog

from cleanweb.core.domain.models import Product
from cleanweb.core.ports.product_repository import IProductRepository

logger = structlog.get_logger()


class InMemoryProductRepository(IProductRepository):
    """
    Process-local implementation of the Product port.

    Ids increase monotonically and are never reused. Writes are serialized
    with an asyncio lock; reads return snapshots.
    """

    def __init__(self, initial: Iterable[str] = ()):
        self._products: Dict[int, Product] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

        for name in initial:
            self._insert(name)

        if self._products:
            logger.debug("repository_seeded", count=len(self._products))

    def _insert(self, name: str) -> Product:
        product = Product(id=self._next_id, name=name)
        self._products[product.id] = product
        self._next_id += 1
        return product

    async def list_all(self) -> List[Product]:
        return [self._products[key] for key in sorted(self._products)]

    async def get(self, product_id: int) -> Optional[Product]:
        return self._products.get(product_id)

    async def find_by_name(self, name: str) -> Optional[Product]:
        wanted = name.strip().casefold()
        for product in self._products.values():
            if product.name.casefold() == wanted:
                return product
        return None

    async def add(self, name: str) -> Product:
        async with self._lock:
            return self._insert(name)

    async def health_check(self) -> bool:
        return True
