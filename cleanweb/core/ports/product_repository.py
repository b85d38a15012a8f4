# cleanweb/core/ports/product_repository.py
from typing import List, Optional, Protocol

from cleanweb.core.domain.models import Product


class IProductRepository(Protocol):
    """
    Port for accessing Product data.
    Implementations could be an in-memory store, SqlAlchemyRepo, or a remote API.
    """

    async def list_all(self) -> List[Product]:
        """Returns every product ordered by id."""
        ...

    async def get(self, product_id: int) -> Optional[Product]:
        """
        Retrieves a single product.

        Returns:
            The Product if found, None otherwise.
        """
        ...

    async def find_by_name(self, name: str) -> Optional[Product]:
        """Case-insensitive lookup by display name."""
        ...

    async def add(self, name: str) -> Product:
        """
        Persists a new product and assigns its id.
        """
        ...

    async def health_check(self) -> bool:
        """Returns True if the underlying storage is accessible."""
        ...
