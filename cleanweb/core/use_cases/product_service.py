# cleanweb/core/use_cases/product_service.py
from typing import List

import structlog

from cleanweb.core.domain.exceptions import (
    DuplicateProductError,
    InvalidProductError,
    ProductNotFoundError,
)
from cleanweb.core.domain.models import PRODUCT_NAME_MAX_LENGTH, Product
from cleanweb.core.ports.product_repository import IProductRepository
from cleanweb.shared.telemetry import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)


class ProductService:
    """
    Use Case: Reads and extends the product catalog.

    Responsibilities:
    1. Normalizes and validates product input.
    2. Enforces name uniqueness across the catalog.
    3. Delegates storage to the repository port.
    """

    def __init__(self, repository: IProductRepository):
        # We inject the interface (Port), not the concrete implementation
        self.repository = repository

    async def list_products(self) -> List[Product]:
        return await self.repository.list_all()

    async def get_product(self, product_id: int) -> Product:
        product = await self.repository.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def add_product(self, name: str) -> Product:
        """
        Adds a product to the catalog.

        Args:
            name: Display name; surrounding whitespace is ignored.

        Returns:
            The stored Product with its assigned id.

        Raises:
            InvalidProductError: empty or over-long name.
            DuplicateProductError: the name is already taken (case-insensitive).
        """
        with tracer.start_as_current_span("use_case.add_product") as span:
            name = self._validate_name(name)
            span.set_attribute("app.product_name", name)

            if await self.repository.find_by_name(name) is not None:
                logger.warning("product_rejected", reason="duplicate", name=name)
                raise DuplicateProductError(name)

            product = await self.repository.add(name)
            logger.info("product_added", product_id=product.id, name=product.name)
            return product

    def _validate_name(self, name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise InvalidProductError("name must not be empty")
        if len(name) > PRODUCT_NAME_MAX_LENGTH:
            raise InvalidProductError(f"name must be at most {PRODUCT_NAME_MAX_LENGTH} characters")
        return name
