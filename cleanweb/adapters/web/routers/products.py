# cleanweb/adapters/web/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, status

from cleanweb.adapters.web.dependencies import get_product_service
from cleanweb.adapters.web.schemas import ErrorResponse
from cleanweb.core.domain.models import Product, ProductDraft
from cleanweb.core.use_cases.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=List[Product])
async def list_products(service: ProductService = Depends(get_product_service)):
    return await service.list_products()


@router.get(
    "/{product_id}",
    response_model=Product,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return await service.get_product(product_id)


@router.post(
    "",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_409_CONFLICT: {"model": ErrorResponse},
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponse},
    },
)
async def create_product(body: ProductDraft, service: ProductService = Depends(get_product_service)):
    """
    Adds a product. Like every state-mutating request, the call must carry
    the antiforgery request token (X-CSRF-TOKEN header).
    """
    return await service.add_product(body.name)
