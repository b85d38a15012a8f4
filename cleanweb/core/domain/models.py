# cleanweb/core/domain/models.py
from pydantic import BaseModel, ConfigDict, Field

PRODUCT_NAME_MAX_LENGTH = 200

# --- Entities ---

class Product(BaseModel):
    """
    A catalog product.
    Identity is assigned by the repository and never reused.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(..., ge=1, description="Repository-assigned identifier")
    name: str = Field(..., min_length=1, max_length=PRODUCT_NAME_MAX_LENGTH)

# --- Value Objects ---

class ProductDraft(BaseModel):
    """Input for creating a product (no identity yet)."""
    name: str = Field(..., description="Display name of the product")
