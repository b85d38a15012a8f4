# tests/core/test_domain_models.py
import pytest
from pydantic import ValidationError

from cleanweb.core.domain.exceptions import (
    DomainError,
    DuplicateProductError,
    InvalidProductError,
    ProductNotFoundError,
)
from cleanweb.core.domain.models import PRODUCT_NAME_MAX_LENGTH, Product, ProductDraft


class TestProductModel:
    def test_valid_product_creation(self):
        """Should strip surrounding whitespace from the name."""
        product = Product(id=1, name="  Keyboard ")
        assert product.id == 1
        assert product.name == "Keyboard"

    def test_product_requires_positive_id(self):
        with pytest.raises(ValidationError):
            Product(id=0, name="Keyboard")

    @pytest.mark.parametrize("name", ["", "   ", "x" * (PRODUCT_NAME_MAX_LENGTH + 1)])
    def test_product_name_bounds(self, name):
        with pytest.raises(ValidationError):
            Product(id=1, name=name)

    def test_product_is_immutable(self):
        """Products are value snapshots; mutation must fail."""
        product = Product(id=1, name="Keyboard")
        with pytest.raises(ValidationError):
            product.name = "Mouse"

    def test_draft_has_no_identity(self):
        draft = ProductDraft(name="Webcam")
        assert draft.name == "Webcam"
        assert "id" not in draft.model_dump()


class TestDomainErrors:
    def test_all_errors_share_the_base(self):
        for error in (ProductNotFoundError(1), InvalidProductError("bad"), DuplicateProductError("Mouse")):
            assert isinstance(error, DomainError)
            assert error.message == str(error)

    def test_messages(self):
        assert ProductNotFoundError(7).message == "Product '7' was not found."
        assert ProductNotFoundError(7).product_id == 7
        assert InvalidProductError("too long").message == "Invalid product: too long"
        assert DuplicateProductError("Mouse").message == "A product named 'Mouse' already exists."
