# cleanweb/core/domain/exceptions.py
class DomainError(Exception):
    """Base class for all domain-level exceptions."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

# --- Entity Not Found Errors ---

class ProductNotFoundError(DomainError):
    """Raised when a product id does not exist in the catalog."""
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product '{product_id}' was not found.")

# --- Validation Errors ---

class InvalidProductError(DomainError):
    """Raised when product input fails validation (e.g., empty name)."""
    def __init__(self, reason: str):
        super().__init__(f"Invalid product: {reason}")

class DuplicateProductError(DomainError):
    """Raised when a product with the same name already exists."""
    def __init__(self, name: str):
        super().__init__(f"A product named '{name}' already exists.")
