# cleanweb/adapters/web/schemas.py
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Envelope used for every JSON error response."""
    status: str = "error"
    code: int
    message: str
