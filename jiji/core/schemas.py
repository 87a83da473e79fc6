from pydantic import BaseModel
from typing import Generic, List, Optional, TypeVar

from jiji.core.validation import ValidationErrorDetail

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every endpoint: `data` on success, `error` otherwise."""
    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None


class ValidationErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: List[ValidationErrorDetail]
