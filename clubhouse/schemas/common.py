"""
Common Pydantic schemas
"""

from typing import Any, Optional
from pydantic import BaseModel

class StandardResponse(BaseModel):
    """Standard API response"""
    success: bool
    message: str
    data: Optional[Any] = None

class ErrorResponse(BaseModel):
    """Error response schema"""
    success: bool = False
    message: str
    error_code: Optional[str] = None
    details: Optional[Any] = None

class StoreResult(BaseModel):
    """Outcome of a store operation; failures carry a user-facing message"""
    success: bool
    message: str = ""
    error_code: Optional[str] = None
    data: Optional[Any] = None

    @classmethod
    def ok(cls, data: Any = None, message: str = "") -> "StoreResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error) -> "StoreResult":
        """Build a failed result from a StoreError"""
        return cls(success=False, message=error.message, error_code=error.error_code)
