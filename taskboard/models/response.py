"""
Response models for the HTTP surface
"""

from typing import Optional, Any
from pydantic import BaseModel


class BoardResponse(BaseModel):
    """Board operation response model"""
    message: str
    success: bool = True
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Error response model"""
    message: str
    error_code: Optional[str] = None
    details: Optional[dict] = None
