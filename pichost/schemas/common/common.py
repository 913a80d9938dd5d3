# pichost/schemas/common/common.py
from pydantic import BaseModel
from typing import Any, Optional


class ErrorResponse(BaseModel):
    success: bool = False
    data: Any = None
    error: str
    code: str


class MessageResponse(BaseModel):
    message: str
    detail: Optional[str] = None
