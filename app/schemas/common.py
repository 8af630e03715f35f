from pydantic import BaseModel
from typing import Generic, Optional, TypeVar

DataT = TypeVar("DataT")

class SuccessResponse(BaseModel, Generic[DataT]):
    success: bool = True
    data: DataT

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: Optional[str] = None

def success(data) -> dict:
    """Wrap payload in the standard envelope; FastAPI validates it against SuccessResponse[...]."""
    return {"success": True, "data": data}
