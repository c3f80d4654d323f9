from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope used by every panel endpoint: ``{success, data?, message?}``."""
    success: bool = True
    data: Optional[DataT] = None
    message: Optional[str] = None


def success_response(data=None, message: Optional[str] = None) -> dict:
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def error_response(message: str) -> dict:
    return {"success": False, "message": message}
