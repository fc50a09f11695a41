import math
from typing import Any

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """Success envelope shared by every endpoint."""
    status_code: int = Field(serialization_alias="statusCode")
    data: Any = None
    message: str = "Success"
    success: bool = True


def api_response(status_code: int, data: Any = None, message: str = "Success") -> ApiResponse:
    return ApiResponse(
        status_code=status_code,
        data=data,
        message=message,
        success=status_code < 400,
    )


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))
