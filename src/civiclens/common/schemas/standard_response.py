# File: common/schemas/standard_response.py

from typing import Any, Optional, Literal
from pydantic import BaseModel, Field


class Meta(BaseModel):
    message: str = Field(..., description="Descriptive message for response.")
    status: Literal["success", "error"] = Field(..., examples=["success", "error"])
    code: int = Field(..., description="HTTP status code (e.g., 200, 400, 500)")


class StandardResponse(BaseModel):
    data: Optional[Any] = Field(None, description="Payload or result")
    meta: Meta = Field(..., description="Standard metadata with status, message, and code")

    @staticmethod
    def success(data: Any = None, message: str = "Success", code: int = 200):
        return StandardResponse(
            data=data,
            meta=Meta(
                message=message,
                status="success",
                code=code
            )
        )


class ErrorResponse(BaseModel):
    detail: str = Field(..., examples=["Invalid credentials."])
    message: Optional[str] = Field(default=None)
    error_code: Optional[str] = Field(None, examples=["SUBMISSION_RETRY"])
    status: Literal["error"] = "error"
