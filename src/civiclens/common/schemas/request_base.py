# File: common/schemas/request_base.py

from typing import Optional, Literal

from pydantic import BaseModel, Field, ConfigDict


class BaseRequestModel(BaseModel):
    """
    Base model for all API request bodies.
    Includes shared metadata like language and tracking fields.
    """

    response_language: Literal["en"] = Field(
        default="en",
        description="Language for response messages"
    )

    request_id: Optional[str] = Field(
        default=None,
        max_length=36,
        description="Optional request ID for traceability and debugging"
    )

    client_version: Optional[str] = Field(
        default=None,
        max_length=15,
        description="Optional client version string (e.g., 'v1.2.3')"
    )

    model_config = ConfigDict(
        extra="forbid",  # Reject extra fields
        str_strip_whitespace=True,
        validate_assignment=True
    )
