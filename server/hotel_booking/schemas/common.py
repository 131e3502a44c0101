"""Common Pydantic schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    code: Optional[str] = Field(None, description="Machine-readable error code, e.g. CONFLICT or EXPIRED")
    error_id: Optional[str] = Field(None, description="Identifier of an unexpected server error")


PROBLEM_RESPONSES = {
    400: {"model": Problem},
    401: {"model": Problem},
    403: {"model": Problem},
    404: {"model": Problem},
    409: {"model": Problem},
    410: {"model": Problem},
}
