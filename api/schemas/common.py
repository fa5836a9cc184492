"""
Shared schema pieces.
"""

from pydantic import BaseModel, Field


def require_text(value: str | None, message: str) -> str:
    """Reject missing or blank strings with a field-specific message."""
    if value is None or not str(value).strip():
        raise ValueError(message)
    return str(value).strip()


class StatusResponse(BaseModel):
    """Acknowledgement without a payload."""

    success: bool = Field(default=True)
    message: str = Field(..., description="Human-readable status message")


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response produced by the service."""

    success: bool = Field(default=False)
    message: str = Field(..., description="What went wrong")
