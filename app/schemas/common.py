"""
Shared response schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str = Field(..., description="Human-readable result", examples=["Property removed"])


class StatusUpdate(BaseModel):
    """Body of status change requests."""

    status: Optional[str] = Field(None, description="New status value", examples=["contacted"])
