"""
Pydantic schemas for favorites responses.
"""

from pydantic import BaseModel, Field
from typing import List


class FavoriteIdsResponse(BaseModel):
    """Result of adding or removing a favorite."""

    message: str = Field(..., examples=["Property added to favorites"])
    favorites: List[str] = Field(..., description="Favorite property ids in insertion order")


class FavoriteCheckResponse(BaseModel):
    is_favorite: bool
