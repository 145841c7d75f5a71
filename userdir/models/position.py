"""Position and token models"""

from typing import List
from pydantic import BaseModel, Field


class Position(BaseModel):
    """Job position a user can be registered with"""
    id: int
    name: str

    class Config:
        frozen = True


class PositionsResponse(BaseModel):
    success: bool
    positions: List[Position] = Field(default_factory=list)


class TokenResponse(BaseModel):
    success: bool
    token: str = Field(min_length=1)
