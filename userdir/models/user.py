"""User data models"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class User(BaseModel):
    """Directory user as returned by the API"""
    id: int
    name: str
    email: str
    phone: str
    position: str  # Display label, e.g. "Lawyer"
    position_id: int
    photo: str  # Photo URL

    class Config:
        frozen = True


class Links(BaseModel):
    """Pagination links"""
    next_url: Optional[str] = None
    prev_url: Optional[str] = None

    class Config:
        frozen = True


class PagedUsersResult(BaseModel):
    """One page of GET /users"""
    success: bool
    page: int
    total_pages: int
    total_users: int
    count: int  # Requested page size echoed by the server
    links: Links = Field(default_factory=Links)
    users: List[User] = Field(default_factory=list)

    class Config:
        frozen = True


class UserCreateRequest(BaseModel):
    """Form values sent as multipart fields to POST /users"""
    name: str
    email: str
    phone: str
    position_id: int

    class Config:
        frozen = True


class CreateUserOutcome(BaseModel):
    """
    Response of POST /users.

    Success carries user_id (and sometimes an echoed users list);
    a validation failure carries message and fails.
    """
    success: bool
    message: Optional[str] = None
    user_id: Optional[int] = None
    users: Optional[List[User]] = None
    fails: Optional[Dict[str, List[str]]] = None

    class Config:
        frozen = True

    def new_user_id(self) -> Optional[int]:
        """Id of the created user, falling back to the last echoed user"""
        if self.user_id is not None:
            return self.user_id
        if self.users:
            return self.users[-1].id
        return None
