from .user import User, Links, PagedUsersResult, UserCreateRequest, CreateUserOutcome
from .position import Position, PositionsResponse, TokenResponse

__all__ = [
    "User",
    "Links",
    "PagedUsersResult",
    "UserCreateRequest",
    "CreateUserOutcome",
    "Position",
    "PositionsResponse",
    "TokenResponse",
]
