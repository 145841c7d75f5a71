"""Custom exceptions for the user directory client"""

from typing import Dict, List, Optional


class DirectoryError(Exception):
    """Base exception for userdir"""
    pass


class InvalidConfigurationError(DirectoryError):
    """Base URL or endpoint does not form a usable URL"""
    pass


class NoDataError(DirectoryError):
    """Server answered with an empty body"""
    pass


class DecodingError(DirectoryError):
    """Response body did not match the expected shape"""
    pass


class ServerError(DirectoryError):
    """Non-2xx response from the directory API"""

    def __init__(
        self,
        status_code: int,
        message: Optional[str] = None,
        fails: Optional[Dict[str, List[str]]] = None,
    ):
        self.status_code = status_code
        self.fails = fails or {}
        super().__init__(message or f"Server error: {status_code}")


class EmailAlreadyTakenError(ServerError):
    """User with this email or phone already exists (HTTP 409)"""

    def __init__(self, message: Optional[str] = None):
        super().__init__(409, message=message or "Email exists")


class UnknownError(DirectoryError):
    """Transport failure or anything else we cannot classify"""
    pass


class UnauthorizedError(DirectoryError):
    """Token missing, expired or rejected (HTTP 401)"""
    pass


class ConfigError(DirectoryError):
    """Configuration error"""
    pass


class PhotoValidationError(DirectoryError):
    """Photo does not satisfy the upload constraints"""
    pass
