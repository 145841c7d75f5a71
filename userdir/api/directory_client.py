"""User directory REST API client"""

from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import urlparse

import requests
from pydantic import BaseModel, ValidationError

from ..models.user import User, PagedUsersResult, UserCreateRequest, CreateUserOutcome
from ..models.position import Position, PositionsResponse, TokenResponse
from ..services.key_value_store import KeyValueStore
from ..utils.config import DEFAULT_BASE_URL
from ..utils.logger import get_logger
from ..utils.exceptions import (
    InvalidConfigurationError,
    NoDataError,
    DecodingError,
    ServerError,
    EmailAlreadyTakenError,
    UnknownError,
    UnauthorizedError,
)
from .multipart import encode_create_user

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

TOKEN_KEY = "api_token"


def _mask(token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    return f"{token[:6]}..." if len(token) > 6 else "***"


class DirectoryClient:
    """Client for the user directory API with HTTP error classification"""

    def __init__(
        self,
        store: KeyValueStore,
        base_url: str = DEFAULT_BASE_URL,
        connection_timeout: int = 30,
        read_timeout: int = 60,
        token_key: str = TOKEN_KEY,
        session: Optional[requests.Session] = None,
    ):
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.token_key = token_key
        # Use tuple timeout: (connect_timeout, read_timeout)
        self.timeout = (connection_timeout, read_timeout)
        self.session = session or requests.Session()

    @property
    def token(self) -> Optional[str]:
        return self.store.get(self.token_key)

    @token.setter
    def token(self, value: Optional[str]) -> None:
        if value is None:
            self.store.delete(self.token_key)
        else:
            self.store.set(self.token_key, value)

    def _build_url(self, endpoint: str) -> str:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidConfigurationError(f"Invalid URL: {url}")
        return url

    def _send(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[bytes] = None,
    ) -> requests.Response:
        """
        Perform the HTTP call and classify the status code.

        Raises:
            InvalidConfigurationError: If the URL cannot be built
            UnknownError: On connection failures and timeouts
            UnauthorizedError: On HTTP 401
            ServerError: On any other non-2xx status
        """
        url = self._build_url(endpoint)

        try:
            logger.info(
                "Making directory API request",
                method=method,
                endpoint=endpoint,
                params=params,
            )
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                headers=headers,
                data=body,
                timeout=self.timeout,
            )
        except (
            requests.exceptions.InvalidURL,
            requests.exceptions.InvalidSchema,
            requests.exceptions.MissingSchema,
        ) as e:
            logger.error("Invalid request URL", url=url, error=str(e))
            raise InvalidConfigurationError(f"Invalid URL: {url}") from e
        except requests.exceptions.Timeout as e:
            logger.error("Request timeout", endpoint=endpoint, timeout=self.timeout, error=str(e))
            raise UnknownError(f"Request timeout after {self.timeout} seconds: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error("Request failed", endpoint=endpoint, error=str(e))
            raise UnknownError(f"Request failed: {e}") from e

        logger.info(
            "Received response from directory API",
            method=method,
            endpoint=endpoint,
            status_code=response.status_code,
        )

        if response.status_code == 401:
            raise UnauthorizedError(f"{method} {endpoint} rejected as unauthorized")

        if not 200 <= response.status_code < 300:
            message, fails = self._error_details(response)
            logger.warning(
                "Directory API returned an error",
                endpoint=endpoint,
                status_code=response.status_code,
                message=message,
            )
            raise ServerError(response.status_code, message=message, fails=fails)

        return response

    @staticmethod
    def _error_details(response: requests.Response):
        """Pull message/fails out of an error body, if it has them"""
        try:
            payload = response.json()
        except ValueError:
            return None, None
        if not isinstance(payload, dict):
            return None, None
        fails = payload.get("fails")
        return payload.get("message"), fails if isinstance(fails, dict) else None

    @staticmethod
    def _decode(response: requests.Response, model: Type[ModelT], endpoint: str) -> ModelT:
        if not response.content:
            raise NoDataError(f"Empty response from {endpoint}")
        try:
            payload = response.json()
        except ValueError as e:
            logger.error("Response is not JSON", endpoint=endpoint, error=str(e))
            raise DecodingError(f"Response from {endpoint} is not JSON") from e
        if not isinstance(payload, dict):
            raise DecodingError(f"Response from {endpoint} is not a JSON object")
        try:
            return model(**payload)
        except ValidationError as e:
            logger.error(
                "Response did not match schema",
                endpoint=endpoint,
                model=model.__name__,
                errors=e.error_count(),
            )
            raise DecodingError(f"Unexpected response shape from {endpoint}") from e

    def _json_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _make_request(
        self,
        method: str,
        endpoint: str,
        model: Type[ModelT],
        params: Optional[Dict[str, Any]] = None,
    ) -> ModelT:
        response = self._send(method, endpoint, params=params, headers=self._json_headers())
        return self._decode(response, model, endpoint)

    # Users

    def list_users(self, page: int = 1, count: int = 5) -> PagedUsersResult:
        """
        Fetch one page of users

        Args:
            page: Page number to fetch (1-based)
            count: Number of users per page
        """
        result = self._make_request("GET", "users", PagedUsersResult, params={"page": page, "count": count})
        logger.info(
            "Users page fetched",
            page=result.page,
            total_pages=result.total_pages,
            total_users=result.total_users,
            returned=len(result.users),
        )
        return result

    def get_user(self, user_id: int) -> User:
        """Fetch a single user; accepts both the bare object and the {"user": ...} envelope"""
        endpoint = f"users/{user_id}"
        response = self._send("GET", endpoint, headers=self._json_headers())
        if not response.content:
            raise NoDataError(f"Empty response from {endpoint}")
        try:
            payload = response.json()
        except ValueError as e:
            raise DecodingError(f"Response from {endpoint} is not JSON") from e
        if isinstance(payload, dict) and isinstance(payload.get("user"), dict):
            payload = payload["user"]
        if not isinstance(payload, dict):
            raise DecodingError(f"Response from {endpoint} is not a JSON object")
        try:
            return User(**payload)
        except ValidationError as e:
            raise DecodingError(f"Unexpected user shape from {endpoint}") from e

    def create_user(self, request: UserCreateRequest, photo_bytes: bytes) -> CreateUserOutcome:
        """
        Register a new user (multipart/form-data, Token header)

        Raises:
            UnauthorizedError: If no token is stored or the server rejects it
            EmailAlreadyTakenError: If the email or phone is already registered
        """
        token = self.token
        if not token:
            raise UnauthorizedError("No API token stored")

        body, content_type = encode_create_user(request, photo_bytes)
        headers = {"Token": token, "Content-Type": content_type}

        try:
            response = self._send("POST", "users", headers=headers, body=body)
        except ServerError as e:
            if e.status_code == 409:
                raise EmailAlreadyTakenError(str(e)) from e
            raise

        outcome = self._decode(response, CreateUserOutcome, "users")
        logger.info(
            "Create user request completed",
            success=outcome.success,
            user_id=outcome.user_id,
            message=outcome.message,
        )
        return outcome

    # Positions

    def get_positions(self) -> List[Position]:
        """Fetch all positions"""
        return self._make_request("GET", "positions", PositionsResponse).positions

    # Token

    def get_token(self) -> str:
        """Obtain a fresh token (POST /token, no body)"""
        return self._make_request("POST", "token", TokenResponse).token

    def refresh_token(self) -> str:
        """Obtain a fresh token and persist it as the current one"""
        token = self.get_token()
        self.token = token
        logger.info("API token refreshed", token=_mask(token))
        return token

    def get_valid_token(self) -> str:
        """Stored token, refreshing first if none is stored"""
        token = self.token
        if token:
            return token
        return self.refresh_token()
