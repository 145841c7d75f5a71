"""Observable view-state for the user directory"""

import functools
import threading
from typing import Dict, List, Optional, Tuple

from tenacity import Retrying, RetryCallState, stop_after_attempt, retry_if_exception_type

from ..api.directory_client import DirectoryClient
from ..models.user import User, UserCreateRequest, CreateUserOutcome
from ..models.position import Position
from ..utils.logger import get_logger
from ..utils.exceptions import (
    DirectoryError,
    InvalidConfigurationError,
    NoDataError,
    DecodingError,
    ServerError,
    EmailAlreadyTakenError,
    UnknownError,
    UnauthorizedError,
)
from .connectivity import ConnectivityMonitor
from .observable import Observable
from .validation import is_valid_name, is_valid_email, is_valid_phone

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 6
CREATE_USER_MAX_ATTEMPTS = 2  # first attempt + one retry after token refresh

EMAIL_INVALID_MESSAGE = "Email should be valid."
AUTH_FAILED_MESSAGE = "Cannot create user. Authentication failed [token expired?]."
UNAUTHORIZED_MESSAGE = "Authorization failed. Please try again."
USER_NOT_LOADED_MESSAGE = "User created, but could not be loaded. Refresh the list to see it."


def describe_error(error: Exception) -> str:
    """Human-readable message for a failed operation"""
    if isinstance(error, InvalidConfigurationError):
        return "Invalid URL"
    if isinstance(error, NoDataError):
        return "No data received"
    if isinstance(error, DecodingError):
        return "Failed to decode response"
    if isinstance(error, EmailAlreadyTakenError):
        return "Email exists"
    if isinstance(error, ServerError):
        if error.status_code == 422:
            return EMAIL_INVALID_MESSAGE
        return f"Server error: {error.status_code}"
    if isinstance(error, UnknownError):
        return "Unknown error occurred"
    if isinstance(error, UnauthorizedError):
        return UNAUTHORIZED_MESSAGE
    return str(error)



def _serialized(method):
    """Run a state operation under the instance lock"""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class DirectoryState(Observable):
    """
    Session state behind the user list and the sign-up form.

    Every public field is observable (see Observable). Operations run to
    completion before returning and never raise for API failures: the
    failure is turned into error_message. Callers must check is_loading /
    is_loading_more before starting another request of the same kind.
    """

    def __init__(
        self,
        client: DirectoryClient,
        connectivity: Optional[ConnectivityMonitor] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        super().__init__()
        # Held by every request-issuing operation; connectivity callbacks arrive
        # on the polling thread
        self._lock = threading.RLock()
        self._client = client
        self._page_size = page_size
        self._user_cache: Dict[int, User] = {}

        # List
        self.users: List[User] = []
        self.positions: List[Position] = []
        self.is_loading = False
        self.is_loading_more = False
        self.error_message: Optional[str] = None
        self.current_page = 0
        self.total_pages = 1
        self.has_more_data = True
        self.is_online = False

        # Sign-up form
        self.selected_position_id = 1
        self.name = ""
        self.email = ""
        self.phone = ""
        self.name_field_valid = True
        self.email_field_valid = True
        self.phone_field_valid = True
        self.photo_field_valid = True
        self.has_attempted_sign_up = False

        self._unsubscribe_connectivity = None
        if connectivity is not None:
            self._unsubscribe_connectivity = connectivity.subscribe(self._on_connectivity_changed)

    @property
    def page_size(self) -> int:
        return self._page_size

    def cached_user(self, user_id: int) -> Optional[User]:
        return self._user_cache.get(user_id)

    def close(self) -> None:
        """Stop listening to connectivity changes"""
        if self._unsubscribe_connectivity is not None:
            self._unsubscribe_connectivity()
            self._unsubscribe_connectivity = None

    # Users list

    @_serialized
    def load_users(self, page: int = 1, page_size: Optional[int] = None) -> bool:
        """
        Fetch one page and merge it into the displayed list.

        Page 1 replaces the list; later pages append users whose id is not
        displayed yet. Returns True on success.
        """
        page_size = page_size or self._page_size
        self.is_loading = True
        self.error_message = None

        try:
            result = self._client.list_users(page=page, count=page_size)
        except DirectoryError as e:
            self.handle_error(e)
            return False

        for user in result.users:
            self._user_cache[user.id] = user
        fetched = [self._user_cache[user.id] for user in result.users]

        if page == 1:
            merged: List[User] = []
            seen = set()
            for user in fetched:
                if user.id not in seen:
                    seen.add(user.id)
                    merged.append(user)
            self.users = merged
        else:
            existing_ids = {user.id for user in self.users}
            appended = []
            for user in fetched:
                if user.id not in existing_ids:
                    existing_ids.add(user.id)
                    appended.append(user)
            self.users = self.users + appended

        self.current_page = result.page
        self.total_pages = result.total_pages
        self.has_more_data = len(result.users) == page_size
        self.is_loading = False

        logger.info(
            "Users loaded",
            page=result.page,
            total_pages=result.total_pages,
            displayed=len(self.users),
            has_more_data=self.has_more_data,
        )
        return True

    @_serialized
    def load_more_users(self) -> bool:
        """Load the next page unless a load is running or the list is exhausted"""
        if self.is_loading or self.is_loading_more or not self.has_more_data:
            return False
        if self.current_page >= self.total_pages:
            return False

        self.is_loading_more = True
        try:
            return self.load_users(page=self.current_page + 1)
        finally:
            self.is_loading_more = False

    # Sign-up

    def validate_fields(self) -> bool:
        """Recompute per-field validity. True if the form can be submitted."""
        self.has_attempted_sign_up = True

        self.name_field_valid = is_valid_name(self.name)
        self.email_field_valid = is_valid_email(self.email)
        self.phone_field_valid = is_valid_phone(self.phone)

        return (
            self.name_field_valid
            and self.email_field_valid
            and self.phone_field_valid
            and self.photo_field_valid
        )

    @_serialized
    def create_user(self, photo_bytes: Optional[bytes]) -> bool:
        """
        Validate the form and register a new user.

        An unauthorized answer triggers one token refresh and one retry.
        Returns True when the new user was added to the list.
        """
        self.photo_field_valid = photo_bytes is not None
        if not self.validate_fields():
            logger.info(
                "Sign-up form invalid, not submitting",
                name_valid=self.name_field_valid,
                email_valid=self.email_field_valid,
                phone_valid=self.phone_field_valid,
                photo_valid=self.photo_field_valid,
            )
            return False

        self.is_loading = True
        self.error_message = None

        request = UserCreateRequest(
            name=self.name,
            email=self.email,
            phone=self.phone,
            position_id=self.selected_position_id,
        )

        try:
            outcome, attempts = self._submit_with_token_refresh(request, photo_bytes)
            new_user_id = outcome.new_user_id() if outcome.success else None
            if new_user_id is None:
                logger.warning(
                    "User not created",
                    attempts=attempts,
                    message=outcome.message,
                    fails=outcome.fails,
                )
                self.error_message = EMAIL_INVALID_MESSAGE if attempts == 1 else AUTH_FAILED_MESSAGE
                self.is_loading = False
                return False
        except UnauthorizedError:
            logger.warning("User not created, token rejected after refresh")
            self.error_message = AUTH_FAILED_MESSAGE
            self.is_loading = False
            return False
        except DirectoryError as e:
            self.handle_error(e)
            return False

        try:
            user = self._client.get_user(new_user_id)
        except DirectoryError as e:
            logger.warning(
                "User created but could not be fetched",
                user_id=new_user_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            self.error_message = USER_NOT_LOADED_MESSAGE
            self.is_loading = False
            return False

        self._user_cache[user.id] = user
        self.users = [user] + [u for u in self.users if u.id != user.id]
        self.is_loading = False
        logger.info("User created", user_id=user.id, attempts=attempts)
        return True

    def _submit_with_token_refresh(
        self, request: UserCreateRequest, photo_bytes: bytes
    ) -> Tuple[CreateUserOutcome, int]:
        """Call create_user, refreshing the token and retrying once on 401"""
        retrying = Retrying(
            stop=stop_after_attempt(CREATE_USER_MAX_ATTEMPTS),
            retry=retry_if_exception_type(UnauthorizedError),
            before_sleep=self._refresh_token_before_retry,
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                outcome = self._client.create_user(request, photo_bytes)
        return outcome, attempt.retry_state.attempt_number

    def _refresh_token_before_retry(self, retry_state: RetryCallState) -> None:
        logger.info("Create user unauthorized, refreshing token", attempt=retry_state.attempt_number)
        self._client.refresh_token()

    # Positions

    @_serialized
    def load_positions(self) -> bool:
        self.is_loading = True
        self.error_message = None

        try:
            positions = self._client.get_positions()
        except DirectoryError as e:
            self.handle_error(e)
            return False

        self.positions = positions
        self.is_loading = False
        self.is_loading_more = False
        logger.info("Positions loaded", count=len(positions))
        return True

    # Errors

    def handle_error(self, error: Exception) -> None:
        """Record a failed operation in error_message"""
        self.is_loading = False
        self.error_message = describe_error(error)
        logger.warning(
            "Directory operation failed",
            error_type=type(error).__name__,
            error=str(error),
            message=self.error_message,
        )

    def clear_error(self) -> None:
        self.error_message = None

    # Connectivity

    def _on_connectivity_changed(self, connected: bool) -> None:
        self.is_online = connected
        if not connected or self.users:
            return
        if not self._lock.acquire(blocking=False):
            logger.info("Back online, another request is in flight, not reloading")
            return
        try:
            if self.is_loading or self.is_loading_more:
                logger.info("Back online, a load is already running, not reloading")
                return
            logger.info("Back online with an empty list, loading users")
            self.load_users()
        finally:
            self._lock.release()
