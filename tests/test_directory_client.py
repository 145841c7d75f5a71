"""Unit tests for DirectoryClient"""

import pytest
import requests

from userdir.api.directory_client import DirectoryClient
from userdir.models.user import UserCreateRequest
from userdir.utils.exceptions import (
    InvalidConfigurationError,
    NoDataError,
    DecodingError,
    ServerError,
    EmailAlreadyTakenError,
    UnknownError,
    UnauthorizedError,
)

from .conftest import BASE_URL, make_response, page_payload, user_payload


def _request_kwargs(session):
    return session.request.call_args.kwargs


class TestListUsers:
    """Test cases for GET /users"""

    def test_sends_page_and_count(self, client, session):
        session.request.return_value = make_response(200, page_payload(2, [7, 8, 9], count=3))

        result = client.list_users(page=2, count=3)

        kwargs = _request_kwargs(session)
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == f"{BASE_URL}/users"
        assert kwargs["params"] == {"page": 2, "count": 3}
        assert result.page == 2
        assert result.total_pages == 5
        assert [u.id for u in result.users] == [7, 8, 9]
        assert result.users[0].position_id == 2

    def test_default_page_size_is_five(self, client, session):
        session.request.return_value = make_response(200, page_payload(1, [1]))

        client.list_users()

        assert _request_kwargs(session)["params"] == {"page": 1, "count": 5}

    def test_json_headers_without_token(self, client, session):
        session.request.return_value = make_response(200, page_payload(1, [1]))

        client.list_users()

        headers = _request_kwargs(session)["headers"]
        assert headers["Content-Type"] == "application/json"
        assert "Authorization" not in headers

    def test_bearer_header_with_stored_token(self, client, session, store):
        store.set("api_token", "abc123")
        session.request.return_value = make_response(200, page_payload(1, [1]))

        client.list_users()

        assert _request_kwargs(session)["headers"]["Authorization"] == "Bearer abc123"


class TestErrorClassification:
    """HTTP outcomes map to the directory error kinds"""

    def test_unauthorized(self, client, session):
        session.request.return_value = make_response(401, {"success": False, "message": "The token expired."})
        with pytest.raises(UnauthorizedError):
            client.list_users()

    def test_server_error_carries_status(self, client, session):
        session.request.return_value = make_response(404, {"success": False, "message": "Page not found"})
        with pytest.raises(ServerError) as exc_info:
            client.list_users(page=99)
        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "Page not found"

    def test_server_error_on_5xx_without_body(self, client, session):
        session.request.return_value = make_response(503)
        with pytest.raises(ServerError) as exc_info:
            client.get_positions()
        assert exc_info.value.status_code == 503

    def test_malformed_json_is_decoding_error(self, client, session):
        session.request.return_value = make_response(200, content=b"<html>oops</html>")
        with pytest.raises(DecodingError):
            client.list_users()

    def test_schema_mismatch_is_decoding_error(self, client, session):
        session.request.return_value = make_response(200, {"success": True, "page": 1})
        with pytest.raises(DecodingError):
            client.list_users()

    def test_empty_body_is_no_data(self, client, session):
        session.request.return_value = make_response(200)
        with pytest.raises(NoDataError):
            client.get_positions()

    def test_connection_failure_is_unknown(self, client, session):
        session.request.side_effect = requests.exceptions.ConnectionError("connection refused")
        with pytest.raises(UnknownError):
            client.list_users()

    def test_timeout_is_unknown(self, client, session):
        session.request.side_effect = requests.exceptions.ReadTimeout("slow")
        with pytest.raises(UnknownError):
            client.list_users()

    def test_bad_base_url_is_invalid_configuration(self, store, session):
        client = DirectoryClient(store=store, base_url="not a url", session=session)
        with pytest.raises(InvalidConfigurationError):
            client.list_users()
        session.request.assert_not_called()


class TestSingleResources:

    def test_get_user_bare_object(self, client, session):
        session.request.return_value = make_response(200, user_payload(42, "Salvador"))

        user = client.get_user(42)

        assert _request_kwargs(session)["url"] == f"{BASE_URL}/users/42"
        assert user.id == 42
        assert user.name == "Salvador"

    def test_get_user_envelope(self, client, session):
        payload = user_payload(42)
        payload["id"] = "42"
        payload["position_id"] = "2"
        session.request.return_value = make_response(200, {"success": True, "user": payload})

        user = client.get_user(42)

        assert user.id == 42
        assert user.position_id == 2

    def test_get_positions(self, client, session):
        session.request.return_value = make_response(200, {
            "success": True,
            "positions": [{"id": 1, "name": "Lawyer"}, {"id": 2, "name": "Content manager"}],
        })

        positions = client.get_positions()

        assert [p.name for p in positions] == ["Lawyer", "Content manager"]


class TestToken:

    def test_get_token_posts_without_body(self, client, session):
        session.request.return_value = make_response(200, {"success": True, "token": "tok-1"})

        assert client.get_token() == "tok-1"
        kwargs = _request_kwargs(session)
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == f"{BASE_URL}/token"
        assert kwargs["data"] is None

    def test_refresh_token_persists(self, client, session, store):
        session.request.return_value = make_response(200, {"success": True, "token": "tok-2"})

        client.refresh_token()

        assert store.get("api_token") == "tok-2"
        assert client.token == "tok-2"

    def test_refresh_token_failure_keeps_old_token(self, client, session, store):
        store.set("api_token", "old")
        session.request.return_value = make_response(500)

        with pytest.raises(ServerError):
            client.refresh_token()
        assert store.get("api_token") == "old"

    def test_get_valid_token_uses_stored(self, client, session, store):
        store.set("api_token", "stored")

        assert client.get_valid_token() == "stored"
        session.request.assert_not_called()

    def test_get_valid_token_refreshes_when_missing(self, client, session):
        session.request.return_value = make_response(200, {"success": True, "token": "fresh"})

        assert client.get_valid_token() == "fresh"


class TestCreateUser:

    request = UserCreateRequest(name="Taras", email="taras@example.com", phone="+380501234567", position_id=3)

    def test_requires_token(self, client, session):
        with pytest.raises(UnauthorizedError):
            client.create_user(self.request, b"\xff\xd8jpeg")
        session.request.assert_not_called()

    def test_multipart_with_token_header(self, client, session, store):
        store.set("api_token", "tok")
        session.request.return_value = make_response(201, {
            "success": True,
            "user_id": 23,
            "message": "New user successfully registered",
        })

        outcome = client.create_user(self.request, b"\xff\xd8jpeg")

        kwargs = _request_kwargs(session)
        headers = kwargs["headers"]
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == f"{BASE_URL}/users"
        assert headers["Token"] == "tok"
        assert "Authorization" not in headers
        assert headers["Content-Type"].startswith("multipart/form-data; boundary=")
        boundary = headers["Content-Type"].split("boundary=", 1)[1]
        assert kwargs["data"].endswith(f"--{boundary}--\r\n".encode())
        assert b'name="position_id"\r\n\r\n3\r\n' in kwargs["data"]
        assert outcome.success is True
        assert outcome.new_user_id() == 23

    def test_fresh_boundary_per_request(self, client, session, store):
        store.set("api_token", "tok")
        session.request.return_value = make_response(201, {"success": True, "user_id": 1})

        client.create_user(self.request, b"x")
        first = _request_kwargs(session)["headers"]["Content-Type"]
        client.create_user(self.request, b"x")
        second = _request_kwargs(session)["headers"]["Content-Type"]

        assert first != second

    def test_conflict_is_email_taken(self, client, session, store):
        store.set("api_token", "tok")
        session.request.return_value = make_response(409, {
            "success": False,
            "message": "User with this phone or email already exist",
        })

        with pytest.raises(EmailAlreadyTakenError) as exc_info:
            client.create_user(self.request, b"x")
        assert exc_info.value.status_code == 409

    def test_validation_failure_keeps_fails(self, client, session, store):
        store.set("api_token", "tok")
        session.request.return_value = make_response(422, {
            "success": False,
            "message": "Validation failed",
            "fails": {"email": ["The email must be a valid email address."]},
        })

        with pytest.raises(ServerError) as exc_info:
            client.create_user(self.request, b"x")
        assert exc_info.value.status_code == 422
        assert exc_info.value.fails["email"] == ["The email must be a valid email address."]

    def test_expired_token(self, client, session, store):
        store.set("api_token", "expired")
        session.request.return_value = make_response(401, {"success": False, "message": "The token expired."})

        with pytest.raises(UnauthorizedError):
            client.create_user(self.request, b"x")
