import json
from typing import Any, Optional
from unittest.mock import Mock

import pytest
import requests

from userdir.api.directory_client import DirectoryClient
from userdir.services.key_value_store import KeyValueStore

BASE_URL = "https://directory.example.com/api/v1"


def make_response(status_code: int = 200, payload: Any = None, content: Optional[bytes] = None) -> requests.Response:
    """Build a real requests.Response with a JSON (or raw) body"""
    response = requests.Response()
    response.status_code = status_code
    if content is not None:
        response._content = content
    elif payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = b""
    return response


def user_payload(user_id: int, name: Optional[str] = None) -> dict:
    return {
        "id": user_id,
        "name": name or f"User {user_id}",
        "email": f"user{user_id}@example.com",
        "phone": "+380501234567",
        "position": "Lawyer",
        "position_id": 2,
        "photo": f"https://directory.example.com/images/users/{user_id}.jpeg",
    }


def page_payload(page: int, user_ids, total_pages: int = 5, count: int = 6) -> dict:
    return {
        "success": True,
        "page": page,
        "total_pages": total_pages,
        "total_users": total_pages * count,
        "count": count,
        "links": {"next_url": None, "prev_url": None},
        "users": [user_payload(i) for i in user_ids],
    }


@pytest.fixture
def store(tmp_path):
    return KeyValueStore(str(tmp_path / "storage.json"))


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(store, session):
    return DirectoryClient(store=store, base_url=BASE_URL, session=session)
