"""multipart/form-data body builder for POST /users"""

import uuid
from typing import Tuple

from ..models.user import UserCreateRequest

PHOTO_FILENAME = "photo.jpg"
PHOTO_CONTENT_TYPE = "image/jpeg"
CRLF = b"\r\n"


def new_boundary() -> str:
    """Fresh random boundary for one request"""
    return str(uuid.uuid4()).upper()


def _text_part(boundary: str, name: str, value: str) -> bytes:
    return (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
        f"{value}\r\n"
    ).encode("utf-8")


def build_multipart_body(request: UserCreateRequest, photo_bytes: bytes, boundary: str) -> bytes:
    """
    Encode the create-user form.

    Part order is name, email, phone, position_id, photo. The photo part
    carries filename="photo.jpg" and Content-Type: image/jpeg.
    """
    body = b"".join([
        _text_part(boundary, "name", request.name),
        _text_part(boundary, "email", request.email),
        _text_part(boundary, "phone", request.phone),
        _text_part(boundary, "position_id", str(request.position_id)),
        (
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="photo"; filename="{PHOTO_FILENAME}"\r\n'
            f"Content-Type: {PHOTO_CONTENT_TYPE}\r\n\r\n"
        ).encode("utf-8"),
        photo_bytes,
        CRLF,
        f"--{boundary}--\r\n".encode("utf-8"),
    ])
    return body


def encode_create_user(request: UserCreateRequest, photo_bytes: bytes) -> Tuple[bytes, str]:
    """Build a body with a new boundary. Returns (body, content_type)."""
    boundary = new_boundary()
    body = build_multipart_body(request, photo_bytes, boundary)
    return body, f"multipart/form-data; boundary={boundary}"
