from .directory_client import DirectoryClient, TOKEN_KEY
from .multipart import build_multipart_body, encode_create_user

__all__ = ["DirectoryClient", "TOKEN_KEY", "build_multipart_body", "encode_create_user"]
