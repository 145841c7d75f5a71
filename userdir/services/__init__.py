from .key_value_store import KeyValueStore
from .photo_validator import validate_photo, load_photo

__all__ = ["KeyValueStore", "validate_photo", "load_photo"]
