"""
Durable key-value storage backed by a JSON file.
Holds values that must survive a restart, such as the API token.
"""

import json
import shutil
import tempfile
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from ..utils.logger import get_logger

logger = get_logger(__name__)


class KeyValueStore:
    """JSON file key-value store with atomic writes"""

    def __init__(self, path: str = "data/storage.json"):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.lock = Lock()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to read storage file", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file is not a JSON object, ignoring", path=str(self.path))
            return {}
        return data

    def _atomic_write(self, data: Dict[str, Any]) -> None:
        """Write JSON atomically (temp file in the same directory, then move)"""
        with tempfile.NamedTemporaryFile(
            mode="w", dir=self.path.parent, delete=False, encoding="utf-8"
        ) as tf:
            temp_path = Path(tf.name)
            try:
                json.dump(data, tf, indent=2)
            except (OSError, TypeError, ValueError):
                tf.close()
                temp_path.unlink()
                raise

        try:
            shutil.move(str(temp_path), str(self.path))
        except OSError:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        with self.lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self.lock:
            data = self._load()
            data[key] = value
            self._atomic_write(data)

    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        with self.lock:
            data = self._load()
            if key not in data:
                return False
            del data[key]
            self._atomic_write(data)
            return True
