import json
import os
import logging
from typing import Any, Optional
from ..config import settings

logger = logging.getLogger(__name__)


class MemoryState:
    """Dict-backed state. Nothing survives the process."""

    def __init__(self, initial: Optional[dict] = None):
        self._data = dict(initial or {})

    def init(self) -> None:
        pass

    def read(self, key: str) -> Any:
        return self._data.get(key)

    def write(self, key: str, value: Any) -> bool:
        self._data[key] = value
        return True

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileState:
    """State kept as a single JSON document on disk.

    Every read goes back to the file, so two objects pointed at the same
    path see each other's writes.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or settings.STATE_FILE

    def init(self) -> None:
        if not os.path.exists(self.path):
            self._save({})

    def _load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r') as f:
                content = f.read().strip()
                if not content:
                    return {}
                data = json.loads(content)
                if not isinstance(data, dict):
                    logger.warning(f"Unexpected state format in {self.path}. Returning empty state.")
                    return {}
                return data
        except json.JSONDecodeError:
            logger.warning(f"Corrupted state file found at {self.path}. Returning empty state.")
            return {}
        except OSError as e:
            logger.error(f"Error loading state from {self.path}: {e}")
            return {}

    def _save(self, data: dict) -> bool:
        try:
            with open(self.path, 'w') as f:
                json.dump(data, f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving state to {self.path}: {e}")
            return False

    def read(self, key: str) -> Any:
        return self._load().get(key)

    def write(self, key: str, value: Any) -> bool:
        data = self._load()
        data[key] = value
        return self._save(data)

    def clear(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)
