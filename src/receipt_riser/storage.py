"""File-backed key-value preferences and JSON array files."""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import StorageError

logger = logging.getLogger(__name__)


class PreferenceStore:
    """
    Small key-value store persisted as one JSON document.

    Holds scalar settings (such as the last training time) and lists of
    serialized records. Every write rewrites the whole file; concurrent
    writers are last-write-wins.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def get_int(self, key: str) -> Optional[int]:
        value = self._load().get(key)
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Preference {key} is not an integer: {value!r}") from e

    def set_int(self, key: str, value: int):
        data = self._load()
        data[key] = int(value)
        self._save(data)

    def get_string_list(self, key: str) -> List[str]:
        value = self._load().get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise StorageError(f"Preference {key} is not a list")
        return [str(item) for item in value]

    def set_string_list(self, key: str, values: List[str]):
        data = self._load()
        data[key] = list(values)
        self._save(data)

    def remove(self, key: str):
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read preferences {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Preferences file {self.path} is not a JSON object")
        return data

    def _save(self, data: Dict[str, Any]):
        write_json(self.path, data)


def read_json_array(path: Path) -> Optional[List[Any]]:
    """
    Read a JSON array file.

    Returns:
        The decoded list, or None if the file does not exist
    """
    path = Path(path)
    if not path.exists():
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Cannot read {path}: {e}") from e
    if not isinstance(data, list):
        raise StorageError(f"{path} does not contain a JSON array")
    return data


def write_json(path: Path, data: Any):
    """Write data as JSON, replacing the file in one step."""
    path = Path(path)
    tmp_path = path.with_name(path.name + '.tmp')
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except OSError as e:
        raise StorageError(f"Cannot write {path}: {e}") from e
    logger.debug(f"Wrote {path}")
