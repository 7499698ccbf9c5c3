"""
Local store for the last-used team id.

Keeps a small JSON key-value file so the system team is reused across
sessions. Last write wins; concurrent writers in one process are serialized.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

TEAM_ID_KEY = "SYSTEM_TEAM_ID"


class TeamStore:
    """JSON-file backed key-value store."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if data.pop(key, None) is not None:
                self._save(data)

    def get_team_id(self) -> Optional[str]:
        return self.get(TEAM_ID_KEY)

    def set_team_id(self, team_id: str) -> None:
        self.set(TEAM_ID_KEY, team_id)

    def clear_team_id(self) -> None:
        self.remove(TEAM_ID_KEY)
