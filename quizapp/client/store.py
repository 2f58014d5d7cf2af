"""
Client-local persisted state
One JSON document holding the keys the quiz client keeps between runs
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = os.path.join(os.path.expanduser("~"), ".quizapp", "client.json")

DEFAULTS = {
    "dark_mode": True,
    "user": None,
    "questions_data": {},
    "quiz_history": [],
    "leaderboard": [],
}


class ClientStore:
    """Dark-mode flag, user session, questions snapshot, quiz history and leaderboard.

    Every setter writes the whole document back to disk.
    """

    def __init__(self, path: str = None):
        self.path = path or os.environ.get("QUIZAPP_CLIENT_STORE", DEFAULT_STORE_PATH)
        self._data = self._load()

    def _load(self) -> Dict[str, Any]:
        data = json.loads(json.dumps(DEFAULTS))
        if not os.path.exists(self.path):
            return data
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                saved = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable client store {self.path}: {e}")
            return data
        if isinstance(saved, dict):
            data.update({k: v for k, v in saved.items() if k in DEFAULTS})
        return data

    def save(self):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)

    def get(self, key: str):
        return self._data[key]

    def set(self, key: str, value):
        if key not in DEFAULTS:
            raise KeyError(key)
        self._data[key] = value
        self.save()

    # ─── convenience accessors ─────────────────────────────────────────────
    @property
    def dark_mode(self) -> bool:
        return bool(self._data["dark_mode"])

    def toggle_dark_mode(self) -> bool:
        self.set("dark_mode", not self.dark_mode)
        return self.dark_mode

    @property
    def user(self) -> Optional[Dict]:
        return self._data["user"]

    def set_user(self, user: Optional[Dict]):
        self.set("user", user)

    @property
    def questions_data(self) -> Dict[str, Dict[str, List[Dict]]]:
        return self._data["questions_data"]

    @property
    def quiz_history(self) -> List[Dict]:
        return self._data["quiz_history"]

    @property
    def leaderboard(self) -> List[Dict]:
        return self._data["leaderboard"]
