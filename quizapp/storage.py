"""
Flat JSON file storage for the quiz platform
Each collection is a single JSON array rewritten whole on every change
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional

from flask import current_app

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a collection file cannot be written"""


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-31T10:15:00.123Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonCollection:
    """One JSON array on disk holding records with sequential integer ids.

    Reads load the whole file; writes overwrite it. Nothing guards the
    read-modify-write cycle, so concurrent writers can lose updates.
    """

    def __init__(self, filepath: str):
        self.filepath = filepath

    def _read(self) -> List[Dict]:
        if not os.path.exists(self.filepath):
            return []
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading {self.filepath}: {e}")
            return []
        if not isinstance(data, list):
            logger.error(f"Error reading {self.filepath}: expected a JSON array")
            return []
        return data

    def _write(self, records: List[Dict]):
        try:
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
        except OSError as e:
            logger.error(f"Error writing {self.filepath}: {e}")
            raise StorageError(f"Could not write {os.path.basename(self.filepath)}") from e

    @staticmethod
    def _next_id(records: List[Dict]) -> int:
        return max((r["id"] for r in records), default=0) + 1

    def find_all(self) -> List[Dict]:
        return self._read()

    def find(self, **filters) -> List[Dict]:
        """Records whose fields equal every given filter value"""
        return [
            r for r in self._read()
            if all(r.get(field) == value for field, value in filters.items())
        ]

    def find_one(self, **filters) -> Optional[Dict]:
        matches = self.find(**filters)
        return matches[0] if matches else None

    def find_by_id(self, record_id: int) -> Optional[Dict]:
        return self.find_one(id=int(record_id))

    def create(self, record: Dict) -> Dict:
        records = self._read()
        new_record = {**record, "id": self._next_id(records), "created_at": utc_timestamp()}
        records.append(new_record)
        self._write(records)
        return new_record

    def update(self, record_id: int, updates: Dict) -> Optional[Dict]:
        records = self._read()
        for index, record in enumerate(records):
            if record.get("id") == int(record_id):
                records[index] = {**record, **updates}
                self._write(records)
                return records[index]
        return None

    def delete(self, record_id: int) -> bool:
        records = self._read()
        remaining = [r for r in records if r.get("id") != int(record_id)]
        if len(remaining) == len(records):
            return False
        self._write(remaining)
        return True

    def count(self) -> int:
        return len(self._read())


class JsonStorage:
    """The four collections backing the API"""

    FILENAMES = {
        "users": "users.json",
        "questions": "questions.json",
        "quiz_history": "quiz_history.json",
        "violations": "fullscreen_violations.json",
    }

    def __init__(self, storage_dir: str):
        self.storage_dir = storage_dir
        self.ensure_storage_dir()

        self.users = self._collection("users")
        self.questions = self._collection("questions")
        self.quiz_history = self._collection("quiz_history")
        self.violations = self._collection("violations")

    def ensure_storage_dir(self):
        """Create storage directory if it doesn't exist"""
        os.makedirs(self.storage_dir, exist_ok=True)

    def _collection(self, name: str) -> JsonCollection:
        return JsonCollection(os.path.join(self.storage_dir, self.FILENAMES[name]))


def init_storage(app) -> JsonStorage:
    storage = JsonStorage(app.config["DATA_DIR"])
    app.extensions["quiz_storage"] = storage
    return storage


def get_storage() -> JsonStorage:
    return current_app.extensions["quiz_storage"]
