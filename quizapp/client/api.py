"""
HTTP client for the quiz API
"""

import json
import os
from typing import Dict, List
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

DEFAULT_API_URL = "http://localhost:5000/api"


class ApiError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class ApiClient:
    def __init__(self, base_url: str = None, token: str = None, timeout: float = 10):
        self.base_url = (base_url or os.environ.get("QUIZAPP_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.token = token
        self.timeout = timeout

    def _request(self, method: str, path: str, body: Dict = None, params: Dict = None):
        url = f"{self.base_url}{path}"
        if params:
            query = urlencode({k: v for k, v in params.items() if v})
            if query:
                url = f"{url}?{query}"

        headers = {"Accept": "application/json"}
        data = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        req = Request(url, data=data, headers=headers, method=method)
        try:
            with urlopen(req, timeout=self.timeout) as resp:
                return json.loads(resp.read().decode("utf-8") or "null")
        except HTTPError as e:
            try:
                message = json.loads(e.read().decode("utf-8")).get("error", e.reason)
            except ValueError:
                message = e.reason
            raise ApiError(e.code, message) from e
        except URLError as e:
            raise ApiError(0, f"Could not reach {self.base_url}: {e.reason}") from e

    # ─── auth ──────────────────────────────────────────────────────────────
    def login(self, username: str, password: str, role: str) -> Dict:
        data = self._request("POST", "/login", {"username": username, "password": password, "role": role})
        self.token = data["token"]
        return data

    def register(self, username: str, password: str, role: str) -> Dict:
        data = self._request("POST", "/register", {"username": username, "password": password, "role": role})
        self.token = data["token"]
        return data

    def verify(self) -> Dict:
        return self._request("GET", "/verify")["user"]

    # ─── questions ─────────────────────────────────────────────────────────
    def list_questions(self, topic: str = None, difficulty: str = None) -> List[Dict]:
        return self._request("GET", "/questions", params={"topic": topic, "difficulty": difficulty})

    def grouped_questions(self) -> Dict:
        return self._request("GET", "/questions/grouped")

    def get_question(self, question_id: int) -> Dict:
        return self._request("GET", f"/questions/{question_id}")

    def create_question(self, topic: str, difficulty: str, question: str, options: List[str],
                        correct: int) -> Dict:
        return self._request("POST", "/questions", {
            "topic": topic, "difficulty": difficulty, "question": question,
            "options": options, "correct": correct,
        })

    def update_question(self, question_id: int, topic: str, difficulty: str, question: str,
                        options: List[str], correct: int) -> Dict:
        return self._request("PUT", f"/questions/{question_id}", {
            "topic": topic, "difficulty": difficulty, "question": question,
            "options": options, "correct": correct,
        })

    def delete_question(self, question_id: int) -> Dict:
        return self._request("DELETE", f"/questions/{question_id}")

    # ─── history ───────────────────────────────────────────────────────────
    def quiz_history(self) -> List[Dict]:
        return self._request("GET", "/quiz-history")

    def save_quiz_history(self, result: Dict) -> Dict:
        return self._request("POST", "/quiz-history", {
            "topic": result["topic"],
            "difficulty": result["difficulty"],
            "score": result["score"],
            "totalQuestions": result["total_questions"],
            "percentage": result["percentage"],
            "timeOutsideFullscreen": result.get("time_outside_fullscreen", 0),
        })

    def violations(self) -> List[Dict]:
        return self._request("GET", "/violations")
