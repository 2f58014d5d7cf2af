"""
History and leaderboard recording for completed attempts
"""

import logging
import time
from datetime import date
from typing import Dict, List, Optional

from quizapp.auth.models import Role
from quizapp.users.models import format_percentage

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 10
RECENT_WRONG_ANSWERS = 5


def _entry_id() -> int:
    return int(time.time() * 1000)


class QuizRecorder:
    def __init__(self, store, api=None):
        self.store = store
        self.api = api

    def record_history(self, result: Dict, role: Optional[Role]) -> Optional[Dict]:
        """Prepend a timestamped entry to the local history (students only).

        When an API client is configured the attempt is also posted to the
        server, which records a violation for any time outside fullscreen.
        """
        if role is not Role.STUDENT:
            return None

        entry = {
            "id": _entry_id(),
            "score": result["score"],
            "total_questions": result["total_questions"],
            "percentage": result["percentage"],
            "topic": result["topic"],
            "difficulty": result["difficulty"],
            "wrong_answers": result.get("wrong_answers", []),
            "time_outside_fullscreen": result.get("time_outside_fullscreen", 0),
            "timestamp": _entry_id(),
            "date": date.today().isoformat(),
        }
        self.store.set("quiz_history", [entry] + self.store.quiz_history)

        if self.api is not None and self.api.token:
            response = self.api.save_quiz_history(result)
            entry["server_id"] = response.get("id")
            self.store.save()
            logger.info(f"Quiz history saved on server as #{entry['server_id']}")
        return entry

    def record_leaderboard(self, name: str, score: int, total_questions: int, topic: str,
                           difficulty: str) -> List[Dict]:
        """Insert, sort descending by percentage and keep the top 10"""
        entry = {
            "id": _entry_id(),
            "name": name,
            "score": score,
            "total_questions": total_questions,
            "percentage": format_percentage(score, total_questions),
            "topic": topic,
            "difficulty": difficulty,
            "date": date.today().isoformat(),
        }
        ranked = sorted(self.store.leaderboard + [entry], key=lambda e: float(e["percentage"]), reverse=True)
        self.store.set("leaderboard", ranked[:LEADERBOARD_SIZE])
        return self.store.leaderboard


def dashboard_stats(history: List[Dict]) -> Dict:
    """Overview numbers for the student dashboard"""
    total_quizzes = len(history)
    topic_performance = {}
    for quiz in history:
        perf = topic_performance.setdefault(quiz["topic"], {"total": 0, "correct": 0, "quizzes": 0})
        perf["total"] += quiz["total_questions"]
        perf["correct"] += quiz["score"]
        perf["quizzes"] += 1

    average = (
        round(sum(float(q["percentage"]) for q in history) / total_quizzes, 1)
        if total_quizzes else 0
    )
    return {
        "total_quizzes": total_quizzes,
        "total_questions": sum(q["total_questions"] for q in history),
        "total_correct": sum(q["score"] for q in history),
        "average_score": average,
        "topic_performance": topic_performance,
        "recent_wrong_answers": [w for q in history for w in q.get("wrong_answers", [])][:RECENT_WRONG_ANSWERS],
    }
