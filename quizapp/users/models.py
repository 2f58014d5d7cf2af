"""
Quiz history and fullscreen violation records
"""

from typing import Dict, List

from quizapp.storage import get_storage


class HistoryValidationError(ValueError):
    pass


def format_percentage(score: int, total_questions: int) -> str:
    """score/total as a percentage with one decimal, e.g. 2/3 -> "66.7" """
    if not total_questions:
        return "0.0"
    return f"{score / total_questions * 100:.1f}"


def validate_history_payload(data: Dict) -> Dict:
    if not isinstance(data, dict):
        raise HistoryValidationError("Missing required fields")

    topic = data.get("topic")
    difficulty = data.get("difficulty")
    score = data.get("score")
    total_questions = data.get("totalQuestions")
    percentage = data.get("percentage")
    time_outside = data.get("timeOutsideFullscreen") or 0

    if not topic or not difficulty or score is None or not total_questions or percentage in (None, ""):
        raise HistoryValidationError("Missing required fields")

    if not isinstance(topic, str) or not isinstance(difficulty, str):
        raise HistoryValidationError("topic and difficulty must be strings")

    for name, value in (("score", score), ("totalQuestions", total_questions),
                        ("timeOutsideFullscreen", time_outside)):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise HistoryValidationError(f"{name} must be a non-negative integer")

    if score > total_questions:
        raise HistoryValidationError("score cannot exceed totalQuestions")

    return {
        "topic": topic,
        "difficulty": difficulty,
        "score": score,
        "total_questions": total_questions,
        # stored value always agrees with score/total
        "percentage": format_percentage(score, total_questions),
        "time_outside_fullscreen": time_outside,
    }


def history_for_user(user_id: int) -> List[Dict]:
    return get_storage().quiz_history.find(user_id=user_id)


def record_attempt(user_id: int, fields: Dict) -> Dict:
    """Append a history record, plus a violation row when time was spent outside fullscreen"""
    storage = get_storage()
    record = storage.quiz_history.create({"user_id": user_id, **fields})

    if fields["time_outside_fullscreen"] > 0:
        storage.violations.create({
            "user_id": user_id,
            "quiz_history_id": record["id"],
            "time_outside_fullscreen": fields["time_outside_fullscreen"],
            "topic": fields["topic"],
            "difficulty": fields["difficulty"],
        })
    return record


def violations_with_usernames() -> List[Dict]:
    storage = get_storage()
    usernames = {u["id"]: u["username"] for u in storage.users.find_all()}
    return [
        {**v, "username": usernames.get(v.get("user_id"), "Unknown")}
        for v in storage.violations.find_all()
    ]
