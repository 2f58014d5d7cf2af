"""
Question records
Stored flat (option1..option4) and exposed with an `options` list
"""

import enum
from collections import OrderedDict
from typing import Dict, List, Optional

from quizapp.storage import get_storage

OPTION_COUNT = 4
OPTION_FIELDS = [f"option{n}" for n in range(1, OPTION_COUNT + 1)]


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def time_limit(self) -> int:
        """Seconds allowed per question"""
        return {"easy": 30, "medium": 45, "hard": 60}[self.value]

    @classmethod
    def parse(cls, value) -> Optional["Difficulty"]:
        try:
            return cls(value)
        except ValueError:
            return None


class QuestionValidationError(ValueError):
    pass


def validate_question_payload(data: Dict) -> Dict:
    """Check a create/update body and return the normalised fields.

    Raises QuestionValidationError with a client-facing message.
    """
    if not isinstance(data, dict):
        raise QuestionValidationError("All fields are required")

    topic = data.get("topic")
    difficulty = data.get("difficulty")
    question = data.get("question")
    options = data.get("options")
    correct = data.get("correct")

    if not topic or not difficulty or not question or not options or correct is None:
        raise QuestionValidationError("All fields are required")

    if not isinstance(options, list) or len(options) != OPTION_COUNT:
        raise QuestionValidationError("Options must be an array of 4 items")

    if not isinstance(topic, str) or not isinstance(question, str):
        raise QuestionValidationError("Topic and question must be text")

    if not all(isinstance(option, str) for option in options):
        raise QuestionValidationError("Options must be text")

    # bool is an int subclass; true/false are not answer indexes
    if isinstance(correct, bool) or not isinstance(correct, int) or not 0 <= correct <= OPTION_COUNT - 1:
        raise QuestionValidationError("Correct answer must be between 0 and 3")

    if Difficulty.parse(difficulty) is None:
        raise QuestionValidationError("Difficulty must be easy, medium or hard")

    return {
        "topic": topic,
        "difficulty": difficulty,
        "question": question,
        "options": list(options),
        "correct": correct,
    }


def to_record(fields: Dict) -> Dict:
    record = {k: v for k, v in fields.items() if k != "options"}
    record.update(zip(OPTION_FIELDS, fields["options"]))
    return record


def serialize(record: Dict, include_partition: bool = True) -> Dict:
    """Public shape of a stored question"""
    out = {
        "id": record["id"],
        "question": record["question"],
        "options": [record.get(field) for field in OPTION_FIELDS],
        "correct": record["correct"],
    }
    if include_partition:
        out["topic"] = record["topic"]
        out["difficulty"] = record["difficulty"]
    return out


# ─── REPOSITORY ────────────────────────────────────────────────────────────────
def list_questions(topic: str = None, difficulty: str = None) -> List[Dict]:
    filters = {}
    if topic:
        filters["topic"] = topic
    if difficulty:
        filters["difficulty"] = difficulty
    return [serialize(q) for q in get_storage().questions.find(**filters)]


def list_grouped() -> Dict[str, Dict[str, List[Dict]]]:
    """topic -> difficulty -> questions, in storage order"""
    grouped = OrderedDict()
    for q in get_storage().questions.find_all():
        by_difficulty = grouped.setdefault(q["topic"], OrderedDict())
        by_difficulty.setdefault(q["difficulty"], []).append(serialize(q, include_partition=False))
    return grouped


def get_question(question_id: int) -> Optional[Dict]:
    record = get_storage().questions.find_by_id(question_id)
    return serialize(record) if record else None


def create_question(fields: Dict, created_by: int) -> Dict:
    record = get_storage().questions.create({**to_record(fields), "created_by": created_by})
    return serialize(record)


def update_question(question_id: int, fields: Dict) -> Optional[Dict]:
    record = get_storage().questions.update(question_id, to_record(fields))
    return serialize(record) if record else None


def delete_question(question_id: int) -> bool:
    return get_storage().questions.delete(question_id)


def seed_default_questions(questions_data: Dict, created_by: int = None) -> int:
    """Insert topic -> difficulty -> [{question, options, correct}] data; returns count"""
    inserted = 0
    for topic, difficulties in questions_data.items():
        for difficulty, question_list in difficulties.items():
            for q in question_list:
                fields = validate_question_payload({
                    "topic": topic,
                    "difficulty": difficulty,
                    "question": q["question"],
                    "options": q["options"],
                    "correct": q["correct"],
                })
                create_question(fields, created_by)
                inserted += 1
    return inserted
