"""
Quiz session controller
Drives one quiz attempt: question sequencing, per-question countdown,
answer capture, fullscreen compliance and scoring.

    idle -> active(i) -> answered(i) -> active(i+1) | complete
"""

import enum
import logging
import threading
from typing import Dict, List, Optional

from quizapp.auth.models import Role
from quizapp.questions.models import Difficulty
from quizapp.users.models import format_percentage

from .timers import IntervalTimer

logger = logging.getLogger(__name__)

# effectively unbounded per-question time in practice mode
PRACTICE_TIME_LIMIT = 9999


class SessionState(str, enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ANSWERED = "answered"
    COMPLETE = "complete"


class SessionError(Exception):
    """An operation not allowed in the session's current state"""


def score_answers(questions: List[Dict], answers: Dict[int, Optional[int]]) -> int:
    """Count of questions whose recorded answer equals the correct index"""
    return sum(
        1 for index, question in enumerate(questions)
        if answers.get(index) is not None and answers.get(index) == question["correct"]
    )


class QuizSession:
    def __init__(self, questions: List[Dict], topic: str, difficulty, role: Role = None,
                 practice_mode: bool = False, tracker=None, realtime: bool = False):
        if not questions:
            raise SessionError(f"No questions available for {topic}/{difficulty}")

        self.questions = questions
        self.topic = topic
        self.difficulty = Difficulty(difficulty)
        self.role = role
        self.practice_mode = practice_mode
        self.realtime = realtime

        # fullscreen is only enforced for students on timed attempts
        self.tracker = tracker if (role is Role.STUDENT and not practice_mode) else None

        self.state = SessionState.IDLE
        self.current_index = 0
        self.answers: Dict[int, Optional[int]] = {}
        self.selected: Optional[int] = None
        self.time_left = 0
        self.score = 0

        self._lock = threading.RLock()
        self._countdown = None

    # ─── properties ────────────────────────────────────────────────────────
    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Dict:
        return self.questions[self.current_index]

    @property
    def time_limit(self) -> int:
        return PRACTICE_TIME_LIMIT if self.practice_mode else self.difficulty.time_limit

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.total_questions - 1

    @property
    def time_outside_fullscreen(self) -> int:
        return self.tracker.seconds_outside if self.tracker else 0

    def is_correct(self, index: int = None) -> Optional[bool]:
        """Whether the recorded answer for a question is right; None while unanswered"""
        index = self.current_index if index is None else index
        if index not in self.answers:
            return None
        return self.answers[index] is not None and self.answers[index] == self.questions[index]["correct"]

    # ─── transitions ───────────────────────────────────────────────────────
    def start(self):
        with self._lock:
            if self.state is not SessionState.IDLE:
                raise SessionError("Session already started")
            if self.tracker:
                self.tracker.start(realtime=self.realtime)
            if self.realtime:
                self._countdown = IntervalTimer(1.0, self._countdown_tick, name="quiz-countdown").start()
            self._enter(0)

    def _enter(self, index: int):
        """Show question `index`: frozen if it already has an answer, otherwise counting down"""
        self.current_index = index
        if index in self.answers:
            self.selected = self.answers[index]
            self.time_left = 0
            self.state = SessionState.ANSWERED
        else:
            self.selected = None
            self.time_left = self.time_limit
            self.state = SessionState.ACTIVE

    def select(self, option: int):
        with self._lock:
            if self.state is not SessionState.ACTIVE or self.time_left <= 0:
                raise SessionError("Answers can only be chosen while the question is active")
            if not 0 <= option < len(self.current_question["options"]):
                raise SessionError(f"Option {option} does not exist")
            self.selected = option

    def submit(self):
        with self._lock:
            if self.state is not SessionState.ACTIVE:
                raise SessionError("No active question to submit")
            if self.selected is None:
                raise SessionError("Select an option before submitting")
            self._record(self.selected)

    def _record(self, answer: Optional[int]):
        self.answers[self.current_index] = answer
        self.time_left = 0
        self.state = SessionState.ANSWERED

    def tick(self, seconds: int = 1):
        """Advance the countdown; expiry submits whatever is selected (possibly nothing)"""
        with self._lock:
            if self.state is not SessionState.ACTIVE:
                return
            self.time_left = max(self.time_left - seconds, 0)
            if self.time_left == 0:
                logger.info(f"Time ran out on question {self.current_index + 1}")
                self._record(self.selected)

    def _countdown_tick(self):
        with self._lock:
            # a tick already waiting on the lock when close() ran
            if self._countdown is None:
                return
            self.tick()

    def next(self):
        with self._lock:
            if self.state is not SessionState.ANSWERED:
                raise SessionError("Answer the question before moving on")
            if self.is_last_question:
                self._complete()
            else:
                self._enter(self.current_index + 1)

    def previous(self):
        with self._lock:
            if self.state not in (SessionState.ACTIVE, SessionState.ANSWERED):
                raise SessionError("Session is not in progress")
            if self.current_index == 0:
                raise SessionError("Already at the first question")
            self._enter(self.current_index - 1)

    def _complete(self):
        self.score = score_answers(self.questions, self.answers)
        self.state = SessionState.COMPLETE
        self.time_left = 0
        if self.tracker:
            self.tracker.pause()
        self._cancel_countdown()

    def _cancel_countdown(self):
        if self._countdown:
            self._countdown.cancel()
            self._countdown = None

    def close(self):
        """Leave the quiz view: cancel the countdown and fullscreen poll, exit fullscreen"""
        with self._lock:
            self._cancel_countdown()
            if self.tracker:
                self.tracker.stop()

    def reset(self):
        """Back to idle for a replay; recorded answers are discarded"""
        with self._lock:
            self.close()
            if self.tracker:
                self.tracker.reset()
            self.state = SessionState.IDLE
            self.current_index = 0
            self.answers = {}
            self.selected = None
            self.time_left = 0
            self.score = 0

    # ─── results ───────────────────────────────────────────────────────────
    def wrong_answers(self) -> List[Dict]:
        wrong = []
        for index, question in enumerate(self.questions):
            answer = self.answers.get(index)
            if answer == question["correct"]:
                continue
            wrong.append({
                "question": question["question"],
                "topic": self.topic,
                "difficulty": self.difficulty.value,
                "user_answer": question["options"][answer] if answer is not None else "Not answered",
                "correct_answer": question["options"][question["correct"]],
            })
        return wrong

    def result(self) -> Dict:
        if self.state is not SessionState.COMPLETE:
            raise SessionError("Quiz is not complete")
        return {
            "topic": self.topic,
            "difficulty": self.difficulty.value,
            "score": self.score,
            "total_questions": self.total_questions,
            "percentage": format_percentage(self.score, self.total_questions),
            "answers": dict(self.answers),
            "wrong_answers": self.wrong_answers(),
            "time_outside_fullscreen": self.time_outside_fullscreen,
            "practice_mode": self.practice_mode,
        }
