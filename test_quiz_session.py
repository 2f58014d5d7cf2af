"""
Quiz session state machine and fullscreen tracker tests
"""

import time

import pytest

from quizapp.auth.models import Role
from quizapp.client.fullscreen import FullscreenTracker
from quizapp.client.timers import IntervalTimer
from quizapp.client.session import (
    PRACTICE_TIME_LIMIT, QuizSession, SessionError, SessionState, score_answers,
)

QUESTIONS = [
    {"id": 1, "question": "q1", "options": ["a", "b", "c", "d"], "correct": 0},
    {"id": 2, "question": "q2", "options": ["a", "b", "c", "d"], "correct": 2},
    {"id": 3, "question": "q3", "options": ["a", "b", "c", "d"], "correct": 3},
]


class FakeDisplay:
    def __init__(self, fullscreen=True):
        self.fullscreen = fullscreen
        self.requested = False
        self.exited = False

    def request(self):
        self.requested = True

    def is_fullscreen(self):
        return self.fullscreen

    def exit(self):
        self.exited = True


def make_session(**kwargs):
    kwargs.setdefault("difficulty", "easy")
    return QuizSession(QUESTIONS, "DSA", **kwargs)


def answer(session, option):
    session.select(option)
    session.submit()


def test_full_attempt_scores_answers():
    session = make_session()
    session.start()
    for option in (0, 2, 1):
        answer(session, option)
        session.next()

    assert session.state is SessionState.COMPLETE
    result = session.result()
    assert result["score"] == 2
    assert result["total_questions"] == 3
    assert result["percentage"] == "66.7"
    assert result["wrong_answers"] == [{
        "question": "q3", "topic": "DSA", "difficulty": "easy",
        "user_answer": "b", "correct_answer": "d",
    }]


@pytest.mark.parametrize("difficulty,seconds", [("easy", 30), ("medium", 45), ("hard", 60)])
def test_countdown_seeded_by_difficulty(difficulty, seconds):
    session = make_session(difficulty=difficulty)
    session.start()
    assert session.state is SessionState.ACTIVE
    assert session.time_left == seconds


def test_practice_mode_is_effectively_unbounded():
    session = make_session(practice_mode=True)
    session.start()
    assert session.time_left == PRACTICE_TIME_LIMIT


def test_timer_expiry_submits_null_and_advances():
    session = make_session()
    session.start()
    for _ in range(30):
        session.tick()

    assert session.state is SessionState.ANSWERED
    assert session.answers == {0: None}
    assert session.is_correct() is False

    session.next()
    assert session.state is SessionState.ACTIVE
    assert session.current_index == 1
    assert session.time_left == 30


def test_timer_expiry_submits_pending_selection():
    session = make_session()
    session.start()
    session.select(0)
    session.tick(30)
    assert session.answers == {0: 0}
    assert session.is_correct() is True


def test_submit_requires_selection():
    session = make_session()
    session.start()
    with pytest.raises(SessionError):
        session.submit()


def test_submit_freezes_timer():
    session = make_session()
    session.start()
    session.tick(5)
    answer(session, 1)
    assert session.time_left == 0
    session.tick(5)
    assert session.state is SessionState.ANSWERED
    with pytest.raises(SessionError):
        session.select(2)


def test_next_requires_answer():
    session = make_session()
    session.start()
    with pytest.raises(SessionError):
        session.next()


def test_previous_keeps_recorded_answer():
    session = make_session()
    session.start()
    with pytest.raises(SessionError):
        session.previous()

    answer(session, 0)
    session.next()
    session.previous()
    assert session.current_index == 0
    assert session.state is SessionState.ANSWERED
    assert session.selected == 0
    assert session.answers == {0: 0}

    session.next()
    assert session.state is SessionState.ACTIVE
    assert session.current_index == 1


def test_unanswered_never_counts_as_correct():
    questions = [{"options": ["a", "b", "c", "d"], "correct": 0}]
    assert score_answers(questions, {0: None}) == 0
    assert score_answers(questions, {}) == 0
    assert score_answers(questions, {0: 0}) == 1


def test_result_before_completion_fails():
    session = make_session()
    session.start()
    with pytest.raises(SessionError):
        session.result()


def test_empty_question_set_is_rejected():
    with pytest.raises(SessionError):
        QuizSession([], "DSA", "easy")


def test_reset_returns_to_idle():
    session = make_session()
    session.start()
    answer(session, 0)
    session.reset()
    assert session.state is SessionState.IDLE
    assert session.answers == {}
    session.start()
    assert session.time_left == 30


def test_replay_counts_fullscreen_time_from_zero():
    display = FakeDisplay(fullscreen=False)
    session = make_session(role=Role.STUDENT, tracker=FullscreenTracker(display))
    session.start()
    for _ in range(4):
        session.tracker.poll()
    assert session.time_outside_fullscreen == 4

    session.reset()
    assert session.time_outside_fullscreen == 0

    display.fullscreen = True
    session.start()
    for option in (0, 2, 3):
        session.tracker.poll()
        answer(session, option)
        session.next()
    assert session.result()["time_outside_fullscreen"] == 0


# ─── fullscreen ────────────────────────────────────────────────────────────────
def test_student_timed_session_tracks_fullscreen():
    display = FakeDisplay(fullscreen=True)
    session = make_session(role=Role.STUDENT, tracker=FullscreenTracker(display))
    session.start()
    assert display.requested

    session.tracker.poll()
    display.fullscreen = False
    for _ in range(5):
        session.tracker.poll()
    display.fullscreen = True
    session.tracker.poll()

    for option in (0, 2, 3):
        answer(session, option)
        session.next()
    session.tracker.poll()

    assert session.result()["time_outside_fullscreen"] == 5


def test_tracking_stops_when_complete():
    display = FakeDisplay(fullscreen=False)
    session = make_session(role=Role.STUDENT, tracker=FullscreenTracker(display))
    session.start()
    session.tracker.poll()
    for _ in range(3):
        session.tick(30)
        session.next()
    session.tracker.poll()
    session.tracker.poll()
    assert session.result()["time_outside_fullscreen"] == 1


@pytest.mark.parametrize("role,practice", [(Role.TEACHER, False), (Role.STUDENT, True), (None, False)])
def test_no_tracking_for_teachers_or_practice(role, practice):
    display = FakeDisplay(fullscreen=False)
    session = make_session(role=role, practice_mode=practice, tracker=FullscreenTracker(display))
    assert session.tracker is None
    session.start()
    assert not display.requested
    assert session.time_outside_fullscreen == 0


def test_close_exits_fullscreen():
    display = FakeDisplay()
    session = make_session(role=Role.STUDENT, tracker=FullscreenTracker(display))
    session.start()
    session.close()
    assert display.exited
    assert not session.tracker.tracking


def test_refused_fullscreen_request_still_tracks():
    class RefusingDisplay(FakeDisplay):
        def request(self):
            raise RuntimeError("denied")

    tracker = FullscreenTracker(RefusingDisplay(fullscreen=False))
    tracker.start()
    tracker.poll()
    assert tracker.seconds_outside == 1


# ─── realtime timers ───────────────────────────────────────────────────────────
def test_interval_timer_runs_until_cancelled():
    calls = []
    timer = IntervalTimer(0.05, lambda: calls.append(1), name="test-timer").start()
    time.sleep(0.3)
    assert timer.running
    timer.cancel()
    time.sleep(0.1)
    seen = len(calls)
    assert seen >= 2
    assert not timer.running

    time.sleep(0.2)
    assert len(calls) == seen


def test_close_cancels_countdown_and_fullscreen_poll():
    display = FakeDisplay(fullscreen=False)
    session = make_session(role=Role.STUDENT, tracker=FullscreenTracker(display), realtime=True)
    session.start()
    time.sleep(2.5)
    session.close()

    time_left = session.time_left
    seconds_outside = session.tracker.seconds_outside
    assert time_left < 30
    assert seconds_outside >= 1

    time.sleep(1.5)
    assert session.time_left == time_left
    assert session.tracker.seconds_outside == seconds_outside
