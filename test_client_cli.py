"""
Terminal client tests driven through click's CliRunner
"""

import pytest
from click.testing import CliRunner

from quizapp.client.api import ApiClient, ApiError
from quizapp.client.cli import cli
from quizapp.client.store import ClientStore

GROUPED = {
    "DSA": {
        "easy": [
            {"id": 1, "question": "q1", "options": ["a", "b", "c", "d"], "correct": 0},
            {"id": 2, "question": "q2", "options": ["a", "b", "c", "d"], "correct": 2},
            {"id": 3, "question": "q3", "options": ["a", "b", "c", "d"], "correct": 3},
        ],
    },
}


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "client.json")


def run(store_path, args, input=None):
    return CliRunner().invoke(cli, ["--store", store_path, "--api-url", "http://quiz.test/api"] + args, input=input)


def test_practice_quiz_end_to_end(store_path, monkeypatch):
    monkeypatch.setattr(ApiClient, "grouped_questions", lambda self: GROUPED)

    result = run(store_path, ["play", "--topic", "DSA", "--difficulty", "easy", "--practice"],
                 input="1\nn\n3\nn\n2\nn\ntester\n")
    assert result.exit_code == 0, result.output
    assert "Correct: 2/3" in result.output
    assert "66.7%" in result.output

    store = ClientStore(store_path)
    assert store.questions_data == GROUPED
    assert store.leaderboard[0]["name"] == "tester"
    assert store.leaderboard[0]["percentage"] == "66.7"
    # anonymous attempts are not added to history
    assert store.quiz_history == []


def test_play_falls_back_to_saved_questions(store_path, monkeypatch):
    ClientStore(store_path).set("questions_data", GROUPED)

    def offline(self):
        raise ApiError(0, "Could not reach http://quiz.test/api")

    monkeypatch.setattr(ApiClient, "grouped_questions", offline)
    result = run(store_path, ["play", "--topic", "DSA", "--difficulty", "easy", "--practice"],
                 input="1\nn\n3\nn\n4\nn\n\n")
    assert result.exit_code == 0, result.output
    assert "Using saved questions" in result.output
    assert "Correct: 3/3" in result.output
    assert ClientStore(store_path).leaderboard == []


def test_unknown_topic_fails(store_path, monkeypatch):
    monkeypatch.setattr(ApiClient, "grouped_questions", lambda self: GROUPED)
    result = run(store_path, ["play", "--topic", "Rust", "--difficulty", "easy"])
    assert result.exit_code == 1


def test_login_stores_session(store_path, monkeypatch):
    def fake_login(self, username, password, role):
        self.token = "tok"
        return {"token": "tok", "user": {"id": 7, "username": username, "role": role}}

    monkeypatch.setattr(ApiClient, "login", fake_login)
    result = run(store_path, ["login", "--role", "student", "--username", "arnold", "--password", "pw"])
    assert result.exit_code == 0, result.output
    assert ClientStore(store_path).user == {"id": 7, "username": "arnold", "role": "student", "token": "tok"}

    result = run(store_path, ["logout"])
    assert ClientStore(store_path).user is None


def test_login_failure_is_reported(store_path, monkeypatch):
    def refuse(self, username, password, role):
        raise ApiError(401, "Invalid credentials")

    monkeypatch.setattr(ApiClient, "login", refuse)
    result = run(store_path, ["login", "--role", "teacher", "--username", "x", "--password", "y"])
    assert result.exit_code == 1
    assert ClientStore(store_path).user is None


def test_teacher_commands_require_teacher(store_path):
    ClientStore(store_path).set_user({"id": 2, "username": "arnold", "role": "student", "token": "t"})
    result = run(store_path, ["questions", "delete", "1", "--yes"])
    assert result.exit_code == 1


def test_leaderboard_and_dark_mode(store_path):
    assert "No scores yet" in run(store_path, ["leaderboard"]).output
    run(store_path, ["dark-mode"])
    assert ClientStore(store_path).dark_mode is False
