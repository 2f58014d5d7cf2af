"""
Quiz history and fullscreen violation endpoint tests
"""

from conftest import auth

ATTEMPT = {
    "topic": "DSA",
    "difficulty": "easy",
    "score": 2,
    "totalQuestions": 3,
    "percentage": "66.7",
    "timeOutsideFullscreen": 0,
}


def test_history_roundtrip(client, student_token):
    resp = client.post("/quiz-history", json=ATTEMPT, headers=auth(student_token))
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["message"] == "Quiz history saved successfully"

    records = client.get("/quiz-history", headers=auth(student_token)).get_json()
    assert len(records) == 1
    record = records[0]
    assert record["id"] == body["id"]
    assert record["score"] == 2
    assert record["total_questions"] == 3
    assert record["percentage"] == "66.7"
    assert record["time_outside_fullscreen"] == 0
    assert record["created_at"].endswith("Z")


def test_history_is_per_user(client, teacher_token, student_token):
    client.post("/quiz-history", json=ATTEMPT, headers=auth(student_token))
    assert client.get("/quiz-history", headers=auth(teacher_token)).get_json() == []


def test_history_requires_auth(client):
    assert client.get("/quiz-history").status_code == 401
    assert client.post("/quiz-history", json=ATTEMPT).status_code == 401


def test_history_validation(client, student_token):
    for missing in ("topic", "difficulty", "score", "totalQuestions", "percentage"):
        body = {k: v for k, v in ATTEMPT.items() if k != missing}
        resp = client.post("/quiz-history", json=body, headers=auth(student_token))
        assert resp.status_code == 400, missing
        assert resp.get_json()["error"] == "Missing required fields"

    resp = client.post("/quiz-history", json={**ATTEMPT, "score": 5}, headers=auth(student_token))
    assert resp.status_code == 400


def test_malformed_history_body_is_400(client, student_token):
    assert client.post("/quiz-history", json=[ATTEMPT], headers=auth(student_token)).status_code == 400
    resp = client.post("/quiz-history", json={**ATTEMPT, "topic": ["DSA"]}, headers=auth(student_token))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "topic and difficulty must be strings"


def test_score_zero_is_accepted(client, student_token):
    resp = client.post("/quiz-history", json={**ATTEMPT, "score": 0, "percentage": "0.0"},
                       headers=auth(student_token))
    assert resp.status_code == 201


def test_stored_percentage_follows_score(client, student_token):
    client.post("/quiz-history", json={**ATTEMPT, "percentage": "99"}, headers=auth(student_token))
    record = client.get("/quiz-history", headers=auth(student_token)).get_json()[0]
    assert record["percentage"] == "66.7"


def test_violation_recorded_only_when_time_outside(client, teacher_token, student_token):
    client.post("/quiz-history", json=ATTEMPT, headers=auth(student_token))
    assert client.get("/violations", headers=auth(teacher_token)).get_json() == []

    resp = client.post("/quiz-history", json={**ATTEMPT, "timeOutsideFullscreen": 5},
                       headers=auth(student_token))
    history_id = resp.get_json()["id"]

    violations = client.get("/violations", headers=auth(teacher_token)).get_json()
    assert len(violations) == 1
    v = violations[0]
    assert v["quiz_history_id"] == history_id
    assert v["time_outside_fullscreen"] == 5
    assert v["username"] == "arnold"
    assert (v["topic"], v["difficulty"]) == ("DSA", "easy")


def test_violations_are_teacher_only(client, student_token):
    assert client.get("/violations", headers=auth(student_token)).status_code == 403
    assert client.get("/violations").status_code == 401


def test_violation_for_deleted_user_shows_unknown(client, app, teacher_token, student_token):
    client.post("/quiz-history", json={**ATTEMPT, "timeOutsideFullscreen": 3}, headers=auth(student_token))
    with app.app_context():
        from quizapp.storage import get_storage
        users = get_storage().users
        student = users.find_one(username="arnold")
        users.delete(student["id"])

    violations = client.get("/violations", headers=auth(teacher_token)).get_json()
    assert violations[0]["username"] == "Unknown"
