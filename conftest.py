import pytest

from quizapp import create_app
from quizapp.config import TestingConfig


@pytest.fixture
def app(tmp_path):
    app = create_app(TestingConfig, DATA_DIR=str(tmp_path / "database"))
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, username, role, password="secret123"):
    resp = client.post("/register", json={"username": username, "password": password, "role": role})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


@pytest.fixture
def teacher_token(client):
    return register(client, "ms_frizzle", "teacher")["token"]


@pytest.fixture
def student_token(client):
    return register(client, "arnold", "student")["token"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}
