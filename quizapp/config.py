import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-quizapp")

    _basedir = os.path.abspath(os.path.dirname(__file__))

    # ------------------------------------------------------------------
    # Token configuration
    # ------------------------------------------------------------------
    JWT_SECRET = os.environ.get("JWT_SECRET", "your-secret-key-change-in-production")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_HOURS = int(os.environ.get("JWT_EXPIRES_HOURS", "24"))

    # ------------------------------------------------------------------
    # JSON storage
    # ------------------------------------------------------------------
    # Flat JSON files default to ./database beside the package;
    # deployments point QUIZAPP_DATA_DIR at a persistent volume.
    DATA_DIR = os.environ.get("QUIZAPP_DATA_DIR") or os.path.join(_basedir, "..", "database")

    # Seed accounts created by `flask init-db`
    DEFAULT_USERS = [
        ("teacher", "teacher123", "teacher"),
        ("student", "student123", "student"),
    ]

    DEFAULT_QUESTIONS_FILE = os.path.join(_basedir, "data", "default_questions.json")


class TestingConfig(Config):
    TESTING = True
    JWT_SECRET = "testing-secret"
    DATA_DIR = None  # set per test run
