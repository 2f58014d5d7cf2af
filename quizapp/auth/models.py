"""
User accounts and bearer tokens
Users live in the users.json collection; tokens are HS256 JWTs
"""

import enum
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt
from flask import current_app
from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from quizapp.storage import get_storage


class Role(str, enum.Enum):
    TEACHER = "teacher"
    STUDENT = "student"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        """Role for a raw string, None when it is not a known role"""
        try:
            return cls(value)
        except ValueError:
            return None


class User(UserMixin):
    def __init__(self, user_id: int, username: str, role: Role, password_hash: str = None,
                 created_at: str = None):
        self.id = user_id
        self.username = username
        self.role = role
        self.password_hash = password_hash
        self.created_at = created_at

    @classmethod
    def from_record(cls, record: Dict) -> "User":
        return cls(
            user_id=record["id"],
            username=record["username"],
            role=Role(record["role"]),
            password_hash=record.get("password"),
            created_at=record.get("created_at"),
        )

    @property
    def is_teacher(self) -> bool:
        return self.role is Role.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role is Role.STUDENT

    def check_password(self, password: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, password)

    def to_public_dict(self) -> Dict:
        return {"id": self.id, "username": self.username, "role": self.role.value}

    @classmethod
    def create_user(cls, username: str, password: str, role: Role) -> Optional["User"]:
        """Create a new user account, None when the username is taken"""
        users = get_storage().users
        if users.find_one(username=username):
            return None

        record = users.create({
            "username": username,
            "password": generate_password_hash(password),
            "role": role.value,
        })
        return cls.from_record(record)

    @classmethod
    def authenticate(cls, username: str, password: str, role: Role) -> Optional["User"]:
        """User matching username, role and password"""
        record = get_storage().users.find_one(username=username, role=role.value)
        if not record:
            return None
        user = cls.from_record(record)
        return user if user.check_password(password) else None

    @classmethod
    def get_by_id(cls, user_id) -> Optional["User"]:
        try:
            record = get_storage().users.find_by_id(int(user_id))
        except (TypeError, ValueError):
            return None
        return cls.from_record(record) if record else None

    @classmethod
    def get_by_username(cls, username: str) -> Optional["User"]:
        record = get_storage().users.find_one(username=username)
        return cls.from_record(record) if record else None


# ─── TOKENS ────────────────────────────────────────────────────────────────────
def issue_token(user: User) -> str:
    config = current_app.config
    payload = {
        "id": user.id,
        "username": user.username,
        "role": user.role.value,
        "exp": datetime.now(timezone.utc) + timedelta(hours=config["JWT_EXPIRES_HOURS"]),
    }
    return jwt.encode(payload, config["JWT_SECRET"], algorithm=config["JWT_ALGORITHM"])


def decode_token(token: str) -> Dict:
    """Decoded claims; raises jwt.InvalidTokenError (incl. ExpiredSignatureError)"""
    config = current_app.config
    return jwt.decode(token, config["JWT_SECRET"], algorithms=[config["JWT_ALGORITHM"]])


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token from an `Authorization: Bearer <token>` header value"""
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        return None
    return parts[1].strip()
