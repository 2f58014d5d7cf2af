"""
Request identity for the JSON API
Flask-Login loads the user from the bearer token; these helpers gate views by role
"""

from functools import wraps

import jwt
from flask import abort, g
from flask_login import current_user

from .models import Role, User, bearer_token, decode_token


def load_user_from_request(req):
    """Flask-Login request_loader: resolve the bearer token to a User.

    The reason for a failed lookup is kept on `g.auth_error` so the
    unauthorized handler can report it.
    """
    token = bearer_token(req.headers.get("Authorization"))
    if not token:
        g.auth_error = "No token provided"
        return None

    try:
        claims = decode_token(token)
    except jwt.ExpiredSignatureError:
        g.auth_error = "Token expired"
        return None
    except jwt.InvalidTokenError:
        g.auth_error = "Invalid token"
        return None

    user = User.get_by_id(claims.get("id"))
    if user is None:
        g.auth_error = "User not found"
        return None
    return user


def unauthorized():
    abort(401, description=g.get("auth_error", "Authentication required"))


def role_required(role: Role):
    """Require an authenticated user holding `role` (401 without a user, 403 with the wrong role)"""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                unauthorized()
            if current_user.role is not role:
                abort(403, description=f"Access denied. {role.value.title()} role required")
            return view(*args, **kwargs)
        return wrapped
    return decorator


teacher_required = role_required(Role.TEACHER)
