"""
Authentication Routes
Token login, registration and verification for teachers and students
"""

from flask import Blueprint, abort, current_app, jsonify, request
from flask_login import current_user, login_required

from .models import Role, User, issue_token

bp = Blueprint('auth', __name__)


def _credentials():
    """username, password and role from the JSON body; 400 when any is missing"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    username = data.get('username')
    password = data.get('password')
    role = data.get('role')

    if not username or not password or not role:
        abort(400, description='Username, password, and role are required')
    if not all(isinstance(value, str) for value in (username, password, role)):
        abort(400, description='Username, password, and role must be strings')
    return username, password, role


@bp.route('/login', methods=['POST'])
def login():
    """Exchange credentials for a token"""
    username, password, role_name = _credentials()

    role = Role.parse(role_name)
    user = User.authenticate(username, password, role) if role else None
    if not user:
        current_app.logger.info(f"Failed login for {username!r} as {role_name!r}")
        abort(401, description='Invalid credentials')

    return jsonify({'token': issue_token(user), 'user': user.to_public_dict()})


@bp.route('/register', methods=['POST'])
def register():
    """Create an account and return a token for it"""
    username, password, role_name = _credentials()

    role = Role.parse(role_name)
    if role is None:
        abort(400, description='Invalid role. Must be teacher or student')

    user = User.create_user(username, password, role)
    if not user:
        abort(400, description='Username already exists')

    current_app.logger.info(f"Registered {role.value} {username!r} (id={user.id})")
    return jsonify({'token': issue_token(user), 'user': user.to_public_dict()}), 201


@bp.route('/verify', methods=['GET'])
@login_required
def verify():
    """Identity behind the bearer token"""
    return jsonify({'user': current_user.to_public_dict()})
