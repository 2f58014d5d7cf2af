from flask import Blueprint, abort, current_app, jsonify, request
from flask_login import current_user, login_required

from quizapp.auth.guards import teacher_required
from . import models
from .models import HistoryValidationError

bp = Blueprint('users', __name__)


@bp.route('/quiz-history', methods=['GET'])
@login_required
def quiz_history():
    """The caller's completed attempts"""
    return jsonify(models.history_for_user(current_user.id))


@bp.route('/quiz-history', methods=['POST'])
@login_required
def save_quiz_history():
    try:
        fields = models.validate_history_payload(request.get_json(silent=True) or {})
    except HistoryValidationError as e:
        abort(400, description=str(e))

    record = models.record_attempt(current_user.id, fields)
    if fields['time_outside_fullscreen'] > 0:
        current_app.logger.warning(
            f"{current_user.username} spent {fields['time_outside_fullscreen']}s outside fullscreen "
            f"({fields['topic']}/{fields['difficulty']})"
        )
    return jsonify({'id': record['id'], 'message': 'Quiz history saved successfully'}), 201


@bp.route('/violations', methods=['GET'])
@teacher_required
def violations():
    return jsonify(models.violations_with_usernames())
