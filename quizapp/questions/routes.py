from flask import Blueprint, abort, current_app, jsonify, request
from flask_login import current_user

from quizapp.auth.guards import teacher_required
from . import models
from .models import QuestionValidationError

bp = Blueprint('questions', __name__)


def _validated_body():
    try:
        return models.validate_question_payload(request.get_json(silent=True) or {})
    except QuestionValidationError as e:
        abort(400, description=str(e))


@bp.route('', methods=['GET'])
def list_questions():
    """All questions, optionally filtered by ?topic= and ?difficulty="""
    topic = request.args.get('topic')
    difficulty = request.args.get('difficulty')
    return jsonify(models.list_questions(topic, difficulty))


@bp.route('/grouped', methods=['GET'])
def grouped_questions():
    return jsonify(models.list_grouped())


@bp.route('/<int:question_id>', methods=['GET'])
def get_question(question_id):
    question = models.get_question(question_id)
    if not question:
        abort(404, description='Question not found')
    return jsonify(question)


@bp.route('', methods=['POST'])
@teacher_required
def create_question():
    fields = _validated_body()
    question = models.create_question(fields, created_by=current_user.id)
    current_app.logger.info(
        f"Question {question['id']} created by {current_user.username} "
        f"({fields['topic']}/{fields['difficulty']})"
    )
    return jsonify(question), 201


@bp.route('/<int:question_id>', methods=['PUT'])
@teacher_required
def update_question(question_id):
    if not models.get_question(question_id):
        abort(404, description='Question not found')

    fields = _validated_body()
    question = models.update_question(question_id, fields)
    if not question:
        abort(404, description='Question not found')
    return jsonify(question)


@bp.route('/<int:question_id>', methods=['DELETE'])
@teacher_required
def delete_question(question_id):
    if not models.delete_question(question_id):
        abort(404, description='Question not found')

    current_app.logger.info(f"Question {question_id} deleted by {current_user.username}")
    return jsonify({'message': 'Question deleted successfully'})
