import logging
from flask import Blueprint, jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from classes.errors import QuizAttemptError, ResponseValidationError
from models import db
from utils.progress_service import get_user_progress
from utils.utils import login_required, current_user_id

logger = logging.getLogger(__name__)

quiz_bp = Blueprint("quizzes", __name__)


def get_attempt_manager():
    return current_app.extensions["attempt_manager"]


@quiz_bp.errorhandler(QuizAttemptError)
def handle_attempt_error(error):
    return jsonify(error.to_dict()), error.status_code


@quiz_bp.errorhandler(SQLAlchemyError)
def handle_storage_error(error):
    db.session.rollback()
    logger.exception("Storage failure while handling %s %s", request.method, request.path)
    return jsonify({"error": "Internal server error"}), 500


#                                                     QUIZ ATTEMPTS
#_____________________________________________________________________________________________________________
# Start a Quiz Attempt
@quiz_bp.route("/<int:quiz_id>/start", methods=["POST"])
@login_required
def start_attempt(quiz_id):
    """Creates the attempt and returns its questions without answers."""
    payload = get_attempt_manager().start(quiz_id, current_user_id())
    return jsonify(payload), 201


@quiz_bp.route("/attempts/<int:attempt_id>/submit", methods=["POST"])
@login_required
def submit_attempt(attempt_id):
    """Grades the attempt. A repeated submit gets 409 with kind 'already_completed'."""
    data = request.get_json(silent=True)
    if data is None and request.get_data():
        raise ResponseValidationError("Request body must be JSON.")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ResponseValidationError("Request body must be a JSON object.")

    payload = get_attempt_manager().submit(
        attempt_id,
        data.get("responses"),
        client_reported_elapsed=data.get("time_spent"),
        user_id=current_user_id(),
    )
    return jsonify(payload), 200


@quiz_bp.route("/attempts/<int:attempt_id>", methods=["GET"])
@login_required
def get_attempt(attempt_id):
    payload = get_attempt_manager().get_attempt(attempt_id, user_id=current_user_id())
    return jsonify(payload), 200


@quiz_bp.route("/<int:quiz_id>/attempts", methods=["GET"])
@login_required
def list_attempts(quiz_id):
    payload = get_attempt_manager().list_attempts(quiz_id, current_user_id())
    return jsonify(payload), 200


#Quiz progress for the signed-in user
@quiz_bp.route("/progress", methods=["GET"])
@login_required
def get_progress():
    return jsonify({"progress": get_user_progress(current_user_id())}), 200
