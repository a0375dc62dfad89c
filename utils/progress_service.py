import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db, QuizAttempt, UserProgress

logger = logging.getLogger(__name__)

STUDY_POINTS_DIVISOR = 5  # 100% earns 20 points


def _metric(user_id, category, metric):
    return UserProgress.query.filter_by(user_id=user_id, category=category, metric=metric)


def _upsert(user_id, category, metric, now, increment=None, value=None):
    """Add `increment` to a metric, or overwrite it with `value`, in one statement.

    The row is inserted only when the update matched nothing. A concurrent insert
    of the same metric surfaces as IntegrityError, after which the update is retried once.
    """
    if increment is not None:
        changes = {UserProgress.value: UserProgress.value + increment}
        initial = increment
    else:
        changes = {UserProgress.value: value}
        initial = value
    changes[UserProgress.last_updated] = now

    if _metric(user_id, category, metric).update(changes, synchronize_session=False):
        return

    try:
        with db.session.begin_nested():
            db.session.add(UserProgress(user_id=user_id, category=category, metric=metric,
                                        value=initial, last_updated=now))
    except IntegrityError:
        logger.info("Progress row %s/%s for user %s created concurrently, retrying", category, metric, user_id)
        _metric(user_id, category, metric).update(changes, synchronize_session=False)


def update_user_quiz_progress(attempt):
    """Roll a passed attempt into the user's quiz metrics and study points.

    Runs after the attempt itself is committed, so a failure here is logged and
    rolled back without touching the attempt.
    """
    if not attempt.is_passed:
        return None

    earned = attempt.score // STUDY_POINTS_DIVISOR
    try:
        now = datetime.utcnow()

        _upsert(attempt.user_id, "quizzes", "completed_quizzes", now, increment=1)

        average = db.session.scalar(
            db.select(func.avg(QuizAttempt.score)).where(
                QuizAttempt.user_id == attempt.user_id,
                QuizAttempt.is_passed.is_(True),
                QuizAttempt.score.isnot(None),
            )
        )
        _upsert(attempt.user_id, "quizzes", "average_score", now, value=float(average or 0))

        _upsert(attempt.user_id, "points", "study_points", now, increment=earned)

        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to update quiz progress for user %s", attempt.user_id)
        return None

    return earned


def get_user_progress(user_id):
    rows = (
        UserProgress.query
        .filter_by(user_id=user_id)
        .order_by(UserProgress.category, UserProgress.metric)
        .all()
    )
    return [row.to_dict() for row in rows]
