from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from app.extensions import db
from app.models import Course, Lesson, Enrollment, UserProgress, progress_percent
from app.utils.auth import acting_user_id, self_or_admin_required
from app.utils.request_data import json_object

bp = Blueprint("progress", __name__)


def _as_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_bool(value, default=True):
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


# Enroll in a course (idempotent)
@bp.route("/enroll", methods=["POST"])
@jwt_required()
def enroll():
    data = json_object()
    user_id, error = acting_user_id(data.get("user_id"))
    if error:
        return error

    course_id = _as_int(data.get("course_id"))
    if not course_id:
        return jsonify({"error": "Missing course_id"}), 400

    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"error": "Course not found"}), 404

    existing = Enrollment.query.filter_by(user_id=user_id, course_id=course.id).first()
    if existing:
        return jsonify({"success": True, "enrolled": True, "message": "Already enrolled"}), 200

    db.session.add(Enrollment(user_id=user_id, course_id=course.id))
    try:
        db.session.commit()
    except IntegrityError:
        # a concurrent request enrolled the same pair first
        db.session.rollback()

    return jsonify({"success": True, "enrolled": True}), 201


@bp.route("/users/<int:user_id>/enrollment/<int:course_id>", methods=["GET"])
@self_or_admin_required
def enrollment_status(user_id, course_id):
    enrolled = db.session.query(
        Enrollment.query.filter_by(user_id=user_id, course_id=course_id).exists()
    ).scalar()
    return jsonify({"enrolled": bool(enrolled)}), 200


# Mark a lesson complete or incomplete
@bp.route("/progress", methods=["POST"])
@jwt_required()
def toggle_progress():
    data = json_object()
    user_id, error = acting_user_id(data.get("user_id"))
    if error:
        return error

    lesson_id = _as_int(data.get("lesson_id"))
    if not lesson_id:
        return jsonify({"error": "Missing lesson_id"}), 400

    lesson = db.session.get(Lesson, lesson_id)
    if not lesson:
        return jsonify({"error": "Lesson not found"}), 404

    completed = _as_bool(data.get("completed"))
    progress = UserProgress.query.filter_by(user_id=user_id, lesson_id=lesson.id).first()

    if completed and not progress:
        db.session.add(UserProgress(user_id=user_id, lesson_id=lesson.id))
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
    elif not completed and progress:
        db.session.delete(progress)
        db.session.commit()

    return jsonify({"success": True, "lesson_id": lesson.id, "completed": completed}), 200


@bp.route("/users/<int:user_id>/course/<int:course_id>/progress", methods=["GET"])
@self_or_admin_required
def course_progress(user_id, course_id):
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"error": "Course not found"}), 404

    completed = [
        lesson_id for (lesson_id,) in
        db.session.query(UserProgress.lesson_id)
        .join(Lesson, UserProgress.lesson_id == Lesson.id)
        .filter(UserProgress.user_id == user_id, Lesson.course_id == course.id)
        .order_by(UserProgress.lesson_id)
        .all()
    ]
    total = Lesson.query.filter_by(course_id=course.id).count()

    return jsonify({
        "completed": completed,
        "total_lessons": total,
        "progress": progress_percent(len(completed), total)
    }), 200


@bp.route("/users/<int:user_id>/dashboard", methods=["GET"])
@self_or_admin_required
def dashboard(user_id):
    """Enrolled courses, newest enrollment first, with lesson totals and completion."""
    totals = (
        db.session.query(Lesson.course_id.label("course_id"), func.count(Lesson.id).label("total"))
        .group_by(Lesson.course_id)
        .subquery()
    )
    done = (
        db.session.query(Lesson.course_id.label("course_id"), func.count(UserProgress.id).label("completed"))
        .join(UserProgress, UserProgress.lesson_id == Lesson.id)
        .filter(UserProgress.user_id == user_id)
        .group_by(Lesson.course_id)
        .subquery()
    )

    rows = (
        db.session.query(
            Course,
            Enrollment.enrolled_at,
            func.coalesce(totals.c.total, 0),
            func.coalesce(done.c.completed, 0)
        )
        .join(Enrollment, Enrollment.course_id == Course.id)
        .outerjoin(totals, totals.c.course_id == Course.id)
        .outerjoin(done, done.c.course_id == Course.id)
        .filter(Enrollment.user_id == user_id)
        .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
        .all()
    )

    result = []
    for course, enrolled_at, total, completed in rows:
        data = course.to_dict()
        data.update({
            "enrolled_at": enrolled_at.isoformat() if enrolled_at else None,
            "totalLessons": total,
            "completedLessons": completed,
            "progress": progress_percent(completed, total)
        })
        result.append(data)

    return jsonify(result), 200
