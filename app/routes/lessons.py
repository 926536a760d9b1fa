from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError
from app.extensions import db
from app.models import Course, Lesson, LessonFile
from app.utils.auth import role_required
from app.utils.file_store import get_file_store, UploadError

bp = Blueprint("lessons", __name__)


def _attach_uploads(lesson, files):
    """
    Write the (already validated) uploads to the store and add their rows.
    Commits; if the commit fails the freshly written files are removed again.
    """
    store = get_file_store()
    saved = store.save_all(files)
    records = [LessonFile(lesson_id=lesson.id, **item) for item in saved]
    db.session.add_all(records)

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        store.delete_many(item["file_path"] for item in saved)
        raise

    return records


# Admin create a lesson, optionally with files in the same request
@bp.route("/lessons", methods=["POST"])
@role_required("admin")
def create_lesson():
    course_id = request.form.get("course_id")
    title = (request.form.get("title") or "").strip()
    content = request.form.get("content")

    if not course_id or not title:
        return jsonify({"error": "Missing fields"}), 400

    try:
        course_id = int(course_id)
    except ValueError:
        return jsonify({"error": "Invalid course_id"}), 400

    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"error": "Course does not exist"}), 404

    files = request.files.getlist("files")
    try:
        get_file_store().validate(files)
    except UploadError as e:
        return jsonify({"error": e.message}), e.status_code

    last_index = (
        db.session.query(db.func.max(Lesson.order_index))
        .filter(Lesson.course_id == course.id)
        .scalar()
    )

    lesson = Lesson(
        course_id=course.id,
        title=title,
        content=content,
        order_index=0 if last_index is None else last_index + 1
    )
    db.session.add(lesson)
    db.session.flush()

    records = _attach_uploads(lesson, files)
    current_app.logger.info(f"Created lesson {lesson.id} in course {course.id} with {len(records)} files")

    return jsonify({"success": True, "id": lesson.id}), 201


@bp.route("/lessons/<int:lesson_id>/files", methods=["POST"])
@role_required("admin")
def attach_files(lesson_id):
    lesson = db.session.get(Lesson, lesson_id)
    if not lesson:
        return jsonify({"error": "Lesson not found"}), 404

    files = request.files.getlist("files")
    if not files:
        return jsonify({"error": "No files uploaded"}), 400

    try:
        get_file_store().validate(files)
    except UploadError as e:
        return jsonify({"error": e.message}), e.status_code

    records = _attach_uploads(lesson, files)

    return jsonify({
        "success": True,
        "files": [r.to_dict() for r in records]
    }), 201


@bp.route("/lessons/<int:lesson_id>", methods=["DELETE"])
@role_required("admin")
def delete_lesson(lesson_id):
    lesson = db.session.get(Lesson, lesson_id)
    if not lesson:
        return jsonify({"success": True}), 200

    file_paths = [f.file_path for f in lesson.files]

    db.session.delete(lesson)
    db.session.commit()

    get_file_store().delete_many(file_paths)
    current_app.logger.info(f"Deleted lesson {lesson_id} and {len(file_paths)} files")

    return jsonify({"success": True}), 200


@bp.route("/files/<int:file_id>", methods=["DELETE"])
@role_required("admin")
def delete_file(file_id):
    lesson_file = db.session.get(LessonFile, file_id)
    if not lesson_file:
        return jsonify({"success": True}), 200

    file_path = lesson_file.file_path
    db.session.delete(lesson_file)
    db.session.commit()

    get_file_store().delete(file_path)

    return jsonify({"success": True}), 200
