from flask import Blueprint, request, jsonify, current_app
from app.extensions import db
from app.models import Course, Lesson, LessonFile
from app.utils.auth import role_required
from app.utils.request_data import json_object
from app.utils.file_store import get_file_store, UploadError, IMAGE_EXT

COURSE_FIELDS = ("title", "description", "image_url", "category", "duration", "level")

bp = Blueprint("courses", __name__)


# List all courses
@bp.route("/courses", methods=["GET"])
def list_courses():
    courses = Course.query.order_by(Course.id).all()
    result = []
    for c in courses:
        data = c.to_dict()
        data["total_lessons"] = c.total_lessons
        result.append(data)
    return jsonify(result)


@bp.route("/courses", methods=["POST"])
@role_required("admin")
def create_course():
    data = json_object()

    course = Course(**{field: data.get(field) for field in COURSE_FIELDS})
    db.session.add(course)
    db.session.commit()

    return jsonify({"success": True, "id": course.id}), 201


@bp.route("/courses/<int:course_id>", methods=["PUT"])
@role_required("admin")
def update_course(course_id):
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"error": "Course not found"}), 404

    data = json_object()
    for field in COURSE_FIELDS:
        if field in data:
            setattr(course, field, data[field])

    db.session.commit()
    return jsonify({"success": True, "id": course.id}), 200


@bp.route("/course/<int:course_id>", methods=["GET"])
def get_course(course_id):
    """
    Returns the course with its ordered lessons, each carrying its files.
    """
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"error": "Not found"}), 404

    lessons = (
        Lesson.query
        .filter_by(course_id=course.id)
        .order_by(Lesson.order_index, Lesson.id)
        .all()
    )

    return jsonify({
        "course": course.to_dict(),
        "lessons": [lesson.to_dict(include_files=True) for lesson in lessons]
    }), 200


@bp.route("/courses/<int:course_id>", methods=["DELETE"])
@role_required("admin")
def delete_course(course_id):
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"success": True}), 200

    file_paths = [
        path for (path,) in
        db.session.query(LessonFile.file_path)
        .join(Lesson, LessonFile.lesson_id == Lesson.id)
        .filter(Lesson.course_id == course.id)
        .all()
    ]
    lesson_count = len(course.lessons)

    # lessons, lesson files, enrollments and progress rows go in one transaction
    db.session.delete(course)
    db.session.commit()

    removed = get_file_store().delete_many(file_paths)
    current_app.logger.info(
        f"Deleted course {course_id}: {lesson_count} lessons, {len(file_paths)} files ({removed} removed from disk)"
    )

    return jsonify({"success": True}), 200


@bp.route("/courses/<int:course_id>/reorder-lessons", methods=["POST"])
@role_required("admin")
def reorder_lessons(course_id):
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"error": "Course not found"}), 404

    data = json_object()
    order = data.get("order")
    if not isinstance(order, list):
        return jsonify({"error": "'order' must be a list of lessons"}), 400

    try:
        lesson_ids = [int(item["id"]) if isinstance(item, dict) else int(item) for item in order]
    except (KeyError, TypeError, ValueError):
        return jsonify({"error": "Each entry in 'order' needs a lesson id"}), 400

    lessons = {l.id: l for l in Lesson.query.filter_by(course_id=course.id).all()}
    unknown = [lid for lid in lesson_ids if lid not in lessons]
    if unknown:
        return jsonify({"error": f"Lessons not in this course: {unknown}"}), 400

    for index, lesson_id in enumerate(lesson_ids):
        lessons[lesson_id].order_index = index

    db.session.commit()
    return jsonify({"success": True}), 200


# Cover image upload for the course builder
@bp.route("/upload", methods=["POST"])
@role_required("admin")
def upload_image():
    files = request.files.getlist("files") or request.files.getlist("file")
    if len(files) != 1:
        return jsonify({"error": "Upload exactly one image in 'files'"}), 400

    store = get_file_store()
    try:
        store.validate(files, allowed_ext=IMAGE_EXT)
    except UploadError as e:
        return jsonify({"error": e.message}), e.status_code

    saved = store.save(files[0])
    return jsonify({"success": True, "url": saved["file_path"]}), 201
