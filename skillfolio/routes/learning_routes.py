# Import Flask routing utilities for learner-facing course APIs.
from flask import Blueprint, jsonify, request

# Import auth guard, DB session and learning flow helpers.
from skillfolio.auth import current_user, login_required
from skillfolio.extensions import db
from skillfolio.learning import (
    LearningError,
    active_modules,
    complete_lesson,
    course_completion,
    course_learn_view,
    enroll,
    enroll_course,
    module_progress_view,
    submit_quiz,
)
from skillfolio.models import Course, LearningModule, UserProgress

# This Blueprint groups catalogue, enrollment and lesson progress endpoints.
learning_bp = Blueprint("learning", __name__, url_prefix="/api")


# Fetch a published course or None.
def _published_course(course_id):
    course = db.session.get(Course, course_id)
    if not course or not course.is_published:
        return None
    return course


# Fetch an active module of a published course or None.
def _active_module(module_id):
    module = db.session.get(LearningModule, module_id)
    if not module or not module.is_active or not _published_course(module.course_id):
        return None
    return module


# Convert a learning rule violation into a JSON error and drop pending writes.
def _learning_error(exc):
    db.session.rollback()
    return jsonify({"success": False, "error": exc.message}), exc.status_code


# Read an integer field from a JSON payload, or None.
def _int_field(data, key):
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


# List published courses.
@learning_bp.get("/courses")
def list_courses():
    courses = Course.query.filter_by(is_published=True).order_by(Course.created_at.desc(), Course.id).all()
    return jsonify({"success": True, "courses": [c.to_dict() for c in courses]}), 200


# Return a course with its module and lesson outline.
@learning_bp.get("/courses/<int:course_id>")
def get_course(course_id):
    course = _published_course(course_id)
    if not course:
        return jsonify({"success": False, "error": "Course not found"}), 404

    data = course.to_dict()
    data["modules"] = [module.to_dict(include_lessons=True) for module in active_modules(course)]
    return jsonify({"success": True, "course": data}), 200


# Return a module with its lesson outline.
@learning_bp.get("/modules/<int:module_id>")
def get_module(module_id):
    module = _active_module(module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404
    return jsonify({"success": True, "module": module.to_dict(include_lessons=True)}), 200


# Enroll the current user in a module.
@learning_bp.post("/modules/<int:module_id>/enroll")
@login_required
def enroll_module(module_id):
    module = _active_module(module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404

    try:
        progress, created = enroll(current_user(), module)
    except LearningError as exc:
        return _learning_error(exc)
    db.session.commit()

    return jsonify({"success": True, "created": created, "progress": progress.to_dict()}), 201 if created else 200


# Enroll the current user in a course and all of its active modules.
@learning_bp.post("/courses/<int:course_id>/enroll")
@login_required
def enroll_in_course(course_id):
    course = _published_course(course_id)
    if not course:
        return jsonify({"success": False, "error": "Course not found"}), 404

    enrollment, created = enroll_course(current_user(), course)
    db.session.commit()
    return jsonify({"success": True, "created": created, "enrollment": enrollment.to_dict()}), 201 if created else 200


# Return per-lesson states for a module.
@learning_bp.get("/modules/<int:module_id>/progress")
@login_required
def get_module_progress(module_id):
    module = _active_module(module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404
    return jsonify({"success": True, **module_progress_view(current_user(), module)}), 200


# Shared handler for both lesson completion endpoints.
def _complete(module_id, lesson_index):
    module = _active_module(module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404

    try:
        result = complete_lesson(current_user(), module, lesson_index)
    except LearningError as exc:
        return _learning_error(exc)
    db.session.commit()
    return jsonify({"success": True, **result}), 200


# Complete a lesson by module and index in the path.
@learning_bp.post("/modules/<int:module_id>/lessons/<int:lesson_index>/complete")
@login_required
def complete_lesson_by_path(module_id, lesson_index):
    return _complete(module_id, lesson_index)


# Complete a lesson by module and index in the body.
@learning_bp.post("/lesson-progress/complete")
@login_required
def complete_lesson_by_body():
    data = request.get_json(silent=True) or {}
    module_id = _int_field(data, "moduleId")
    lesson_index = _int_field(data, "lessonIndex")
    if module_id is None or lesson_index is None:
        return jsonify({"success": False, "error": "moduleId and lessonIndex are required"}), 400
    return _complete(module_id, lesson_index)


# Grade a lesson quiz or module final exam.
@learning_bp.post("/quiz/submit")
@login_required
def submit_quiz_answers():
    data = request.get_json(silent=True) or {}
    module_id = _int_field(data, "moduleId")
    lesson_index = _int_field(data, "lessonIndex")
    if module_id is None or lesson_index is None:
        return jsonify({"success": False, "error": "moduleId and lessonIndex are required"}), 400

    module = _active_module(module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404

    try:
        result = submit_quiz(current_user(), module, lesson_index, data.get("answers"))
    except LearningError as exc:
        return _learning_error(exc)
    db.session.commit()
    return jsonify({"success": True, **result}), 200


# Return module unlock and lesson states across a course.
@learning_bp.get("/courses/<int:course_id>/learn")
@login_required
def learn_course(course_id):
    course = _published_course(course_id)
    if not course:
        return jsonify({"success": False, "error": "Course not found"}), 404
    return jsonify({"success": True, **course_learn_view(current_user(), course)}), 200


# Return course completion counters.
@learning_bp.get("/courses/<int:course_id>/completion")
@login_required
def get_course_completion(course_id):
    course = _published_course(course_id)
    if not course:
        return jsonify({"success": False, "error": "Course not found"}), 404
    return jsonify({"success": True, **course_completion(current_user(), course)}), 200


# List the current user's module progress rows.
@learning_bp.get("/user-progress")
@login_required
def list_user_progress():
    user = current_user()
    rows = UserProgress.query.filter_by(user_id=user.id).order_by(UserProgress.enrolled_at).all()
    progress = []
    for row in rows:
        data = row.to_dict()
        data["moduleTitle"] = row.module.title if row.module else None
        data["courseId"] = row.module.course_id if row.module else None
        progress.append(data)
    return jsonify({"success": True, "progress": progress}), 200
