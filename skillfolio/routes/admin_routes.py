# Import logging for admin audit lines.
import logging

# Import Flask routing utilities for admin APIs.
from flask import Blueprint, jsonify, request
from sqlalchemy import func

# Import DB session, admin guard, forms and account helpers.
from skillfolio.extensions import db
from skillfolio.forms import (
    AdminUserForm,
    AdminUserUpdateForm,
    CourseForm,
    LessonForm,
    ModuleForm,
    QuizQuestionForm,
    json_bool,
)
from skillfolio.models import (
    Course,
    CourseEnrollment,
    ForumPost,
    ForumReport,
    LearningModule,
    Lesson,
    Notification,
    QuizQuestion,
    User,
    UserBadge,
    UserProgress,
)
from skillfolio.routes.admin_utils import require_admin
from skillfolio.users import createUser, deleteUser, getAllUsers, getUserByEmail, getUserById, updateUser

logger = logging.getLogger("skillfolio")

COURSE_LIST_FIELDS = {
    "whatYouWillLearn": "what_you_will_learn",
    "skillsYouWillGain": "skills_you_will_gain",
    "detailsToKnow": "details_to_know",
}
MIN_OPTIONS = 2
MAX_OPTIONS = 6
NOTIFICATION_MAX = 500

# This Blueprint groups admin management endpoints.
admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


# Return a uniform validation failure response.
def _form_error(form):
    return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400


# Normalize an optional text field.
def _text(value):
    return (value or "").strip() or None


# Validate the course bullet lists; returns an error message or None.
def _validate_course_lists(data):
    for key in COURSE_LIST_FIELDS:
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, list) or not all(isinstance(item, str) and item.strip() for item in value):
            return f"{key} must be a list of non-empty strings"
    return None


# Copy validated course fields onto a course row.
def _apply_course(course, form, data):
    course.title = form.title.data.strip()
    course.subtitle = _text(form.subtitle.data)
    course.description = form.description.data.strip()
    course.language = _text(form.language.data) or "English"
    course.level = _text(form.level.data) or "All"
    course.cover_image_url = _text(form.coverImageUrl.data)
    course.promo_video_url = _text(form.promoVideoUrl.data)
    course.is_free = json_bool(data, "isFree", True)
    course.price = 0 if course.is_free else float(form.price.data or 0)
    course.duration_months = form.durationMonths.data
    course.schedule_info = _text(form.scheduleInfo.data)
    course.is_published = json_bool(data, "isPublished", True)
    for key, column in COURSE_LIST_FIELDS.items():
        if key in data:
            setattr(course, column, [item.strip() for item in data[key] or []])


# Copy validated module fields onto a module row.
def _apply_module(module, form, data):
    module.title = form.title.data.strip()
    module.description = _text(form.description.data)
    module.category = _text(form.category.data)
    module.duration_hours = form.durationHours.data
    if form.xpReward.data is not None:
        module.xp_reward = form.xpReward.data
    if form.moduleOrder.data is not None:
        module.module_order = form.moduleOrder.data
    module.is_active = json_bool(data, "isActive", True)


# Copy validated lesson fields onto a lesson row.
def _apply_lesson(lesson, form):
    lesson.title = form.title.data.strip()
    lesson.description = _text(form.description.data)
    lesson.content = form.content.data or None
    lesson.video_url = _text(form.videoUrl.data)
    lesson.duration_minutes = form.durationMinutes.data
    if form.lessonOrder.data is not None:
        lesson.lesson_order = form.lessonOrder.data


# Rewrite an ordering column from a permutation of ids; returns an error message or None.
def _reorder(items, order, column):
    ids = [item.id for item in items]
    if not isinstance(order, list) or any(isinstance(i, bool) or not isinstance(i, int) for i in order):
        return "order must be a list of ids"
    if sorted(order) != sorted(ids) or len(set(order)) != len(order):
        return "order must list every item exactly once"
    by_id = {item.id: item for item in items}
    for position, item_id in enumerate(order, start=1):
        setattr(by_id[item_id], column, position)
    return None


# Validate quiz options against the answer index; returns an error message or None.
def _validate_options(options, correct_answer):
    if not isinstance(options, list) or not MIN_OPTIONS <= len(options) <= MAX_OPTIONS:
        return f"Options must be a list of {MIN_OPTIONS} to {MAX_OPTIONS} choices"
    if not all(isinstance(option, str) and option.strip() for option in options):
        return "Options must be non-empty text"
    if correct_answer >= len(options):
        return "Correct answer must point at one of the options"
    return None


# Build a quiz question from a validated payload.
def _new_question(module, lesson, existing):
    data = request.get_json(silent=True) or {}
    form = QuizQuestionForm(data=data)
    if not form.validate():
        return None, _form_error(form)
    options = data.get("options")
    error = _validate_options(options, form.correctAnswer.data)
    if error:
        return None, (jsonify({"success": False, "error": error}), 400)

    question = QuizQuestion(
        module_id=module.id,
        lesson_id=lesson.id if lesson else None,
        question=form.question.data.strip(),
        options=[option.strip() for option in options],
        correct_answer=form.correctAnswer.data,
        explanation=_text(form.explanation.data),
        position=len(existing),
    )
    db.session.add(question)
    db.session.commit()
    return question, None


# List all courses including unpublished ones.
@admin_bp.get("/courses")
def list_courses():
    _, err = require_admin()
    if err:
        return err
    courses = Course.query.order_by(Course.created_at.desc(), Course.id.desc()).all()
    result = []
    for course in courses:
        data = course.to_dict()
        data["enrollmentCount"] = len(course.enrollments)
        result.append(data)
    return jsonify({"success": True, "courses": result}), 200


# Create a course (admin-only).
@admin_bp.post("/courses")
def create_course():
    admin_id, err = require_admin()
    if err:
        return err
    # Validate input payload using a form schema.
    data = request.get_json(silent=True) or {}
    form = CourseForm(data=data)
    if not form.validate():
        return _form_error(form)
    error = _validate_course_lists(data)
    if error:
        return jsonify({"success": False, "error": error}), 400

    course = Course()
    _apply_course(course, form, data)
    db.session.add(course)
    db.session.commit()
    logger.info("Course created: admin=%s course=%s", admin_id, course.id)
    return jsonify({"success": True, "course": course.to_dict()}), 201


# Return a course with all of its modules (admin-only).
@admin_bp.get("/courses/<int:course_id>")
def get_course(course_id):
    _, err = require_admin()
    if err:
        return err
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"success": False, "error": "Course not found"}), 404
    data = course.to_dict()
    data["modules"] = [module.to_dict() for module in course.modules]
    return jsonify({"success": True, "course": data}), 200


# Update a course (admin-only).
@admin_bp.put("/courses/<int:course_id>")
def update_course(course_id):
    admin_id, err = require_admin()
    if err:
        return err
    # Guard against updates to missing courses.
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"success": False, "error": "Course not found"}), 404

    data = request.get_json(silent=True) or {}
    form = CourseForm(data=data)
    if not form.validate():
        return _form_error(form)
    error = _validate_course_lists(data)
    if error:
        return jsonify({"success": False, "error": error}), 400

    _apply_course(course, form, data)
    db.session.commit()
    logger.info("Course updated: admin=%s course=%s", admin_id, course.id)
    return jsonify({"success": True, "course": course.to_dict()}), 200


# Delete a course with its modules, lessons, questions and progress (admin-only).
@admin_bp.delete("/courses/<int:course_id>")
def delete_course(course_id):
    admin_id, err = require_admin()
    if err:
        return err
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"success": False, "error": "Course not found"}), 404
    db.session.delete(course)
    db.session.commit()
    logger.info("Course deleted: admin=%s course=%s", admin_id, course_id)
    return jsonify({"success": True, "message": "Course deleted"}), 200


# List modules of a course in order (admin-only).
@admin_bp.get("/courses/<int:course_id>/modules")
def list_modules(course_id):
    _, err = require_admin()
    if err:
        return err
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"success": False, "error": "Course not found"}), 404
    return jsonify({"success": True, "modules": [module.to_dict() for module in course.modules]}), 200


# Add a module to a course (admin-only).
@admin_bp.post("/courses/<int:course_id>/modules")
def create_module(course_id):
    admin_id, err = require_admin()
    if err:
        return err
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"success": False, "error": "Course not found"}), 404

    data = request.get_json(silent=True) or {}
    form = ModuleForm(data=data)
    if not form.validate():
        return _form_error(form)

    module = LearningModule(course_id=course.id)
    # New modules go to the end unless an order is given.
    module.module_order = max((m.module_order for m in course.modules), default=0) + 1
    _apply_module(module, form, data)
    db.session.add(module)
    db.session.commit()
    logger.info("Module created: admin=%s course=%s module=%s", admin_id, course.id, module.id)
    return jsonify({"success": True, "module": module.to_dict()}), 201


# Rewrite module order from a permutation of module ids (admin-only).
@admin_bp.put("/courses/<int:course_id>/modules/reorder")
def reorder_modules(course_id):
    _, err = require_admin()
    if err:
        return err
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"success": False, "error": "Course not found"}), 404

    data = request.get_json(silent=True) or {}
    error = _reorder(course.modules, data.get("order"), "module_order")
    if error:
        return jsonify({"success": False, "error": error}), 400
    db.session.commit()

    modules = sorted(course.modules, key=lambda m: (m.module_order, m.id))
    return jsonify({"success": True, "modules": [module.to_dict() for module in modules]}), 200


# Return a module with its lessons (admin-only).
@admin_bp.get("/modules/<int:module_id>")
def get_module(module_id):
    _, err = require_admin()
    if err:
        return err
    module = db.session.get(LearningModule, module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404
    return jsonify({"success": True, "module": module.to_dict(include_lessons=True)}), 200


# Update a module (admin-only).
@admin_bp.put("/modules/<int:module_id>")
def update_module(module_id):
    admin_id, err = require_admin()
    if err:
        return err
    module = db.session.get(LearningModule, module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404

    data = request.get_json(silent=True) or {}
    form = ModuleForm(data=data)
    if not form.validate():
        return _form_error(form)

    _apply_module(module, form, data)
    db.session.commit()
    logger.info("Module updated: admin=%s module=%s", admin_id, module.id)
    return jsonify({"success": True, "module": module.to_dict()}), 200


# Delete a module with its lessons, questions and progress (admin-only).
@admin_bp.delete("/modules/<int:module_id>")
def delete_module(module_id):
    admin_id, err = require_admin()
    if err:
        return err
    module = db.session.get(LearningModule, module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404
    db.session.delete(module)
    db.session.commit()
    logger.info("Module deleted: admin=%s module=%s", admin_id, module_id)
    return jsonify({"success": True, "message": "Module deleted"}), 200


# List lessons of a module in order (admin-only).
@admin_bp.get("/modules/<int:module_id>/lessons")
def list_lessons(module_id):
    _, err = require_admin()
    if err:
        return err
    module = db.session.get(LearningModule, module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404
    lessons = [lesson.to_dict(lesson_index=index, include_content=True) for index, lesson in enumerate(module.lessons)]
    return jsonify({"success": True, "lessons": lessons}), 200


# Add a lesson to a module (admin-only).
@admin_bp.post("/modules/<int:module_id>/lessons")
def create_lesson(module_id):
    admin_id, err = require_admin()
    if err:
        return err
    module = db.session.get(LearningModule, module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404

    form = LessonForm(data=request.get_json(silent=True) or {})
    if not form.validate():
        return _form_error(form)

    lesson = Lesson(module_id=module.id)
    # New lessons go to the end unless an order is given.
    lesson.lesson_order = max((item.lesson_order for item in module.lessons), default=0) + 1
    _apply_lesson(lesson, form)
    db.session.add(lesson)
    db.session.commit()
    logger.info("Lesson created: admin=%s module=%s lesson=%s", admin_id, module.id, lesson.id)
    return jsonify({"success": True, "lesson": lesson.to_dict(include_content=True)}), 201


# Rewrite lesson order from a permutation of lesson ids (admin-only).
@admin_bp.put("/modules/<int:module_id>/lessons/reorder")
def reorder_lessons(module_id):
    _, err = require_admin()
    if err:
        return err
    module = db.session.get(LearningModule, module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404

    data = request.get_json(silent=True) or {}
    error = _reorder(module.lessons, data.get("order"), "lesson_order")
    if error:
        return jsonify({"success": False, "error": error}), 400
    db.session.commit()

    lessons = sorted(module.lessons, key=lambda item: (item.lesson_order, item.id))
    return jsonify({
        "success": True,
        "lessons": [lesson.to_dict(lesson_index=index) for index, lesson in enumerate(lessons)],
    }), 200


# Return a lesson with content (admin-only).
@admin_bp.get("/lessons/<int:lesson_id>")
def get_lesson(lesson_id):
    _, err = require_admin()
    if err:
        return err
    lesson = db.session.get(Lesson, lesson_id)
    if not lesson:
        return jsonify({"success": False, "error": "Lesson not found"}), 404
    return jsonify({"success": True, "lesson": lesson.to_dict(include_content=True)}), 200


# Update a lesson (admin-only).
@admin_bp.put("/lessons/<int:lesson_id>")
def update_lesson(lesson_id):
    admin_id, err = require_admin()
    if err:
        return err
    lesson = db.session.get(Lesson, lesson_id)
    if not lesson:
        return jsonify({"success": False, "error": "Lesson not found"}), 404

    form = LessonForm(data=request.get_json(silent=True) or {})
    if not form.validate():
        return _form_error(form)

    _apply_lesson(lesson, form)
    db.session.commit()
    logger.info("Lesson updated: admin=%s lesson=%s", admin_id, lesson.id)
    return jsonify({"success": True, "lesson": lesson.to_dict(include_content=True)}), 200


# Delete a lesson and its quiz (admin-only).
@admin_bp.delete("/lessons/<int:lesson_id>")
def delete_lesson(lesson_id):
    admin_id, err = require_admin()
    if err:
        return err
    lesson = db.session.get(Lesson, lesson_id)
    if not lesson:
        return jsonify({"success": False, "error": "Lesson not found"}), 404
    db.session.delete(lesson)
    db.session.commit()
    logger.info("Lesson deleted: admin=%s lesson=%s", admin_id, lesson_id)
    return jsonify({"success": True, "message": "Lesson deleted"}), 200


# List a lesson's quiz questions with answers (admin-only).
@admin_bp.get("/lessons/<int:lesson_id>/quiz")
def list_lesson_quiz(lesson_id):
    _, err = require_admin()
    if err:
        return err
    lesson = db.session.get(Lesson, lesson_id)
    if not lesson:
        return jsonify({"success": False, "error": "Lesson not found"}), 404
    questions = [question.to_dict(include_answer=True) for question in lesson.questions]
    return jsonify({"success": True, "questions": questions}), 200


# Add a quiz question to a lesson (admin-only).
@admin_bp.post("/lessons/<int:lesson_id>/quiz")
def create_lesson_question(lesson_id):
    _, err = require_admin()
    if err:
        return err
    lesson = db.session.get(Lesson, lesson_id)
    if not lesson:
        return jsonify({"success": False, "error": "Lesson not found"}), 404

    question, error_response = _new_question(lesson.module, lesson, lesson.questions)
    if error_response:
        return error_response
    return jsonify({"success": True, "question": question.to_dict(include_answer=True)}), 201


# List a module's final exam questions with answers (admin-only).
@admin_bp.get("/modules/<int:module_id>/final-exam")
def list_final_exam(module_id):
    _, err = require_admin()
    if err:
        return err
    module = db.session.get(LearningModule, module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404
    questions = [question.to_dict(include_answer=True) for question in module.final_exam_questions]
    return jsonify({"success": True, "questions": questions}), 200


# Add a final exam question to a module (admin-only).
@admin_bp.post("/modules/<int:module_id>/final-exam")
def create_final_exam_question(module_id):
    _, err = require_admin()
    if err:
        return err
    module = db.session.get(LearningModule, module_id)
    if not module:
        return jsonify({"success": False, "error": "Module not found"}), 404

    question, error_response = _new_question(module, None, module.final_exam_questions)
    if error_response:
        return error_response
    return jsonify({"success": True, "question": question.to_dict(include_answer=True)}), 201


# Delete a quiz or final exam question (admin-only).
@admin_bp.delete("/quiz-questions/<int:question_id>")
def delete_question(question_id):
    _, err = require_admin()
    if err:
        return err
    question = db.session.get(QuizQuestion, question_id)
    if not question:
        return jsonify({"success": False, "error": "Question not found"}), 404
    db.session.delete(question)
    db.session.commit()
    return jsonify({"success": True, "message": "Question deleted"}), 200


# List all users with their stats (admin-only).
@admin_bp.get("/users")
def list_users():
    _, err = require_admin()
    if err:
        return err
    users = []
    for user in getAllUsers():
        data = user.to_dict()
        data["stats"] = user.stats.to_dict() if user.stats else None
        users.append(data)
    return jsonify({"success": True, "users": users}), 200


# Create a user account (admin-only).
@admin_bp.post("/users")
def create_user():
    admin_id, err = require_admin()
    if err:
        return err
    data = request.get_json(silent=True) or {}
    form = AdminUserForm(data=data)
    if not form.validate():
        return _form_error(form)
    if getUserByEmail(form.email.data):
        return jsonify({"success": False, "error": "Email already registered"}), 409

    user = createUser(
        form.email.data,
        form.password.data,
        first_name=form.firstName.data,
        last_name=form.lastName.data,
        is_admin=json_bool(data, "isAdmin", False),
        is_active=json_bool(data, "isActive", True),
    )
    logger.info("User created by admin: admin=%s user=%s", admin_id, user.id)
    return jsonify({"success": True, "user": user.to_dict()}), 201


# Update a user account (admin-only).
@admin_bp.put("/users/<int:user_id>")
def update_user(user_id):
    admin_id, err = require_admin()
    if err:
        return err
    user = getUserById(user_id)
    if not user:
        return jsonify({"success": False, "error": "User not found"}), 404

    data = request.get_json(silent=True) or {}
    form = AdminUserUpdateForm(data=data)
    if not form.validate():
        return _form_error(form)

    changes = {
        key: data[key]
        for key in ("email", "firstName", "lastName", "profileImageUrl", "password")
        if key in data
    }
    for flag in ("isActive", "isAdmin"):
        if flag in data:
            changes[flag] = json_bool(data, flag)

    # Admins cannot lock themselves out.
    if user.id == admin_id and (changes.get("isActive") is False or changes.get("isAdmin") is False):
        return jsonify({"success": False, "error": "You cannot deactivate or demote your own account"}), 400
    if "email" in changes:
        if not (changes["email"] or "").strip():
            return jsonify({"success": False, "error": "Email cannot be empty"}), 400
        clash = getUserByEmail(changes["email"])
        if clash and clash.id != user.id:
            return jsonify({"success": False, "error": "Email already registered"}), 409

    updateUser(user, **changes)
    logger.info("User updated by admin: admin=%s user=%s", admin_id, user.id)
    return jsonify({"success": True, "user": user.to_dict()}), 200


# Delete a user and everything they own (admin-only).
@admin_bp.delete("/users/<int:user_id>")
def delete_user(user_id):
    admin_id, err = require_admin()
    if err:
        return err
    user = getUserById(user_id)
    if not user:
        return jsonify({"success": False, "error": "User not found"}), 404
    if user.id == admin_id:
        return jsonify({"success": False, "error": "You cannot delete your own account"}), 400

    deleteUser(user)
    logger.info("User deleted by admin: admin=%s user=%s", admin_id, user_id)
    return jsonify({"success": True, "message": "User deleted"}), 200


# Send a notification to a user (admin-only).
@admin_bp.post("/users/<int:user_id>/notify")
def notify_user(user_id):
    admin_id, err = require_admin()
    if err:
        return err
    user = getUserById(user_id)
    if not user:
        return jsonify({"success": False, "error": "User not found"}), 404

    data = request.get_json(silent=True) or {}
    message = data.get("message")
    message = message.strip() if isinstance(message, str) else ""
    if not message:
        return jsonify({"success": False, "error": "Message is required"}), 400
    if len(message) > NOTIFICATION_MAX:
        return jsonify({"success": False, "error": f"Message must be {NOTIFICATION_MAX} characters or less"}), 400

    notification = Notification(user_id=user.id, type="admin", message=message)
    db.session.add(notification)
    db.session.commit()
    logger.info("Notification sent: admin=%s user=%s", admin_id, user.id)
    return jsonify({"success": True, "notification": notification.to_dict()}), 201


# Return platform-wide counters (admin-only).
@admin_bp.get("/stats")
def get_stats():
    _, err = require_admin()
    if err:
        return err
    stats = {
        "totalUsers": User.query.count(),
        "activeUsers": User.query.filter_by(is_active=True).count(),
        "totalCourses": Course.query.count(),
        "totalModules": LearningModule.query.count(),
        "totalLessons": Lesson.query.count(),
        "courseEnrollments": CourseEnrollment.query.count(),
        "moduleEnrollments": UserProgress.query.count(),
        "completedModules": UserProgress.query.filter_by(is_completed=True).count(),
        "forumPosts": ForumPost.query.count(),
        "pendingReports": ForumReport.query.filter_by(status="pending").count(),
        "badgesAwarded": UserBadge.query.count(),
        "totalXpEarned": db.session.query(func.coalesce(func.sum(UserProgress.xp_earned), 0)).scalar(),
    }
    return jsonify({"success": True, "stats": stats}), 200
