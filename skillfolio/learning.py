"""Course learning flow: enrollment, lesson unlocking, quizzes and completion.

Lessons are addressed by their 0-based index within the module's ordered
lesson list. Each lesson index is locked, unlocked or completed for a user:
lesson 0 unlocks on enrollment and lesson n unlocks once lesson n-1 is
completed. Modules of a course unlock in order the same way, keyed on every
lesson of the previous module being completed.
"""
import logging

from flask import current_app

from skillfolio.dates import utc_now
from skillfolio.extensions import db
from skillfolio.gamification import record_activity
from skillfolio.models import CourseEnrollment, LessonProgress, UserProgress

logger = logging.getLogger("skillfolio")

LOCKED = "locked"
UNLOCKED = "unlocked"
COMPLETED = "completed"
FINAL_EXAM_INDEX = -1


class LearningError(Exception):
    """An illegal learning transition; carries the HTTP status to report."""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _setting(name):
    return current_app.config[name]


def active_modules(course):
    return [module for module in course.modules if module.is_active]


def get_progress(user_id, module_id):
    return UserProgress.query.filter_by(user_id=user_id, module_id=module_id).first()


def lesson_rows(user_id, module_id):
    rows = LessonProgress.query.filter_by(user_id=user_id, module_id=module_id).all()
    return {row.lesson_index: row for row in rows}


def _ensure_lesson_row(user_id, module_id, lesson_index, rows=None):
    row = (rows or {}).get(lesson_index)
    if row is None:
        row = LessonProgress.query.filter_by(
            user_id=user_id, module_id=module_id, lesson_index=lesson_index
        ).first()
    if row is None:
        row = LessonProgress(
            user_id=user_id,
            module_id=module_id,
            lesson_index=lesson_index,
            is_completed=False,
            quiz_passed=False,
            quiz_attempts=0,
        )
        db.session.add(row)
        if rows is not None:
            rows[lesson_index] = row
    return row


def _all_lessons_completed(user_id, module, rows=None):
    total = len(module.lessons)
    if total == 0:
        return False
    rows = rows if rows is not None else lesson_rows(user_id, module.id)
    return all(rows.get(index) is not None and rows[index].is_completed for index in range(total))


def module_unlocked(user_id, module):
    """Module 0 of a course is always unlocked; module k needs module k-1's lessons done."""
    siblings = active_modules(module.course)
    if module not in siblings:
        return False
    position = siblings.index(module)
    if position == 0:
        return True
    previous = siblings[position - 1]
    return _all_lessons_completed(user_id, previous)


def lesson_states(module, progress, rows, unlocked=True):
    states = []
    for index in range(len(module.lessons)):
        row = rows.get(index)
        if row is not None and row.is_completed:
            states.append(COMPLETED)
        elif not progress or not unlocked:
            states.append(LOCKED)
        elif index == 0 or states[index - 1] == COMPLETED:
            states.append(UNLOCKED)
        else:
            states.append(LOCKED)
    return states


def module_progress_view(user, module):
    progress = get_progress(user.id, module.id)
    rows = lesson_rows(user.id, module.id)
    unlocked = module_unlocked(user.id, module)
    states = lesson_states(module, progress, rows, unlocked=unlocked)
    lessons = []
    for index, lesson in enumerate(module.lessons):
        row = rows.get(index)
        lessons.append({
            "lessonIndex": index,
            "lessonId": lesson.id,
            "title": lesson.title,
            "state": states[index],
            "hasQuiz": bool(lesson.questions),
            "quizPassed": bool(row.quiz_passed) if row else False,
            "quizScore": row.quiz_score if row else None,
            "quizAttempts": row.quiz_attempts if row else 0,
            "completedAt": row.completed_at.isoformat() if row and row.completed_at else None,
        })
    has_exam = bool(module.final_exam_questions)
    return {
        "moduleId": module.id,
        "enrolled": progress is not None,
        "moduleUnlocked": unlocked,
        "progress": progress.to_dict() if progress else None,
        "totalLessons": len(module.lessons),
        "completedLessons": states.count(COMPLETED),
        "lessons": lessons,
        "finalExam": {
            "available": has_exam and progress is not None and states.count(COMPLETED) == len(states) and bool(states),
            "hasExam": has_exam,
            "passed": bool(progress.final_exam_passed) if progress else False,
            "score": progress.final_exam_score if progress else None,
            "attempts": progress.final_exam_attempts if progress else 0,
        },
    }


def enroll(user, module):
    """Enroll a user in a module; returns (progress, created)."""
    progress = get_progress(user.id, module.id)
    if progress:
        return progress, False
    if not module_unlocked(user.id, module):
        raise LearningError("Complete the previous module first")
    progress = UserProgress(user_id=user.id, module_id=module.id, current_lesson=0)
    db.session.add(progress)
    db.session.flush()
    logger.info("Enrolled: user=%s module=%s", user.id, module.id)
    return progress, True


def enroll_course(user, course):
    """Enroll in a course and in each of its active modules; returns (enrollment, created)."""
    enrollment = CourseEnrollment.query.filter_by(user_id=user.id, course_id=course.id).first()
    created = enrollment is None
    if created:
        enrollment = CourseEnrollment(user_id=user.id, course_id=course.id)
        db.session.add(enrollment)
    for module in active_modules(course):
        if not get_progress(user.id, module.id):
            db.session.add(UserProgress(user_id=user.id, module_id=module.id, current_lesson=0))
    db.session.flush()
    if created:
        logger.info("Enrolled in course: user=%s course=%s", user.id, course.id)
    return enrollment, created


def _require_enrollment(user, module):
    progress = get_progress(user.id, module.id)
    if not progress:
        raise LearningError("Not enrolled in this module")
    if not module_unlocked(user.id, module):
        raise LearningError("Module is locked")
    return progress


def _require_lesson_index(module, lesson_index):
    if lesson_index < 0 or lesson_index >= len(module.lessons):
        raise LearningError("Lesson not found", status_code=404)
    return module.lessons[lesson_index]


def _maybe_complete_module(user, module, progress, rows=None):
    if progress.is_completed:
        return False, []
    if not _all_lessons_completed(user.id, module, rows):
        return False, []
    if module.final_exam_questions and not progress.final_exam_passed:
        return False, []
    progress.is_completed = True
    progress.completed_at = utc_now()
    reward = module.xp_reward or 0
    progress.xp_earned = (progress.xp_earned or 0) + reward
    logger.info("Module completed: user=%s module=%s xp=%s", user.id, module.id, reward)
    return True, record_activity(user, xp=reward)


def _mark_lesson_complete(user, module, progress, row, rows):
    row.is_completed = True
    row.completed_at = utc_now()
    progress.current_lesson = max(progress.current_lesson or 0, row.lesson_index + 1)

    xp = _setting("XP_PER_LESSON")
    progress.xp_earned = (progress.xp_earned or 0) + xp
    badges = record_activity(user, xp=xp, lessons=1)
    module_completed, module_badges = _maybe_complete_module(user, module, progress, rows)
    logger.info("Lesson completed: user=%s module=%s lesson=%s", user.id, module.id, row.lesson_index)
    return {
        "lessonIndex": row.lesson_index,
        "xpAwarded": xp,
        "moduleCompleted": module_completed,
        "unlockedBadges": badges + module_badges,
        "progress": progress.to_dict(),
    }


def complete_lesson(user, module, lesson_index):
    """Manually complete an unlocked lesson.

    Lessons with a quiz require a passed quiz first unless
    REQUIRE_QUIZ_FOR_COMPLETION is switched off.
    """
    progress = _require_enrollment(user, module)
    lesson = _require_lesson_index(module, lesson_index)
    rows = lesson_rows(user.id, module.id)
    states = lesson_states(module, progress, rows)

    if states[lesson_index] == COMPLETED:
        raise LearningError("Lesson already completed")
    if states[lesson_index] == LOCKED:
        raise LearningError("Lesson is locked")

    row = _ensure_lesson_row(user.id, module.id, lesson_index, rows)
    if _setting("REQUIRE_QUIZ_FOR_COMPLETION") and lesson.questions and not row.quiz_passed:
        raise LearningError("Quiz must be passed before completing this lesson")

    return _mark_lesson_complete(user, module, progress, row, rows)


def grade_answers(questions, answers):
    """Score answers against questions; returns (correct_count, per-question results)."""
    results = []
    correct = 0
    for question, selected in zip(questions, answers):
        is_correct = selected == question.correct_answer
        correct += 1 if is_correct else 0
        results.append({
            "questionId": question.id,
            "selected": selected,
            "correctAnswer": question.correct_answer,
            "isCorrect": is_correct,
            "explanation": question.explanation,
        })
    return correct, results


def _validate_answers(questions, answers):
    if not isinstance(answers, list):
        raise LearningError("Answers must be a list")
    if len(answers) != len(questions):
        raise LearningError(f"Expected {len(questions)} answers, got {len(answers)}")
    for answer in answers:
        if answer is not None and (isinstance(answer, bool) or not isinstance(answer, int)):
            raise LearningError("Each answer must be an option index")


def submit_quiz(user, module, lesson_index, answers):
    """Grade a lesson quiz or, for lesson index -1, the module final exam."""
    progress = _require_enrollment(user, module)
    rows = lesson_rows(user.id, module.id)

    if lesson_index == FINAL_EXAM_INDEX:
        questions = module.final_exam_questions
        if not questions:
            raise LearningError("This module has no final exam", status_code=404)
        if not _all_lessons_completed(user.id, module, rows):
            raise LearningError("Complete all lessons before the final exam")
    else:
        lesson = _require_lesson_index(module, lesson_index)
        questions = lesson.questions
        if not questions:
            raise LearningError("This lesson has no quiz", status_code=404)
        states = lesson_states(module, progress, rows)
        if states[lesson_index] == LOCKED:
            raise LearningError("Lesson is locked")

    _validate_answers(questions, answers)
    correct, results = grade_answers(questions, answers)
    total = len(questions)
    score = round(correct / total * 100)
    passed = score >= _setting("QUIZ_PASS_PERCENT")

    response = {
        "score": score,
        "totalQuestions": total,
        "correctAnswers": correct,
        "passed": passed,
        "lessonIndex": lesson_index,
        "results": results,
        "xpAwarded": 0,
        "moduleCompleted": False,
        "unlockedBadges": [],
    }

    if lesson_index == FINAL_EXAM_INDEX:
        # Attempts always count; the best score is kept.
        progress.final_exam_attempts = (progress.final_exam_attempts or 0) + 1
        progress.final_exam_score = max(progress.final_exam_score or 0, score)
        if passed and not progress.final_exam_passed:
            progress.final_exam_passed = True
            xp = _setting("FINAL_EXAM_XP")
            progress.xp_earned = (progress.xp_earned or 0) + xp
            badges = record_activity(user, xp=xp)
            module_completed, module_badges = _maybe_complete_module(user, module, progress, rows)
            response.update({
                "xpAwarded": xp,
                "moduleCompleted": module_completed,
                "unlockedBadges": badges + module_badges,
            })
        response["attempts"] = progress.final_exam_attempts
    else:
        row = _ensure_lesson_row(user.id, module.id, lesson_index, rows)
        row.quiz_attempts = (row.quiz_attempts or 0) + 1
        row.quiz_score = max(row.quiz_score or 0, score)
        if passed:
            row.quiz_passed = True
        # A passed quiz completes the lesson.
        if passed and not row.is_completed:
            completion = _mark_lesson_complete(user, module, progress, row, rows)
            response.update({
                "xpAwarded": completion["xpAwarded"],
                "moduleCompleted": completion["moduleCompleted"],
                "unlockedBadges": completion["unlockedBadges"],
            })
        response["attempts"] = row.quiz_attempts

    logger.info(
        "Quiz submitted: user=%s module=%s lesson=%s score=%s passed=%s",
        user.id, module.id, lesson_index, score, passed,
    )
    response["progress"] = progress.to_dict()
    return response


def course_learn_view(user, course):
    modules = []
    for position, module in enumerate(active_modules(course)):
        view = module_progress_view(user, module)
        modules.append({
            "position": position,
            "module": module.to_dict(),
            "unlocked": view["moduleUnlocked"],
            "enrolled": view["enrolled"],
            "isCompleted": bool(view["progress"] and view["progress"]["isCompleted"]),
            "totalLessons": view["totalLessons"],
            "completedLessons": view["completedLessons"],
            "lessons": view["lessons"],
            "finalExam": view["finalExam"],
        })
    enrolled = CourseEnrollment.query.filter_by(user_id=user.id, course_id=course.id).first() is not None
    return {"course": course.to_dict(), "enrolled": enrolled, "modules": modules}


def course_completion(user, course):
    modules = active_modules(course)
    completed = 0
    for module in modules:
        progress = get_progress(user.id, module.id)
        if progress and progress.is_completed:
            completed += 1
    total = len(modules)
    return {
        "courseId": course.id,
        "completedModules": completed,
        "totalModules": total,
        "percentage": round(completed / total * 100) if total else 0,
        "isCompleted": total > 0 and completed == total,
    }
