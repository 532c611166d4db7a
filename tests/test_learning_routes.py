from skillfolio.extensions import db
from skillfolio.models import LearningModule


def _states(client, module_id):
    data = client.get(f"/api/modules/{module_id}/progress").get_json()
    return [lesson["state"] for lesson in data["lessons"]]


def _complete(client, module_id, index):
    return client.post(f"/api/modules/{module_id}/lessons/{index}/complete")


def test_catalogue_hides_unpublished_courses_and_answers(client, make_course):
    published = make_course([{"lessons": 1, "quiz": [0], "exam": True}])
    hidden = make_course([{"lessons": 1}], published=False)

    courses = client.get("/api/courses").get_json()["courses"]
    assert [course["id"] for course in courses] == [published["course_id"]]
    assert client.get(f"/api/courses/{hidden['course_id']}").status_code == 404

    resp = client.get(f"/api/courses/{published['course_id']}")
    assert resp.status_code == 200
    assert resp.get_json()["course"]["modules"][0]["lessons"][0]["hasQuiz"] is True
    assert b"correctAnswer" not in resp.data


def test_enroll_unlocks_first_lesson_and_is_idempotent(auth_client, make_course):
    course = make_course([{"lessons": 3}])
    module_id = course["modules"][0]["id"]

    assert _states(auth_client, module_id) == ["locked", "locked", "locked"]

    first = auth_client.post(f"/api/modules/{module_id}/enroll")
    assert first.status_code == 201
    assert first.get_json()["progress"]["currentLesson"] == 0
    again = auth_client.post(f"/api/modules/{module_id}/enroll")
    assert again.status_code == 200
    assert again.get_json()["created"] is False

    assert _states(auth_client, module_id) == ["unlocked", "locked", "locked"]


def test_lessons_complete_in_order(auth_client, make_course):
    course = make_course([{"lessons": 2}])
    module_id = course["modules"][0]["id"]

    resp = _complete(auth_client, module_id, 0)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Not enrolled in this module"

    auth_client.post(f"/api/modules/{module_id}/enroll")
    resp = _complete(auth_client, module_id, 1)
    assert resp.get_json()["error"] == "Lesson is locked"

    resp = _complete(auth_client, module_id, 0)
    assert resp.status_code == 200
    assert resp.get_json()["xpAwarded"] == 10
    assert _states(auth_client, module_id) == ["completed", "unlocked"]

    resp = _complete(auth_client, module_id, 0)
    assert resp.get_json()["error"] == "Lesson already completed"

    assert _complete(auth_client, module_id, 5).status_code == 404

    resp = auth_client.post("/api/lesson-progress/complete", json={"moduleId": module_id, "lessonIndex": 1})
    assert resp.status_code == 200
    assert resp.get_json()["moduleCompleted"] is True

    stats = auth_client.get("/api/stats").get_json()["stats"]
    # Two lessons plus the module reward.
    assert stats["totalXp"] == 10 + 10 + 100


def test_quiz_gate_blocks_manual_completion_until_passed(auth_client, make_course):
    course = make_course([{"lessons": 2, "quiz": [0]}])
    module_id = course["modules"][0]["id"]
    auth_client.post(f"/api/modules/{module_id}/enroll")

    resp = _complete(auth_client, module_id, 0)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Quiz must be passed before completing this lesson"

    wrong = auth_client.post("/api/quiz/submit", json={"moduleId": module_id, "lessonIndex": 0, "answers": [2]})
    body = wrong.get_json()
    assert body["passed"] is False
    assert body["score"] == 0
    assert body["attempts"] == 1
    assert _states(auth_client, module_id) == ["unlocked", "locked"]

    right = auth_client.post("/api/quiz/submit", json={"moduleId": module_id, "lessonIndex": 0, "answers": [0]})
    body = right.get_json()
    assert body["passed"] is True
    assert body["score"] == 100
    assert body["attempts"] == 2
    assert body["xpAwarded"] == 10
    assert _states(auth_client, module_id) == ["completed", "unlocked"]

    progress = auth_client.get(f"/api/modules/{module_id}/progress").get_json()
    assert progress["lessons"][0]["quizScore"] == 100
    assert progress["lessons"][0]["quizAttempts"] == 2


def test_quiz_answers_must_match_question_count(auth_client, make_course):
    course = make_course([{"lessons": 1, "quiz": [0]}])
    module_id = course["modules"][0]["id"]
    auth_client.post(f"/api/modules/{module_id}/enroll")

    resp = auth_client.post("/api/quiz/submit", json={"moduleId": module_id, "lessonIndex": 0, "answers": [0, 1]})
    assert resp.status_code == 400


def test_manual_completion_allowed_when_quiz_requirement_disabled(app, auth_client, make_course):
    app.config["REQUIRE_QUIZ_FOR_COMPLETION"] = False
    course = make_course([{"lessons": 1, "quiz": [0]}])
    module_id = course["modules"][0]["id"]
    auth_client.post(f"/api/modules/{module_id}/enroll")

    assert _complete(auth_client, module_id, 0).status_code == 200


def test_final_exam_requires_all_lessons_and_completes_module(auth_client, make_course):
    course = make_course([{"lessons": 1, "exam": True}])
    module_id = course["modules"][0]["id"]
    auth_client.post(f"/api/modules/{module_id}/enroll")

    early = auth_client.post("/api/quiz/submit", json={"moduleId": module_id, "lessonIndex": -1, "answers": [1, 1]})
    assert early.status_code == 400
    assert early.get_json()["error"] == "Complete all lessons before the final exam"

    lesson = _complete(auth_client, module_id, 0).get_json()
    assert lesson["moduleCompleted"] is False

    failed = auth_client.post("/api/quiz/submit", json={"moduleId": module_id, "lessonIndex": -1, "answers": [0, 1]})
    assert failed.get_json()["passed"] is False
    assert failed.get_json()["score"] == 50

    passed = auth_client.post("/api/quiz/submit", json={"moduleId": module_id, "lessonIndex": -1, "answers": [1, 1]})
    body = passed.get_json()
    assert body["passed"] is True
    assert body["xpAwarded"] == 50
    assert body["moduleCompleted"] is True
    assert body["attempts"] == 2

    exam = auth_client.get(f"/api/modules/{module_id}/progress").get_json()["finalExam"]
    assert exam["passed"] is True
    assert exam["score"] == 100

    stats = auth_client.get("/api/stats").get_json()["stats"]
    assert stats["totalXp"] == 10 + 50 + 100
    assert stats["level"] == 2


def test_course_modules_unlock_in_sequence(auth_client, other_client, make_course):
    course = make_course([{"lessons": 1}, {"lessons": 1}])
    course_id = course["course_id"]
    first, second = (module["id"] for module in course["modules"])

    resp = auth_client.post(f"/api/courses/{course_id}/enroll")
    assert resp.status_code == 201

    view = auth_client.get(f"/api/courses/{course_id}/learn").get_json()
    assert view["enrolled"] is True
    assert [module["unlocked"] for module in view["modules"]] == [True, False]

    locked = _complete(auth_client, second, 0)
    assert locked.get_json()["error"] == "Module is locked"

    assert _complete(auth_client, first, 0).status_code == 200
    view = auth_client.get(f"/api/courses/{course_id}/learn").get_json()
    assert [module["unlocked"] for module in view["modules"]] == [True, True]

    completion = auth_client.get(f"/api/courses/{course_id}/completion").get_json()
    assert completion["completedModules"] == 1
    assert completion["totalModules"] == 2
    assert completion["percentage"] == 50
    assert completion["isCompleted"] is False

    # A learner who has not finished the first module cannot enroll in the second.
    resp = other_client.post(f"/api/modules/{second}/enroll")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Complete the previous module first"


def test_user_progress_lists_enrolled_modules(auth_client, make_course):
    course = make_course([{"lessons": 1}])
    module_id = course["modules"][0]["id"]
    auth_client.post(f"/api/modules/{module_id}/enroll")

    progress = auth_client.get("/api/user-progress").get_json()["progress"]
    assert [row["moduleId"] for row in progress] == [module_id]
    assert progress[0]["moduleTitle"] == "Module 1"


def test_learning_endpoints_require_login(client, make_course):
    course = make_course([{"lessons": 1}])
    module_id = course["modules"][0]["id"]
    assert client.post(f"/api/modules/{module_id}/enroll").status_code == 401
    assert client.get("/api/user-progress").status_code == 401


def test_modules_sharing_an_order_unlock_by_id(app, auth_client, make_course):
    course = make_course([{"lessons": 1}, {"lessons": 1}])
    course_id = course["course_id"]
    first, second = (module["id"] for module in course["modules"])
    with app.app_context():
        for module in LearningModule.query.filter_by(course_id=course_id).all():
            module.module_order = 1
        db.session.commit()

    auth_client.post(f"/api/courses/{course_id}/enroll")
    view = auth_client.get(f"/api/courses/{course_id}/learn").get_json()
    assert [module["module"]["id"] for module in view["modules"]] == [first, second]
    assert [module["unlocked"] for module in view["modules"]] == [True, False]

    assert _complete(auth_client, second, 0).get_json()["error"] == "Module is locked"
    assert _complete(auth_client, first, 0).status_code == 200
    assert _complete(auth_client, second, 0).status_code == 200
