from datetime import datetime

from conftest import PASSWORD

from skillfolio.extensions import db
from skillfolio.gamification import (
    badge_progress,
    check_and_unlock_badges,
    criteria_met,
    record_activity,
    user_metrics,
    validate_badge,
)
from skillfolio.models import Badge, DailyActivity, Notification, User, UserBadge
from skillfolio.users import createUser


def _badge(name, criteria, xp_reward=0):
    badge = Badge(name=name, description=f"{name} badge", type="milestone", criteria=criteria, xp_reward=xp_reward)
    db.session.add(badge)
    db.session.commit()
    return badge


def test_streak_extends_on_consecutive_days_and_resets_after_gap(app):
    with app.app_context():
        user = createUser("streak@example.com", PASSWORD)

        record_activity(user, xp=10, lessons=1, now=datetime(2026, 5, 1, 9))
        assert user.stats.current_streak == 1

        record_activity(user, xp=5, now=datetime(2026, 5, 1, 18))
        assert user.stats.current_streak == 1
        day = DailyActivity.query.filter_by(user_id=user.id, date="2026-05-01").one()
        assert day.xp_earned == 15
        assert day.lessons_completed == 1

        record_activity(user, xp=10, now=datetime(2026, 5, 2, 9))
        assert user.stats.current_streak == 2

        record_activity(user, xp=10, now=datetime(2026, 5, 5, 9))
        assert user.stats.current_streak == 1
        assert user.stats.longest_streak == 2
        assert user.stats.total_xp == 35
        assert user.stats.level == 1


def test_criteria_are_combined_with_and():
    metrics = {"totalXp": 120, "streakDays": 2, "firstLogin": True}
    assert criteria_met({"totalXp": 100}, metrics)
    assert not criteria_met({"totalXp": 100, "streakDays": 5}, metrics)
    assert criteria_met({"firstLogin": True}, metrics)
    assert not criteria_met({"firstLogin": True}, {"firstLogin": False})
    assert not criteria_met({}, metrics)


def test_badge_progress_is_limited_by_the_furthest_criterion():
    metrics = {"totalXp": 500, "streakDays": 1}
    assert badge_progress({"totalXp": 1000}, metrics) == 50
    assert badge_progress({"totalXp": 1000, "streakDays": 4}, metrics) == 25
    assert badge_progress({"totalXp": 100}, metrics) == 100


def test_badges_unlock_once_with_reward_and_notification(app):
    with app.app_context():
        user = createUser("badges@example.com", PASSWORD)
        _badge("Ten XP", {"totalXp": 10}, xp_reward=25)
        _badge("Ten XP And Streak", {"totalXp": 10, "streakDays": 5})

        unlocked = record_activity(user, xp=10, now=datetime(2026, 6, 1))
        db.session.commit()

        assert [badge["name"] for badge in unlocked] == ["Ten XP"]
        assert user.stats.total_xp == 35
        assert UserBadge.query.filter_by(user_id=user.id).count() == 1
        notification = Notification.query.filter_by(user_id=user.id).one()
        assert notification.type == "badge"
        assert "Ten XP" in notification.message

        assert check_and_unlock_badges(user) == []


def test_validate_badge_rejects_bad_payloads():
    valid = {
        "name": "Streak Master",
        "description": "Seven days in a row",
        "type": "streak",
        "rarity": "rare",
        "criteria": {"streakDays": 7},
        "xpReward": 50,
    }
    assert validate_badge(valid) is None
    assert validate_badge({**valid, "type": "weekly"}) is not None
    assert validate_badge({**valid, "rarity": "mythic"}) is not None
    assert validate_badge({**valid, "criteria": {}}) is not None
    assert validate_badge({**valid, "criteria": {"grade": "distinction"}}) == "Unknown criteria key: grade"
    assert validate_badge({**valid, "criteria": {"streakDays": -1}}) is not None
    assert validate_badge({**valid, "criteria": {"firstLogin": "yes"}}) is not None
    assert validate_badge({**valid, "xpReward": -5}) == "XP reward cannot be negative"
    assert validate_badge({**valid, "name": 5}) == "name must be a string"
    assert validate_badge({**valid, "color": {"hex": "#fff"}}) == "color must be a string"


def test_login_awards_first_login_badge(app, client):
    with app.app_context():
        _badge("First Steps", {"firstLogin": True}, xp_reward=25)

    client.post("/api/auth/register", json={"email": "new@example.com", "password": PASSWORD})
    client.post("/api/auth/logout")
    resp = client.post("/api/auth/login", json={"email": "new@example.com", "password": PASSWORD})

    assert resp.status_code == 200
    assert [badge["name"] for badge in resp.get_json()["unlockedBadges"]] == ["First Steps"]

    earned = client.get("/api/badges/earned").get_json()["badges"]
    assert earned[0]["name"] == "First Steps"
    stats = client.get("/api/stats").get_json()["stats"]
    assert stats["totalXp"] == 25
    assert stats["loginCount"] == 1


def test_daily_activity_range_and_validation(app, auth_client):
    resp = auth_client.get("/api/daily-activity?start=2026-01-01&end=2026-01-31")
    assert resp.status_code == 200
    assert resp.get_json()["activity"] == []

    assert auth_client.get("/api/daily-activity?start=not-a-date").status_code == 400
    assert auth_client.get("/api/daily-activity?start=2026-02-01&end=2026-01-01").status_code == 400

    default = auth_client.get("/api/daily-activity").get_json()
    assert default["start"] < default["end"]


def test_badge_catalogue_reports_progress(app, auth_client):
    with app.app_context():
        _badge("Hundred XP", {"totalXp": 100})

    badges = auth_client.get("/api/badges").get_json()["badges"]
    assert badges[0]["earned"] is False
    assert badges[0]["progress"] == 0

    resp = auth_client.post("/api/achievements/check")
    assert resp.status_code == 200
    assert resp.get_json()["unlockedBadges"] == []


def _finish_course_and_goal(client, make_course):
    course = make_course([{"lessons": 1, "exam": True}])
    module_id = course["modules"][0]["id"]
    client.post(f"/api/courses/{course['course_id']}/enroll")
    client.post(f"/api/modules/{module_id}/lessons/0/complete")
    exam = client.post("/api/quiz/submit", json={"moduleId": module_id, "lessonIndex": -1, "answers": [1, 1]})
    assert exam.get_json()["moduleCompleted"] is True

    goal = client.post("/api/goals", json={
        "name": "Finish the bootcamp",
        "categories": [{"name": "Python", "topics": [{"name": "Basics", "subtopics": ["Syntax"]}]}],
    }).get_json()["goal"]
    subtopic_id = goal["categories"][0]["topics"][0]["subtopics"][0]["id"]
    client.put(f"/api/subtopics/{subtopic_id}/status", json={"status": "completed"})


def test_metrics_count_courses_exams_and_goals(app, auth_client, make_course):
    _finish_course_and_goal(auth_client, make_course)

    with app.app_context():
        metrics = user_metrics(db.session.get(User, auth_client.user_id))
    assert metrics["coursesCompleted"] == 1
    assert metrics["modulesCompleted"] == 1
    assert metrics["lessonsCompleted"] == 1
    assert metrics["examScore"] == 100
    assert metrics["goalsCompleted"] == 1


def test_course_exam_and_goal_badges_unlock(app, auth_client, make_course):
    with app.app_context():
        _badge("Course Finisher", {"coursesCompleted": 1, "examScore": 90})
        _badge("Goal Getter", {"goalsCompleted": 1})
        _badge("Two Courses", {"coursesCompleted": 2})

    _finish_course_and_goal(auth_client, make_course)
    auth_client.post("/api/achievements/check")

    earned = {badge["name"] for badge in auth_client.get("/api/badges/earned").get_json()["badges"]}
    assert earned == {"Course Finisher", "Goal Getter"}


def test_recent_badges_limit(app, auth_client, make_course):
    with app.app_context():
        _badge("Course Finisher", {"coursesCompleted": 1})
        _badge("Goal Getter", {"goalsCompleted": 1})
    _finish_course_and_goal(auth_client, make_course)
    auth_client.post("/api/achievements/check")

    assert len(auth_client.get("/api/badges/recent").get_json()["badges"]) == 2
    assert len(auth_client.get("/api/badges/recent?limit=1").get_json()["badges"]) == 1
    assert auth_client.get("/api/badges/recent?limit=0").status_code == 400
    assert auth_client.get("/api/badges/recent?limit=51").status_code == 400


def test_dashboard_summarizes_learning_and_goals(auth_client, client, make_course):
    course = make_course([{"lessons": 2}])
    module_id = course["modules"][0]["id"]
    auth_client.post(f"/api/modules/{module_id}/enroll")
    auth_client.post(f"/api/modules/{module_id}/lessons/0/complete")
    auth_client.post("/api/goals", json={"name": "Weekly plan"})

    resp = auth_client.get("/api/dashboard")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["user"]["email"] == "learner@example.com"
    assert body["stats"]["totalXp"] == 10
    assert body["recentBadges"] == []
    module = body["modules"][0]
    assert (module["moduleId"], module["courseId"]) == (module_id, course["course_id"])
    assert (module["completedLessons"], module["totalLessons"]) == (1, 2)
    assert module["isCompleted"] is False
    assert [goal["name"] for goal in body["goals"]] == ["Weekly plan"]
    assert body["profileCompletion"] is not None

    assert client.get("/api/dashboard").status_code == 401
