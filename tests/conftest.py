import pytest

from skillfolio import create_app
from skillfolio.extensions import db
from skillfolio.forum import _RATE_LIMIT_BUCKETS
from skillfolio.models import Course, LearningModule, Lesson, QuizQuestion

PASSWORD = "secret123"
ADMIN_EMAIL = "admin@email.com"


@pytest.fixture
def app():
    _RATE_LIMIT_BUCKETS.clear()
    app = create_app("testing")
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, email, password=PASSWORD, first_name="Test", last_name="User"):
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "firstName": first_name, "lastName": last_name},
    )


def _registered_client(app, email):
    client = app.test_client()
    resp = register(client, email)
    assert resp.status_code == 201, resp.get_json()
    client.user_id = resp.get_json()["user"]["id"]
    return client


@pytest.fixture
def auth_client(app):
    return _registered_client(app, "learner@example.com")


@pytest.fixture
def other_client(app):
    return _registered_client(app, "other@example.com")


@pytest.fixture
def admin_client(app):
    return _registered_client(app, ADMIN_EMAIL)


@pytest.fixture
def make_course(app):
    """Build a published course directly in the database.

    Each module entry is a dict with ``lessons`` (count), ``quiz`` (indices of
    lessons that get a one-question quiz, answer 0) and ``exam`` (adds a
    two-question final exam, answers [1, 1]).
    """
    def _make(modules, published=True):
        with app.app_context():
            course = Course(
                title="Test Course",
                description="A course used by the test suite.",
                is_published=published,
            )
            db.session.add(course)
            db.session.flush()
            result = {"course_id": course.id, "modules": []}
            for order, layout in enumerate(modules, start=1):
                module = LearningModule(course_id=course.id, title=f"Module {order}", module_order=order)
                db.session.add(module)
                db.session.flush()
                lesson_ids = []
                for index in range(layout.get("lessons", 1)):
                    lesson = Lesson(module_id=module.id, title=f"Lesson {index}", lesson_order=index + 1)
                    db.session.add(lesson)
                    db.session.flush()
                    lesson_ids.append(lesson.id)
                    if index in layout.get("quiz", ()):
                        db.session.add(QuizQuestion(
                            module_id=module.id,
                            lesson_id=lesson.id,
                            question="Pick the first option",
                            options=["first", "second", "third"],
                            correct_answer=0,
                        ))
                if layout.get("exam"):
                    for position in range(2):
                        db.session.add(QuizQuestion(
                            module_id=module.id,
                            lesson_id=None,
                            question=f"Exam question {position}",
                            options=["no", "yes"],
                            correct_answer=1,
                            position=position,
                        ))
                result["modules"].append({"id": module.id, "lesson_ids": lesson_ids})
            db.session.commit()
            return result

    return _make
