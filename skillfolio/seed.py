import logging
import os

# Import click for the Flask CLI seed command.
import click

from skillfolio.extensions import db
from skillfolio.models import Badge, Course, LearningModule, Lesson, QuizQuestion
from skillfolio.users import createUser, getUserByEmail

logger = logging.getLogger("skillfolio")

# Badge definitions; names are unique so re-seeding skips existing rows.
BADGES = [
    {
        "name": "First Steps",
        "description": "Welcome to your learning journey!",
        "icon": "Gift",
        "color": "pink",
        "type": "milestone",
        "criteria": {"firstLogin": True},
        "xp_reward": 25,
        "rarity": "common",
    },
    {
        "name": "Lesson Learner",
        "description": "Completed your first lesson",
        "icon": "BookOpen",
        "color": "teal",
        "type": "achievement",
        "criteria": {"lessonsCompleted": 1},
        "xp_reward": 10,
        "rarity": "common",
    },
    {
        "name": "Module Master",
        "description": "Completed your first learning module",
        "icon": "Layers",
        "color": "blue",
        "type": "milestone",
        "criteria": {"modulesCompleted": 1},
        "xp_reward": 50,
        "rarity": "common",
    },
    {
        "name": "AI Pioneer",
        "description": "Completed your first course",
        "icon": "Zap",
        "color": "purple",
        "type": "course_completion",
        "criteria": {"coursesCompleted": 1},
        "xp_reward": 100,
        "rarity": "rare",
    },
    {
        "name": "Knowledge Seeker",
        "description": "Completed 5 courses",
        "icon": "BookOpen",
        "color": "indigo",
        "type": "milestone",
        "criteria": {"coursesCompleted": 5},
        "xp_reward": 200,
        "rarity": "epic",
    },
    {
        "name": "Streak Master",
        "description": "Maintained a 7-day learning streak",
        "icon": "Calendar",
        "color": "green",
        "type": "streak",
        "criteria": {"streakDays": 7},
        "xp_reward": 50,
        "rarity": "common",
    },
    {
        "name": "Perfect Score",
        "description": "Achieved 100% on a final exam",
        "icon": "Star",
        "color": "yellow",
        "type": "achievement",
        "criteria": {"examScore": 100},
        "xp_reward": 100,
        "rarity": "rare",
    },
    {
        "name": "XP Collector",
        "description": "Earned 1000 total XP points",
        "icon": "Target",
        "color": "emerald",
        "type": "milestone",
        "criteria": {"totalXp": 1000},
        "xp_reward": 100,
        "rarity": "rare",
    },
    {
        "name": "Goal Getter",
        "description": "Finished every subtopic of a learning goal",
        "icon": "Flag",
        "color": "orange",
        "type": "achievement",
        "criteria": {"goalsCompleted": 1},
        "xp_reward": 75,
        "rarity": "rare",
    },
    {
        "name": "Learning Champion",
        "description": "Completed 10 courses and earned 5000 XP",
        "icon": "Crown",
        "color": "gold",
        "type": "milestone",
        "criteria": {"coursesCompleted": 10, "totalXp": 5000},
        "xp_reward": 500,
        "rarity": "legendary",
    },
]

# Starter course with modules, lessons, lesson quizzes and final exams.
COURSE = {
    "title": "PG Program in Artificial Intelligence & Machine Learning",
    "subtitle": "Comprehensive AI/ML program for working professionals",
    "description": (
        "Master the fundamentals of AI and machine learning with hands-on projects "
        "and real-world applications."
    ),
    "language": "English",
    "level": "Intermediate",
    "is_free": True,
    "price": 0,
    "duration_months": 12,
    "schedule_info": "10-12 hours per week, flexible schedule",
    "what_you_will_learn": [
        "Machine Learning algorithms",
        "Deep Learning",
        "NLP",
        "Computer Vision",
        "AI implementation",
    ],
    "skills_you_will_gain": ["Python Programming", "TensorFlow", "PyTorch", "Data Analysis", "AI Deployment"],
    "details_to_know": ["Industry certificate", "Hands-on projects", "Career support", "Expert mentorship"],
    "modules": [
        {
            "title": "Python for Data Science",
            "description": "Core Python, NumPy and pandas for working with data.",
            "category": "Programming",
            "duration_hours": 20,
            "xp_reward": 100,
            "lessons": [
                {
                    "title": "Python Basics",
                    "content": "Variables, control flow, functions and the standard library.",
                    "duration_minutes": 45,
                    "quiz": [
                        ("Which keyword defines a function in Python?", ["func", "def", "lambda", "fn"], 1,
                         "Functions are declared with def."),
                        ("What type does len() return?", ["str", "float", "int", "list"], 2,
                         "len() returns an integer count."),
                    ],
                },
                {
                    "title": "NumPy Arrays",
                    "content": "Vectorised numeric computing with ndarray.",
                    "duration_minutes": 50,
                    "quiz": [
                        ("What does np.zeros((2, 3)).shape return?", ["(3, 2)", "(2, 3)", "6", "[2, 3]"], 1,
                         "shape mirrors the tuple passed in."),
                    ],
                },
                {
                    "title": "Data Wrangling with pandas",
                    "content": "DataFrames, indexing, grouping and joins.",
                    "duration_minutes": 60,
                    "quiz": [],
                },
            ],
            "final_exam": [
                ("Which pandas method groups rows by a column?", ["pivot", "groupby", "melt", "stack"], 1,
                 "groupby splits the frame into groups."),
                ("Which library provides the ndarray type?", ["pandas", "NumPy", "SciPy", "matplotlib"], 1,
                 "ndarray is NumPy's core type."),
            ],
        },
        {
            "title": "Machine Learning Foundations",
            "description": "Supervised learning, evaluation and model selection.",
            "category": "Machine Learning",
            "duration_hours": 30,
            "xp_reward": 150,
            "lessons": [
                {
                    "title": "Supervised Learning",
                    "content": "Regression and classification with labelled data.",
                    "duration_minutes": 55,
                    "quiz": [
                        ("Predicting a house price is which task?", ["Classification", "Clustering", "Regression",
                                                                      "Dimensionality reduction"], 2,
                         "Continuous targets are regression problems."),
                    ],
                },
                {
                    "title": "Model Evaluation",
                    "content": "Train/test splits, cross-validation and metrics.",
                    "duration_minutes": 50,
                    "quiz": [
                        ("Which metric suits imbalanced classes best?", ["Accuracy", "F1 score", "MSE", "R squared"], 1,
                         "F1 balances precision and recall."),
                    ],
                },
            ],
            "final_exam": [
                ("Cross-validation mainly helps to...", ["Speed up training", "Estimate generalisation",
                                                         "Remove features", "Label data"], 1,
                 "It estimates performance on unseen data."),
            ],
        },
    ],
}


# Insert badge definitions that are not present yet.
def seed_badges():
    created = 0
    for data in BADGES:
        if Badge.query.filter_by(name=data["name"]).first():
            continue
        db.session.add(Badge(**data))
        created += 1
    db.session.commit()
    return created


# Insert the starter course unless a course with the same title exists.
def seed_course(course_data=COURSE):
    if Course.query.filter_by(title=course_data["title"]).first():
        return None

    fields = {key: value for key, value in course_data.items() if key != "modules"}
    course = Course(**fields)
    db.session.add(course)
    db.session.flush()

    for module_order, module_data in enumerate(course_data["modules"], start=1):
        module = LearningModule(
            course_id=course.id,
            title=module_data["title"],
            description=module_data["description"],
            category=module_data["category"],
            duration_hours=module_data["duration_hours"],
            xp_reward=module_data["xp_reward"],
            module_order=module_order,
        )
        db.session.add(module)
        db.session.flush()

        for lesson_order, lesson_data in enumerate(module_data["lessons"], start=1):
            lesson = Lesson(
                module_id=module.id,
                title=lesson_data["title"],
                content=lesson_data["content"],
                duration_minutes=lesson_data["duration_minutes"],
                lesson_order=lesson_order,
            )
            db.session.add(lesson)
            db.session.flush()
            _add_questions(module.id, lesson.id, lesson_data["quiz"])

        _add_questions(module.id, None, module_data["final_exam"])

    db.session.commit()
    return course


def _add_questions(module_id, lesson_id, questions):
    for position, (question, options, correct, explanation) in enumerate(questions):
        db.session.add(QuizQuestion(
            module_id=module_id,
            lesson_id=lesson_id,
            question=question,
            options=options,
            correct_answer=correct,
            explanation=explanation,
            position=position,
        ))


# Create the admin account when it does not exist.
def seed_admin(email, password):
    if getUserByEmail(email):
        return None
    return createUser(email, password, first_name="Admin", last_name="User", is_admin=True)


# Register the `flask seed` command on the app.
def register_seed_command(app):
    @app.cli.command("seed")
    @click.option("--admin-email", default=None, help="Email for the seeded admin account.")
    @click.option("--admin-password", default=None, help="Password for the seeded admin account.")
    def seed_command(admin_email, admin_password):
        """Load badges, the starter course and an admin account."""
        admin_email = admin_email or sorted(app.config["ADMIN_EMAILS"])[0]
        admin_password = admin_password or os.environ.get("SEED_ADMIN_PASSWORD", "admin123")

        badges = seed_badges()
        course = seed_course()
        admin = seed_admin(admin_email, admin_password)

        logger.info("Seeded %s badges", badges)
        click.echo(f"Badges added: {badges}")
        click.echo(f"Course added: {course.title if course else 'already present'}")
        click.echo(f"Admin account: {admin.email if admin else 'already present'}")
