from skillfolio.dates import iso
from skillfolio.extensions import db


class LessonProgress(db.Model):
    __tablename__ = "lesson_progress"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    module_id = db.Column(db.Integer, db.ForeignKey("learning_modules.id"), nullable=False, index=True)
    lesson_index = db.Column(db.Integer, nullable=False)

    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    quiz_passed = db.Column(db.Boolean, nullable=False, default=False)
    quiz_score = db.Column(db.Integer, nullable=True)
    quiz_attempts = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint("user_id", "module_id", "lesson_index", name="uq_user_module_lesson"),
    )

    def to_dict(self):
        return {
            "lessonIndex": self.lesson_index,
            "isCompleted": bool(self.is_completed),
            "completedAt": iso(self.completed_at),
            "quizPassed": bool(self.quiz_passed),
            "quizScore": self.quiz_score,
            "quizAttempts": self.quiz_attempts,
        }
