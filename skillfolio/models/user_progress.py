from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class UserProgress(db.Model):
    __tablename__ = "user_progress"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    module_id = db.Column(db.Integer, db.ForeignKey("learning_modules.id"), nullable=False, index=True)

    current_lesson = db.Column(db.Integer, nullable=False, default=0)
    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    xp_earned = db.Column(db.Integer, nullable=False, default=0)
    completed_at = db.Column(db.DateTime, nullable=True)

    final_exam_passed = db.Column(db.Boolean, nullable=False, default=False)
    final_exam_score = db.Column(db.Integer, nullable=True)
    final_exam_attempts = db.Column(db.Integer, nullable=False, default=0)

    enrolled_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    __table_args__ = (db.UniqueConstraint("user_id", "module_id", name="uq_user_module"),)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "moduleId": self.module_id,
            "currentLesson": self.current_lesson,
            "isCompleted": bool(self.is_completed),
            "xpEarned": self.xp_earned,
            "completedAt": iso(self.completed_at),
            "finalExamPassed": bool(self.final_exam_passed),
            "finalExamScore": self.final_exam_score,
            "finalExamAttempts": self.final_exam_attempts,
            "enrolledAt": iso(self.enrolled_at),
        }
