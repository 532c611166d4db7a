from skillfolio.extensions import db


class Lesson(db.Model):
    __tablename__ = "lessons"

    id = db.Column(db.Integer, primary_key=True)
    module_id = db.Column(db.Integer, db.ForeignKey("learning_modules.id"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    content = db.Column(db.Text, nullable=True)
    video_url = db.Column(db.String(500), nullable=True)
    lesson_order = db.Column(db.Integer, nullable=False, default=1)
    duration_minutes = db.Column(db.Integer, nullable=True)

    questions = db.relationship(
        "QuizQuestion",
        backref="lesson",
        cascade="all, delete",
        order_by="(QuizQuestion.position, QuizQuestion.id)",
    )

    def to_dict(self, lesson_index=None, include_content=False):
        data = {
            "id": self.id,
            "moduleId": self.module_id,
            "title": self.title,
            "description": self.description,
            "videoUrl": self.video_url,
            "lessonOrder": self.lesson_order,
            "durationMinutes": self.duration_minutes,
            "hasQuiz": bool(self.questions),
        }
        if lesson_index is not None:
            data["lessonIndex"] = lesson_index
        if include_content:
            data["content"] = self.content
        return data
