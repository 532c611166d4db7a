from skillfolio.extensions import db


class LearningModule(db.Model):
    __tablename__ = "learning_modules"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(100), nullable=True)
    module_order = db.Column(db.Integer, nullable=False, default=1)
    duration_hours = db.Column(db.Integer, nullable=True)
    xp_reward = db.Column(db.Integer, nullable=False, default=100)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    lessons = db.relationship(
        "Lesson",
        backref="module",
        cascade="all, delete",
        order_by="(Lesson.lesson_order, Lesson.id)",
    )
    questions = db.relationship(
        "QuizQuestion",
        backref="module",
        cascade="all, delete",
        order_by="(QuizQuestion.position, QuizQuestion.id)",
    )
    progress = db.relationship("UserProgress", backref="module", cascade="all, delete")
    lesson_progress = db.relationship("LessonProgress", backref="module", cascade="all, delete")

    @property
    def final_exam_questions(self):
        return [q for q in self.questions if q.lesson_id is None]

    def to_dict(self, include_lessons=False):
        data = {
            "id": self.id,
            "courseId": self.course_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "moduleOrder": self.module_order,
            "durationHours": self.duration_hours,
            "xpReward": self.xp_reward,
            "isActive": bool(self.is_active),
            "totalLessons": len(self.lessons),
            "hasFinalExam": bool(self.final_exam_questions),
        }
        if include_lessons:
            data["lessons"] = [
                lesson.to_dict(lesson_index=index) for index, lesson in enumerate(self.lessons)
            ]
        return data
