from skillfolio.extensions import db


class QuizQuestion(db.Model):
    __tablename__ = "quiz_questions"

    id = db.Column(db.Integer, primary_key=True)
    module_id = db.Column(db.Integer, db.ForeignKey("learning_modules.id"), nullable=False, index=True)
    # NULL marks a final exam question for the module.
    lesson_id = db.Column(db.Integer, db.ForeignKey("lessons.id"), nullable=True, index=True)

    question = db.Column(db.Text, nullable=False)
    options = db.Column(db.JSON, nullable=False, default=list)
    correct_answer = db.Column(db.Integer, nullable=False)
    explanation = db.Column(db.Text, nullable=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self, include_answer=False):
        data = {
            "id": self.id,
            "moduleId": self.module_id,
            "lessonId": self.lesson_id,
            "question": self.question,
            "options": self.options or [],
            "position": self.position,
        }
        if include_answer:
            data["correctAnswer"] = self.correct_answer
            data["explanation"] = self.explanation
        return data
