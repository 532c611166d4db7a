from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class GoalTopic(db.Model):
    __tablename__ = "goal_topics"

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("goal_categories.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    subtopics = db.relationship(
        "GoalSubtopic",
        backref="topic",
        cascade="all, delete",
        order_by="GoalSubtopic.id",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "categoryId": self.category_id,
            "name": self.name,
            "description": self.description,
            "createdAt": iso(self.created_at),
        }
