from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class GoalCategory(db.Model):
    __tablename__ = "goal_categories"

    id = db.Column(db.Integer, primary_key=True)
    goal_id = db.Column(db.Integer, db.ForeignKey("goals.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    topics = db.relationship(
        "GoalTopic",
        backref="category",
        cascade="all, delete",
        order_by="GoalTopic.id",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "goalId": self.goal_id,
            "name": self.name,
            "description": self.description,
            "createdAt": iso(self.created_at),
        }
