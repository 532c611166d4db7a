from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class GoalSubtopic(db.Model):
    __tablename__ = "goal_subtopics"

    id = db.Column(db.Integer, primary_key=True)
    topic_id = db.Column(db.Integer, db.ForeignKey("goal_topics.id"), nullable=False, index=True)
    name = db.Column(db.String(300), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="pending")  # pending, start, completed
    notes = db.Column(db.Text, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "topicId": self.topic_id,
            "name": self.name,
            "status": self.status,
            "notes": self.notes,
            "completedAt": iso(self.completed_at),
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
