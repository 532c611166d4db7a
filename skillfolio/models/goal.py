from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class Goal(db.Model):
    __tablename__ = "goals"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(20), nullable=False, default="custom")  # custom, csv

    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False, index=True)

    categories = db.relationship(
        "GoalCategory",
        backref="goal",
        cascade="all, delete",
        order_by="GoalCategory.id",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
