from skillfolio.extensions import db


class DailyActivity(db.Model):
    __tablename__ = "daily_activity"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False)  # YYYY-MM-DD
    xp_earned = db.Column(db.Integer, nullable=False, default=0)
    lessons_completed = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (db.UniqueConstraint("user_id", "date", name="uq_user_day"),)

    def to_dict(self):
        return {
            "date": self.date,
            "xpEarned": self.xp_earned,
            "lessonsCompleted": self.lessons_completed,
        }
