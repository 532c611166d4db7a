from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class UserBadge(db.Model):
    __tablename__ = "user_badges"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    badge_id = db.Column(db.Integer, db.ForeignKey("badges.id"), nullable=False, index=True)
    earned_at = db.Column(db.DateTime, default=utc_now, nullable=False, index=True)

    __table_args__ = (db.UniqueConstraint("user_id", "badge_id", name="uq_user_badge"),)

    def to_dict(self):
        data = self.badge.to_dict()
        data["earned"] = True
        data["earnedAt"] = iso(self.earned_at)
        return data
