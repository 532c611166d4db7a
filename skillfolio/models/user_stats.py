from skillfolio.extensions import db


class UserStats(db.Model):
    __tablename__ = "user_stats"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True, nullable=False, index=True)
    total_xp = db.Column(db.Integer, nullable=False, default=0)
    current_streak = db.Column(db.Integer, nullable=False, default=0)
    longest_streak = db.Column(db.Integer, nullable=False, default=0)
    last_activity_date = db.Column(db.String(10), nullable=True)  # YYYY-MM-DD
    portfolio_views = db.Column(db.Integer, nullable=False, default=0)
    login_count = db.Column(db.Integer, nullable=False, default=0)

    @property
    def level(self):
        return (self.total_xp or 0) // 100 + 1

    def to_dict(self):
        return {
            "totalXp": self.total_xp,
            "level": self.level,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "lastActivityDate": self.last_activity_date,
            "portfolioViews": self.portfolio_views,
            "loginCount": self.login_count,
        }
