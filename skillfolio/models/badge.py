from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class Badge(db.Model):
    __tablename__ = "badges"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=False)
    icon = db.Column(db.String(100), nullable=True)
    color = db.Column(db.String(30), nullable=True)
    type = db.Column(db.String(30), nullable=False, default="achievement")
    criteria = db.Column(db.JSON, nullable=False, default=dict)
    xp_reward = db.Column(db.Integer, nullable=False, default=0)
    rarity = db.Column(db.String(20), nullable=False, default="common")
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    awards = db.relationship("UserBadge", backref="badge", cascade="all, delete")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "color": self.color,
            "type": self.type,
            "criteria": self.criteria or {},
            "xpReward": self.xp_reward,
            "rarity": self.rarity,
            "createdAt": iso(self.created_at),
        }
