from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class Profile(db.Model):
    __tablename__ = "profiles"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True, nullable=False, index=True)

    personal_details = db.Column(db.JSON, nullable=False, default=dict)
    contact_details = db.Column(db.JSON, nullable=False, default=dict)
    other_details = db.Column(db.JSON, nullable=False, default=dict)

    portfolio_theme = db.Column(db.String(50), nullable=False, default="modern")
    is_public = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "personalDetails": self.personal_details or {},
            "contactDetails": self.contact_details or {},
            "otherDetails": self.other_details or {},
            "portfolioTheme": self.portfolio_theme,
            "isPublic": bool(self.is_public),
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
