from skillfolio.extensions import db


class SectionSetting(db.Model):
    __tablename__ = "section_settings"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    section_name = db.Column(db.String(100), nullable=False)
    is_visible = db.Column(db.Boolean, nullable=False, default=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (db.UniqueConstraint("user_id", "section_name", name="uq_user_section"),)

    def to_dict(self):
        return {
            "id": self.id,
            "sectionName": self.section_name,
            "isVisible": bool(self.is_visible),
            "sortOrder": self.sort_order,
        }
