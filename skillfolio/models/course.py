from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class Course(db.Model):
    __tablename__ = "courses"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    subtitle = db.Column(db.String(300), nullable=True)
    description = db.Column(db.Text, nullable=True)
    language = db.Column(db.String(50), nullable=False, default="English")
    level = db.Column(db.String(20), nullable=False, default="All")

    cover_image_url = db.Column(db.String(500), nullable=True)
    promo_video_url = db.Column(db.String(500), nullable=True)
    is_free = db.Column(db.Boolean, nullable=False, default=True)
    price = db.Column(db.Float, nullable=False, default=0)
    duration_months = db.Column(db.Integer, nullable=True)
    schedule_info = db.Column(db.String(300), nullable=True)

    what_you_will_learn = db.Column(db.JSON, nullable=False, default=list)
    skills_you_will_gain = db.Column(db.JSON, nullable=False, default=list)
    details_to_know = db.Column(db.JSON, nullable=False, default=list)

    is_published = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    modules = db.relationship(
        "LearningModule",
        backref="course",
        cascade="all, delete",
        order_by="(LearningModule.module_order, LearningModule.id)",
    )
    enrollments = db.relationship("CourseEnrollment", backref="course", cascade="all, delete")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "description": self.description,
            "language": self.language,
            "level": self.level,
            "coverImageUrl": self.cover_image_url,
            "promoVideoUrl": self.promo_video_url,
            "isFree": bool(self.is_free),
            "price": self.price,
            "durationMonths": self.duration_months,
            "scheduleInfo": self.schedule_info,
            "whatYouWillLearn": self.what_you_will_learn or [],
            "skillsYouWillGain": self.skills_you_will_gain or [],
            "detailsToKnow": self.details_to_know or [],
            "isPublished": bool(self.is_published),
            "moduleCount": len(self.modules),
            "createdAt": iso(self.created_at),
        }
