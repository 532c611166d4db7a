from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    profile_image_url = db.Column(db.String(500), nullable=True)

    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    # Owned rows are removed together with the account.
    profile = db.relationship("Profile", uselist=False, cascade="all, delete")
    stats = db.relationship("UserStats", uselist=False, cascade="all, delete")
    section_settings = db.relationship("SectionSetting", cascade="all, delete")
    module_progress = db.relationship("UserProgress", cascade="all, delete")
    lesson_progress = db.relationship("LessonProgress", cascade="all, delete")
    enrollments = db.relationship("CourseEnrollment", cascade="all, delete")
    goals = db.relationship("Goal", cascade="all, delete")
    daily_activity = db.relationship("DailyActivity", cascade="all, delete")
    badges = db.relationship("UserBadge", cascade="all, delete")
    notifications = db.relationship("Notification", cascade="all, delete")
    forum_posts = db.relationship("ForumPost", back_populates="author", cascade="all, delete")
    forum_replies = db.relationship("ForumReply", back_populates="author", cascade="all, delete")
    forum_likes = db.relationship("PostLike", cascade="all, delete")
    forum_reports = db.relationship("ForumReport", cascade="all, delete")

    @property
    def full_name(self):
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.email.split("@")[0]

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "fullName": self.full_name,
            "profileImageUrl": self.profile_image_url,
            "isAdmin": bool(self.is_admin),
            "isActive": bool(self.is_active),
            "lastLoginAt": iso(self.last_login_at),
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
