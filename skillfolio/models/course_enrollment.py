from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class CourseEnrollment(db.Model):
    __tablename__ = "course_enrollments"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False, index=True)
    enrolled_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    __table_args__ = (db.UniqueConstraint("user_id", "course_id", name="uq_user_course"),)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "courseId": self.course_id,
            "enrolledAt": iso(self.enrolled_at),
        }
