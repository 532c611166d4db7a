from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class ForumReport(db.Model):
    __tablename__ = "forum_reports"

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey("forum_posts.id"), nullable=False, index=True)
    reporter_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    reason = db.Column(db.String(30), nullable=False)  # spam, abuse, harassment, misinformation, other
    details = db.Column(db.String(300), nullable=True)
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "postId": self.post_id,
            "postTitle": self.post.title if self.post else None,
            "reporterId": self.reporter_id,
            "reason": self.reason,
            "details": self.details,
            "status": self.status,
            "createdAt": iso(self.created_at),
        }
