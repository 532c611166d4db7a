from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class ForumReply(db.Model):
    __tablename__ = "forum_replies"

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey("forum_posts.id"), nullable=False, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    author = db.relationship("User", back_populates="forum_replies")

    def to_dict(self):
        return {
            "id": self.id,
            "postId": self.post_id,
            "authorId": self.author_id,
            "authorName": self.author.full_name if self.author else None,
            "content": self.content,
            "createdAt": iso(self.created_at),
        }
