from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db


class ForumPost(db.Model):
    __tablename__ = "forum_posts"

    id = db.Column(db.Integer, primary_key=True)
    author_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    title = db.Column(db.String(140), nullable=False)
    content = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(50), nullable=False, default="General")

    created_at = db.Column(db.DateTime, default=utc_now, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    author = db.relationship("User", back_populates="forum_posts")
    replies = db.relationship(
        "ForumReply",
        backref="post",
        cascade="all, delete",
        order_by="ForumReply.created_at",
    )
    likes = db.relationship("PostLike", backref="post", cascade="all, delete")
    reports = db.relationship("ForumReport", backref="post", cascade="all, delete")

    def to_dict(self, viewer_id=None):
        return {
            "id": self.id,
            "authorId": self.author_id,
            "authorName": self.author.full_name if self.author else None,
            "title": self.title,
            "content": self.content,
            "category": self.category,
            # Counters are live counts of child rows.
            "likesCount": len(self.likes),
            "repliesCount": len(self.replies),
            "likedByMe": any(like.user_id == viewer_id for like in self.likes) if viewer_id else False,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
