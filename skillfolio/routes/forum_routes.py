# Import logging for moderation and rate-limit audit lines.
import logging

# Import Flask routing utilities for forum APIs.
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func, or_

# Import auth guards, forms, DB session and forum helpers.
from skillfolio.auth import current_user, login_required
from skillfolio.extensions import db
from skillfolio.forms import ForumPostForm, ForumReplyForm, ForumReportForm
from skillfolio.forum import (
    FORUM_CATEGORIES,
    REPORT_STATUSES,
    _forum_content_guard,
    _forum_rate_key,
    _normalize_forum_category,
    _rate_limit_check,
    _validate_forum_text,
)
from skillfolio.models import ForumPost, ForumReply, ForumReport, PostLike
from skillfolio.routes.admin_utils import require_admin

logger = logging.getLogger("skillfolio")

RATE_LIMIT_WINDOW_SECONDS = 60
SORT_OPTIONS = {"newest", "likes", "replies"}

# This Blueprint groups community forum endpoints.
forum_bp = Blueprint("forum", __name__, url_prefix="/api/forum")
# This Blueprint groups forum moderation endpoints for admins.
admin_forum_bp = Blueprint("admin_forum", __name__, url_prefix="/api/admin/forum")


# Apply a per-user sliding-window limit; returns a 429 response or None.
def _rate_limited(action, user_id, limit_key):
    if not current_app.config.get("RATE_LIMIT_ENABLED", True):
        return None
    limit = current_app.config[limit_key]
    allowed, retry_after = _rate_limit_check(
        _forum_rate_key(action, user_id), limit=limit, window_seconds=RATE_LIMIT_WINDOW_SECONDS
    )
    if allowed:
        return None
    logger.warning("Rate limit hit: action=%s user=%s retry_after=%s", action, user_id, retry_after)
    return jsonify({"success": False, "error": "Rate limit exceeded", "retry_after": retry_after}), 429


# Validate title and content against length rules and the content guard.
def _check_post_text(title, content):
    error = _validate_forum_text(title, content) or _forum_content_guard(f"{title}\n{content}")
    return error


# Only the author or an admin may change a post or reply.
def _can_moderate(user, author_id):
    return user.is_admin or user.id == author_id


# Build the filtered and sorted post query used by both listings.
def _post_query(search=None, category=None, sort="newest"):
    query = ForumPost.query
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(ForumPost.title.ilike(pattern), ForumPost.content.ilike(pattern)))
    if category:
        query = query.filter(ForumPost.category == category)

    if sort == "likes":
        likes = (
            db.session.query(func.count(PostLike.id))
            .filter(PostLike.post_id == ForumPost.id)
            .correlate(ForumPost)
            .scalar_subquery()
        )
        query = query.order_by(likes.desc(), ForumPost.created_at.desc())
    elif sort == "replies":
        replies = (
            db.session.query(func.count(ForumReply.id))
            .filter(ForumReply.post_id == ForumPost.id)
            .correlate(ForumPost)
            .scalar_subquery()
        )
        query = query.order_by(replies.desc(), ForumPost.created_at.desc())
    else:
        query = query.order_by(ForumPost.created_at.desc(), ForumPost.id.desc())
    return query


# Paginate a post query into the listing payload.
def _page_payload(query, page, viewer_id):
    page_size = current_app.config["FORUM_PAGE_SIZE"]
    pagination = query.paginate(page=page, per_page=page_size, error_out=False)
    return {
        "success": True,
        "posts": [post.to_dict(viewer_id=viewer_id) for post in pagination.items],
        "total": pagination.total,
        "page": page,
        "totalPages": max(1, pagination.pages),
    }


# List forum posts with search, category filter, sorting and pagination.
@forum_bp.get("/posts")
@login_required
def list_posts():
    sort = request.args.get("sort", "newest")
    if sort not in SORT_OPTIONS:
        return jsonify({"success": False, "error": "Sort must be newest, likes, or replies"}), 400
    page = max(1, request.args.get("page", default=1, type=int))
    category = (request.args.get("category") or "").strip()
    if category and category not in FORUM_CATEGORIES:
        category = None
    search = (request.args.get("q") or "").strip()

    query = _post_query(search=search, category=category, sort=sort)
    payload = _page_payload(query, page, current_user().id)
    payload["categories"] = sorted(FORUM_CATEGORIES)
    return jsonify(payload), 200


# Create a forum post.
@forum_bp.post("/posts")
@login_required
def create_post():
    user = current_user()
    limited = _rate_limited("post", user.id, "FORUM_POST_RATE_LIMIT")
    if limited:
        return limited

    data = request.get_json(silent=True) or {}
    form = ForumPostForm(data=data)
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    title = form.title.data.strip()
    content = form.content.data.strip()
    error = _check_post_text(title, content)
    if error:
        return jsonify({"success": False, "error": error}), 400

    post = ForumPost(
        author_id=user.id,
        title=title,
        content=content,
        category=_normalize_forum_category(data.get("category")),
    )
    db.session.add(post)
    db.session.commit()
    logger.info("Forum post created: user=%s post=%s", user.id, post.id)
    return jsonify({"success": True, "post": post.to_dict(viewer_id=user.id)}), 201


# Return a single post with its replies.
@forum_bp.get("/posts/<int:post_id>")
@login_required
def get_post(post_id):
    post = db.session.get(ForumPost, post_id)
    if not post:
        return jsonify({"success": False, "error": "Post not found"}), 404

    data = post.to_dict(viewer_id=current_user().id)
    data["replies"] = [reply.to_dict() for reply in post.replies]
    return jsonify({"success": True, "post": data}), 200


# Edit a post (author or admin).
@forum_bp.put("/posts/<int:post_id>")
@login_required
def update_post(post_id):
    user = current_user()
    post = db.session.get(ForumPost, post_id)
    if not post:
        return jsonify({"success": False, "error": "Post not found"}), 404
    if not _can_moderate(user, post.author_id):
        return jsonify({"success": False, "error": "Not allowed to edit this post"}), 403

    data = request.get_json(silent=True) or {}
    # Omitted fields keep their stored values.
    merged = {
        "title": data.get("title", post.title),
        "content": data.get("content", post.content),
        "category": data.get("category", post.category),
    }
    form = ForumPostForm(data=merged)
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    title = form.title.data.strip()
    content = form.content.data.strip()
    error = _check_post_text(title, content)
    if error:
        return jsonify({"success": False, "error": error}), 400

    post.title = title
    post.content = content
    post.category = _normalize_forum_category(merged["category"])
    db.session.commit()
    return jsonify({"success": True, "post": post.to_dict(viewer_id=user.id)}), 200


# Delete a post (author or admin).
@forum_bp.delete("/posts/<int:post_id>")
@login_required
def delete_post(post_id):
    user = current_user()
    post = db.session.get(ForumPost, post_id)
    if not post:
        return jsonify({"success": False, "error": "Post not found"}), 404
    if not _can_moderate(user, post.author_id):
        return jsonify({"success": False, "error": "Not allowed to delete this post"}), 403

    db.session.delete(post)
    db.session.commit()
    logger.info("Forum post deleted: user=%s post=%s", user.id, post_id)
    return jsonify({"success": True}), 200


# Toggle the current user's like on a post.
@forum_bp.post("/like")
@login_required
def toggle_like():
    user = current_user()
    limited = _rate_limited("like", user.id, "FORUM_LIKE_RATE_LIMIT")
    if limited:
        return limited

    data = request.get_json(silent=True) or {}
    post_id = data.get("postId")
    if isinstance(post_id, bool) or not isinstance(post_id, int):
        return jsonify({"success": False, "error": "postId is required"}), 400
    post = db.session.get(ForumPost, post_id)
    if not post:
        return jsonify({"success": False, "error": "Post not found"}), 404

    existing = PostLike.query.filter_by(user_id=user.id, post_id=post.id).first()
    if existing:
        db.session.delete(existing)
        liked = False
    else:
        db.session.add(PostLike(user_id=user.id, post_id=post.id))
        liked = True
    db.session.commit()

    likes_count = PostLike.query.filter_by(post_id=post.id).count()
    return jsonify({"success": True, "liked": liked, "likesCount": likes_count}), 200


# List replies of a post, oldest first.
@forum_bp.get("/posts/<int:post_id>/replies")
@login_required
def list_replies(post_id):
    post = db.session.get(ForumPost, post_id)
    if not post:
        return jsonify({"success": False, "error": "Post not found"}), 404
    return jsonify({"success": True, "replies": [reply.to_dict() for reply in post.replies]}), 200


# Reply to a post.
@forum_bp.post("/posts/<int:post_id>/replies")
@login_required
def create_reply(post_id):
    user = current_user()
    post = db.session.get(ForumPost, post_id)
    if not post:
        return jsonify({"success": False, "error": "Post not found"}), 404
    limited = _rate_limited("reply", user.id, "FORUM_REPLY_RATE_LIMIT")
    if limited:
        return limited

    form = ForumReplyForm(data=request.get_json(silent=True) or {})
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    content = form.content.data.strip()
    error = _forum_content_guard(content)
    if error:
        return jsonify({"success": False, "error": error}), 400

    reply = ForumReply(post_id=post.id, author_id=user.id, content=content)
    db.session.add(reply)
    db.session.commit()
    return jsonify({"success": True, "reply": reply.to_dict()}), 201


# Delete a reply (author or admin).
@forum_bp.delete("/replies/<int:reply_id>")
@login_required
def delete_reply(reply_id):
    user = current_user()
    reply = db.session.get(ForumReply, reply_id)
    if not reply:
        return jsonify({"success": False, "error": "Reply not found"}), 404
    if not _can_moderate(user, reply.author_id):
        return jsonify({"success": False, "error": "Not allowed to delete this reply"}), 403

    db.session.delete(reply)
    db.session.commit()
    return jsonify({"success": True}), 200


# Report a post for moderation.
@forum_bp.post("/posts/<int:post_id>/report")
@login_required
def report_post(post_id):
    user = current_user()
    post = db.session.get(ForumPost, post_id)
    if not post:
        return jsonify({"success": False, "error": "Post not found"}), 404
    limited = _rate_limited("report", user.id, "FORUM_REPORT_RATE_LIMIT")
    if limited:
        return limited

    form = ForumReportForm(data=request.get_json(silent=True) or {})
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    # One pending report per reporter and post.
    pending = ForumReport.query.filter_by(post_id=post.id, reporter_id=user.id, status="pending").first()
    if pending:
        return jsonify({"success": False, "error": "You have already reported this post"}), 409

    report = ForumReport(
        post_id=post.id,
        reporter_id=user.id,
        reason=form.reason.data,
        details=(form.payload.get("details") or "").strip() or None,
        status="pending",
    )
    db.session.add(report)
    db.session.commit()
    logger.info("Forum post reported: user=%s post=%s reason=%s", user.id, post.id, report.reason)
    return jsonify({"success": True, "report": report.to_dict()}), 201


# List posts for moderation (admin-only).
@admin_forum_bp.get("/posts")
def admin_list_posts():
    admin_id, err = require_admin()
    if err:
        return err
    page = max(1, request.args.get("page", default=1, type=int))
    search = (request.args.get("q") or "").strip()
    query = _post_query(search=search, sort="newest")
    payload = _page_payload(query, page, admin_id)
    # Attach pending report counts for the moderation table.
    for item in payload["posts"]:
        item["pendingReports"] = ForumReport.query.filter_by(post_id=item["id"], status="pending").count()
    return jsonify(payload), 200


# List replies of a post for moderation (admin-only).
@admin_forum_bp.get("/posts/<int:post_id>/replies")
def admin_list_replies(post_id):
    _, err = require_admin()
    if err:
        return err
    post = db.session.get(ForumPost, post_id)
    if not post:
        return jsonify({"success": False, "error": "Post not found"}), 404
    return jsonify({"success": True, "replies": [reply.to_dict() for reply in post.replies]}), 200


# Remove a post (admin-only).
@admin_forum_bp.delete("/posts/<int:post_id>")
def admin_delete_post(post_id):
    admin_id, err = require_admin()
    if err:
        return err
    post = db.session.get(ForumPost, post_id)
    if not post:
        return jsonify({"success": False, "error": "Post not found"}), 404
    db.session.delete(post)
    db.session.commit()
    logger.info("Forum post removed by admin: admin=%s post=%s", admin_id, post_id)
    return jsonify({"success": True, "message": "Post deleted"}), 200


# Remove a reply (admin-only).
@admin_forum_bp.delete("/replies/<int:reply_id>")
def admin_delete_reply(reply_id):
    admin_id, err = require_admin()
    if err:
        return err
    reply = db.session.get(ForumReply, reply_id)
    if not reply:
        return jsonify({"success": False, "error": "Reply not found"}), 404
    db.session.delete(reply)
    db.session.commit()
    logger.info("Forum reply removed by admin: admin=%s reply=%s", admin_id, reply_id)
    return jsonify({"success": True, "message": "Reply deleted"}), 200


# List reports, optionally filtered by status (admin-only).
@admin_forum_bp.get("/reports")
def admin_list_reports():
    _, err = require_admin()
    if err:
        return err
    status = (request.args.get("status") or "").strip()
    query = ForumReport.query
    if status:
        if status not in REPORT_STATUSES:
            return jsonify({"success": False, "error": "Status must be pending, confirmed, or resolved"}), 400
        query = query.filter_by(status=status)
    reports = query.order_by(ForumReport.created_at.desc(), ForumReport.id.desc()).all()
    return jsonify({"success": True, "reports": [report.to_dict() for report in reports]}), 200


# Change the status of a report (admin-only).
@admin_forum_bp.post("/reports/<int:report_id>/status")
def admin_update_report_status(report_id):
    admin_id, err = require_admin()
    if err:
        return err
    report = db.session.get(ForumReport, report_id)
    if not report:
        return jsonify({"success": False, "error": "Report not found"}), 404

    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if not isinstance(status, str):
        status = ""
    status = status.strip()
    if status not in REPORT_STATUSES:
        return jsonify({"success": False, "error": "Status must be pending, confirmed, or resolved"}), 400

    report.status = status
    db.session.commit()
    logger.info("Report status changed: admin=%s report=%s status=%s", admin_id, report.id, status)
    return jsonify({"success": True, "report": report.to_dict()}), 200
