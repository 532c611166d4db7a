# Import Flask routing utilities for notification APIs.
from flask import Blueprint, jsonify

# Import auth guard, DB session and the notification model.
from skillfolio.auth import current_user, login_required
from skillfolio.extensions import db
from skillfolio.models import Notification

NOTIFICATIONS_LIMIT = 50

# This Blueprint groups the user's notification inbox.
notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


# List the newest notifications with an unread count.
@notifications_bp.get("")
@login_required
def list_notifications():
    user = current_user()
    rows = (
        Notification.query.filter_by(user_id=user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(NOTIFICATIONS_LIMIT)
        .all()
    )
    unread = Notification.query.filter_by(user_id=user.id, is_read=False).count()
    return jsonify({
        "success": True,
        "notifications": [row.to_dict() for row in rows],
        "unreadCount": unread,
    }), 200


# Mark a notification as read.
@notifications_bp.post("/<int:notification_id>/read")
@login_required
def mark_read(notification_id):
    notification = db.session.get(Notification, notification_id)
    # Other users' notifications are reported as missing.
    if not notification or notification.user_id != current_user().id:
        return jsonify({"success": False, "error": "Notification not found"}), 404
    notification.is_read = True
    db.session.commit()
    return jsonify({"success": True, "notification": notification.to_dict()}), 200
