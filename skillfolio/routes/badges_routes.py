# Import logging for badge admin audit lines.
import logging

# Import Flask routing utilities for badge APIs.
from flask import Blueprint, jsonify, request

# Import auth guards, DB session and badge helpers.
from skillfolio.auth import current_user, login_required
from skillfolio.extensions import db
from skillfolio.gamification import badges_with_progress, recent_badges, validate_badge
from skillfolio.models import Badge, UserBadge
from skillfolio.routes.admin_utils import require_admin

logger = logging.getLogger("skillfolio")

# This Blueprint groups learner badge APIs.
badges_bp = Blueprint("badges", __name__, url_prefix="/api/badges")
# This Blueprint groups badge CRUD APIs for admins.
admin_badges_bp = Blueprint("admin_badges", __name__, url_prefix="/api/admin/badges")

RECENT_BADGES_MAX = 50


# Copy validated payload fields onto a badge row.
def _apply_badge(badge, data):
    badge.name = data["name"].strip()
    badge.description = data["description"].strip()
    badge.icon = (data.get("icon") or "").strip() or None
    badge.color = (data.get("color") or "").strip() or None
    badge.type = data["type"].strip()
    badge.rarity = (data.get("rarity") or "common").strip()
    badge.criteria = dict(data["criteria"])
    badge.xp_reward = int(data.get("xpReward", 0))


# List the badge catalogue with the user's earned state and progress.
@badges_bp.get("")
@login_required
def list_badges():
    return jsonify({"success": True, "badges": badges_with_progress(current_user())}), 200


# List the badges the user has earned.
@badges_bp.get("/earned")
@login_required
def list_earned_badges():
    user = current_user()
    rows = UserBadge.query.filter_by(user_id=user.id).order_by(UserBadge.earned_at.desc()).all()
    return jsonify({"success": True, "badges": [row.to_dict() for row in rows]}), 200


# List the most recently earned badges.
@badges_bp.get("/recent")
@login_required
def list_recent_badges():
    limit = request.args.get("limit", default=5, type=int)
    if limit < 1 or limit > RECENT_BADGES_MAX:
        return jsonify({"success": False, "error": f"Limit must be between 1 and {RECENT_BADGES_MAX}"}), 400
    return jsonify({"success": True, "badges": recent_badges(current_user(), limit)}), 200


# List all badge definitions (admin-only).
@admin_badges_bp.get("")
def admin_list_badges():
    _, err = require_admin()
    if err:
        return err
    badges = Badge.query.order_by(Badge.id).all()
    result = []
    for badge in badges:
        data = badge.to_dict()
        data["awardedCount"] = len(badge.awards)
        result.append(data)
    return jsonify({"success": True, "badges": result}), 200


# Create a new badge (admin-only).
@admin_badges_bp.post("")
def admin_create_badge():
    admin_id, err = require_admin()
    if err:
        return err
    # Parse and validate payload.
    data = request.get_json(silent=True) or {}
    error = validate_badge(data)
    if error:
        return jsonify({"success": False, "error": error}), 400
    # Badge names are unique.
    if Badge.query.filter_by(name=data["name"].strip()).first():
        return jsonify({"success": False, "error": "A badge with this name already exists"}), 409

    badge = Badge()
    _apply_badge(badge, data)
    db.session.add(badge)
    db.session.commit()
    logger.info("Badge created: admin=%s badge=%s", admin_id, badge.id)
    return jsonify({"success": True, "badge": badge.to_dict()}), 201


# Update an existing badge (admin-only).
@admin_badges_bp.put("/<int:badge_id>")
def admin_update_badge(badge_id):
    admin_id, err = require_admin()
    if err:
        return err
    # Guard against updates to missing badges.
    badge = db.session.get(Badge, badge_id)
    if not badge:
        return jsonify({"success": False, "error": "Badge not found"}), 404
    # Parse and validate payload.
    data = request.get_json(silent=True) or {}
    error = validate_badge(data)
    if error:
        return jsonify({"success": False, "error": error}), 400
    clash = Badge.query.filter_by(name=data["name"].strip()).first()
    if clash and clash.id != badge.id:
        return jsonify({"success": False, "error": "A badge with this name already exists"}), 409

    _apply_badge(badge, data)
    db.session.commit()
    logger.info("Badge updated: admin=%s badge=%s", admin_id, badge.id)
    return jsonify({"success": True, "badge": badge.to_dict()}), 200


# Delete a badge and its awards (admin-only).
@admin_badges_bp.delete("/<int:badge_id>")
def admin_delete_badge(badge_id):
    admin_id, err = require_admin()
    if err:
        return err
    # Guard against deletion of missing records.
    badge = db.session.get(Badge, badge_id)
    if not badge:
        return jsonify({"success": False, "error": "Badge not found"}), 404
    db.session.delete(badge)
    db.session.commit()
    logger.info("Badge deleted: admin=%s badge=%s", admin_id, badge_id)
    return jsonify({"success": True, "message": "Badge deleted"}), 200
