# Import logging for badge award audit lines.
import logging

from sqlalchemy import func

from skillfolio.dates import today_str, utc_now, yesterday_str
from skillfolio.extensions import db
from skillfolio.models import (
    Badge,
    DailyActivity,
    Goal,
    LearningModule,
    LessonProgress,
    Notification,
    UserBadge,
    UserProgress,
    UserStats,
)
from skillfolio.progress import goal_summary

logger = logging.getLogger("skillfolio")

BADGE_TYPES = {"course_completion", "milestone", "streak", "achievement"}
BADGE_RARITIES = {"common", "rare", "epic", "legendary"}
CRITERIA_KEYS = {
    "totalXp",
    "streakDays",
    "coursesCompleted",
    "modulesCompleted",
    "lessonsCompleted",
    "examScore",
    "firstLogin",
    "goalsCompleted",
}


# Return the stats row for a user, creating it when missing.
def ensure_stats(user):
    if not user.stats:
        user.stats = UserStats()
        db.session.flush()
    return user.stats


# Record XP and lesson activity for today and advance the streak.
def record_activity(user, xp=0, lessons=0, now=None):
    now = now or utc_now()
    today = today_str(now)
    yesterday = yesterday_str(now)
    stats = ensure_stats(user)

    # Upsert today's activity row.
    activity = DailyActivity.query.filter_by(user_id=user.id, date=today).first()
    if not activity:
        activity = DailyActivity(user_id=user.id, date=today, xp_earned=0, lessons_completed=0)
        db.session.add(activity)
    activity.xp_earned = (activity.xp_earned or 0) + xp
    activity.lessons_completed = (activity.lessons_completed or 0) + lessons

    stats.total_xp = (stats.total_xp or 0) + xp

    # Same day keeps the streak, the previous day extends it, anything else restarts it.
    last_date = (stats.last_activity_date or "").strip()
    if last_date != today:
        if last_date == yesterday:
            stats.current_streak = (stats.current_streak or 0) + 1
        else:
            stats.current_streak = 1
        stats.last_activity_date = today
    stats.longest_streak = max(stats.longest_streak or 0, stats.current_streak)

    db.session.flush()
    return check_and_unlock_badges(user)


# Count courses whose active modules are all completed by the user.
def _count_completed_courses(user_id):
    completed_ids = {
        row.module_id
        for row in UserProgress.query.filter_by(user_id=user_id, is_completed=True).all()
    }
    if not completed_ids:
        return 0
    modules_by_course = {}
    for module in LearningModule.query.filter_by(is_active=True).all():
        modules_by_course.setdefault(module.course_id, set()).add(module.id)
    return sum(
        1 for module_ids in modules_by_course.values()
        if module_ids and module_ids <= completed_ids
    )


# Count goals with every subtopic completed.
def _count_completed_goals(user_id):
    count = 0
    for goal in Goal.query.filter_by(user_id=user_id).all():
        summary = goal_summary(goal)
        if summary["totalSubtopics"] and summary["completedSubtopics"] == summary["totalSubtopics"]:
            count += 1
    return count


# Aggregate the metrics badge criteria are evaluated against.
def user_metrics(user):
    stats = ensure_stats(user)
    best_exam = (
        db.session.query(func.max(UserProgress.final_exam_score))
        .filter(UserProgress.user_id == user.id)
        .scalar()
    )
    return {
        "totalXp": stats.total_xp or 0,
        "streakDays": max(stats.longest_streak or 0, stats.current_streak or 0),
        "coursesCompleted": _count_completed_courses(user.id),
        "modulesCompleted": UserProgress.query.filter_by(user_id=user.id, is_completed=True).count(),
        "lessonsCompleted": LessonProgress.query.filter_by(user_id=user.id, is_completed=True).count(),
        "examScore": best_exam or 0,
        "firstLogin": (stats.login_count or 0) > 0,
        "goalsCompleted": _count_completed_goals(user.id),
    }


def criteria_met(criteria, metrics):
    """All criteria must hold. Boolean criteria need a truthy metric."""
    if not criteria:
        return False
    for key, target in criteria.items():
        current = metrics.get(key, 0)
        if isinstance(target, bool):
            if target and not current:
                return False
            continue
        if current < target:
            return False
    return True


def badge_progress(criteria, metrics):
    """Percent progress towards a badge, limited by its furthest-off criterion."""
    if not criteria:
        return 0
    ratios = []
    for key, target in criteria.items():
        current = metrics.get(key, 0)
        if isinstance(target, bool):
            ratios.append(1.0 if (current or not target) else 0.0)
        elif target <= 0:
            ratios.append(1.0)
        else:
            ratios.append(min(1.0, float(current) / float(target)))
    return round(min(ratios) * 100)


# Check all badge rules and unlock any that now qualify.
def check_and_unlock_badges(user):
    metrics = user_metrics(user)
    earned_ids = {row.badge_id for row in UserBadge.query.filter_by(user_id=user.id).all()}
    stats = ensure_stats(user)
    unlocked = []

    # Evaluate each badge against current metrics in a single pass.
    for badge in Badge.query.order_by(Badge.id).all():
        if badge.id in earned_ids:
            continue
        if not criteria_met(badge.criteria or {}, metrics):
            continue

        db.session.add(UserBadge(user_id=user.id, badge_id=badge.id, earned_at=utc_now()))
        stats.total_xp = (stats.total_xp or 0) + (badge.xp_reward or 0)
        db.session.add(Notification(
            user_id=user.id,
            type="badge",
            message=f"You earned the {badge.name} badge!",
        ))
        logger.info("Badge awarded: user=%s badge=%s", user.id, badge.name)
        unlocked.append(badge.to_dict())

    db.session.flush()
    return unlocked


# Return the badge catalogue annotated with the user's earned state and progress.
def badges_with_progress(user):
    metrics = user_metrics(user)
    earned = {row.badge_id: row for row in UserBadge.query.filter_by(user_id=user.id).all()}
    result = []
    for badge in Badge.query.order_by(Badge.id).all():
        data = badge.to_dict()
        user_badge = earned.get(badge.id)
        data["earned"] = bool(user_badge)
        data["earnedAt"] = user_badge.earned_at.isoformat() if user_badge else None
        data["progress"] = 100 if user_badge else badge_progress(badge.criteria or {}, metrics)
        result.append(data)
    return result


# Return the most recently earned badges for a user.
def recent_badges(user, limit=5):
    rows = (
        UserBadge.query.filter_by(user_id=user.id)
        .order_by(UserBadge.earned_at.desc(), UserBadge.id.desc())
        .limit(limit)
        .all()
    )
    return [row.to_dict() for row in rows]


# Validate badge payloads for admin CRUD operations.
def validate_badge(data):
    # Text fields must arrive as JSON strings before they are trimmed.
    for key in ("name", "description", "type", "rarity", "icon", "color"):
        if data.get(key) is not None and not isinstance(data[key], str):
            return f"{key} must be a string"

    name = (data.get("name") or "").strip()
    description = (data.get("description") or "").strip()
    badge_type = (data.get("type") or "").strip()
    rarity = (data.get("rarity") or "common").strip()
    criteria = data.get("criteria")
    xp_reward = data.get("xpReward", 0)

    # Validate required text fields.
    if not name:
        return "Name required"
    if not description:
        return "Description required"
    # Validate type and rarity against supported values.
    if badge_type not in BADGE_TYPES:
        return "Type must be course_completion, milestone, streak, or achievement"
    if rarity not in BADGE_RARITIES:
        return "Rarity must be common, rare, epic, or legendary"
    # Validate criteria keys and values.
    if not isinstance(criteria, dict) or not criteria:
        return "Criteria must be a non-empty object"
    for key, value in criteria.items():
        if key not in CRITERIA_KEYS:
            return f"Unknown criteria key: {key}"
        if key == "firstLogin":
            if not isinstance(value, bool):
                return "firstLogin must be true or false"
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return f"{key} must be a non-negative number"
    # Validate numeric reward.
    try:
        xp_value = int(xp_reward)
    except (TypeError, ValueError):
        return "XP reward must be a number"
    if xp_value < 0:
        return "XP reward cannot be negative"

    return None
