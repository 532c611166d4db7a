# Import date arithmetic for activity ranges.
from datetime import timedelta

# Import Flask routing utilities for progress APIs.
from flask import jsonify, request

# Import auth guard, DB session and gamification helpers.
from skillfolio.auth import current_user, login_required
from skillfolio.dates import parse_day, utc_now
from skillfolio.extensions import db
from skillfolio.gamification import check_and_unlock_badges, ensure_stats, recent_badges
from skillfolio.models import DailyActivity, Goal, UserProgress
from skillfolio.profiles import profile_completion
from skillfolio.progress import goal_summary

ACTIVITY_DEFAULT_DAYS = 30
ACTIVITY_MAX_DAYS = 366


# Register stats, activity and dashboard routes on the app.
def register_progress_routes(app):
    # Return the current user's XP, level and streak.
    @app.route("/api/stats", methods=["GET"])
    @login_required
    def get_stats():
        user = current_user()
        stats = ensure_stats(user)
        db.session.commit()
        return jsonify({"success": True, "stats": stats.to_dict()}), 200

    # Return daily activity for an inclusive date range.
    @app.route("/api/daily-activity", methods=["GET"])
    @login_required
    def get_daily_activity():
        user = current_user()
        today = utc_now().date()

        # Validate optional date bounds before querying.
        start_raw = request.args.get("start")
        end_raw = request.args.get("end")
        end = parse_day(end_raw) if end_raw else today
        start = parse_day(start_raw) if start_raw else (end and end - timedelta(days=ACTIVITY_DEFAULT_DAYS - 1))
        if not start or not end:
            return jsonify({"success": False, "error": "Dates must be in YYYY-MM-DD format"}), 400
        if start > end:
            return jsonify({"success": False, "error": "Start date must be on or before end date"}), 400
        if (end - start).days >= ACTIVITY_MAX_DAYS:
            return jsonify({"success": False, "error": f"Range cannot exceed {ACTIVITY_MAX_DAYS} days"}), 400

        # Stored dates are ISO strings, so string comparison orders them correctly.
        rows = (
            DailyActivity.query.filter_by(user_id=user.id)
            .filter(DailyActivity.date >= start.isoformat(), DailyActivity.date <= end.isoformat())
            .order_by(DailyActivity.date)
            .all()
        )
        return jsonify({
            "success": True,
            "start": start.isoformat(),
            "end": end.isoformat(),
            "activity": [row.to_dict() for row in rows],
        }), 200

    # Force badge evaluation for the current user.
    @app.route("/api/achievements/check", methods=["POST"])
    @login_required
    def check_achievements():
        user = current_user()
        unlocked = check_and_unlock_badges(user)
        db.session.commit()
        return jsonify({"success": True, "unlockedBadges": unlocked, "stats": user.stats.to_dict()}), 200

    # Summarize stats, badges, learning and goals for the dashboard.
    @app.route("/api/dashboard", methods=["GET"])
    @login_required
    def get_dashboard():
        user = current_user()
        stats = ensure_stats(user)

        modules = []
        for row in UserProgress.query.filter_by(user_id=user.id).order_by(UserProgress.enrolled_at).all():
            module = row.module
            completed_lessons = sum(1 for lesson in module.lesson_progress
                                    if lesson.user_id == user.id and lesson.is_completed)
            modules.append({
                "moduleId": module.id,
                "title": module.title,
                "courseId": module.course_id,
                "totalLessons": len(module.lessons),
                "completedLessons": completed_lessons,
                "isCompleted": bool(row.is_completed),
                "xpEarned": row.xp_earned,
            })

        goals = Goal.query.filter_by(user_id=user.id).order_by(Goal.updated_at.desc()).all()
        completion = profile_completion(user.profile) if user.profile else None
        db.session.commit()

        return jsonify({
            "success": True,
            "user": user.to_dict(),
            "stats": stats.to_dict(),
            "recentBadges": recent_badges(user),
            "modules": modules,
            "goals": [goal_summary(goal) for goal in goals],
            "profileCompletion": completion,
        }), 200
