# Import logging for goal audit lines.
import logging

# Import Flask routing utilities for goal APIs.
from flask import Blueprint, jsonify, request

# Import auth guard, forms, DB session and goal progress helpers.
from skillfolio.auth import current_user, login_required
from skillfolio.extensions import db
from skillfolio.forms import GoalForm, StatusForm
from skillfolio.gamification import check_and_unlock_badges
from skillfolio.models import Goal, GoalCategory, GoalSubtopic, GoalTopic
from skillfolio.progress import (
    GoalStructureError,
    build_goal,
    completion_history,
    goal_summary,
    parse_goal_csv,
    set_subtopic_status,
    set_topic_status,
    topic_summary,
)

logger = logging.getLogger("skillfolio")

# This Blueprint groups goal tracking endpoints.
goals_bp = Blueprint("goals", __name__, url_prefix="/api")


# Fetch a goal owned by the current user or None.
def _own_goal(goal_id):
    goal = db.session.get(Goal, goal_id)
    if not goal or goal.user_id != current_user().id:
        return None
    return goal


# Convert a malformed goal payload into a JSON error and drop pending writes.
def _structure_error(exc):
    db.session.rollback()
    return jsonify({"success": False, "error": str(exc)}), 400


# Create a goal with an optional nested category tree.
@goals_bp.post("/goals")
@login_required
def create_goal():
    data = request.get_json(silent=True) or {}
    form = GoalForm(data=data)
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    user = current_user()
    try:
        goal = build_goal(user.id, form.name.data, form.description.data, data.get("categories"))
    except GoalStructureError as exc:
        return _structure_error(exc)
    db.session.commit()

    logger.info("Goal created: user=%s goal=%s", user.id, goal.id)
    return jsonify({"success": True, "goal": goal_summary(goal, include_tree=True)}), 201


# Create a goal from CSV rows of category, topic and subtopic.
@goals_bp.post("/goals/from-csv")
@login_required
def create_goal_from_csv():
    data = request.get_json(silent=True) or {}
    form = GoalForm(data={"name": data.get("goalName"), "description": data.get("description")})
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    user = current_user()
    try:
        categories = parse_goal_csv(data.get("csvData"))
        goal = build_goal(user.id, form.name.data, form.description.data, categories, goal_type="csv")
    except GoalStructureError as exc:
        return _structure_error(exc)
    db.session.commit()

    logger.info("Goal imported from CSV: user=%s goal=%s", user.id, goal.id)
    return jsonify({"success": True, "goal": goal_summary(goal, include_tree=True)}), 201


# List the current user's goals, most recently updated first.
@goals_bp.get("/goals")
@login_required
def list_goals():
    goals = (
        Goal.query.filter_by(user_id=current_user().id)
        .order_by(Goal.updated_at.desc(), Goal.id.desc())
        .all()
    )
    return jsonify({"success": True, "goals": [goal_summary(goal) for goal in goals]}), 200


# Return a goal with its full tree and counters.
@goals_bp.get("/goals/<int:goal_id>")
@login_required
def get_goal(goal_id):
    goal = _own_goal(goal_id)
    if not goal:
        return jsonify({"success": False, "error": "Goal not found"}), 404
    return jsonify({"success": True, "goal": goal_summary(goal, include_tree=True)}), 200


# Update goal name and description.
@goals_bp.put("/goals/<int:goal_id>")
@login_required
def update_goal(goal_id):
    goal = _own_goal(goal_id)
    if not goal:
        return jsonify({"success": False, "error": "Goal not found"}), 404

    data = request.get_json(silent=True) or {}
    # Fill omitted fields from the stored goal so the form validates the merged result.
    merged = {"name": data.get("name", goal.name), "description": data.get("description", goal.description)}
    form = GoalForm(data=merged)
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    goal.name = form.name.data.strip()
    if "description" in data:
        goal.description = form.description.data or None
    db.session.commit()
    return jsonify({"success": True, "goal": goal_summary(goal)}), 200


# Delete a goal and its tree.
@goals_bp.delete("/goals/<int:goal_id>")
@login_required
def delete_goal(goal_id):
    goal = _own_goal(goal_id)
    if not goal:
        return jsonify({"success": False, "error": "Goal not found"}), 404

    db.session.delete(goal)
    db.session.commit()
    logger.info("Goal deleted: user=%s goal=%s", current_user().id, goal_id)
    return jsonify({"success": True}), 200


# List topics of a category with their subtopics.
@goals_bp.get("/goal-categories/<int:category_id>/topics")
@login_required
def list_category_topics(category_id):
    category = db.session.get(GoalCategory, category_id)
    if not category or category.goal.user_id != current_user().id:
        return jsonify({"success": False, "error": "Category not found"}), 404

    topics = [topic_summary(topic, include_subtopics=True) for topic in category.topics]
    return jsonify({"success": True, "topics": topics}), 200


# Set the status of a single subtopic.
@goals_bp.put("/subtopics/<int:subtopic_id>/status")
@login_required
def update_subtopic_status(subtopic_id):
    user = current_user()
    subtopic = db.session.get(GoalSubtopic, subtopic_id)
    if not subtopic or subtopic.topic.category.goal.user_id != user.id:
        return jsonify({"success": False, "error": "Subtopic not found"}), 404

    form = StatusForm(data=request.get_json(silent=True) or {})
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    set_subtopic_status(subtopic, form.status.data, notes=form.payload.get("notes"))
    # Finishing a goal can unlock goal badges.
    unlocked = check_and_unlock_badges(user)
    db.session.commit()
    return jsonify({
        "success": True,
        "subtopic": subtopic.to_dict(),
        "topic": topic_summary(subtopic.topic),
        "unlockedBadges": unlocked,
    }), 200


# Apply a status to every subtopic of a topic.
@goals_bp.put("/topics/<int:topic_id>/status")
@login_required
def update_topic_status(topic_id):
    user = current_user()
    topic = db.session.get(GoalTopic, topic_id)
    if not topic or topic.category.goal.user_id != user.id:
        return jsonify({"success": False, "error": "Topic not found"}), 404

    form = StatusForm(data=request.get_json(silent=True) or {})
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    set_topic_status(topic, form.status.data, notes=form.payload.get("notes"))
    unlocked = check_and_unlock_badges(user)
    db.session.commit()
    return jsonify({
        "success": True,
        "topic": topic_summary(topic, include_subtopics=True),
        "unlockedBadges": unlocked,
    }), 200


# Return cumulative completion series per topic.
@goals_bp.get("/goals/<int:goal_id>/history")
@login_required
def get_goal_history(goal_id):
    goal = _own_goal(goal_id)
    if not goal:
        return jsonify({"success": False, "error": "Goal not found"}), 404

    year = request.args.get("year", type=int)
    month = request.args.get("month", type=int)
    if month is not None and not 1 <= month <= 12:
        return jsonify({"success": False, "error": "Month must be between 1 and 12"}), 400

    return jsonify({"success": True, "history": completion_history(goal, year=year, month=month)}), 200
