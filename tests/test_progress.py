from datetime import datetime

import pytest

from skillfolio.models import Goal, GoalCategory, GoalSubtopic, GoalTopic
from skillfolio.progress import (
    GoalStructureError,
    build_goal,
    completion_history,
    display_status,
    goal_summary,
    parse_goal_csv,
    percentage,
    set_subtopic_status,
    set_topic_status,
)


def _goal_tree(statuses, created_at=datetime(2026, 1, 1)):
    goal = Goal(user_id=1, name="Data Science", type="custom")
    category = GoalCategory(name="Foundations", created_at=created_at)
    topic = GoalTopic(name="Statistics", created_at=created_at)
    for index, status in enumerate(statuses):
        topic.subtopics.append(GoalSubtopic(name=f"Sub {index}", status=status))
    category.topics.append(topic)
    goal.categories.append(category)
    return goal, topic


def test_percentage_and_display_status():
    assert percentage(0, 0) == 0
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67
    assert display_status(0, 0) == "Not Started"
    assert display_status(0, 4) == "Not Started"
    assert display_status(2, 4) == "In Progress"
    assert display_status(4, 4) == "Completed"


def test_goal_summary_recounts_from_subtopic_statuses(app):
    with app.app_context():
        goal, _ = _goal_tree(["completed", "start", "pending", "completed"])
        summary = goal_summary(goal, include_tree=True)

    assert summary["totalSubtopics"] == 4
    assert summary["completedSubtopics"] == 2
    assert summary["completedTopics"] == 0
    assert summary["percentage"] == 50
    assert summary["status"] == "In Progress"
    topic = summary["categories"][0]["topics"][0]
    assert topic["totalSubtopics"] == 4
    assert [s["status"] for s in topic["subtopics"]] == ["completed", "start", "pending", "completed"]


def test_topic_counts_as_completed_only_when_every_subtopic_is(app):
    with app.app_context():
        goal, _ = _goal_tree(["completed", "completed"])
        summary = goal_summary(goal)
    assert summary["completedTopics"] == 1
    assert summary["status"] == "Completed"


def test_parse_goal_csv_groups_rows_in_first_seen_order():
    csv_text = (
        "Category,TOPIC,subtopic\n"
        "ML,Regression,Linear\n"
        "ML,Regression,Ridge\n"
        "\n"
        "Stats,Probability,Bayes\n"
        "ML,Trees,CART\n"
        "ML,Regression,Linear\n"
        "ML,,Missing topic\n"
    )
    categories = parse_goal_csv(csv_text)

    assert [c["name"] for c in categories] == ["ML", "Stats"]
    ml_topics = categories[0]["topics"]
    assert [t["name"] for t in ml_topics] == ["Regression", "Trees"]
    assert ml_topics[0]["subtopics"] == ["Linear", "Ridge"]


@pytest.mark.parametrize("csv_text", ["", "category,topic\nA,B\n", "category,topic,subtopic\n,,\n"])
def test_parse_goal_csv_rejects_unusable_input(csv_text):
    with pytest.raises(GoalStructureError):
        parse_goal_csv(csv_text)


def test_set_subtopic_status_stamps_and_clears_completion(app):
    now = datetime(2026, 3, 1, 12, 0)
    with app.app_context():
        goal, topic = _goal_tree(["pending"])
        subtopic = topic.subtopics[0]

        set_subtopic_status(subtopic, "completed", notes="done", now=now)
        assert subtopic.completed_at == now
        assert subtopic.notes == "done"
        assert goal.updated_at == now

        set_subtopic_status(subtopic, "start", now=datetime(2026, 3, 2))
        assert subtopic.completed_at is None
        assert subtopic.notes == "done"

        with pytest.raises(GoalStructureError):
            set_subtopic_status(subtopic, "finished")


def test_set_topic_status_applies_to_every_subtopic(app):
    with app.app_context():
        _, topic = _goal_tree(["pending", "start", "completed"])
        set_topic_status(topic, "completed", now=datetime(2026, 4, 1))
        assert {s.status for s in topic.subtopics} == {"completed"}


def test_completion_history_builds_cumulative_series(app):
    with app.app_context():
        goal, topic = _goal_tree(["completed", "completed", "pending"])
        topic.subtopics[0].completed_at = datetime(2026, 2, 10)
        topic.subtopics[1].completed_at = datetime(2026, 1, 5)
        now = datetime(2026, 3, 1)

        series = completion_history(goal, now=now)
        assert len(series) == 1
        assert series[0]["topic"] == "Statistics"
        assert series[0]["points"] == [
            ["2026-01-01T00:00:00", 0],
            ["2026-01-05T00:00:00", 1],
            ["2026-02-10T00:00:00", 2],
            ["2026-03-01T00:00:00", 2],
        ]

        february = completion_history(goal, year=2026, month=2, now=now)
        assert february[0]["points"][-1] == ["2026-03-01T00:00:00", 1]

        assert completion_history(goal, year=2025, now=now) == []


def test_build_goal_rejects_topics_without_subtopics(app):
    with app.app_context():
        with pytest.raises(GoalStructureError, match="at least one subtopic"):
            build_goal(1, "Plan", categories=[{"name": "Python", "topics": [{"name": "Basics", "subtopics": []}]}])

        goal = build_goal(1, "Plan", categories=[{"name": "Python", "topics": [{"name": "Basics", "subtopics": ["Syntax"]}]}])
        summary = goal_summary(goal)
        assert summary["totalTopics"] == 1
        assert summary["completedTopics"] == 0
