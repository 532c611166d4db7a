"""Goal hierarchy progress.

Goals own categories, categories own topics and topics own subtopics. Only
subtopic statuses are stored; every counter returned by this module is a
live recount of those statuses.
"""
import csv
import io

from skillfolio.dates import iso, utc_now
from skillfolio.extensions import db
from skillfolio.models import Goal, GoalCategory, GoalSubtopic, GoalTopic

STATUSES = ("pending", "start", "completed")
CSV_COLUMNS = ("category", "topic", "subtopic")


class GoalStructureError(ValueError):
    pass


def percentage(completed, total):
    if not total:
        return 0
    return round(completed / total * 100)


def display_status(completed, total):
    if total > 0 and completed == total:
        return "Completed"
    if completed > 0:
        return "In Progress"
    return "Not Started"


def completion_timestamps(subtopics):
    """Sorted completion times of the completed subtopics."""
    stamps = [s.completed_at for s in subtopics if s.status == "completed" and s.completed_at]
    return [iso(stamp) for stamp in sorted(stamps)]


def topic_counts(topic):
    total = len(topic.subtopics)
    completed = sum(1 for s in topic.subtopics if s.status == "completed")
    return {"totalSubtopics": total, "completedSubtopics": completed}


def is_topic_complete(topic):
    counts = topic_counts(topic)
    return counts["totalSubtopics"] > 0 and counts["completedSubtopics"] == counts["totalSubtopics"]


def topic_summary(topic, include_subtopics=False):
    counts = topic_counts(topic)
    data = topic.to_dict()
    data.update(counts)
    data["percentage"] = percentage(counts["completedSubtopics"], counts["totalSubtopics"])
    data["status"] = display_status(counts["completedSubtopics"], counts["totalSubtopics"])
    data["completedSubtopicTimestamps"] = completion_timestamps(topic.subtopics)
    if include_subtopics:
        data["subtopics"] = [subtopic.to_dict() for subtopic in topic.subtopics]
    return data


def category_summary(category, include_topics=False):
    topics = [topic_summary(topic, include_subtopics=include_topics) for topic in category.topics]
    total_subtopics = sum(t["totalSubtopics"] for t in topics)
    completed_subtopics = sum(t["completedSubtopics"] for t in topics)
    completed_topics = sum(
        1 for t in topics
        if t["totalSubtopics"] > 0 and t["completedSubtopics"] == t["totalSubtopics"]
    )
    data = category.to_dict()
    data.update({
        "totalTopics": len(topics),
        "completedTopics": completed_topics,
        "totalSubtopics": total_subtopics,
        "completedSubtopics": completed_subtopics,
        "percentage": percentage(completed_subtopics, total_subtopics),
        "status": display_status(completed_subtopics, total_subtopics),
        "completedSubtopicTimestamps": completion_timestamps(
            [s for topic in category.topics for s in topic.subtopics]
        ),
    })
    if include_topics:
        data["topics"] = topics
    return data


def goal_summary(goal, include_tree=False):
    categories = [category_summary(c, include_topics=include_tree) for c in goal.categories]
    totals = {
        "totalCategories": len(categories),
        "totalTopics": sum(c["totalTopics"] for c in categories),
        "completedTopics": sum(c["completedTopics"] for c in categories),
        "totalSubtopics": sum(c["totalSubtopics"] for c in categories),
        "completedSubtopics": sum(c["completedSubtopics"] for c in categories),
    }
    data = goal.to_dict()
    data.update(totals)
    data["percentage"] = percentage(totals["completedSubtopics"], totals["totalSubtopics"])
    data["status"] = display_status(totals["completedSubtopics"], totals["totalSubtopics"])
    if include_tree:
        data["categories"] = categories
    return data


def _clean_name(value, label):
    name = value.strip() if isinstance(value, str) else ""
    if not name:
        raise GoalStructureError(f"{label} name is required")
    if len(name) > 300:
        raise GoalStructureError(f"{label} name must be 300 characters or less")
    return name


# Optional descriptions must be text when present.
def _clean_description(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise GoalStructureError("description must be a string")
    return value


def build_goal(user_id, name, description=None, categories=None, goal_type="custom"):
    """Create a goal and its tree from nested category/topic/subtopic data.

    Raises GoalStructureError for malformed input; nothing is added to the
    session in that case.
    """
    goal = Goal(user_id=user_id, name=_clean_name(name, "Goal"), description=description, type=goal_type)
    if categories is not None and not isinstance(categories, list):
        raise GoalStructureError("categories must be a list")
    for category_data in categories or []:
        if not isinstance(category_data, dict):
            raise GoalStructureError("Each category must be an object")
        category = GoalCategory(
            name=_clean_name(category_data.get("name"), "Category"),
            description=_clean_description(category_data.get("description")),
        )
        topics = category_data.get("topics") or []
        if not isinstance(topics, list):
            raise GoalStructureError("topics must be a list")
        for topic_data in topics:
            if not isinstance(topic_data, dict):
                raise GoalStructureError("Each topic must be an object")
            topic = GoalTopic(
                name=_clean_name(topic_data.get("name"), "Topic"),
                description=_clean_description(topic_data.get("description")),
            )
            subtopics = topic_data.get("subtopics") or []
            if not isinstance(subtopics, list):
                raise GoalStructureError("subtopics must be a list")
            if not subtopics:
                raise GoalStructureError("Topic must have at least one subtopic")
            for subtopic_data in subtopics:
                # Subtopics may be plain names or {"name": ...} objects.
                raw = subtopic_data.get("name") if isinstance(subtopic_data, dict) else subtopic_data
                topic.subtopics.append(GoalSubtopic(name=_clean_name(raw, "Subtopic"), status="pending"))
            category.topics.append(topic)
        goal.categories.append(category)

    db.session.add(goal)
    return goal


def parse_goal_csv(csv_text):
    """Group CSV rows into categories, topics and subtopics in first-seen order.

    Headers are matched case-insensitively; blank rows are skipped.
    """
    if csv_text is not None and not isinstance(csv_text, str):
        raise GoalStructureError("CSV data must be text")
    reader = csv.reader(io.StringIO(csv_text or ""))
    rows = [row for row in reader if any((cell or "").strip() for cell in row)]
    if not rows:
        raise GoalStructureError("CSV data is empty")

    header = [str(h).strip().lower() for h in rows[0]]
    missing = [column for column in CSV_COLUMNS if column not in header]
    if missing:
        raise GoalStructureError(f"CSV is missing columns: {', '.join(missing)}")
    index = {column: header.index(column) for column in CSV_COLUMNS}

    categories = {}
    for row in rows[1:]:
        cells = {column: (row[pos].strip() if pos < len(row) else "") for column, pos in index.items()}
        if not all(cells.values()):
            continue
        topics = categories.setdefault(cells["category"], {})
        subtopics = topics.setdefault(cells["topic"], [])
        if cells["subtopic"] not in subtopics:
            subtopics.append(cells["subtopic"])

    if not categories:
        raise GoalStructureError("CSV has no complete category, topic, subtopic rows")
    return [
        {
            "name": category,
            "topics": [{"name": topic, "subtopics": subtopics} for topic, subtopics in topics.items()],
        }
        for category, topics in categories.items()
    ]


def _touch_goal(goal, now):
    goal.updated_at = now


def set_subtopic_status(subtopic, status, notes=None, now=None):
    """Apply a status; entering completed stamps completed_at, leaving clears it."""
    if status not in STATUSES:
        raise GoalStructureError("Status must be pending, start, or completed")
    now = now or utc_now()
    if status == "completed" and subtopic.status != "completed":
        subtopic.completed_at = now
    elif status != "completed":
        subtopic.completed_at = None
    subtopic.status = status
    if notes is not None:
        subtopic.notes = notes
    subtopic.updated_at = now
    _touch_goal(subtopic.topic.category.goal, now)
    return subtopic


def set_topic_status(topic, status, notes=None, now=None):
    now = now or utc_now()
    for subtopic in topic.subtopics:
        set_subtopic_status(subtopic, status, notes=notes, now=now)
    _touch_goal(topic.category.goal, now)
    return topic


def completion_history(goal, year=None, month=None, now=None):
    """Cumulative completion series per topic for charting.

    Each series starts at the topic's creation time with zero, steps up at
    every subtopic completion and is extended to ``now`` with its final count.
    Topics with no completions in the selected period are omitted.
    """
    now = now or utc_now()
    series = []
    for category in goal.categories:
        for topic in category.topics:
            stamps = sorted(
                s.completed_at for s in topic.subtopics
                if s.status == "completed" and s.completed_at
            )
            if year is not None:
                stamps = [stamp for stamp in stamps if stamp.year == year]
            if month is not None:
                stamps = [stamp for stamp in stamps if stamp.month == month]
            if not stamps:
                continue
            points = [[iso(topic.created_at), 0]]
            for count, stamp in enumerate(stamps, start=1):
                points.append([iso(stamp), count])
            if stamps[-1] < now:
                points.append([iso(now), len(stamps)])
            series.append({
                "topicId": topic.id,
                "topic": topic.name,
                "category": category.name,
                "points": points,
            })
    return series
